import os
import sys
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test scripts to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)

# Parse RUNTIME_ENVIRONMENT with clear error message on misconfiguration
try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    valid_values = [env.value for env in RuntimeEnvironment]
    print(f"\n ERROR: Invalid RUNTIME_ENVIRONMENT configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Valid values: {', '.join(valid_values)}", file=sys.stderr)
    print(f"Current value: {os.environ.get('RUNTIME_ENVIRONMENT', '(not set)')}", file=sys.stderr)
    print(f"\nAdd to .env: RUNTIME_ENVIRONMENT={valid_values[0]}\n", file=sys.stderr)
    sys.exit(1)


def _parse_money(name: str, default: str) -> Decimal:
    raw = os.environ.get(name, default)
    try:
        value = Decimal(raw)
        if value < 0:
            raise ValueError(f"{name} must not be negative (got: {raw})")
        return value.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError) as e:
        print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
        print(f"Reason: {e}", file=sys.stderr)
        print(f"Expected: non-negative decimal (e.g., {default})\n", file=sys.stderr)
        sys.exit(1)


# Web server
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT")) if os.environ.get("WEBAPP_PORT") else 8000
CORS_ALLOWED_ORIGINS = [origin.strip() for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",")
                        if origin.strip()]

# Database
DB_NAME = os.environ.get("DB_NAME", "restaurant.db")
DB_URL = os.environ.get("DB_URL") or f"sqlite+aiosqlite:///data/{DB_NAME}"

# Currency / pricing defaults
CURRENCY = os.environ.get("CURRENCY", "INR")
if len(CURRENCY) != 3 or not CURRENCY.isalpha():
    print(f"\n ERROR: Invalid CURRENCY configuration\n", file=sys.stderr)
    print(f"Expected: ISO 4217 code (e.g., INR)", file=sys.stderr)
    print(f"Current value: {CURRENCY}\n", file=sys.stderr)
    sys.exit(1)
DEFAULT_TAX_RATE = _parse_money("DEFAULT_TAX_RATE", "5.00")  # Percent, used when category has no GST rate
DEFAULT_DELIVERY_CHARGE = _parse_money("DEFAULT_DELIVERY_CHARGE", "0.00")

# Restaurant open/closed status
RESTAURANT_TIMEZONE = os.environ.get("RESTAURANT_TIMEZONE", "Asia/Kolkata")
RESTAURANT_STATUS_TTL_SECONDS = int(os.environ.get("RESTAURANT_STATUS_TTL_SECONDS", "30"))

# Payment gateway (UPI dynamic QR)
PAYMENT_GATEWAY_API_URL = os.environ.get("PAYMENT_GATEWAY_API_URL", "https://merchant.upigateway.com/api")
PAYMENT_GATEWAY_MERCHANT_KEY = os.environ.get("PAYMENT_GATEWAY_MERCHANT_KEY", "")
PAYMENT_WEBHOOK_SECRET = os.environ.get("PAYMENT_WEBHOOK_SECRET", "")
PAYMENT_CALLBACK_URL = os.environ.get("PAYMENT_CALLBACK_URL", "")
PAYMENT_TEST_MODE = os.environ.get("PAYMENT_TEST_MODE", "false") == "true"
PAYMENT_REQUEST_TIMEOUT_SECONDS = int(os.environ.get("PAYMENT_REQUEST_TIMEOUT_SECONDS", "30"))
PAYMENT_ORDER_NOTES_PREFIX = os.environ.get("PAYMENT_ORDER_NOTES_PREFIX", "Restaurant Order")

# Staff authentication for admin endpoints (shared secret issued by the auth layer)
STAFF_API_TOKEN = os.environ.get("STAFF_API_TOKEN", "")

# Staff alerts over Telegram (optional)
TOKEN = os.environ.get("TOKEN", "")
try:
    _admin_id_list_str = os.environ.get("ADMIN_ID_LIST", "")
    ADMIN_ID_LIST = [int(admin_id.strip()) for admin_id in _admin_id_list_str.split(',') if admin_id.strip()]
except ValueError as e:
    print(f"\n ERROR: Invalid ADMIN_ID_LIST configuration\n", file=sys.stderr)
    print(f"Reason: {e}", file=sys.stderr)
    print(f"Expected format: comma-separated list of Telegram chat IDs", file=sys.stderr)
    print(f"Example: ADMIN_ID_LIST=123456789,987654321", file=sys.stderr)
    print(f"Current value: {os.environ.get('ADMIN_ID_LIST', '(not set)')}\n", file=sys.stderr)
    sys.exit(1)
STAFF_TELEGRAM_ALERTS_ENABLED = bool(TOKEN) and len(ADMIN_ID_LIST) > 0

# Push notifications (Expo)
PUSH_NOTIFICATIONS_ENABLED = os.environ.get("PUSH_NOTIFICATIONS_ENABLED", "false") == "true"
EXPO_PUSH_URL = os.environ.get("EXPO_PUSH_URL", "https://exp.host/--/api/v2/push/send")

# Redis (rate limiting)
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD") or None

# Rate Limiting Configuration
MAX_ORDERS_PER_USER_PER_HOUR = int(os.environ.get("MAX_ORDERS_PER_USER_PER_HOUR", "10"))  # Prevent order spam
MAX_PAYMENT_INITIATIONS_PER_HOUR = int(os.environ.get("MAX_PAYMENT_INITIATIONS_PER_HOUR", "20"))

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"  # Mask sensitive data in logs

# Log Retention: Environment-specific defaults
# Dev: keep logs longer for debugging
# Prod: Use 5 days default to save disk space
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))
