"""
Configuration Validation Module

Validates critical configuration values at startup to fail-fast
with clear error messages instead of runtime failures.
"""

import sys
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from enums.runtime_environment import RuntimeEnvironment


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""
    pass


def validate_secret(secret: Optional[str], name: str, purpose: str) -> None:
    """
    Validate a shared secret used for request authentication.

    Raises:
        ConfigValidationError: If secret is missing, empty, or too weak
    """
    if not secret or len(secret.strip()) == 0:
        raise ConfigValidationError(
            f"{name} is required and must not be empty!\n"
            f"This secret is used to {purpose}.\n"
            "Generate a secure token with: openssl rand -hex 32\n"
            f"Add to .env: {name}=<your-generated-token>"
        )

    if len(secret) < 32:
        raise ConfigValidationError(
            f"{name} is too weak (length: {len(secret)}, minimum: 32)!\n"
            "Generate a secure token with: openssl rand -hex 32"
        )


def validate_timezone(timezone_name: str) -> None:
    try:
        ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigValidationError(
            f"RESTAURANT_TIMEZONE '{timezone_name}' is not a known IANA timezone\n"
            "Example: RESTAURANT_TIMEZONE=Asia/Kolkata"
        )


def validate_required_config(value: Optional[str], name: str, example: str = "") -> None:
    """
    Validate that a required config value is set.

    Raises:
        ConfigValidationError: If value is missing
    """
    if not value:
        error_msg = f"{name} is required but not set!"
        if example:
            error_msg += f"\nAdd to .env: {name}={example}"
        raise ConfigValidationError(error_msg)


def validate_startup_config(config_module) -> None:
    """
    Validate all critical configuration at startup.

    Secrets are only enforced outside TEST so the test suite can run with short values.

    Raises:
        ConfigValidationError: If any validation fails
    """
    validate_timezone(config_module.RESTAURANT_TIMEZONE)

    if config_module.RUNTIME_ENVIRONMENT == RuntimeEnvironment.TEST:
        return

    validate_secret(config_module.PAYMENT_WEBHOOK_SECRET, 'PAYMENT_WEBHOOK_SECRET',
                    'verify payment gateway webhook signatures')
    validate_secret(config_module.STAFF_API_TOKEN, 'STAFF_API_TOKEN',
                    'authenticate staff requests to the admin endpoints')

    if not config_module.PAYMENT_TEST_MODE:
        validate_required_config(config_module.PAYMENT_GATEWAY_MERCHANT_KEY, 'PAYMENT_GATEWAY_MERCHANT_KEY',
                                 '<your-merchant-key>')


def validate_or_exit(config_module) -> None:
    """
    Validate configuration and exit with error code 1 if validation fails.

    This is the main entry point for startup validation.
    """
    try:
        validate_startup_config(config_module)
    except ConfigValidationError as e:
        print(f"\n ERROR: Configuration Validation Failed\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted. Please fix configuration and try again.\n", file=sys.stderr)
        sys.exit(1)
