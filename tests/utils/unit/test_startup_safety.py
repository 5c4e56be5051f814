"""
Tests for startup config validation and secret masking in logs.
"""

import logging
from types import SimpleNamespace

import pytest

from enums.runtime_environment import RuntimeEnvironment
from utils.config_validator import ConfigValidationError, validate_or_exit, validate_startup_config
from utils.logging_config import SecretMaskingFilter

STRONG = "a" * 40


def prod_config(**overrides):
    values = dict(
        RUNTIME_ENVIRONMENT=RuntimeEnvironment.PROD,
        RESTAURANT_TIMEZONE="Asia/Kolkata",
        PAYMENT_WEBHOOK_SECRET=STRONG,
        STAFF_API_TOKEN=STRONG,
        PAYMENT_TEST_MODE=False,
        PAYMENT_GATEWAY_MERCHANT_KEY="merchant-key",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestConfigValidation:

    def test_valid_production_config(self):
        validate_startup_config(prod_config())

    @pytest.mark.parametrize("overrides", [
        {"PAYMENT_WEBHOOK_SECRET": ""},
        {"PAYMENT_WEBHOOK_SECRET": "short"},
        {"STAFF_API_TOKEN": None},
        {"PAYMENT_GATEWAY_MERCHANT_KEY": ""},
        {"RESTAURANT_TIMEZONE": "Mars/Olympus_Mons"},
    ])
    def test_rejected(self, overrides):
        with pytest.raises(ConfigValidationError):
            validate_startup_config(prod_config(**overrides))

    def test_merchant_key_optional_in_gateway_test_mode(self):
        validate_startup_config(prod_config(PAYMENT_TEST_MODE=True, PAYMENT_GATEWAY_MERCHANT_KEY=""))

    def test_secrets_not_enforced_in_test_environment(self):
        validate_startup_config(prod_config(RUNTIME_ENVIRONMENT=RuntimeEnvironment.TEST,
                                            PAYMENT_WEBHOOK_SECRET="", STAFF_API_TOKEN=""))

    def test_exit_on_failure(self):
        with pytest.raises(SystemExit) as exc_info:
            validate_or_exit(prod_config(STAFF_API_TOKEN=""))

        assert exc_info.value.code == 1


class TestSecretMaskingFilter:

    @staticmethod
    def masked(message, *args):
        record = logging.LogRecord("test", logging.INFO, __file__, 1, message, args or None, None)
        SecretMaskingFilter().filter(record)
        return record.getMessage()

    def test_phone_and_email(self):
        result = self.masked("Order for asha@example.com, phone +91 9800000001")

        assert "asha@example.com" not in result
        assert "9800000001" not in result
        assert "[REDACTED_EMAIL]" in result

    def test_upi_vpa(self):
        assert self.masked("Paid from asha@okaxis") == "Paid from [REDACTED_VPA]"

    def test_signature_and_merchant_key(self):
        result = self.masked("signature=%s merchant_key=%s" % ("ab" * 32, "mk_live_12345678"))

        assert "[REDACTED_SIGNATURE]" in result
        assert "[REDACTED_MERCHANT_KEY]" in result

    def test_args_are_masked(self):
        assert "9800000001" not in self.masked("Customer phone: %s", "9800000001")

    def test_order_ids_untouched(self):
        assert self.masked("Order 42 confirmed (INR 709.90)") == "Order 42 confirmed (INR 709.90)"
