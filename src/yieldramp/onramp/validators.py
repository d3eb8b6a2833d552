"""Validation for onramp configuration and user-supplied widget input.

These checks are advisory formatting checks, not cryptographic address
verification. Validators never raise for bad input: they return a bool or a
ValidationResult so the caller can show every problem at once.
"""

import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Optional
from urllib.parse import urlsplit

from yieldramp.onramp.parameters import PaymentMethod

SANDBOX = "sandbox"
PRODUCTION = "production"
ENVIRONMENTS = (SANDBOX, PRODUCTION)

TEST_KEY_PREFIX = "pk_test_"
LIVE_KEY_PREFIX = "pk_live_"

COLOR_CODE_RE = re.compile(r"^#[0-9A-F]{6}$", re.IGNORECASE)
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
LANGUAGE_RE = re.compile(r"^[a-z]{2}$")

EVM_CURRENCIES = ("eth", "usdc", "usdt")
PAYMENT_METHODS = frozenset(m.value for m in PaymentMethod)


@dataclass
class ValidationResult:
    """Outcome of validating a parameter set."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_api_key(api_key: Optional[str]) -> bool:
    """Check that an API key carries a publishable key prefix."""
    if not api_key or not isinstance(api_key, str):
        return False
    return api_key.startswith(TEST_KEY_PREFIX) or api_key.startswith(LIVE_KEY_PREFIX)


def environment_from_api_key(api_key: str) -> str:
    """Derive the widget environment from the key prefix.

    Test keys select sandbox, live keys production. Anything else falls back
    to sandbox so an unknown key never talks to production.
    """
    if api_key.startswith(TEST_KEY_PREFIX):
        return SANDBOX
    if api_key.startswith(LIVE_KEY_PREFIX):
        return PRODUCTION
    return SANDBOX


def resolve_environment(api_key: str, requested: Optional[str] = None) -> str:
    """Pick the environment for a key, honouring the caller where allowed.

    A pk_test_ key always forces sandbox.
    """
    if api_key and api_key.startswith(TEST_KEY_PREFIX):
        return SANDBOX
    if requested in ENVIRONMENTS:
        return requested
    return environment_from_api_key(api_key or "")


def validate_wallet_address(address: Optional[str], currency_code: Optional[str]) -> bool:
    """Basic per-currency wallet address format check."""
    if not isinstance(address, str) or not isinstance(currency_code, str):
        return False
    if not address or not currency_code:
        return False

    currency = currency_code.lower()
    if currency == "sol":
        return 32 <= len(address) <= 44
    if currency == "btc":
        return 26 <= len(address) <= 35
    if currency in EVM_CURRENCIES:
        return address.startswith("0x") and len(address) == 42
    return len(address) > 20


def is_valid_color_code(value: Any) -> bool:
    return isinstance(value, str) and bool(COLOR_CODE_RE.fullmatch(value))


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and bool(EMAIL_RE.fullmatch(value))


def is_valid_language(value: Any) -> bool:
    return isinstance(value, str) and bool(LANGUAGE_RE.fullmatch(value))


def is_valid_url(value: Any) -> bool:
    """Check that a value parses as an absolute URL."""
    if not isinstance(value, str):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme and parts.netloc)


def is_valid_payment_method(value: Any) -> bool:
    return isinstance(value, str) and value in PAYMENT_METHODS


def _is_positive_number(value: Any) -> bool:
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return False
    return number.is_finite() and number > 0


def validate_parameters(params: dict[str, Any]) -> ValidationResult:
    """Validate a (partial) widget parameter set.

    Only parameters that are present are checked, except the API key which
    is required.
    """
    errors: list[str] = []

    api_key = params.get("apiKey")
    if not api_key or not isinstance(api_key, str):
        errors.append("API key is required and must be a string")
    elif not validate_api_key(api_key):
        errors.append("API key must start with pk_test_ or pk_live_")

    for name in ("baseCurrencyAmount", "quoteCurrencyAmount"):
        value = params.get(name)
        if value and not _is_positive_number(value):
            errors.append(f"{name} must be a positive number")

    color_code = params.get("colorCode")
    if color_code and not is_valid_color_code(color_code):
        errors.append("colorCode must be a valid hexadecimal color (e.g., #FF2B8F)")

    email = params.get("email")
    if email and not is_valid_email(email):
        errors.append("email must be a valid email address")

    for name in ("redirectURL", "unsupportedRegionRedirectUrl"):
        value = params.get(name)
        if value and not is_valid_url(value):
            errors.append(f"{name} must be a valid URL")

    payment_method = params.get("paymentMethod")
    if payment_method and not is_valid_payment_method(payment_method):
        errors.append(f"paymentMethod must be one of: {', '.join(sorted(PAYMENT_METHODS))}")

    language = params.get("language")
    if language and not is_valid_language(language):
        errors.append("language must be a valid ISO 639-1 language code (e.g., en, es, fr)")

    return ValidationResult(is_valid=not errors, errors=errors)
