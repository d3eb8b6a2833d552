"""Onramp widget parameter building.

The widget only accepts string query parameters, so every parameter set is
passed through `sanitize_parameters` before it leaves this module.
See https://dev.moonpay.com/docs/ramps-sdk-buy-params for the full list.
"""

import json
import logging
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)

Parameters = dict[str, Any]

# Widget parameter names, as they appear in the query string
PARAMETER_NAMES = frozenset(
    {
        "apiKey",
        "currencyCode",
        "defaultCurrencyCode",
        "walletAddress",
        "walletAddressTag",
        "walletAddresses",
        "walletAddressTags",
        "colorCode",
        "theme",
        "themeId",
        "language",
        "baseCurrencyCode",
        "baseCurrencyAmount",
        "quoteCurrencyAmount",
        "lockAmount",
        "email",
        "externalTransactionId",
        "externalCustomerId",
        "paymentMethod",
        "redirectURL",
        "showAllCurrencies",
        "showOnlyCurrencies",
        "showWalletAddressForm",
        "unsupportedRegionRedirectUrl",
        "skipUnsupportedRegionScreen",
    }
)


class UseCase(str, Enum):
    """Preset parameter sets."""

    BASIC = "basic"
    SOLANA = "solana"
    ETHEREUM = "ethereum"


class PaymentMethod(str, Enum):
    """Payment methods the widget can pre-select."""

    CREDIT_DEBIT_CARD = "credit_debit_card"
    GBP_BANK_TRANSFER = "gbp_bank_transfer"
    GBP_OPEN_BANKING_PAYMENT = "gbp_open_banking_payment"
    APPLE_PAY = "apple_pay"
    GOOGLE_PAY = "google_pay"
    SEPA_BANK_TRANSFER = "sepa_bank_transfer"
    PIX_INSTANT_PAYMENT = "pix_instant_payment"
    PAYPAL = "paypal"
    VENMO = "venmo"
    MOONPAY_BALANCE = "moonpay_balance"


def get_default_parameters(use_case: str = UseCase.SOLANA) -> Parameters:
    """Get default parameters for a common use case.

    Unknown use cases fall back to the Solana preset.
    """
    base: Parameters = {
        "baseCurrencyCode": "usd",
        "baseCurrencyAmount": "50",
        "theme": "dark",
        "showWalletAddressForm": False,
    }

    try:
        use_case = UseCase(use_case)
    except ValueError:
        logger.debug(f"Unknown onramp use case {use_case!r}, using solana defaults")
        use_case = UseCase.SOLANA

    if use_case == UseCase.BASIC:
        return base
    if use_case == UseCase.ETHEREUM:
        return {**base, "currencyCode": "eth", "defaultCurrencyCode": "eth"}
    return {**base, "currencyCode": "sol", "defaultCurrencyCode": "sol"}


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (dict, list, tuple)):
        # walletAddresses / walletAddressTags are JSON objects
        return json.dumps(value, separators=(",", ":"))
    return str(value)


def sanitize_parameters(params: Parameters) -> dict[str, str]:
    """Drop empty values and convert the rest to query-safe strings.

    None and "" are removed, booleans become "true"/"false", mappings and
    lists are JSON-encoded and everything else goes through str().
    """
    sanitized: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        sanitized[key] = _stringify(value)
    return sanitized


def build_widget_parameters(
    api_key: str,
    parameters: Optional[Parameters] = None,
    wallet_address: Optional[str] = None,
    color_code: Optional[str] = None,
    use_case: str = UseCase.SOLANA,
) -> dict[str, str]:
    """Merge all parameter layers into the final widget parameter set.

    Precedence, lowest first: use-case defaults, the connected wallet
    address, brand styling, caller parameters, and finally the API key.
    Caller parameters set to None do not override earlier layers.

    Args:
        api_key: Publishable API key, always wins
        parameters: Caller overrides
        wallet_address: Address of the connected wallet, if any
        color_code: Brand accent colour (with or without leading '#')
        use_case: Preset for the defaults layer

    Returns:
        Sanitised string-only parameters
    """
    overrides = {k: v for k, v in (parameters or {}).items() if v is not None}

    merged: Parameters = dict(get_default_parameters(use_case))

    address = overrides.get("walletAddress") or wallet_address
    if address:
        merged["walletAddress"] = address

    merged["theme"] = "dark"
    if color_code:
        merged["colorCode"] = color_code.lstrip("#")
    merged["showWalletAddressForm"] = False

    merged.update(overrides)
    merged["apiKey"] = api_key

    unknown = set(merged) - PARAMETER_NAMES
    if unknown:
        logger.debug(f"Passing unrecognised widget parameters through: {sorted(unknown)}")

    return sanitize_parameters(merged)
