"""Onramp widget service.

Builds widget URLs and validates the widget configuration. The widget itself
is rendered by the third-party SDK; this service only prepares its input.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from yieldramp.onramp.parameters import (
    Parameters,
    get_default_parameters,
    sanitize_parameters,
)
from yieldramp.onramp.validators import (
    ENVIRONMENTS,
    SANDBOX,
    resolve_environment,
    validate_wallet_address,
)

logger = logging.getLogger(__name__)

WIDGET_URLS = {
    "sandbox": "https://buy-sandbox.moonpay.com",
    "production": "https://buy.moonpay.com",
}

# Solana first, it is the primary chain of the wallet
SUPPORTED_CURRENCIES = [
    {"code": "sol", "name": "Solana"},
    {"code": "usdc", "name": "USD Coin"},
    {"code": "usdt", "name": "Tether"},
    {"code": "btc", "name": "Bitcoin"},
    {"code": "eth", "name": "Ethereum"},
]


class OnrampService:
    """Prepares the fiat-to-crypto widget for a configured API key."""

    def __init__(
        self,
        api_key: str,
        environment: str = SANDBOX,
        default_parameters: Optional[Parameters] = None,
    ):
        """Initialize the service.

        Args:
            api_key: Publishable API key (pk_test_... or pk_live_...)
            environment: Requested environment; test keys always use sandbox
            default_parameters: Defaults for every widget URL (Solana preset if None)
        """
        self.api_key = api_key
        self.requested_environment = environment
        self.default_parameters = (
            default_parameters if default_parameters is not None else get_default_parameters()
        )

    @property
    def environment(self) -> str:
        return resolve_environment(self.api_key, self.requested_environment)

    @property
    def base_url(self) -> str:
        return WIDGET_URLS[self.environment]

    def get_widget_url(self, custom_parameters: Optional[Parameters] = None) -> str:
        """Get the widget URL with defaults, custom parameters and the API key."""
        merged = {
            **self.default_parameters,
            **(custom_parameters or {}),
            "apiKey": self.api_key,
        }
        query = urlencode(sanitize_parameters(merged))
        logger.debug(f"Built onramp widget URL for {self.environment}")
        return f"{self.base_url}?{query}"

    def validate_config(self) -> bool:
        """Check that the service is configured with a key and known environment."""
        return bool(self.api_key) and self.requested_environment in ENVIRONMENTS

    def get_supported_currencies(self) -> list[dict]:
        return [dict(currency) for currency in SUPPORTED_CURRENCIES]

    def validate_wallet_address(self, address: str, currency_code: str) -> bool:
        return validate_wallet_address(address, currency_code)
