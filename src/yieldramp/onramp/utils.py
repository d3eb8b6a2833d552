"""Display helpers for the onramp flow."""

from typing import Optional

# (needle, friendly message), checked in order
ERROR_PATTERNS = [
    ("network", "Unable to connect to MoonPay. Please check your internet connection."),
    ("connection", "Unable to connect to MoonPay. Please check your internet connection."),
    ("api key", "Invalid API configuration. Please contact support."),
    ("unsupported region", "MoonPay is not available in your region."),
    ("wallet address", "Invalid wallet address provided."),
]


def format_wallet_address(address: Optional[str]) -> str:
    """Shorten a wallet address for display, e.g. 7xKXtg...gAsU."""
    if not address:
        return ""
    if len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


def parse_error_message(error: object) -> str:
    """Map an onramp error to a user-facing message."""
    if not error:
        return "Unknown error occurred"

    if isinstance(error, Exception):
        message = str(error)
        for needle, friendly in ERROR_PATTERNS:
            if needle in message:
                return friendly
        return message

    return "An unexpected error occurred. Please try again."
