"""Keypad and slider input for the deposit/withdraw amount."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

DELETE_KEY = "delete"
DECIMAL_POINT = "."
MAX_FRACTION_DIGITS = 2
CENTS = Decimal("0.01")


class AmountEntry:
    """Decimal amount typed on a keypad.

    Keeps at most one decimal point and two fractional digits; a lone
    leading zero is replaced by the next digit.
    """

    def __init__(self, text: str = ""):
        self.text = text
        self.slider_value = 0.0

    def __str__(self) -> str:
        return self.text

    def __bool__(self) -> bool:
        return bool(self.text)

    def press(self, key: str) -> str:
        """Apply a keypad key ('0'-'9', '.', 'delete') and return the new text."""
        if key == DELETE_KEY:
            self.text = self.text[:-1]
        elif key == DECIMAL_POINT:
            if DECIMAL_POINT not in self.text:
                self.text = "0." if self.text == "" else self.text + DECIMAL_POINT
        elif not key.isdigit() or len(key) != 1:
            raise ValueError(f"Unsupported keypad key: {key!r}")
        elif self.text == "0":
            self.text = key
        else:
            if DECIMAL_POINT in self.text:
                fraction = self.text.split(DECIMAL_POINT, 1)[1]
                if len(fraction) >= MAX_FRACTION_DIGITS:
                    return self.text
            self.text += key
        return self.text

    def clear(self) -> None:
        self.text = ""
        self.slider_value = 0.0

    def select_percentage(self, balance: Optional[Decimal], percentage: float) -> str:
        """Set the amount to a share of a balance, rounded to cents.

        No-op when the balance is unknown.
        """
        if balance is None:
            return self.text
        value = (Decimal(str(balance)) * Decimal(str(percentage))).quantize(CENTS, rounding=ROUND_HALF_UP)
        self.text = f"{value:.2f}"
        self.slider_value = percentage
        return self.text
