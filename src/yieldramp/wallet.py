"""Interface of the connected wallet.

Signing flow:
1. Yield backend builds an unsigned transaction (base64)
2. Wallet shows an approval prompt to the user
3. Wallet signs and submits the transaction
4. Wallet returns the transaction signature

The wallet never exposes keys to this package; it only returns signatures.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Awaitable, Callable, Optional

# (owner address, token mint) -> balance in token units
TokenBalanceFetcher = Callable[[str, str], Awaitable[Decimal]]


class WalletSigner(ABC):
    """Abstract connected wallet."""

    @property
    @abstractmethod
    def address(self) -> Optional[str]:
        """Public key of the connected account, None if not connected."""
        pass

    @property
    @abstractmethod
    def connected(self) -> bool:
        """Whether a wallet session is active."""
        pass

    @abstractmethod
    async def send_base64_transaction(self, transaction: str) -> Optional[str]:
        """Sign and submit a base64 encoded transaction.

        Args:
            transaction: Base64 unsigned transaction from the yield backend

        Returns:
            Transaction signature, or None if nothing was submitted
        """
        pass
