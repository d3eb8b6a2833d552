"""HTTP client for the yield backend.

Endpoints (relative to the configured server URL):
    GET  /api/lulo/apy
    GET  /api/lulo/balance/{address}
    GET  /api/lulo/pending-withdrawals/{address}
    POST /api/lulo/lend | initiate-withdraw | complete-withdraw
"""

import logging
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Optional, Union

import httpx
from pydantic import ValidationError

from yieldramp.lulo.contracts import (
    ApyInfo,
    BalanceInfo,
    PendingWithdrawal,
    TransactionEnvelope,
    YieldAction,
)
from yieldramp.lulo.errors import BackendError

logger = logging.getLogger(__name__)

API_PREFIX = "/api/lulo"


def _json_amount(amount: Union[Decimal, int]) -> Union[int, float]:
    """Render an amount as a JSON number, keeping integers integral."""
    if isinstance(amount, int):
        return amount
    if amount == amount.to_integral_value():
        return int(amount)
    return float(amount)


class LuloClient:
    """Async client for the yield backend.

    Read endpoints return None / [] when the backend reports failure; HTTP
    transport errors propagate as httpx exceptions. Transaction endpoints
    raise BackendError when no transaction is returned.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the client.

        Args:
            base_url: Backend base URL, e.g. https://api.example.com
            timeout: Per-request timeout in seconds
            client: Shared AsyncClient; a short-lived one is created per call if None
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client

    def _url(self, path: str) -> str:
        return f"{self.base_url}{API_PREFIX}{path}"

    async def _get_json(self, path: str) -> dict:
        async with self._session() as client:
            response = await client.get(self._url(path))
        try:
            data = response.json()
        except ValueError:
            logger.warning(f"Yield backend returned non-JSON for {path}: HTTP {response.status_code}")
            return {}
        return data if isinstance(data, dict) else {}

    async def get_apy(self) -> Optional[ApyInfo]:
        """Get current APY for the regular and protected pools."""
        data = await self._get_json("/apy")
        if not data.get("success"):
            logger.warning(f"APY request failed: {data.get('error', 'no error given')}")
            return None
        return ApyInfo.model_validate(data.get("apy") or {})

    async def get_balance(self, address: str) -> Optional[BalanceInfo]:
        """Get the deposited balance of a wallet."""
        data = await self._get_json(f"/balance/{address}")
        if not data.get("success"):
            logger.warning(f"Balance request failed for {address}: {data.get('error', 'no error given')}")
            return None
        return BalanceInfo.model_validate(data.get("balance") or {})

    async def get_pending_withdrawals(self, address: str) -> list[PendingWithdrawal]:
        """Get withdrawals waiting to be completed, oldest first as sent by the backend."""
        data = await self._get_json(f"/pending-withdrawals/{address}")
        withdrawals = data.get("withdrawals")
        if not data.get("success") or not isinstance(withdrawals, list):
            return []

        pending = []
        for item in withdrawals:
            try:
                pending.append(PendingWithdrawal.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed pending withdrawal {item!r}: {e}")
        return pending

    async def request_transaction(
        self,
        action: YieldAction,
        address: str,
        amount: Union[Decimal, int],
    ) -> str:
        """Ask the backend to build an unsigned transaction.

        Args:
            action: Which transaction to build
            address: Wallet public key that will sign
            amount: USDC amount (deposit / initiate) or native amount (complete)

        Returns:
            Base64 encoded unsigned transaction

        Raises:
            BackendError: If the backend reports failure or omits the transaction
        """
        payload = {"userPublicKey": address, "amount": _json_amount(amount)}
        logger.info(f"Requesting {action.label} transaction for {address}: {payload['amount']}")

        async with self._session() as client:
            response = await client.post(self._url(f"/{action.value}"), json=payload)

        try:
            envelope = TransactionEnvelope.model_validate(response.json())
        except (ValueError, ValidationError):
            raise BackendError(f"Yield service returned an invalid response (HTTP {response.status_code})")

        if not envelope.success or not envelope.transaction:
            message = envelope.error or f"Failed to get transaction for {action.label}"
            logger.warning(f"Backend refused {action.label} for {address}: {message}")
            raise BackendError(message)

        return envelope.transaction
