"""Pytest configuration and fixtures."""

import asyncio
import json
import os
from decimal import Decimal
from typing import Optional

import httpx
import pytest
import pytest_asyncio

# Set test environment
os.environ["TELEGRAM_BOT_TOKEN"] = ""
os.environ["MOONPAY_API_KEY"] = "pk_test_fixture"

from yieldramp.config import Settings
from yieldramp.lulo.client import LuloClient
from yieldramp.lulo.orchestrator import YieldCard
from yieldramp.notifications.base import Notifier
from yieldramp.wallet import WalletSigner

SERVER_URL = "http://lulo.test"
WALLET_ADDRESS = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
NOW = 1_700_000_000.0


class FakeWallet(WalletSigner):
    """Wallet double that records submissions."""

    def __init__(
        self,
        address: Optional[str] = WALLET_ADDRESS,
        connected: bool = True,
        signature: Optional[str] = "5igSig",
        error: Optional[Exception] = None,
        hang: bool = False,
    ):
        self._address = address
        self._connected = connected
        self.signature = signature
        self.error = error
        self.hang = hang
        self.release = asyncio.Event()
        self.transactions: list[str] = []

    @property
    def address(self) -> Optional[str]:
        return self._address

    @property
    def connected(self) -> bool:
        return self._connected

    async def send_base64_transaction(self, transaction: str) -> Optional[str]:
        self.transactions.append(transaction)
        if self.hang:
            await self.release.wait()
        if self.error:
            raise self.error
        return self.signature


class RecordingNotifier(Notifier):
    """Notifier double that keeps every message."""

    def __init__(self, confirm_answer: bool = False):
        self.successes: list[str] = []
        self.errors: list[str] = []
        self.confirms: list[tuple[str, str]] = []
        self.confirm_answer = confirm_answer

    async def success(self, message: str) -> bool:
        self.successes.append(message)
        return True

    async def error(self, message: str) -> bool:
        self.errors.append(message)
        return True

    async def confirm(self, title: str, message: str) -> bool:
        self.confirms.append((title, message))
        return self.confirm_answer


class FakeLuloBackend:
    """In-memory yield backend served through httpx.MockTransport."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.apy = {
            "regular": {"CURRENT": 8.5, "1HR": 8.4, "1YR": 9.1, "24HR": 8.6, "30DAY": 8.7, "7DAY": 8.8},
            "protected": {"CURRENT": 6.1, "1HR": 6.0, "1YR": 6.5, "24HR": 6.2, "30DAY": 6.3, "7DAY": 6.4},
        }
        self.total_usd_value = 125.5
        self.withdrawals: list[dict] = []
        self.transaction_reply: dict = {"success": True, "transaction": "AQAB...base64"}
        self.fail_reads = False

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    def post_bodies(self) -> list[dict]:
        return [json.loads(r.content) for r in self.posts]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "GET" and self.fail_reads:
            raise httpx.ConnectError("backend unreachable", request=request)

        if path == "/api/lulo/apy":
            return httpx.Response(200, json={"success": True, "apy": self.apy})
        if path.startswith("/api/lulo/balance/"):
            return httpx.Response(
                200, json={"success": True, "balance": {"totalUsdValue": self.total_usd_value}}
            )
        if path.startswith("/api/lulo/pending-withdrawals/"):
            return httpx.Response(200, json={"success": True, "withdrawals": self.withdrawals})
        if request.method == "POST" and path in (
            "/api/lulo/lend",
            "/api/lulo/initiate-withdraw",
            "/api/lulo/complete-withdraw",
        ):
            return httpx.Response(200, json=self.transaction_reply)
        return httpx.Response(404, json={"success": False, "error": "not found"})


@pytest.fixture
def settings() -> Settings:
    return Settings(
        server_url=SERVER_URL,
        transaction_timeout_seconds=0.2,
        moonpay_api_key="pk_test_fixture",
        telegram_bot_token="",
    )


@pytest.fixture
def backend() -> FakeLuloBackend:
    return FakeLuloBackend()


@pytest_asyncio.fixture
async def http_client(backend):
    async with httpx.AsyncClient(transport=httpx.MockTransport(backend.handler)) as client:
        yield client


@pytest.fixture
def lulo_client(http_client) -> LuloClient:
    return LuloClient(SERVER_URL, client=http_client)


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock():
    """Mutable clock: set clock.now to move time."""

    class Clock:
        now = NOW

        def __call__(self) -> float:
            return self.now

    return Clock()


@pytest.fixture
def card(lulo_client, wallet, notifier, settings, clock) -> YieldCard:
    async def fetch_balance(address: str, mint: str) -> Decimal:
        return Decimal("250.75")

    return YieldCard(
        client=lulo_client,
        wallet=wallet,
        notifier=notifier,
        balance_fetcher=fetch_balance,
        settings=settings,
        clock=clock,
    )
