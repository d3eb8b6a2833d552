"""Yield deposit/withdrawal orchestration.

YieldCard holds the state of one yield surface and drives its flows:

1. Ask the yield backend for an unsigned transaction
2. Have the connected wallet sign and submit it, within a deadline
3. Refresh balance, APY and pending withdrawals on success

Every flow reports its result through the notifier and returns a
TransactionOutcome; nothing is raised to the caller. After each suspension
point the flow checks the surface's CancellationToken and stops mutating
state once the surface is unmounted.
"""

import logging
import time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Callable, Optional

import httpx

from yieldramp.config import Settings, get_settings
from yieldramp.lulo.amount import AmountEntry
from yieldramp.lulo.client import LuloClient
from yieldramp.lulo.contracts import ApyInfo, PendingWithdrawal, YieldAction
from yieldramp.lulo.countdown import Countdown, EligibilityTracker, get_withdraw_countdown
from yieldramp.lulo.deadline import CancellationToken, TransactionOutcome, race_with_deadline
from yieldramp.lulo.errors import (
    BackendError,
    DismissedError,
    InvalidAmountError,
    InvalidInputError,
    NotConnectedError,
    TransactionInProgressError,
    TransactionTimeoutError,
    UnknownError,
    YieldError,
)
from yieldramp.notifications import Notifier, get_notifier
from yieldramp.wallet import TokenBalanceFetcher, WalletSigner

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = (
    "Transaction approval timed out. Please try again and make sure to approve "
    "the transaction in your wallet."
)
WALLET_LOST_MESSAGE = "Wallet connection lost. Please reconnect your wallet and try again."
DATA_FETCH_FAILED_MESSAGE = "Failed to fetch Lulo data."
READY_TITLE = "Complete Withdrawal"
READY_MESSAGE = "Your pending withdrawal is ready to be completed. Press OK to proceed."

APPROVAL_MESSAGES = {
    YieldAction.DEPOSIT: "Please approve the transaction to deposit.",
    YieldAction.INITIATE_WITHDRAW: "Please approve the transaction to initiate withdrawal.",
    YieldAction.COMPLETE_WITHDRAW: (
        "Please approve the transaction in your wallet to complete the withdrawal."
    ),
}

FALLBACK_MESSAGES = {
    YieldAction.DEPOSIT: "Deposit failed. Please try again.",
    YieldAction.INITIATE_WITHDRAW: "Withdraw initiation failed. Please try again.",
    YieldAction.COMPLETE_WITHDRAW: "Withdraw completion failed. Please try again.",
}


class ModalView(str, Enum):
    HIDDEN = "hidden"
    DETAILS = "details"
    AMOUNT = "amount"
    PENDING_LIST = "pending_list"


class AmountMode(str, Enum):
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


def parse_amount(text: str, message: str) -> Decimal:
    """Parse a positive decimal amount or raise InvalidAmountError(message)."""
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, AttributeError):
        raise InvalidAmountError(message)
    if not value.is_finite() or value <= 0:
        raise InvalidAmountError(message)
    return value


class YieldCard:
    """State and flows of the rebalancing-yield surface."""

    def __init__(
        self,
        client: LuloClient,
        wallet: WalletSigner,
        notifier: Notifier,
        balance_fetcher: Optional[TokenBalanceFetcher] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize the surface.

        Args:
            client: Yield backend client
            wallet: Connected wallet used to sign and submit
            notifier: Success/error notification dispatcher
            balance_fetcher: Wallet token balance lookup (address, mint) -> amount
            settings: Settings (global settings if None)
            clock: Unix time source
        """
        self.client = client
        self.wallet = wallet
        self.notifier = notifier
        self.balance_fetcher = balance_fetcher
        self.settings = settings or get_settings()
        self.clock = clock

        self.view = ModalView.HIDDEN
        self.mode: Optional[AmountMode] = None
        self.amount = AmountEntry()
        self.apy: Optional[ApyInfo] = None
        self.balance = Decimal("0")
        self.loading = False
        self.pending_withdrawals: list[PendingWithdrawal] = []
        self.wallet_balance: Optional[Decimal] = None

        self._token = CancellationToken()
        self._in_flight: Optional[object] = None
        self._eligibility = EligibilityTracker(self.settings.withdrawal_maturation_seconds)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def mounted(self) -> bool:
        return self._token.alive

    @property
    def is_processing(self) -> bool:
        return self._in_flight is not None

    def mount(self) -> None:
        """Start a new mount; suspended flows of a previous mount stay muted."""
        if self._token.cancelled:
            self._token = CancellationToken()
        self._eligibility.reset()

    def unmount(self) -> None:
        self._token.cancel()

    # ------------------------------------------------------------------
    # Views and input
    # ------------------------------------------------------------------

    async def open_details(self) -> None:
        self.view = ModalView.DETAILS
        self._eligibility.reset()
        await self.refresh_yield_data()
        await self.refresh_pending_withdrawals()

    async def open_amount(self, mode: AmountMode) -> None:
        self.mode = AmountMode(mode)
        self.amount.clear()
        self.view = ModalView.AMOUNT
        await self.refresh_wallet_balance()

    def open_pending_list(self) -> None:
        self.view = ModalView.PENDING_LIST

    def close(self) -> None:
        self.view = ModalView.HIDDEN
        self.mode = None

    def press_key(self, key: str) -> str:
        """Feed a keypad key into the amount; ignored while processing."""
        if self.is_processing:
            return self.amount.text
        return self.amount.press(key)

    def select_percentage(self, percentage: float) -> str:
        """Fill the amount with a share of the relevant balance."""
        balance = self.wallet_balance if self.mode == AmountMode.DEPOSIT else self.balance
        return self.amount.select_percentage(balance, percentage)

    @property
    def balance_text(self) -> str:
        if self.loading:
            return "..."
        return f"${self.balance:.2f}"

    def countdown(self, withdrawal: Optional[PendingWithdrawal]) -> Countdown:
        return get_withdraw_countdown(
            withdrawal,
            now=self.clock(),
            window=self.settings.withdrawal_maturation_seconds,
        )

    # ------------------------------------------------------------------
    # Data refresh
    # ------------------------------------------------------------------

    async def refresh_yield_data(self) -> None:
        """Reload APY and deposited balance."""
        address = self.wallet.address
        if not address:
            return

        token = self._token
        self.loading = True
        try:
            apy = await self.client.get_apy()
            if token.cancelled:
                return
            if apy is not None:
                self.apy = apy

            balance = await self.client.get_balance(address)
            if token.cancelled:
                return
            if balance is not None:
                self.balance = balance.total_usd_value
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to refresh yield data for {address}: {e}")
            if token.alive:
                await self.notifier.error(DATA_FETCH_FAILED_MESSAGE)
        finally:
            if token.alive:
                self.loading = False

    async def refresh_pending_withdrawals(self) -> None:
        """Reload pending withdrawals; any failure empties the list."""
        address = self.wallet.address
        if not address:
            return

        token = self._token
        try:
            withdrawals = await self.client.get_pending_withdrawals(address)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch pending withdrawals for {address}: {e}")
            withdrawals = []

        if token.alive:
            self.pending_withdrawals = withdrawals

    async def refresh_wallet_balance(self) -> None:
        """Reload the wallet's USDC balance; failures show as zero."""
        address = self.wallet.address
        if not address or self.balance_fetcher is None:
            return

        token = self._token
        try:
            balance = await self.balance_fetcher(address, self.settings.usdc_mint)
        except Exception as e:
            logger.warning(f"Failed to fetch USDC balance for {address}: {e}")
            balance = Decimal("0")

        if token.alive:
            self.wallet_balance = balance

    # ------------------------------------------------------------------
    # Transaction flows
    # ------------------------------------------------------------------

    async def deposit(self) -> TransactionOutcome:
        """Deposit the entered amount."""
        return await self._start(YieldAction.DEPOSIT, self._prepare_deposit)

    async def initiate_withdraw(self) -> TransactionOutcome:
        """Start a withdrawal of the entered amount; completes after maturation."""
        return await self._start(YieldAction.INITIATE_WITHDRAW, self._prepare_initiate_withdraw)

    async def complete_withdraw(self, withdrawal: Optional[PendingWithdrawal]) -> TransactionOutcome:
        """Complete a matured withdrawal."""
        return await self._start(
            YieldAction.COMPLETE_WITHDRAW,
            lambda: self._prepare_complete_withdraw(withdrawal),
        )

    async def tick(self) -> Optional[TransactionOutcome]:
        """Check whether the first pending withdrawal became completable.

        Prompts at most once per mount (or per change of the pending list)
        and completes the withdrawal when the user confirms.
        """
        withdrawal = self._eligibility.check(self.pending_withdrawals, now=self.clock())
        if withdrawal is None:
            return None

        token = self._token
        confirmed = await self.notifier.confirm(READY_TITLE, READY_MESSAGE)
        if not confirmed or token.cancelled:
            return None
        return await self.complete_withdraw(withdrawal)

    def _require_address(self) -> str:
        address = self.wallet.address
        if not address or not self.wallet.connected:
            raise NotConnectedError()
        return address

    def _prepare_deposit(self) -> tuple[str, Decimal]:
        address = self._require_address()
        return address, parse_amount(self.amount.text, "Please enter a valid deposit amount.")

    def _prepare_initiate_withdraw(self) -> tuple[str, Decimal]:
        address = self._require_address()
        value = parse_amount(self.amount.text, "Please enter a valid withdrawal amount.")
        minimum = self.settings.min_withdraw_amount
        if value < minimum:
            raise InvalidAmountError(f"Withdrawal amount must be at least {minimum} USDC.")
        return address, value

    def _prepare_complete_withdraw(self, withdrawal: Optional[PendingWithdrawal]) -> tuple[str, int]:
        address = self._require_address()
        if withdrawal is None or not withdrawal.native_amount:
            raise InvalidInputError("No pending withdrawal amount found to complete.")
        return address, withdrawal.native_amount

    async def _start(self, action: YieldAction, prepare) -> TransactionOutcome:
        if self.is_processing:
            error = TransactionInProgressError()
            logger.info(f"Rejected {action.label}: another transaction is in flight")
            await self.notifier.error(error.message)
            return TransactionOutcome.failed(error)

        try:
            address, amount = prepare()
        except YieldError as e:
            logger.info(f"Rejected {action.label} before request: {e.message}")
            await self.notifier.error(e.message)
            return TransactionOutcome.failed(e)

        # Claimed before the first await so concurrent calls see it
        ticket = object()
        self._in_flight = ticket
        try:
            return await self._submit(action, address, amount)
        finally:
            if self._in_flight is ticket:
                self._in_flight = None

    async def _submit(self, action: YieldAction, address: str, amount) -> TransactionOutcome:
        token = self._token
        dismissed = TransactionOutcome.failed(DismissedError())

        try:
            transaction = await self.client.request_transaction(action, address, amount)
            if token.cancelled:
                return dismissed

            await self.notifier.success(APPROVAL_MESSAGES[action])
            if token.cancelled:
                return dismissed

            outcome = await race_with_deadline(
                self.wallet.send_base64_transaction(transaction),
                timeout=self.settings.transaction_timeout_seconds,
            )
        except BackendError as e:
            outcome = TransactionOutcome.failed(e)
        except httpx.HTTPError as e:
            logger.error(f"{action.label} request failed: {type(e).__name__}: {e}")
            outcome = TransactionOutcome.failed(UnknownError(str(e)))

        if token.cancelled:
            return dismissed

        if not outcome.succeeded:
            logger.warning(f"{action.label} for {address} failed: {outcome.kind.value}: {outcome.message}")
            await self.notifier.error(self._failure_message(action, outcome.error))
            return outcome

        logger.info(f"{action.label} for {address} submitted: {outcome.signature}")
        await self.refresh_yield_data()
        if token.cancelled:
            return outcome
        if action.is_withdrawal:
            await self.refresh_pending_withdrawals()
            if token.cancelled:
                return outcome

        self.view = ModalView.DETAILS
        self.amount.clear()
        await self.notifier.success(self._success_message(action))
        return outcome

    def _success_message(self, action: YieldAction) -> str:
        if action == YieldAction.DEPOSIT:
            return "Your deposit has been processed successfully."
        if action == YieldAction.INITIATE_WITHDRAW:
            hours = self.settings.withdrawal_maturation_seconds // 3600
            return f"Your withdrawal has been initiated. You must wait {hours} hours to complete it."
        return "Your withdrawal has been completed successfully."

    @staticmethod
    def _failure_message(action: YieldAction, error: Optional[YieldError]) -> str:
        detail = error.detail if error else ""
        if isinstance(error, TransactionTimeoutError) or "timeout" in detail.lower():
            return TIMEOUT_MESSAGE
        if "wallets:connect" in detail:
            return WALLET_LOST_MESSAGE
        return detail or FALLBACK_MESSAGES[action]


def create_yield_card(
    wallet: WalletSigner,
    notifier: Optional[Notifier] = None,
    balance_fetcher: Optional[TokenBalanceFetcher] = None,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> YieldCard:
    """Build a YieldCard wired to the configured backend and notifier.

    When the notifier is the Telegram channel, call
    `yieldramp.notifications.close_notifiers()` on shutdown.
    """
    settings = settings or get_settings()
    client = LuloClient(
        settings.server_url,
        timeout=settings.http_timeout_seconds,
        client=http_client,
    )
    return YieldCard(
        client=client,
        wallet=wallet,
        notifier=notifier or get_notifier(settings),
        balance_fetcher=balance_fetcher,
        settings=settings,
    )
