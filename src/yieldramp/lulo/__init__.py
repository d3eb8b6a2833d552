"""Rebalancing yield deposits and withdrawals."""

from yieldramp.lulo.client import LuloClient
from yieldramp.lulo.contracts import ApyInfo, BalanceInfo, PendingWithdrawal, YieldAction
from yieldramp.lulo.countdown import Countdown, EligibilityTracker, get_withdraw_countdown
from yieldramp.lulo.deadline import CancellationToken, OutcomeKind, TransactionOutcome
from yieldramp.lulo.orchestrator import AmountMode, ModalView, YieldCard, create_yield_card

__all__ = [
    "AmountMode",
    "ApyInfo",
    "BalanceInfo",
    "CancellationToken",
    "Countdown",
    "EligibilityTracker",
    "LuloClient",
    "ModalView",
    "OutcomeKind",
    "PendingWithdrawal",
    "TransactionOutcome",
    "YieldAction",
    "YieldCard",
    "create_yield_card",
    "get_withdraw_countdown",
]
