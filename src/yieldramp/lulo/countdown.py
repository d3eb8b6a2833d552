"""Withdrawal maturation countdown and completion eligibility."""

import logging
import time
from typing import NamedTuple, Optional, Sequence

from yieldramp.lulo.contracts import PendingWithdrawal

logger = logging.getLogger(__name__)

MATURATION_WINDOW_SECONDS = 24 * 3600


class Countdown(NamedTuple):
    """Time left before a withdrawal can be completed.

    total is 0 when eligible and -1 when there is nothing to count down.
    """

    total: float
    text: Optional[str]

    @property
    def is_ready(self) -> bool:
        return self.total == 0


def get_withdraw_countdown(
    withdrawal: Optional[PendingWithdrawal],
    now: Optional[float] = None,
    window: int = MATURATION_WINDOW_SECONDS,
) -> Countdown:
    """Compute the countdown for a pending withdrawal.

    Args:
        withdrawal: Pending withdrawal, may be None
        now: Current unix time (defaults to time.time())
        window: Maturation window in seconds

    Returns:
        Countdown(0, None) once eligible, otherwise the seconds left and a
        "<H>h <M>m remaining" label
    """
    if withdrawal is None or not withdrawal.created_timestamp:
        return Countdown(total=-1, text=None)

    if now is None:
        now = time.time()

    seconds_left = window - (now - withdrawal.created_timestamp)
    if seconds_left <= 0:
        return Countdown(total=0, text=None)

    hours = int(seconds_left // 3600)
    minutes = int((seconds_left % 3600) // 60)
    return Countdown(total=seconds_left, text=f"{hours}h {minutes}m remaining")


class EligibilityTracker:
    """Fires once when the earliest pending withdrawal becomes completable.

    The flag is re-armed by reset() (surface remount / details reopened) or
    when the set of pending withdrawal ids changes.
    """

    def __init__(self, window: int = MATURATION_WINDOW_SECONDS):
        self.window = window
        self._fired = False
        self._composition: frozenset = frozenset()

    @property
    def fired(self) -> bool:
        return self._fired

    def reset(self) -> None:
        self._fired = False

    def check(
        self,
        withdrawals: Sequence[PendingWithdrawal],
        now: Optional[float] = None,
    ) -> Optional[PendingWithdrawal]:
        """Return the withdrawal to prompt for, or None.

        Safe to call on every tick; returns a withdrawal at most once until
        re-armed.
        """
        composition = frozenset(str(w.withdrawal_id) for w in withdrawals)
        if composition != self._composition:
            self._composition = composition
            self._fired = False

        if not withdrawals or self._fired:
            return None

        first = withdrawals[0]
        if not get_withdraw_countdown(first, now=now, window=self.window).is_ready:
            return None

        self._fired = True
        logger.info(f"Withdrawal {first.withdrawal_id} is ready to be completed")
        return first
