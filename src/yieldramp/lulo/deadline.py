"""Deadline races and cancellation tokens for the transaction flows.

A wallet prompt cannot be withdrawn once it is shown, so the deadline race
stops waiting but leaves the submission running. CancellationToken marks a
surface as gone so suspended continuations skip their side effects.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Optional

from yieldramp.lulo.errors import TransactionTimeoutError, UnknownError, YieldError

logger = logging.getLogger(__name__)

DEFAULT_TRANSACTION_TIMEOUT = 30.0


class CancellationToken:
    """Liveness flag shared by every continuation of one mounted surface."""

    def __init__(self, reason: str = "surface"):
        self.reason = reason
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def alive(self) -> bool:
        return not self._cancelled

    def cancel(self) -> None:
        if not self._cancelled:
            logger.debug(f"Cancellation token for {self.reason} cancelled")
        self._cancelled = True


class OutcomeKind(str, Enum):
    SIGNATURE = "signature"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass
class TransactionOutcome:
    """Result of one transaction attempt. Exactly one kind per attempt."""

    kind: OutcomeKind
    signature: Optional[str] = None
    error: Optional[YieldError] = None

    @classmethod
    def success(cls, signature: str) -> "TransactionOutcome":
        return cls(kind=OutcomeKind.SIGNATURE, signature=signature)

    @classmethod
    def timed_out(cls, timeout: float) -> "TransactionOutcome":
        return cls(
            kind=OutcomeKind.TIMEOUT,
            error=TransactionTimeoutError(
                f"Transaction approval timed out after {timeout:.0f}s. Please try again."
            ),
        )

    @classmethod
    def failed(cls, error: YieldError) -> "TransactionOutcome":
        return cls(kind=OutcomeKind.ERROR, error=error)

    @property
    def succeeded(self) -> bool:
        return self.kind == OutcomeKind.SIGNATURE

    @property
    def message(self) -> Optional[str]:
        return self.error.message if self.error else None


def _log_late_result(task: asyncio.Task) -> None:
    """Retrieve the result of a submission nobody is waiting for any more."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(f"Submission finished unobserved with error: {exc}")
    else:
        logger.warning(f"Submission finished unobserved: {task.result()!r}")


async def race_with_deadline(
    submission: Awaitable[Optional[str]],
    timeout: float = DEFAULT_TRANSACTION_TIMEOUT,
) -> TransactionOutcome:
    """Race a wallet submission against a deadline.

    Args:
        submission: Awaitable resolving to a transaction signature
        timeout: Seconds to wait before giving up

    Returns:
        SIGNATURE with the signature, TIMEOUT, or ERROR with the wrapped error.
        An empty signature counts as an error.
    """
    task = asyncio.ensure_future(submission)
    try:
        done, _ = await asyncio.wait({task}, timeout=timeout)
    except asyncio.CancelledError:
        logger.warning("Flow cancelled while waiting for the wallet submission")
        task.add_done_callback(_log_late_result)
        raise

    if not done:
        logger.warning(f"Wallet submission did not finish within {timeout}s")
        task.add_done_callback(_log_late_result)
        return TransactionOutcome.timed_out(timeout)

    try:
        signature = task.result()
    except YieldError as e:
        return TransactionOutcome.failed(e)
    except asyncio.CancelledError:
        return TransactionOutcome.failed(UnknownError("Wallet submission was cancelled"))
    except Exception as e:
        return TransactionOutcome.failed(UnknownError(str(e)))

    if not signature:
        return TransactionOutcome.failed(UnknownError("Wallet returned no transaction signature"))
    return TransactionOutcome.success(signature)
