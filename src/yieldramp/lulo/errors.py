"""Errors raised inside the yield deposit/withdrawal flows.

Flows catch these and turn them into a notification plus a
TransactionOutcome; they never escape to the caller.
"""


class YieldError(Exception):
    """Base class for yield flow errors."""

    default_message = "Something went wrong. Please try again."

    def __init__(self, message: str = ""):
        self.detail = message
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInputError(YieldError):
    """Bad user input, rejected before any network call."""

    default_message = "Invalid input."


class InvalidAmountError(InvalidInputError):
    """Amount is not a positive number or is below the minimum."""

    default_message = "Please enter a valid amount."


class NotConnectedError(YieldError):
    """No wallet is connected."""

    default_message = "Please connect your wallet first."


class BackendError(YieldError):
    """The yield backend reported a failure or returned no transaction."""

    default_message = "The yield service could not build the transaction."


class TransactionTimeoutError(YieldError):
    """The wallet did not approve and submit within the deadline."""

    default_message = "Transaction approval timed out. Please try again."


class TransactionInProgressError(YieldError):
    """Another transaction is already in flight on this surface."""

    default_message = "A transaction is already in progress. Please wait for it to finish."


class DismissedError(YieldError):
    """The surface was dismissed while the flow was suspended."""

    default_message = "The yield view was closed before the flow finished."


class UnknownError(YieldError):
    """Anything that does not fit the categories above."""
