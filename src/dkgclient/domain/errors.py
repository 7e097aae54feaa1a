"""Error taxonomy shared by every dkgclient operation."""

from __future__ import annotations


class DkgError(Exception):
    """Base class for errors raised by dkgclient."""


class FormatError(DkgError, ValueError):
    """Raised for malformed UALs or request options, before any network call."""


class TransportError(DkgError):
    """Raised when a node request fails at the HTTP level."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OperationFailedError(DkgError):
    """Raised when the node reports a terminal FAILED status."""

    def __init__(self, operation: str, message: str | None, *, handle: str | None = None) -> None:
        super().__init__(f"Get {operation} failed. Reason: {message}.")
        self.operation = operation
        self.message = message
        self.handle = handle


class RetriesExhaustedError(DkgError):
    """Raised when an operation is still pending after the retry budget is spent."""

    def __init__(self, operation: str, *, handle: str, attempts: int) -> None:
        super().__init__(
            f"Unable to get {operation} results. Max number of retries reached "
            f"after {attempts} polls."
        )
        self.operation = operation
        self.handle = handle
        self.attempts = attempts


class ChainExecutionError(DkgError):
    """Raised when a contract call gives up, carrying the last underlying error."""

    def __init__(
        self,
        contract: str,
        function: str,
        *,
        attempts: int,
        last_error: BaseException,
    ) -> None:
        super().__init__(
            f"{contract}.{function} failed after {attempts} attempt(s): {last_error}"
        )
        self.contract = contract
        self.function = function
        self.attempts = attempts
        self.last_error = last_error


class TransactionFailedError(ChainExecutionError):
    """A state-changing contract call could not be mined."""


class ChainCallError(ChainExecutionError):
    """A read-only contract call could not be completed."""


class TransactionRevertedError(DkgError):
    """Raised when a broadcast transaction was mined with a failed status."""

    def __init__(self, transaction_hash: str) -> None:
        super().__init__(f"Transaction {transaction_hash} reverted")
        self.transaction_hash = transaction_hash
