"""Retry policy for on-chain reads and transactions."""

from __future__ import annotations

import random
from collections.abc import Callable
from dataclasses import dataclass

from web3.exceptions import ContractLogicError, MismatchedABI, Web3ValidationError

from dkgclient.domain.errors import TransactionRevertedError

RetryClassifier = Callable[[BaseException], bool]

# Failures that will never succeed on a retry with the same arguments.
DEFAULT_FATAL_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ContractLogicError,
    MismatchedABI,
    Web3ValidationError,
    TransactionRevertedError,
    TypeError,
)

DEFAULT_GAS_FLOOR = 900_000
DEFAULT_GAS_PRICE_GWEI = 100


@dataclass(slots=True, frozen=True)
class ChainRetryPolicy:
    """How often and how patiently a chain call is retried.

    ``total`` counts full attempts, including the first one. ``None`` means the
    call is retried until it succeeds or hits a fatal error. ``should_retry``
    is consulted after ``fatal_exceptions`` and can veto any other error.
    """

    total: int | None = 5
    backoff_factor: float = 0.5
    max_backoff_wait: float = 30.0
    backoff_jitter: float = 0.0
    fatal_exceptions: tuple[type[BaseException], ...] = DEFAULT_FATAL_EXCEPTIONS
    should_retry: RetryClassifier | None = None

    def __post_init__(self) -> None:
        if self.total is not None and self.total < 1:
            raise ValueError("ChainRetryPolicy.total must be at least 1 or None")
        if self.backoff_factor < 0 or self.max_backoff_wait < 0 or self.backoff_jitter < 0:
            raise ValueError("ChainRetryPolicy backoff values must be non-negative")

    def is_retryable(self, error: BaseException) -> bool:
        if isinstance(error, self.fatal_exceptions):
            return False
        if self.should_retry is not None:
            return self.should_retry(error)
        return True

    def allows_attempt(self, attempt: int) -> bool:
        return self.total is None or attempt <= self.total

    def backoff(self, failed_attempts: int) -> float:
        """Seconds to wait after ``failed_attempts`` consecutive failures."""

        if self.backoff_factor == 0 and self.backoff_jitter == 0:
            return 0.0
        wait = self.backoff_factor * (2 ** max(failed_attempts - 1, 0))
        if self.backoff_jitter:
            wait += random.uniform(0, self.backoff_jitter)  # noqa: S311
        return min(wait, self.max_backoff_wait)


# Never gives up: a permanently failing call blocks the caller forever.
RETRY_FOREVER = ChainRetryPolicy(
    total=None,
    backoff_factor=0.0,
    fatal_exceptions=(),
)
