"""Retrying executors for contract reads and transactions."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dkgclient.domain.errors import ChainCallError, ChainExecutionError, TransactionFailedError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dkgclient.config.blockchain import BlockchainConfig
    from dkgclient.domain.ports.chain import ChainProvider, TransactionReceipt
    from dkgclient.domain.types import ContractHandle

log = getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class _RetryingExecutor:
    _error_type: type[ChainExecutionError] = ChainExecutionError
    _label: str = "call"

    def __init__(self, provider: ChainProvider, *, sleep: Sleep = asyncio.sleep) -> None:
        self._provider = provider
        self._sleep = sleep

    async def _run[T](
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        attempt_once: Callable[[], Awaitable[T]],
    ) -> T:
        policy = config.retry
        attempt = 0
        while True:
            attempt += 1
            try:
                return await attempt_once()
            except Exception as exc:
                if not policy.is_retryable(exc):
                    log.error(
                        "%s %s.%s failed with a non-retryable error: %r",
                        self._label,
                        contract.name,
                        function,
                        exc,
                    )
                    raise self._error_type(
                        contract.name, function, attempts=attempt, last_error=exc
                    ) from exc
                if not policy.allows_attempt(attempt + 1):
                    log.error(
                        "%s %s.%s gave up after %s attempt(s): %r",
                        self._label,
                        contract.name,
                        function,
                        attempt,
                        exc,
                    )
                    raise self._error_type(
                        contract.name, function, attempts=attempt, last_error=exc
                    ) from exc
                delay = policy.backoff(attempt)
                log.warning(
                    "%s %s.%s attempt %s failed: %r; retrying in %.2fs",
                    self._label,
                    contract.name,
                    function,
                    attempt,
                    exc,
                    delay,
                )
                await self._sleep(delay)


class TransactionExecutor(_RetryingExecutor):
    """Runs a state-changing contract call: estimate, encode, envelope, sign, broadcast.

    A failure at any step restarts the whole sequence according to the chain's
    ``ChainRetryPolicy``. Note that failed attempts may still have cost gas.
    """

    _error_type = TransactionFailedError
    _label = "transaction"

    async def execute(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> TransactionReceipt:
        async def attempt_once() -> TransactionReceipt:
            return await self._send(config, contract, function, args)

        return await self._run(config, contract, function, attempt_once)

    async def _send(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> TransactionReceipt:
        gas_limit = await self._provider.estimate_gas(config, contract, function, args)
        data = await self._provider.encode_call(config, contract, function, args)
        transaction = {
            "from": config.wallet,
            "to": contract.address,
            "data": data,
            "gasPrice": config.gas_price_wei,
            "gas": gas_limit or config.gas_floor,
        }
        raw_transaction = await self._provider.sign(config, transaction)
        receipt = await self._provider.broadcast(config, raw_transaction)
        log.info(
            "%s.%s mined in tx %s",
            contract.name,
            function,
            receipt.get("transactionHash"),
        )
        return receipt


class ReadExecutor(_RetryingExecutor):
    """Runs a view/pure contract call under the chain's retry policy."""

    _error_type = ChainCallError
    _label = "read"

    async def call(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any] = (),
    ) -> Any:
        async def attempt_once() -> Any:
            return await self._provider.call(config, contract, function, args)

        return await self._run(config, contract, function, attempt_once)
