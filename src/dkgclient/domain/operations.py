"""Polling a node until an asynchronous operation settles."""

from __future__ import annotations

import asyncio
import inspect
import time
from collections.abc import Awaitable, Callable, Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dkgclient.config.node import PollingConfig

from .errors import FormatError, OperationFailedError, RetriesExhaustedError
from .types import OperationResult, OperationStatus

if TYPE_CHECKING:
    from .ports.node import NodeTransport, OperationKind
    from .types import OperationHandle

log = getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]
Clock = Callable[[], float]
SearchCallback = Callable[[Mapping[str, Any]], Awaitable[object] | object]


def _option[N: (int, float)](value: N | None, default: N, name: str) -> N:
    if value is None:
        return default
    if value < 0:
        raise FormatError(f"{name} must be non-negative, got {value}")
    return value


def _status_of(payload: Mapping[str, Any]) -> OperationStatus:
    raw = payload.get("status")
    try:
        return OperationStatus(str(raw).upper())
    except ValueError:
        # Intermediate node states count as still running.
        return OperationStatus.PENDING


class OperationResultResolver:
    """Polls an operation handle until it completes, fails or runs out of retries.

    The loop waits ``settle_delay`` once, then for each tick sleeps ``frequency``
    seconds and asks the node for the status. More than
    ``max_number_of_retries + 1`` pending answers raise
    :class:`RetriesExhaustedError`. Transport errors are not retried here.
    """

    def __init__(
        self,
        transport: NodeTransport,
        *,
        polling: PollingConfig | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._transport = transport
        self._polling = polling or PollingConfig()
        self._sleep = sleep

    async def get_result(
        self,
        operation: OperationKind | str,
        handle: OperationHandle | None,
        *,
        frequency: float | None = None,
        max_number_of_retries: int | None = None,
    ) -> OperationResult:
        if not handle or not operation:
            raise FormatError("Unable to get results, need handler id and operation")
        frequency = _option(frequency, self._polling.frequency, "frequency")
        max_retries = _option(
            max_number_of_retries,
            self._polling.max_number_of_retries,
            "max_number_of_retries",
        )

        await self._sleep(self._polling.settle_delay)

        attempts = 0
        while True:
            if attempts > max_retries:
                raise RetriesExhaustedError(str(operation), handle=handle, attempts=attempts)
            attempts += 1
            await self._sleep(frequency)

            payload = await self._transport.poll(operation, handle)
            status = _status_of(payload)
            log.debug(
                "%s result status: %s (poll %s of %s)",
                operation,
                payload.get("status"),
                attempts,
                max_retries + 1,
            )

            if status is OperationStatus.PENDING:
                continue
            if status is OperationStatus.FAILED:
                raise OperationFailedError(str(operation), payload.get("message"), handle=handle)
            return OperationResult(
                operation=str(operation),
                handle=handle,
                status=status,
                data=payload.get("data"),
                raw=dict(payload),
            )


class SearchPoller:
    """Polls a growing search result set.

    Stops once ``number_of_results`` items have arrived or the deadline armed at
    loop entry has passed, whichever comes first. The deadline is only checked
    between ticks, so the loop may overshoot it by one polling interval. Every
    fetched payload is handed to the callback in full.
    """

    def __init__(
        self,
        transport: NodeTransport,
        *,
        polling: PollingConfig | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        self._transport = transport
        self._polling = polling or PollingConfig()
        self._sleep = sleep
        self._clock = clock

    async def get_results(
        self,
        result_type: str,
        handle: OperationHandle | None,
        callback: SearchCallback | None = None,
        *,
        timeout_in_seconds: float | None = None,
        number_of_results: int | None = None,
        frequency: float | None = None,
    ) -> Mapping[str, Any]:
        if not handle:
            raise FormatError("Unable to get results, need handler id")
        timeout = _option(timeout_in_seconds, self._polling.timeout_in_seconds, "timeout_in_seconds")
        target = _option(number_of_results, self._polling.number_of_results, "number_of_results")
        frequency = _option(frequency, self._polling.frequency, "frequency")

        kind = f"{result_type}:search"
        deadline = self._clock() + timeout
        ticks = 0
        while True:
            ticks += 1
            await self._sleep(frequency)
            payload = await self._transport.poll(kind, handle)
            current = len(payload.get("itemListElement") or ())
            log.debug("%s tick %s: %s of %s results", kind, ticks, current, target)

            if callback is not None:
                outcome = callback(payload)
                if inspect.isawaitable(outcome):
                    await outcome

            if self._clock() >= deadline:
                log.debug("%s deadline reached with %s results", kind, current)
                return payload
            if current >= target:
                return payload


def operation_status(result: OperationResult) -> dict[str, Any]:
    """Summarise a result as ``{operationId, status}`` plus any error details."""

    summary: dict[str, Any] = {"operationId": result.handle, "status": str(result.status)}
    data = result.data
    if isinstance(data, Mapping) and data.get("errorType"):
        summary.update(data)
    return summary
