"""Fakes for node polling tests."""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


class FakeNodeTransport:
    """Scripted node: each poll pops the next queued payload for its operation.

    The last queued payload repeats once the queue runs dry.
    """

    def __init__(self, *, info: Mapping[str, Any] | None = None) -> None:
        self._info = dict(info or {"version": "6.0.0"})
        self._responses: dict[str, list[Mapping[str, Any]]] = defaultdict(list)
        self.submitted: list[tuple[str, dict[str, Any]]] = []
        self.polls: list[tuple[str, str]] = []

    def queue(self, kind: str, *payloads: Mapping[str, Any]) -> FakeNodeTransport:
        self._responses[str(kind)].extend(payloads)
        return self

    def statuses(self, kind: str, *statuses: str, data: Any = None) -> FakeNodeTransport:
        return self.queue(kind, *({"status": status, "data": data} for status in statuses))

    async def info(self) -> Mapping[str, Any]:
        return self._info

    async def submit(self, kind: str, payload: Mapping[str, Any]) -> str:
        self.submitted.append((str(kind), dict(payload)))
        return f"{kind}-handle-{len(self.submitted)}"

    async def poll(self, kind: str, handle: str) -> Mapping[str, Any]:
        self.polls.append((str(kind), handle))
        queued = self._responses[str(kind)]
        if not queued:
            raise AssertionError(f"No payload queued for {kind}")
        if len(queued) > 1:
            return queued.pop(0)
        return queued[0]


class FakeTimer:
    """Sleep and clock pair: sleeping advances the clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds

    def clock(self) -> float:
        return self.now
