"""Port for the knowledge-graph node HTTP API."""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dkgclient.domain.types import OperationHandle


class OperationKind(StrEnum):
    """Operation names as they appear in node URLs."""

    PUBLISH = "publish"
    RESOLVE = "resolve"
    QUERY = "query"
    PROOFS = "proofs:get"
    ENTITIES_SEARCH = "entities:search"
    ASSERTIONS_SEARCH = "assertions:search"


@runtime_checkable
class NodeTransport(Protocol):
    """Submits operations to a node and fetches their current state."""

    async def info(self) -> Mapping[str, Any]:
        ...

    async def submit(self, kind: OperationKind, payload: Mapping[str, Any]) -> OperationHandle:
        """Start an operation and return the handle the node issued for it."""
        ...

    async def poll(self, kind: OperationKind | str, handle: OperationHandle) -> Mapping[str, Any]:
        """Return the current ``{status, data?, message?}`` payload for ``handle``."""
        ...
