"""Port for JSON-LD canonicalization."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@runtime_checkable
class Canonicalizer(Protocol):
    """Deterministic, order-stable conversion between JSON-LD and n-quads."""

    def to_nquads(self, content: Any, input_format: str | None = None) -> list[str]:
        ...

    def to_jsonld(self, nquads: Sequence[str]) -> Any:
        ...
