"""JSON-LD canonicalization with PyLD."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pyld import jsonld

from dkgclient.domain.errors import FormatError

if TYPE_CHECKING:
    from collections.abc import Sequence

NQUADS = "application/n-quads"
CANONICAL_ALGORITHM = "URDNA2015"


class PyLDCanonicalizer:
    """URDNA2015 canonical n-quads, one quad per list entry."""

    def to_nquads(self, content: Any, input_format: str | None = None) -> list[str]:
        options: dict[str, Any] = {"algorithm": CANONICAL_ALGORITHM, "format": NQUADS}
        if input_format:
            options["inputFormat"] = input_format
        try:
            canonized = jsonld.normalize(content, options)
        except jsonld.JsonLdError as exc:
            raise FormatError(f"Unable to canonicalize content: {exc}") from exc
        return [line for line in canonized.split("\n") if line != ""]

    def to_jsonld(self, nquads: Sequence[str]) -> Any:
        try:
            return jsonld.from_rdf("\n".join(nquads) + "\n", {"format": NQUADS})
        except jsonld.JsonLdError as exc:
            raise FormatError(f"Unable to convert n-quads to JSON-LD: {exc}") from exc
