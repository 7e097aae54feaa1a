"""Triple-store repository selection for graph queries."""

from __future__ import annotations

from .errors import FormatError
from .types import GraphLocation, GraphState, TripleStoreRepository

_REPOSITORIES: dict[tuple[GraphLocation, GraphState], TripleStoreRepository] = {
    (GraphLocation.PUBLIC_KG, GraphState.CURRENT): TripleStoreRepository.PUBLIC_CURRENT,
    (GraphLocation.PUBLIC_KG, GraphState.HISTORICAL): TripleStoreRepository.PUBLIC_HISTORY,
    (GraphLocation.LOCAL_KG, GraphState.CURRENT): TripleStoreRepository.PRIVATE_CURRENT,
    (GraphLocation.LOCAL_KG, GraphState.HISTORICAL): TripleStoreRepository.PRIVATE_HISTORY,
}


def derive_repository(graph_location: str, graph_state: str) -> TripleStoreRepository:
    try:
        key = (GraphLocation(graph_location), GraphState(graph_state))
    except ValueError as exc:
        raise FormatError(
            f"Unknown graph location and state: {graph_location}, {graph_state}"
        ) from exc
    return _REPOSITORIES[key]
