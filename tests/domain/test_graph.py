from __future__ import annotations

import pytest

from dkgclient.domain.errors import FormatError
from dkgclient.domain.graph import derive_repository
from dkgclient.domain.types import TripleStoreRepository


@pytest.mark.parametrize(
    ("location", "state", "expected"),
    [
        ("PUBLIC_KG", "CURRENT", TripleStoreRepository.PUBLIC_CURRENT),
        ("PUBLIC_KG", "HISTORICAL", TripleStoreRepository.PUBLIC_HISTORY),
        ("LOCAL_KG", "CURRENT", TripleStoreRepository.PRIVATE_CURRENT),
        ("LOCAL_KG", "HISTORICAL", TripleStoreRepository.PRIVATE_HISTORY),
    ],
)
def test_derive_repository_maps_location_and_state(
    location: str, state: str, expected: TripleStoreRepository
) -> None:
    assert derive_repository(location, state) is expected


def test_derive_repository_rejects_unknown_combinations() -> None:
    with pytest.raises(FormatError):
        derive_repository("REMOTE_KG", "CURRENT")
