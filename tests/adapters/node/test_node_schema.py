from __future__ import annotations

import pytest

from dkgclient.adapters.node import extract_root_hash, parse_node_info, parse_proofs
from dkgclient.domain.errors import TransportError


def test_parse_proofs_maps_node_payload() -> None:
    data = [
        {
            "assertionId": "0xabc",
            "proofs": [
                {"triple": "<a> <b> <c> .", "tripleHash": "0x01", "proof": [{"left": "0x02"}]},
                {"triple": "<d> <e> <f> .", "proof": None},
            ],
        }
    ]

    (assertion,) = parse_proofs(data)

    assert assertion.assertion_id == "0xabc"
    assert assertion.proofs[0].triple_hash == "0x01"
    assert assertion.proofs[0].proof == [{"left": "0x02"}]
    assert assertion.proofs[1].proof is None


@pytest.mark.parametrize("data", [None, "text", [{"proofs": []}]])
def test_parse_proofs_rejects_unexpected_shapes(data: object) -> None:
    with pytest.raises(TransportError):
        parse_proofs(data)


def test_extract_root_hash_reads_first_result() -> None:
    data = [{"0xabc": {"rootHash": "0xroot", "metadata": {}}}]

    assert extract_root_hash(data, "0xabc") == "0xroot"


@pytest.mark.parametrize("data", [[], [{}], [{"0xabc": {}}], None])
def test_extract_root_hash_reports_missing_hash(data: object) -> None:
    with pytest.raises(TransportError, match="0xabc"):
        extract_root_hash(data, "0xabc")


def test_parse_node_info_keeps_extra_fields() -> None:
    info = parse_node_info({"version": "6.0.0", "auto_update": False, "network": "testnet"})

    assert info == {"version": "6.0.0", "auto_update": False, "network": "testnet"}


@pytest.mark.parametrize("payload", [["6.0.0"], {"version": ["6"]}])
def test_parse_node_info_rejects_unexpected_shapes(payload: object) -> None:
    with pytest.raises(TransportError, match="node info"):
        parse_node_info(payload)
