from __future__ import annotations

import asyncio

import pytest

from dkgclient.app import DkgClient
from dkgclient.config.node import PollingConfig
from dkgclient.domain.errors import FormatError, OperationFailedError
from dkgclient.domain.proofs import hash_triple, merkle_proof, merkle_root
from dkgclient.domain.types import OperationStatus, ValidatedTriple
from tests.helpers.chain import FakeCanonicalizer, FakeChainProvider, make_settings
from tests.helpers.node import FakeNodeTransport, FakeTimer

TRIPLES = [
    '<urn:a> <http://schema.org/name> "A" .',
    '<urn:a> <http://schema.org/knows> <urn:b> .',
    '<urn:b> <http://schema.org/name> "B" .',
]


def _client(node: FakeNodeTransport) -> tuple[DkgClient, FakeTimer]:
    timer = FakeTimer()
    client = DkgClient(
        node=node,
        polling=PollingConfig(frequency=1.0, settle_delay=0.0),
        blockchain_settings=make_settings,
        chain=FakeChainProvider(),
        canonicalizer=FakeCanonicalizer(),
        sleep=timer.sleep,
        clock=timer.clock,
    )
    return client, timer


def test_node_info_passes_through() -> None:
    client, _ = _client(FakeNodeTransport(info={"version": "6.1.0"}))

    assert asyncio.run(client.node_info()) == {"version": "6.1.0"}


def test_resolve_submits_ids_and_waits_for_completion() -> None:
    node = FakeNodeTransport().statuses("resolve", "PENDING", "COMPLETED", data=[{"0xa": {}}])
    client, timer = _client(node)

    result = asyncio.run(client.resolve(["0xa", "", "0xb"]))

    assert node.submitted == [("resolve", {"ids": ["0xa", "0xb"]})]
    assert result.status is OperationStatus.COMPLETED
    assert result.data == [{"0xa": {}}]
    assert timer.sleeps == [0.0, 1.0, 1.0]


def test_resolve_without_ids_is_rejected() -> None:
    node = FakeNodeTransport()
    client, _ = _client(node)

    with pytest.raises(FormatError):
        asyncio.run(client.resolve([]))

    assert node.submitted == []


def test_resolve_reports_failed_operation() -> None:
    node = FakeNodeTransport().queue("resolve", {"status": "FAILED", "message": "not found"})
    client, _ = _client(node)

    with pytest.raises(OperationFailedError, match="not found"):
        asyncio.run(client.resolve(["0xa"]))


@pytest.mark.parametrize(("query", "result_type"), [("", "entities"), ("alice", "widgets")])
def test_search_rejects_bad_options(query: str, result_type: str) -> None:
    node = FakeNodeTransport()
    client, _ = _client(node)

    with pytest.raises(FormatError):
        asyncio.run(client.search(query, result_type))

    assert node.submitted == []


def test_search_collects_results() -> None:
    items = [{"@id": "urn:a"}, {"@id": "urn:b"}]
    node = FakeNodeTransport().queue("entities:search", {"itemListElement": items})
    client, _ = _client(node)

    result = asyncio.run(client.search("al", "entities", number_of_results=2, limit=5))

    assert node.submitted == [("entities:search", {"query": "al", "prefix": None, "limit": 5})]
    assert list(result["itemListElement"]) == items


def test_query_adds_repository_for_graph_options() -> None:
    node = FakeNodeTransport().statuses("query", "COMPLETED", data="<urn:a> <urn:b> <urn:c> .")
    client, _ = _client(node)

    asyncio.run(
        client.query(
            "CONSTRUCT WHERE { ?s ?p ?o }",
            graph_location="LOCAL_KG",
            graph_state="HISTORICAL",
        )
    )

    assert node.submitted == [
        (
            "query",
            {
                "query": "CONSTRUCT WHERE { ?s ?p ?o }",
                "type": "construct",
                "repository": "privateHistory",
            },
        )
    ]


def test_query_without_graph_options_leaves_repository_to_node() -> None:
    node = FakeNodeTransport().statuses("query", "COMPLETED", data=[])
    client, _ = _client(node)

    asyncio.run(client.query("SELECT * WHERE { ?s ?p ?o }", "select"))

    assert node.submitted == [("query", {"query": "SELECT * WHERE { ?s ?p ?o }", "type": "select"})]


def test_query_with_half_a_graph_selection_is_rejected() -> None:
    client, _ = _client(FakeNodeTransport())

    with pytest.raises(FormatError):
        asyncio.run(client.query("SELECT * WHERE { ?s ?p ?o }", graph_state="CURRENT"))


def test_validate_checks_proofs_against_resolved_root_hash() -> None:
    leaves = [hash_triple(triple) for triple in TRIPLES]
    root = "0x" + merkle_root(leaves).hex()
    proofs = [
        {
            "triple": TRIPLES[0],
            "tripleHash": "0x" + leaves[0].hex(),
            "proof": merkle_proof(leaves, 0),
        },
        {"triple": TRIPLES[1], "proof": merkle_proof(leaves, 1)},
        {"triple": "<urn:x> <urn:y> <urn:z> .", "proof": merkle_proof(leaves, 2)},
        {"triple": TRIPLES[2], "proof": None},
    ]
    node = (
        FakeNodeTransport()
        .statuses("proofs:get", "COMPLETED", data=[{"assertionId": "0xabc", "proofs": proofs}])
        .statuses("resolve", "COMPLETED", data=[{"0xabc": {"rootHash": root}}])
    )
    client, _ = _client(node)

    results = asyncio.run(client.validate(TRIPLES))

    assert results == [
        ValidatedTriple(triple=TRIPLES[0], valid=True),
        ValidatedTriple(triple=TRIPLES[1], valid=True),
        ValidatedTriple(triple="<urn:x> <urn:y> <urn:z> .", valid=False),
    ]
    assert node.submitted == [
        ("proofs:get", {"nquads": TRIPLES}),
        ("resolve", {"ids": ["0xabc"]}),
    ]


def test_validate_requires_nquads() -> None:
    client, _ = _client(FakeNodeTransport())

    with pytest.raises(FormatError):
        asyncio.run(client.validate([]))
