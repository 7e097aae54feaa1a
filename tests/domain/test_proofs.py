from __future__ import annotations

import asyncio

import pytest
from eth_utils import keccak

from dkgclient.domain.errors import FormatError
from dkgclient.domain.proofs import (
    ProofValidator,
    hash_triple,
    merkle_proof,
    merkle_root,
    verify_merkle_proof,
)
from dkgclient.domain.types import AssertionProofs, ProofRecord

TRIPLES = [
    '<urn:a> <http://schema.org/name> "A" .',
    '<urn:b> <http://schema.org/name> "B" .',
    '<urn:c> <http://schema.org/name> "C" .',
]


def _leaves() -> list[bytes]:
    return [hash_triple(triple) for triple in TRIPLES]


def test_merkle_root_duplicates_last_leaf_on_odd_levels() -> None:
    a, b, c = _leaves()

    expected = keccak(keccak(a + b) + keccak(c + c))

    assert merkle_root([a, b, c]) == expected


def test_merkle_root_of_single_leaf_is_the_leaf() -> None:
    leaf = hash_triple(TRIPLES[0])

    assert merkle_root([leaf]) == leaf


@pytest.mark.parametrize("index", [0, 1, 2])
def test_merkle_proof_verifies_against_root(index: int) -> None:
    leaves = _leaves()
    root = merkle_root(leaves)

    proof = merkle_proof(leaves, index)

    assert verify_merkle_proof(leaves[index], proof, root)
    assert verify_merkle_proof("0x" + leaves[index].hex(), proof, "0x" + root.hex())


def test_verify_merkle_proof_rejects_wrong_leaf() -> None:
    leaves = _leaves()
    proof = merkle_proof(leaves, 0)

    assert not verify_merkle_proof(leaves[1], proof, merkle_root(leaves))


def test_verify_merkle_proof_rejects_unknown_step() -> None:
    with pytest.raises(FormatError):
        verify_merkle_proof(b"\x00" * 32, [{"up": "0x00"}], b"\x00" * 32)


def test_validator_skips_null_proofs_and_flags_mismatches() -> None:
    leaves = _leaves()
    root = "0x" + merkle_root(leaves).hex()
    requested: list[str] = []

    async def fetch_root_hash(assertion_id: str) -> str:
        requested.append(assertion_id)
        return root

    assertion = AssertionProofs(
        assertion_id="0xassertion",
        proofs=(
            ProofRecord(triple=TRIPLES[0], proof=merkle_proof(leaves, 0)),
            ProofRecord(triple='<urn:z> <urn:p> "missing" .', proof=None),
            ProofRecord(triple=TRIPLES[2], proof=merkle_proof(leaves, 1)),
            ProofRecord(
                triple=TRIPLES[1],
                proof=merkle_proof(leaves, 1),
                triple_hash="0x" + leaves[1].hex(),
            ),
        ),
    )

    results = asyncio.run(ProofValidator(fetch_root_hash).validate([assertion]))

    assert requested == ["0xassertion"]
    assert [(r.triple, r.valid) for r in results] == [
        (TRIPLES[0], True),
        (TRIPLES[2], False),
        (TRIPLES[1], True),
    ]


def test_validator_marks_malformed_proofs_invalid() -> None:
    async def fetch_root_hash(assertion_id: str) -> str:
        return "0x" + "00" * 32

    assertion = AssertionProofs(
        assertion_id="0x01",
        proofs=(ProofRecord(triple=TRIPLES[0], proof=[{"left": "not-hex"}]),),
    )

    results = asyncio.run(ProofValidator(fetch_root_hash).validate([assertion]))

    assert [r.valid for r in results] == [False]


def test_validator_rejects_triple_paired_with_another_leaf_hash() -> None:
    leaves = _leaves()
    root = "0x" + merkle_root(leaves).hex()

    async def fetch_root_hash(assertion_id: str) -> str:
        return root

    forged = '<urn:evil> <http://schema.org/name> "E" .'
    assertion = AssertionProofs(
        assertion_id="0x01",
        proofs=(
            ProofRecord(
                triple=forged,
                proof=merkle_proof(leaves, 0),
                triple_hash="0x" + leaves[0].hex(),
            ),
            ProofRecord(triple=TRIPLES[0], proof=merkle_proof(leaves, 0), triple_hash="0xzz"),
        ),
    )

    results = asyncio.run(ProofValidator(fetch_root_hash).validate([assertion]))

    assert [(r.triple, r.valid) for r in results] == [(forged, False), (TRIPLES[0], False)]
