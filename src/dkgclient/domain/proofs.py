"""Merkle inclusion proofs for triples of an assertion."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import TYPE_CHECKING

from eth_utils import keccak

from .errors import FormatError
from .types import ValidatedTriple

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from .types import AssertionProofs, HexDigest, ProofRecord

log = getLogger(__name__)

HashFunction = Callable[[bytes], bytes]
RootHashFetcher = Callable[[str], Awaitable["HexDigest"]]


def _keccak(data: bytes) -> bytes:
    return keccak(primitive=data)


def as_bytes(value: bytes | str) -> bytes:
    if isinstance(value, bytes):
        return value
    text = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(text)
    except ValueError as exc:
        raise FormatError(f"Not a hex digest: {value!r}") from exc


def hash_triple(triple: str, *, hash_function: HashFunction = _keccak) -> bytes:
    return hash_function(triple.encode("utf-8"))


def merkle_root(leaves: Sequence[bytes], *, hash_function: HashFunction = _keccak) -> bytes:
    """Merkle root over already-hashed leaves, duplicating the last node on odd levels."""

    if not leaves:
        return hash_function(b"")
    level = list(leaves)
    while len(level) > 1:
        if len(level) % 2:
            level.append(level[-1])
        level = [hash_function(level[i] + level[i + 1]) for i in range(0, len(level), 2)]
    return level[0]


def merkle_proof(
    leaves: Sequence[bytes],
    index: int,
    *,
    hash_function: HashFunction = _keccak,
) -> list[dict[str, str]]:
    """Sibling path for ``leaves[index]`` in the tree built by :func:`merkle_root`."""

    if not 0 <= index < len(leaves):
        raise IndexError(f"Leaf index {index} out of range for {len(leaves)} leaves")
    proof: list[dict[str, str]] = []
    level = list(leaves)
    position = index
    while len(level) > 1:
        if len(level) % 2:
            level.append(level[-1])
        if position % 2:
            proof.append({"left": "0x" + level[position - 1].hex()})
        else:
            proof.append({"right": "0x" + level[position + 1].hex()})
        level = [hash_function(level[i] + level[i + 1]) for i in range(0, len(level), 2)]
        position //= 2
    return proof


def verify_merkle_proof(
    leaf: bytes | str,
    proof: Sequence[Mapping[str, str]],
    root: bytes | str,
    *,
    hash_function: HashFunction = _keccak,
) -> bool:
    node = as_bytes(leaf)
    for step in proof:
        if "left" in step:
            node = hash_function(as_bytes(step["left"]) + node)
        elif "right" in step:
            node = hash_function(node + as_bytes(step["right"]))
        else:
            raise FormatError(f"Proof step needs a 'left' or 'right' sibling: {dict(step)}")
    return node == as_bytes(root)


class ProofValidator:
    """Checks every proved triple of a set of assertions against its root hash.

    Root hashes come from ``fetch_root_hash``, usually a resolve on the node.
    Triples without a proof make no claim and produce no record.
    """

    def __init__(
        self,
        fetch_root_hash: RootHashFetcher,
        *,
        hash_function: HashFunction = _keccak,
    ) -> None:
        self._fetch_root_hash = fetch_root_hash
        self._hash = hash_function

    async def validate(self, assertions: Iterable[AssertionProofs]) -> list[ValidatedTriple]:
        results: list[ValidatedTriple] = []
        for assertion in assertions:
            root_hash = await self._fetch_root_hash(assertion.assertion_id)
            for record in assertion.proofs:
                if record.proof is None:
                    log.debug(
                        "%s has no proof in assertion %s", record.triple, assertion.assertion_id
                    )
                    continue
                valid = self.validate_record(record, root_hash)
                results.append(ValidatedTriple(triple=record.triple, valid=valid))
                if valid:
                    log.debug("Validation successful for triple: %s", record.triple)
                else:
                    log.debug("Invalid triple: %s", record.triple)
        return results

    def validate_record(self, record: ProofRecord, root_hash: HexDigest) -> bool:
        if record.proof is None:
            raise FormatError(f"No proof to validate for {record.triple}")
        leaf = hash_triple(record.triple, hash_function=self._hash)
        try:
            if record.triple_hash and as_bytes(record.triple_hash) != leaf:
                log.debug("Triple hash does not match triple: %s", record.triple)
                return False
            return verify_merkle_proof(leaf, record.proof, root_hash, hash_function=self._hash)
        except FormatError as exc:
            log.debug("Malformed proof for %s: %s", record.triple, exc)
            return False
