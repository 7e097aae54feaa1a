"""Core value types used across dkgclient."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from enum import IntEnum, StrEnum
from typing import Any

type OperationHandle = str
type Triple = str
type HexDigest = str


class OperationStatus(StrEnum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Visibility(IntEnum):
    PUBLIC = 0
    PRIVATE = 1


class GraphLocation(StrEnum):
    PUBLIC_KG = "PUBLIC_KG"
    LOCAL_KG = "LOCAL_KG"


class GraphState(StrEnum):
    CURRENT = "CURRENT"
    HISTORICAL = "HISTORICAL"


class TripleStoreRepository(StrEnum):
    PUBLIC_CURRENT = "publicCurrent"
    PUBLIC_HISTORY = "publicHistory"
    PRIVATE_CURRENT = "privateCurrent"
    PRIVATE_HISTORY = "privateHistory"


class ContractName(StrEnum):
    """Names under which contracts are registered in the hub."""

    HUB = "Hub"
    ASSET_REGISTRY = "AssetRegistry"
    UAI_REGISTRY = "UAIRegistry"
    TOKEN = "Token"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Terminal payload of a node operation. Never PENDING."""

    operation: str
    handle: OperationHandle
    status: OperationStatus
    data: Any = None
    raw: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ProofRecord:
    triple: Triple
    proof: Sequence[Mapping[str, str]] | None
    triple_hash: HexDigest | None = None


@dataclass(frozen=True, slots=True)
class AssertionProofs:
    assertion_id: str
    proofs: Sequence[ProofRecord]


@dataclass(frozen=True, slots=True)
class ValidatedTriple:
    triple: Triple
    valid: bool


@dataclass(frozen=True, slots=True)
class ContractHandle:
    """A contract binding: where it lives and how to talk to it."""

    name: ContractName
    address: str
    abi: Sequence[Mapping[str, Any]] = field(repr=False)


@dataclass(frozen=True, slots=True)
class ContractHandleSet:
    hub: ContractHandle
    asset_registry: ContractHandle
    token_registry: ContractHandle
    token: ContractHandle

    def get(self, name: ContractName) -> ContractHandle:
        return getattr(self, _HANDLE_FIELDS[name])

    def with_handle(self, handle: ContractHandle) -> ContractHandleSet:
        return replace(self, **{_HANDLE_FIELDS[handle.name]: handle})


_HANDLE_FIELDS: dict[ContractName, str] = {
    ContractName.HUB: "hub",
    ContractName.ASSET_REGISTRY: "asset_registry",
    ContractName.UAI_REGISTRY: "token_registry",
    ContractName.TOKEN: "token",
}


@dataclass(frozen=True, slots=True)
class CreateAssetResult:
    ual: str
    assertion_id: HexDigest
    token_id: int
    transaction_hash: str | None
    operation: OperationResult | None
