"""Pydantic models describing the node HTTP payloads."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dkgclient.domain.errors import TransportError
from dkgclient.domain.types import AssertionProofs, ProofRecord


class NodeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class HandlerResponse(NodeBaseModel):
    handler_id: str = Field(min_length=1)


class OperationResponse(NodeBaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    status: str
    data: Any = None
    message: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def _upper(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value


class NodeInfo(NodeBaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    version: str | None = None
    auto_update: bool | None = Field(default=None, alias="auto_update")
    telemetry: bool | None = None


class ProofEntry(NodeBaseModel):
    triple: str
    triple_hash: str | None = Field(default=None, alias="tripleHash")
    proof: list[dict[str, str]] | None = None

    def to_domain(self) -> ProofRecord:
        return ProofRecord(triple=self.triple, proof=self.proof, triple_hash=self.triple_hash)


class AssertionProofsPayload(NodeBaseModel):
    assertion_id: str = Field(alias="assertionId")
    proofs: list[ProofEntry]

    def to_domain(self) -> AssertionProofs:
        return AssertionProofs(
            assertion_id=self.assertion_id,
            proofs=tuple(entry.to_domain() for entry in self.proofs),
        )


def parse_handler_id(payload: object) -> str:
    try:
        return HandlerResponse.model_validate(payload).handler_id
    except ValidationError as exc:
        raise TransportError("Node response carries no handler_id") from exc


def parse_operation(payload: object) -> OperationResponse:
    try:
        return OperationResponse.model_validate(payload)
    except ValidationError as exc:
        raise TransportError(f"Unexpected operation payload: {exc}") from exc


def parse_node_info(payload: object) -> dict[str, Any]:
    try:
        info = NodeInfo.model_validate(payload)
    except ValidationError as exc:
        raise TransportError(f"Unexpected node info payload: {exc}") from exc
    return info.model_dump(by_alias=True, exclude_none=True)


def parse_proofs(data: object) -> list[AssertionProofs]:
    """Turn the ``proofs:get`` result data into domain records."""

    if not isinstance(data, Sequence) or isinstance(data, str):
        raise TransportError("Proofs result is not a list of assertions")
    try:
        return [AssertionProofsPayload.model_validate(item).to_domain() for item in data]
    except ValidationError as exc:
        raise TransportError(f"Unexpected proofs payload: {exc}") from exc


def extract_root_hash(data: object, assertion_id: str) -> str:
    """Read ``data[0][assertion_id].rootHash`` from a resolve result."""

    try:
        entry = data[0][assertion_id]  # type: ignore[index]
        root_hash = entry["rootHash"]
    except (KeyError, IndexError, TypeError) as exc:
        raise TransportError(f"Node returned no root hash for assertion {assertion_id}") from exc
    if not isinstance(root_hash, str) or not root_hash:
        raise TransportError(f"Node returned no root hash for assertion {assertion_id}")
    return root_hash


def as_mapping(payload: object) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise TransportError("Node response is not a JSON object")
    return payload
