"""Node HTTP adapter package."""

from __future__ import annotations

from .client import NodeHTTPClient
from .schema import (
    AssertionProofsPayload,
    HandlerResponse,
    NodeInfo,
    OperationResponse,
    extract_root_hash,
    parse_node_info,
    parse_proofs,
)

__all__ = [
    "AssertionProofsPayload",
    "HandlerResponse",
    "NodeHTTPClient",
    "NodeInfo",
    "OperationResponse",
    "extract_root_hash",
    "parse_node_info",
    "parse_proofs",
]
