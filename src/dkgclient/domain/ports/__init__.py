"""Domain port definitions for adapters."""

from __future__ import annotations

from .canonicalization import Canonicalizer
from .chain import ChainProvider, TransactionReceipt
from .node import NodeTransport, OperationKind

__all__ = [
    "Canonicalizer",
    "ChainProvider",
    "NodeTransport",
    "OperationKind",
    "TransactionReceipt",
]
