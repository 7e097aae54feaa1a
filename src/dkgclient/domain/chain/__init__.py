"""On-chain execution: contract registry and retrying executors."""

from __future__ import annotations

from .abi import DEFAULT_ABIS
from .executor import ReadExecutor, TransactionExecutor
from .registry import ContractRegistry

__all__ = ["DEFAULT_ABIS", "ContractRegistry", "ReadExecutor", "TransactionExecutor"]
