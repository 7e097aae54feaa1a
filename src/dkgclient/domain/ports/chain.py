"""Port for chain RPC and transaction signing."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from dkgclient.config.blockchain import BlockchainConfig
    from dkgclient.domain.types import ContractHandle

type TransactionReceipt = Mapping[str, Any]


@runtime_checkable
class ChainProvider(Protocol):
    """Opaque chain primitives keyed by contract handle, function and arguments."""

    async def estimate_gas(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> int:
        ...

    async def encode_call(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> str:
        ...

    async def sign(self, config: BlockchainConfig, transaction: Mapping[str, Any]) -> bytes:
        ...

    async def broadcast(self, config: BlockchainConfig, raw_transaction: bytes) -> TransactionReceipt:
        """Send a signed transaction and wait for it to be mined."""
        ...

    async def call(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> Any:
        ...

    async def decode_events(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        event: str,
        receipt: TransactionReceipt,
    ) -> list[Mapping[str, Any]]:
        """Return the arguments of every ``event`` the contract emitted in ``receipt``."""
        ...
