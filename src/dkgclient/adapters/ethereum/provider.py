"""web3.py implementation of the chain provider port."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from eth_account import Account
from web3 import AsyncWeb3
from web3.logs import DISCARD

from dkgclient.domain.errors import TransactionRevertedError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from web3.contract import AsyncContract

    from dkgclient.config.blockchain import BlockchainConfig
    from dkgclient.domain.ports.chain import TransactionReceipt
    from dkgclient.domain.types import ContractHandle

log = getLogger(__name__)

Web3Factory = Callable[[str], AsyncWeb3]


def _default_web3_factory(rpc: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc))


class Web3ChainProvider:
    """Chain primitives over ``AsyncWeb3``, one connection per RPC endpoint."""

    def __init__(self, *, web3_factory: Web3Factory | None = None) -> None:
        self._web3_factory = web3_factory or _default_web3_factory
        self._connections: dict[str, AsyncWeb3] = {}

    def web3(self, config: BlockchainConfig) -> AsyncWeb3:
        connection = self._connections.get(config.rpc)
        if connection is None:
            log.debug("Connecting to %s at %s", config.title, config.rpc)
            connection = self._web3_factory(config.rpc)
            self._connections[config.rpc] = connection
        return connection

    def contract(self, config: BlockchainConfig, handle: ContractHandle) -> AsyncContract:
        return self.web3(config).eth.contract(
            address=AsyncWeb3.to_checksum_address(handle.address),
            abi=list(handle.abi),
        )

    async def estimate_gas(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> int:
        bound = self.contract(config, contract).functions[function](*args)
        return await bound.estimate_gas({"from": AsyncWeb3.to_checksum_address(config.wallet)})

    async def encode_call(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> str:
        return self.contract(config, contract).encode_abi(function, args=list(args))

    async def sign(self, config: BlockchainConfig, transaction: Mapping[str, Any]) -> bytes:
        w3 = self.web3(config)
        sender = AsyncWeb3.to_checksum_address(config.wallet)
        unsigned = {key: value for key, value in transaction.items() if key != "from"}
        unsigned["to"] = AsyncWeb3.to_checksum_address(unsigned["to"])
        unsigned.setdefault("nonce", await w3.eth.get_transaction_count(sender, "pending"))
        unsigned.setdefault("chainId", await w3.eth.chain_id)
        signed = Account.sign_transaction(unsigned, config.private_key)
        return bytes(signed.raw_transaction)

    async def broadcast(self, config: BlockchainConfig, raw_transaction: bytes) -> TransactionReceipt:
        w3 = self.web3(config)
        transaction_hash = await w3.eth.send_raw_transaction(raw_transaction)
        log.debug("Broadcast %s on %s", transaction_hash.hex(), config.title)
        receipt = await w3.eth.wait_for_transaction_receipt(transaction_hash)
        if receipt.get("status") == 0:
            raise TransactionRevertedError(transaction_hash.hex())
        return dict(receipt)

    async def call(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        function: str,
        args: Sequence[Any],
    ) -> Any:
        return await self.contract(config, contract).functions[function](*args).call()

    async def decode_events(
        self,
        config: BlockchainConfig,
        contract: ContractHandle,
        event: str,
        receipt: TransactionReceipt,
    ) -> list[Mapping[str, Any]]:
        events = self.contract(config, contract).events[event]().process_receipt(
            receipt, errors=DISCARD
        )
        return [dict(item["args"]) for item in events]

    async def aclose(self) -> None:
        for connection in self._connections.values():
            await connection.provider.disconnect()
        self._connections.clear()
