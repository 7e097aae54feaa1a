from __future__ import annotations

import asyncio
from typing import Any

import pytest
from eth_account import Account

from dkgclient.adapters.ethereum import Web3ChainProvider
from dkgclient.domain.errors import TransactionRevertedError
from tests.helpers.chain import make_blockchain_config

PRIVATE_KEY = "0x" + "11" * 32
SENDER = Account.from_key(PRIVATE_KEY).address
RECIPIENT = "0x00000000000000000000000000000000000000b2"


class _FakeEth:
    def __init__(self, *, status: int = 1) -> None:
        self.status = status
        self.sent: list[bytes] = []
        self.nonce_queries: list[tuple[str, str]] = []

    @property
    async def chain_id(self) -> int:
        return 31337

    async def get_transaction_count(self, address: str, block: str) -> int:
        self.nonce_queries.append((address, block))
        return 4

    async def send_raw_transaction(self, raw: bytes) -> bytes:
        self.sent.append(raw)
        return b"\x99" * 32

    async def wait_for_transaction_receipt(self, tx_hash: bytes) -> dict[str, Any]:
        return {"transactionHash": tx_hash, "status": self.status}


class _FakeWeb3:
    def __init__(self, eth: _FakeEth) -> None:
        self.eth = eth


def _provider(eth: _FakeEth) -> tuple[Web3ChainProvider, list[str]]:
    connected: list[str] = []

    def factory(rpc: str) -> Any:
        connected.append(rpc)
        return _FakeWeb3(eth)

    return Web3ChainProvider(web3_factory=factory), connected


def test_sign_fills_nonce_and_chain_id_and_drops_sender() -> None:
    eth = _FakeEth()
    provider, _ = _provider(eth)
    config = make_blockchain_config(wallet=SENDER, private_key=PRIVATE_KEY)
    transaction = {
        "from": SENDER,
        "to": RECIPIENT,
        "data": "0x",
        "gasPrice": config.gas_price_wei,
        "gas": 900_000,
    }

    raw = asyncio.run(provider.sign(config, transaction))

    assert Account.recover_transaction(raw) == SENDER
    assert eth.nonce_queries == [(SENDER, "pending")]


def test_broadcast_returns_receipt() -> None:
    provider, _ = _provider(_FakeEth())

    receipt = asyncio.run(provider.broadcast(make_blockchain_config(), b"raw"))

    assert receipt["status"] == 1
    assert receipt["transactionHash"] == b"\x99" * 32


def test_broadcast_raises_on_reverted_receipt() -> None:
    provider, _ = _provider(_FakeEth(status=0))

    with pytest.raises(TransactionRevertedError):
        asyncio.run(provider.broadcast(make_blockchain_config(), b"raw"))


def test_connections_are_reused_per_rpc() -> None:
    provider, connected = _provider(_FakeEth())
    config = make_blockchain_config()

    provider.web3(config)
    provider.web3(config)

    assert connected == [config.rpc]
