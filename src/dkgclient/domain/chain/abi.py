"""Minimal ABIs for the contracts an asset operation touches."""

from __future__ import annotations

from typing import Any, Final

from dkgclient.domain.types import ContractName

type ABI = list[dict[str, Any]]


def _function(
    name: str,
    inputs: list[tuple[str, str]],
    outputs: list[tuple[str, str]] | None = None,
    *,
    mutability: str = "nonpayable",
) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"internalType": kind, "name": arg, "type": kind} for arg, kind in inputs],
        "outputs": [
            {"internalType": kind, "name": arg, "type": kind} for arg, kind in outputs or []
        ],
        "stateMutability": mutability,
    }


HUB_ABI: Final[ABI] = [
    _function(
        "getContractAddress",
        [("contractName", "string")],
        [("", "address")],
        mutability="view",
    ),
]

ASSET_REGISTRY_ABI: Final[ABI] = [
    _function(
        "createAsset",
        [
            ("assertionId", "bytes32"),
            ("size", "uint256"),
            ("visibility", "uint8"),
            ("holdingTimeInYears", "uint256"),
            ("tokenAmount", "uint256"),
        ],
        [("UAI", "uint256")],
    ),
    _function(
        "getCommitHash",
        [("UAI", "uint256"), ("offset", "uint256")],
        [("commitHash", "bytes32")],
        mutability="view",
    ),
    {
        "type": "event",
        "name": "AssetCreated",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "UAI", "type": "uint256"},
            {"indexed": False, "internalType": "bytes32", "name": "assertionId", "type": "bytes32"},
        ],
    },
]

UAI_REGISTRY_ABI: Final[ABI] = [
    _function("ownerOf", [("tokenId", "uint256")], [("owner", "address")], mutability="view"),
    _function("transferFrom", [("from", "address"), ("to", "address"), ("tokenId", "uint256")]),
]

ERC20_TOKEN_ABI: Final[ABI] = [
    _function(
        "increaseAllowance",
        [("spender", "address"), ("addedValue", "uint256")],
        [("", "bool")],
    ),
    _function("balanceOf", [("account", "address")], [("", "uint256")], mutability="view"),
]

DEFAULT_ABIS: Final[dict[ContractName, ABI]] = {
    ContractName.HUB: HUB_ABI,
    ContractName.ASSET_REGISTRY: ASSET_REGISTRY_ABI,
    ContractName.UAI_REGISTRY: UAI_REGISTRY_ABI,
    ContractName.TOKEN: ERC20_TOKEN_ABI,
}
