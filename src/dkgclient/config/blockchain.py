"""Blockchain configuration values.

Each asset operation picks one ``BlockchainConfig`` from the table and carries
that frozen snapshot through every chain call it makes, so two operations
against different chains never share state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from .chain_resilience import DEFAULT_GAS_FLOOR, DEFAULT_GAS_PRICE_GWEI, ChainRetryPolicy
from .env import env_key, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError, UnknownBlockchainError

if TYPE_CHECKING:
    from collections.abc import Mapping

AVAILABLE_BLOCKCHAINS: tuple[str, ...] = (
    "hardhat",
    "otp::testnet",
    "otp::mainnet",
    "polygon::testnet",
    "polygon::mainnet",
)
DEFAULT_BLOCKCHAIN = "hardhat"

# Local development chain: first contract deployed by the default hardhat account.
_BUILTIN_ENDPOINTS: dict[str, tuple[str, str]] = {
    "hardhat": ("http://localhost:8545", "0x5FbDB2315678afecb367f032d93F642f64180aa3"),
}


@dataclass(frozen=True, slots=True)
class BlockchainConfig:
    title: str
    rpc: str
    hub_contract: str
    wallet: str
    private_key: str = field(repr=False)
    gas_price_gwei: int = DEFAULT_GAS_PRICE_GWEI
    gas_floor: int = DEFAULT_GAS_FLOOR
    retry: ChainRetryPolicy = field(default_factory=ChainRetryPolicy)

    @property
    def gas_price_wei(self) -> int:
        return self.gas_price_gwei * 10**9


@dataclass(frozen=True, slots=True)
class BlockchainSettings:
    """Static table of blockchain configurations keyed by chain name."""

    default: str
    blockchains: Mapping[str, BlockchainConfig]

    def __post_init__(self) -> None:
        object.__setattr__(self, "blockchains", MappingProxyType(dict(self.blockchains)))

    def select(self, name: str | None = None) -> BlockchainConfig:
        """Return the configuration for ``name`` or for the default chain."""

        chosen = name or self.default
        config = self.blockchains.get(chosen)
        if config is None:
            raise UnknownBlockchainError(chosen, available=tuple(self.blockchains))
        return config


def get_blockchain_settings(
    *,
    retry: ChainRetryPolicy | None = None,
) -> BlockchainSettings:
    """Build the blockchain table from the environment.

    The wallet is shared by every chain. A chain is only listed when both its
    RPC endpoint and hub address are known, either built in or supplied via
    ``DKG_<CHAIN>_RPC`` and ``DKG_<CHAIN>_HUB``.
    """

    wallet = require_env_vars(("DKG_WALLET_PUBLIC_KEY", "DKG_WALLET_PRIVATE_KEY"))
    default = optional_env_var("DKG_BLOCKCHAIN", DEFAULT_BLOCKCHAIN) or DEFAULT_BLOCKCHAIN
    gas_price = optional_env_var("DKG_GAS_PRICE_GWEI")
    try:
        gas_price_gwei = int(gas_price) if gas_price else DEFAULT_GAS_PRICE_GWEI
    except ValueError as exc:
        raise ConfigurationError(f"Invalid gas price: {gas_price!r}") from exc

    blockchains: dict[str, BlockchainConfig] = {}
    for name in AVAILABLE_BLOCKCHAINS:
        builtin_rpc, builtin_hub = _BUILTIN_ENDPOINTS.get(name, (None, None))
        key = env_key(name)
        rpc = optional_env_var(f"DKG_{key}_RPC", builtin_rpc)
        hub = optional_env_var(f"DKG_{key}_HUB", builtin_hub)
        if rpc is None or hub is None:
            continue
        blockchains[name] = BlockchainConfig(
            title=name,
            rpc=rpc,
            hub_contract=hub,
            wallet=wallet["DKG_WALLET_PUBLIC_KEY"],
            private_key=wallet["DKG_WALLET_PRIVATE_KEY"],
            gas_price_gwei=gas_price_gwei,
            retry=retry or ChainRetryPolicy(),
        )

    if default not in blockchains:
        key = env_key(default)
        raise MissingConfigurationError(
            f"Blockchain configuration is missing for {default!r}: "
            f"set DKG_{key}_RPC and DKG_{key}_HUB"
        )
    return BlockchainSettings(default=default, blockchains=blockchains)
