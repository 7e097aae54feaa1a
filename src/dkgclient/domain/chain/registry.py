"""Resolve the contracts an asset operation needs from the hub contract."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from dkgclient.config.errors import ConfigurationError
from dkgclient.domain.types import ContractHandle, ContractHandleSet, ContractName

from .abi import DEFAULT_ABIS

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dkgclient.config.blockchain import BlockchainConfig

    from .abi import ABI
    from .executor import ReadExecutor

log = getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

_RESOLVED_CONTRACTS = (
    ContractName.ASSET_REGISTRY,
    ContractName.UAI_REGISTRY,
    ContractName.TOKEN,
)


class ContractRegistry:
    """Looks up contract addresses by name through the hub.

    Nothing is cached: every call to :meth:`resolve` asks the hub again, so a
    redeployed registry is picked up by the next operation.
    """

    def __init__(
        self,
        reader: ReadExecutor,
        *,
        abis: Mapping[ContractName, ABI] | None = None,
    ) -> None:
        self._reader = reader
        self._abis = dict(abis or DEFAULT_ABIS)

    def hub(self, config: BlockchainConfig) -> ContractHandle:
        return ContractHandle(
            name=ContractName.HUB,
            address=config.hub_contract,
            abi=self._abis[ContractName.HUB],
        )

    async def resolve(self, config: BlockchainConfig) -> ContractHandleSet:
        hub = self.hub(config)
        try:
            async with asyncio.TaskGroup() as group:
                tasks = [
                    group.create_task(self.lookup(config, hub, name))
                    for name in _RESOLVED_CONTRACTS
                ]
        except ExceptionGroup as errors:
            # Remaining lookups are cancelled; surface the first failure as-is.
            raise errors.exceptions[0] from None
        asset_registry, token_registry, token = (task.result() for task in tasks)
        log.debug(
            "Resolved contracts on %s: AssetRegistry=%s UAIRegistry=%s Token=%s",
            config.title,
            asset_registry.address,
            token_registry.address,
            token.address,
        )
        return ContractHandleSet(
            hub=hub,
            asset_registry=asset_registry,
            token_registry=token_registry,
            token=token,
        )

    async def lookup(
        self,
        config: BlockchainConfig,
        hub: ContractHandle,
        name: ContractName,
    ) -> ContractHandle:
        address = await self._reader.call(config, hub, "getContractAddress", [str(name)])
        if not address or str(address).lower() == ZERO_ADDRESS:
            raise ConfigurationError(
                f"Hub {hub.address} on {config.title} has no address registered for {name}"
            )
        return ContractHandle(name=name, address=str(address), abi=self._abis[name])

    async def refresh_if_stale(
        self,
        config: BlockchainConfig,
        handles: ContractHandleSet,
        name: ContractName,
    ) -> ContractHandleSet | None:
        """Re-read ``name`` from the hub.

        Returns an updated handle set when the hub now points at a different
        address, or ``None`` when the handle we hold is still current.
        """

        current = handles.get(name)
        fresh = await self.lookup(config, handles.hub, name)
        if fresh.address.lower() == current.address.lower():
            return None
        log.info("%s on %s moved from %s to %s", name, config.title, current.address, fresh.address)
        return handles.with_handle(fresh)
