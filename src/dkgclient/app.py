"""Application wiring and the ``DkgClient`` facade."""

from __future__ import annotations

import asyncio
import time
from functools import cache
from logging import getLogger
from typing import TYPE_CHECKING, Any

from dkgclient.adapters.ethereum import Web3ChainProvider
from dkgclient.adapters.jsonld import PyLDCanonicalizer
from dkgclient.adapters.node import NodeHTTPClient, extract_root_hash, parse_proofs
from dkgclient.config.blockchain import get_blockchain_settings
from dkgclient.config.node import get_node_config
from dkgclient.domain.assets import AssetService
from dkgclient.domain.chain import ContractRegistry, ReadExecutor, TransactionExecutor
from dkgclient.domain.errors import FormatError
from dkgclient.domain.graph import derive_repository
from dkgclient.domain.operations import OperationResultResolver, SearchPoller
from dkgclient.domain.ports.node import OperationKind
from dkgclient.domain.proofs import ProofValidator

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping
    from types import TracebackType

    from dkgclient.config.blockchain import BlockchainSettings
    from dkgclient.config.node import NodeConfig, PollingConfig
    from dkgclient.domain.operations import Clock, SearchCallback, Sleep
    from dkgclient.domain.ports.canonicalization import Canonicalizer
    from dkgclient.domain.ports.chain import ChainProvider
    from dkgclient.domain.ports.node import NodeTransport
    from dkgclient.domain.types import GraphLocation, GraphState, OperationResult, ValidatedTriple

log = getLogger(__name__)

SEARCH_RESULT_TYPES = ("entities", "assertions")
DEFAULT_QUERY_TYPE = "construct"


class DkgClient:
    """Node operations plus the ``asset`` workflow behind one object.

    Blockchain settings are read on the first asset operation, so node-only use
    never needs wallet configuration.
    """

    def __init__(
        self,
        *,
        node: NodeTransport,
        polling: PollingConfig | None = None,
        blockchain_settings: Callable[[], BlockchainSettings] | None = None,
        chain: ChainProvider | None = None,
        canonicalizer: Canonicalizer | None = None,
        sleep: Sleep = asyncio.sleep,
        clock: Clock = time.monotonic,
    ) -> None:
        self._node = node
        self._resolver = OperationResultResolver(node, polling=polling, sleep=sleep)
        self._search = SearchPoller(node, polling=polling, sleep=sleep, clock=clock)
        self._canonicalizer = canonicalizer or PyLDCanonicalizer()
        self._chain = chain or Web3ChainProvider()

        reader = ReadExecutor(self._chain, sleep=sleep)
        self.asset = AssetService(
            settings=blockchain_settings or cache(get_blockchain_settings),
            registry=ContractRegistry(reader),
            transactions=TransactionExecutor(self._chain, sleep=sleep),
            reader=reader,
            chain=self._chain,
            node=node,
            resolver=self._resolver,
            canonicalizer=self._canonicalizer,
        )

    async def __aenter__(self) -> DkgClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if isinstance(self._chain, Web3ChainProvider):
            await self._chain.aclose()

    async def node_info(self) -> Mapping[str, Any]:
        return await self._node.info()

    async def resolve(
        self,
        ids: Iterable[str],
        *,
        frequency: float | None = None,
        max_number_of_retries: int | None = None,
    ) -> OperationResult:
        ids = [identifier for identifier in ids if identifier]
        if not ids:
            raise FormatError("Please provide resolve options in order to resolve.")
        handle = await self._node.submit(OperationKind.RESOLVE, {"ids": ids})
        return await self._resolver.get_result(
            OperationKind.RESOLVE,
            handle,
            frequency=frequency,
            max_number_of_retries=max_number_of_retries,
        )

    async def search(
        self,
        query: str,
        result_type: str,
        callback: SearchCallback | None = None,
        *,
        prefix: bool | None = None,
        limit: int | None = None,
        timeout_in_seconds: float | None = None,
        number_of_results: int | None = None,
        frequency: float | None = None,
    ) -> Mapping[str, Any]:
        if not query or not result_type:
            raise FormatError("Please provide search options in order to search.")
        if result_type not in SEARCH_RESULT_TYPES:
            raise FormatError(
                f"Unknown search result type {result_type!r}; "
                f"expected one of {', '.join(SEARCH_RESULT_TYPES)}"
            )
        kind = OperationKind(f"{result_type}:search")
        handle = await self._node.submit(kind, {"query": query, "prefix": prefix, "limit": limit})
        return await self._search.get_results(
            result_type,
            handle,
            callback,
            timeout_in_seconds=timeout_in_seconds,
            number_of_results=number_of_results,
            frequency=frequency,
        )

    async def query(
        self,
        sparql: str,
        query_type: str = DEFAULT_QUERY_TYPE,
        *,
        graph_location: GraphLocation | str | None = None,
        graph_state: GraphState | str | None = None,
        frequency: float | None = None,
        max_number_of_retries: int | None = None,
    ) -> OperationResult:
        if not sparql:
            raise FormatError("Please provide options in order to query.")
        payload: dict[str, Any] = {"query": sparql, "type": query_type or DEFAULT_QUERY_TYPE}
        if graph_location is not None or graph_state is not None:
            payload["repository"] = str(derive_repository(graph_location, graph_state))
        handle = await self._node.submit(OperationKind.QUERY, payload)
        return await self._resolver.get_result(
            OperationKind.QUERY,
            handle,
            frequency=frequency,
            max_number_of_retries=max_number_of_retries,
        )

    async def validate(
        self,
        nquads: Iterable[str],
        *,
        frequency: float | None = None,
        max_number_of_retries: int | None = None,
    ) -> list[ValidatedTriple]:
        """Ask the node for Merkle proofs of ``nquads`` and check each one."""

        nquads = list(nquads)
        if not nquads:
            raise FormatError("Please provide assertions and nquads in order to get proofs.")
        handle = await self._node.submit(OperationKind.PROOFS, {"nquads": nquads})
        result = await self._resolver.get_result(
            OperationKind.PROOFS,
            handle,
            frequency=frequency,
            max_number_of_retries=max_number_of_retries,
        )
        assertions = parse_proofs(result.data)
        log.debug("Validating %s assertion(s) for %s n-quads", len(assertions), len(nquads))
        return await ProofValidator(self._fetch_root_hash).validate(assertions)

    async def _fetch_root_hash(self, assertion_id: str) -> str:
        result = await self.resolve([assertion_id])
        return extract_root_hash(result.data, assertion_id)


def build_client(
    *,
    node_config: NodeConfig | None = None,
    blockchain_settings: Callable[[], BlockchainSettings] | None = None,
) -> DkgClient:
    """Wire a client from the environment (``DKG_*`` variables)."""

    config = node_config or get_node_config()
    log.debug("Using node at %s", config.base_url)
    return DkgClient(
        node=NodeHTTPClient(config=config),
        polling=config.polling,
        blockchain_settings=blockchain_settings,
    )
