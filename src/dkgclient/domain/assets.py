"""Knowledge asset lifecycle: create on chain, publish to the node, read back."""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .errors import ChainCallError, FormatError, TransactionFailedError
from .ports.node import OperationKind
from .proofs import hash_triple, merkle_root
from .types import ContractName, CreateAssetResult, Visibility
from .ual import derive_ual, resolve_ual

if TYPE_CHECKING:
    from collections.abc import Sequence

    from dkgclient.config.blockchain import BlockchainConfig, BlockchainSettings

    from .chain.executor import ReadExecutor, TransactionExecutor
    from .chain.registry import ContractRegistry
    from .operations import OperationResultResolver
    from .ports.canonicalization import Canonicalizer
    from .ports.chain import ChainProvider, TransactionReceipt
    from .ports.node import NodeTransport
    from .types import ContractHandleSet, HexDigest, OperationResult

log = getLogger(__name__)

HOLDING_TIME_IN_YEARS = 1
PUBLISH_TOKEN_AMOUNT = 15
DEFAULT_COMMIT_OFFSET = 0

SettingsProvider = Callable[[], "BlockchainSettings"]


@dataclass(frozen=True, slots=True)
class AssetOptions:
    blockchain: str | None = None
    holding_time_in_years: int = HOLDING_TIME_IN_YEARS
    token_amount: int = PUBLISH_TOKEN_AMOUNT
    visibility: Visibility = Visibility.PUBLIC
    commit_offset: int = DEFAULT_COMMIT_OFFSET
    frequency: float | None = None
    max_number_of_retries: int | None = None

    def __post_init__(self) -> None:
        for name in ("holding_time_in_years", "token_amount", "commit_offset"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise FormatError(f"Invalid request parameters: {name}={value!r}")

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any] | None) -> AssetOptions:
        """Build options from camelCase or snake_case keys."""

        if not options:
            return cls()
        aliases = {
            "holdingTimeInYears": "holding_time_in_years",
            "tokenAmount": "token_amount",
            "commitOffset": "commit_offset",
            "maxNumberOfRetries": "max_number_of_retries",
        }
        values = {aliases.get(key, key): value for key, value in options.items()}
        visibility = values.get("visibility")
        if isinstance(visibility, str):
            try:
                values["visibility"] = Visibility[visibility.upper()]
            except KeyError as exc:
                raise FormatError(f"Invalid request parameters: visibility={visibility!r}") from exc
        try:
            return cls(**values)
        except TypeError as exc:
            raise FormatError(f"Invalid request parameters: {exc}") from exc


def assertion_size_in_kb(nquads: Sequence[str]) -> int:
    size = len("\n".join(nquads).encode("utf-8"))
    return max(1, math.ceil(size / 1024))


def compute_assertion_id(nquads: Sequence[str]) -> HexDigest:
    """Assertion id: Merkle root over the hashed canonical n-quads."""

    return "0x" + merkle_root([hash_triple(quad) for quad in nquads]).hex()


def build_create_asset_request(
    assertion_id: HexDigest,
    nquads: Sequence[str],
    options: AssetOptions,
) -> list[Any]:
    """Arguments for ``AssetRegistry.createAsset`` in ABI order."""

    try:
        assertion_bytes = bytes.fromhex(assertion_id.removeprefix("0x"))
    except ValueError as exc:
        raise FormatError(f"Invalid assertion id: {assertion_id}") from exc
    if len(assertion_bytes) != 32:
        raise FormatError(f"Assertion id must be 32 bytes: {assertion_id}")
    return [
        assertion_bytes,
        assertion_size_in_kb(nquads),
        int(options.visibility),
        options.holding_time_in_years,
        options.token_amount,
    ]


def _hex(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes | bytearray):
        return "0x" + bytes(value).hex()
    text = value.hex() if hasattr(value, "hex") and not isinstance(value, str) else str(value)
    return text if text.startswith("0x") else "0x" + text


class AssetService:
    """Creates, reads and transfers knowledge assets.

    Every method selects its blockchain configuration once and passes that
    snapshot down; nothing about the chosen chain is stored on the service.
    """

    def __init__(
        self,
        *,
        settings: SettingsProvider,
        registry: ContractRegistry,
        transactions: TransactionExecutor,
        reader: ReadExecutor,
        chain: ChainProvider,
        node: NodeTransport,
        resolver: OperationResultResolver,
        canonicalizer: Canonicalizer,
    ) -> None:
        self._settings = settings
        self._registry = registry
        self._transactions = transactions
        self._reader = reader
        self._chain = chain
        self._node = node
        self._resolver = resolver
        self._canonicalizer = canonicalizer

    def _select(self, options: AssetOptions) -> BlockchainConfig:
        return self._settings().select(options.blockchain)

    async def create(
        self,
        content: Any,
        options: AssetOptions | None = None,
    ) -> CreateAssetResult:
        options = options or AssetOptions()
        config = self._select(options)

        nquads = self._canonicalizer.to_nquads(content)
        if not nquads:
            raise FormatError("Asset content has no triples to publish")
        assertion_id = compute_assertion_id(nquads)
        request = build_create_asset_request(assertion_id, nquads, options)
        log.info("Creating asset %s on %s (%s triples)", assertion_id, config.title, len(nquads))

        handles = await self._registry.resolve(config)
        handles, _ = await self._transact(
            config,
            handles,
            ContractName.TOKEN,
            "increaseAllowance",
            lambda h: [h.asset_registry.address, options.token_amount],
        )
        handles, receipt = await self._transact(
            config,
            handles,
            ContractName.ASSET_REGISTRY,
            "createAsset",
            lambda _h: request,
        )
        token_id = await self._token_id_from_receipt(config, handles, receipt)
        ual = derive_ual(config.title, config.hub_contract, token_id)
        log.info("Asset %s minted as %s", assertion_id, ual)

        handle = await self._node.submit(
            OperationKind.PUBLISH,
            {
                "assertion_id": assertion_id,
                "assertion": nquads,
                "ual": ual,
                "blockchain": config.title,
                "contract": config.hub_contract,
                "token_id": token_id,
            },
        )
        operation = await self._resolver.get_result(
            OperationKind.PUBLISH,
            handle,
            frequency=options.frequency,
            max_number_of_retries=options.max_number_of_retries,
        )
        return CreateAssetResult(
            ual=ual,
            assertion_id=assertion_id,
            token_id=token_id,
            transaction_hash=_hex(receipt.get("transactionHash")),
            operation=operation,
        )

    async def get(self, ual: str, options: AssetOptions | None = None) -> OperationResult:
        resolve_ual(ual)
        options = options or AssetOptions()
        handle = await self._node.submit(OperationKind.RESOLVE, {"ids": [ual]})
        return await self._resolver.get_result(
            OperationKind.RESOLVE,
            handle,
            frequency=options.frequency,
            max_number_of_retries=options.max_number_of_retries,
        )

    async def get_commit_hash(self, ual: str, options: AssetOptions | None = None) -> str | None:
        options = options or AssetOptions()
        token_id = resolve_ual(ual).token_id
        config = self._select(options)
        handles = await self._registry.resolve(config)
        commit_hash = await self._reader.call(
            config,
            handles.asset_registry,
            "getCommitHash",
            [token_id, options.commit_offset],
        )
        return _hex(commit_hash)

    async def get_owner(self, ual: str, options: AssetOptions | None = None) -> str:
        options = options or AssetOptions()
        token_id = resolve_ual(ual).token_id
        config = self._select(options)
        handles = await self._registry.resolve(config)
        return str(await self._reader.call(config, handles.token_registry, "ownerOf", [token_id]))

    async def transfer(
        self,
        ual: str,
        new_owner: str,
        options: AssetOptions | None = None,
    ) -> str | None:
        options = options or AssetOptions()
        token_id = resolve_ual(ual).token_id
        config = self._select(options)
        handles = await self._registry.resolve(config)
        _, receipt = await self._transact(
            config,
            handles,
            ContractName.UAI_REGISTRY,
            "transferFrom",
            lambda _h: [config.wallet, new_owner, token_id],
        )
        log.info("Transferred %s to %s", ual, new_owner)
        return _hex(receipt.get("transactionHash"))

    async def _transact(
        self,
        config: BlockchainConfig,
        handles: ContractHandleSet,
        name: ContractName,
        function: str,
        build_args: Callable[[ContractHandleSet], Sequence[Any]],
    ) -> tuple[ContractHandleSet, TransactionReceipt]:
        """Run a transaction; on terminal failure re-resolve a moved contract once."""

        try:
            receipt = await self._transactions.execute(
                config, handles.get(name), function, build_args(handles)
            )
        except TransactionFailedError:
            refreshed = await self._registry.refresh_if_stale(config, handles, name)
            if refreshed is None:
                raise
            log.warning("Retrying %s.%s against the redeployed contract", name, function)
            receipt = await self._transactions.execute(
                config, refreshed.get(name), function, build_args(refreshed)
            )
            return refreshed, receipt
        return handles, receipt

    async def _token_id_from_receipt(
        self,
        config: BlockchainConfig,
        handles: ContractHandleSet,
        receipt: TransactionReceipt,
    ) -> int:
        events = await self._chain.decode_events(
            config, handles.asset_registry, "AssetCreated", receipt
        )
        if not events:
            raise ChainCallError(
                str(ContractName.ASSET_REGISTRY),
                "AssetCreated",
                attempts=1,
                last_error=LookupError("no AssetCreated event in transaction receipt"),
            )
        return int(events[0]["UAI"])
