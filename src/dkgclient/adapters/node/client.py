"""HTTP client for the knowledge-graph node API."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx

from dkgclient.adapters.http_resilience import ResilientClient
from dkgclient.domain.errors import FormatError, TransportError
from dkgclient.domain.ports.node import OperationKind

from .schema import as_mapping, parse_handler_id, parse_node_info, parse_operation

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from dkgclient.adapters.http_resilience import RequestOptions
    from dkgclient.config.http_resilience import ResilienceConfig
    from dkgclient.config.node import NodeConfig
    from dkgclient.domain.types import OperationHandle

log = getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20
DEFAULT_QUERY_TYPE = "construct"

_SEARCH_KINDS = frozenset({OperationKind.ENTITIES_SEARCH, OperationKind.ASSERTIONS_SEARCH})


def _form(fields: Mapping[str, object]) -> dict[str, tuple[None, str]]:
    """Multipart fields without file names, the way the node expects form data."""

    return {
        name: (None, value if isinstance(value, str) else json.dumps(value))
        for name, value in fields.items()
        if value is not None
    }


def _flag(value: object) -> str:
    return "true" if value else "false"


class NodeHTTPClient:
    """Talks to a node over HTTP: one request to submit, one per poll.

    Every request opens a short-lived :class:`ResilientClient` from the
    factory, so retries and rate limiting apply per request.
    """

    def __init__(
        self,
        *,
        config: NodeConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience_config()
        self._client_factory = client_factory or ResilientClient
        self._base_url = (self._resilience.base_url or config.base_url).rstrip("/")

    @property
    def base_url(self) -> str:
        return self._base_url

    async def info(self) -> Mapping[str, Any]:
        log.debug("Sending info request.")
        return parse_node_info(await self._request("GET", "info"))

    async def submit(self, kind: OperationKind, payload: Mapping[str, Any]) -> OperationHandle:
        method, path, options = self._build_submit(OperationKind(kind), payload)
        log.debug("Sending %s request.", kind)
        handle = parse_handler_id(await self._request(method, path, **options))
        log.debug("%s accepted with handler id %s", kind, handle)
        return handle

    async def poll(self, kind: OperationKind | str, handle: OperationHandle) -> Mapping[str, Any]:
        payload = await self._request("GET", f"{kind}/result/{handle}")
        if str(kind) in _SEARCH_KINDS:
            # Search results are JSON-LD item lists without a status envelope.
            return as_mapping(payload)
        return parse_operation(payload).model_dump(exclude_none=True)

    def _build_submit(
        self,
        kind: OperationKind,
        payload: Mapping[str, Any],
    ) -> tuple[str, str, RequestOptions]:
        match kind:
            case OperationKind.RESOLVE:
                ids = payload.get("ids")
                if not ids:
                    raise FormatError("Please provide resolve options in order to resolve.")
                return "GET", "resolve", {"params": httpx.QueryParams([("ids", i) for i in ids])}
            case OperationKind.ENTITIES_SEARCH | OperationKind.ASSERTIONS_SEARCH:
                query = payload.get("query")
                if not query:
                    raise FormatError("Please provide search options in order to search.")
                params: dict[str, str | int] = {"query": query}
                limit, prefix = payload.get("limit"), payload.get("prefix")
                paged = limit is not None or prefix is not None
                if kind is OperationKind.ENTITIES_SEARCH or paged:
                    params["limit"] = limit if limit is not None else DEFAULT_SEARCH_LIMIT
                    params["prefix"] = _flag(True if prefix is None else prefix)
                return "GET", str(kind), {"params": params}
            case OperationKind.QUERY:
                query = payload.get("query")
                if not query:
                    raise FormatError("Please provide options in order to query.")
                query_type = payload.get("type") or DEFAULT_QUERY_TYPE
                query_params = {"type": query_type}
                if payload.get("repository"):
                    query_params["repository"] = payload["repository"]
                return "POST", "query", {
                    "params": query_params,
                    "files": _form({"query": query, "type": query_type}),
                }
            case OperationKind.PROOFS:
                nquads = payload.get("nquads")
                if not nquads:
                    raise FormatError(
                        "Please provide assertions and nquads in order to get proofs."
                    )
                return "POST", str(kind), {"files": _form({"nquads": list(nquads)})}
            case OperationKind.PUBLISH:
                return "POST", "publish", {
                    "files": _form(
                        {
                            "assertionId": payload.get("assertion_id"),
                            "assertion": list(payload.get("assertion") or ()),
                            "ual": payload.get("ual"),
                            "blockchain": payload.get("blockchain"),
                            "contract": payload.get("contract"),
                            "tokenId": str(payload["token_id"])
                            if payload.get("token_id") is not None
                            else None,
                        }
                    )
                }
        raise FormatError(f"Unsupported node operation: {kind}")

    async def _request(self, method: str, path: str, **options: Any) -> object:
        url = f"{self._base_url}/{path}"
        async with self._client_factory(self._resilience) as client:
            try:
                response = await client.request(method, url, **options)
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                log.error("Node %s %s returned %s", method, url, exc.response.status_code)
                raise TransportError(
                    f"Node request {method} {path} failed with status "
                    f"{exc.response.status_code}",
                    status_code=exc.response.status_code,
                ) from exc
            except httpx.HTTPError as exc:
                log.error("Node %s %s failed: %s", method, url, exc)
                raise TransportError(f"Node request {method} {path} failed: {exc}") from exc
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Node returned a non-JSON body for {method} {path}") from exc
