# ruff: noqa: T201

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from signal import SIGINT, signal
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from dkgclient.app import SEARCH_RESULT_TYPES, build_client
from dkgclient.config import configure_logging
from dkgclient.domain.assets import AssetOptions
from dkgclient.domain.errors import FormatError
from dkgclient.domain.types import GraphLocation, GraphState, Visibility
from dkgclient.domain.ual import derive_ual, resolve_ual

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from dkgclient.app import DkgClient

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="dkgclient",
        description="Talk to a knowledge-graph node and its blockchain",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (default: %(default)s)",
    )
    parser.add_argument(
        "--frequency",
        type=float,
        help="Seconds between result polls (defaults to config)",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        help="Polls allowed beyond the first before giving up (defaults to config)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("info", help="Show node information")

    resolve = subparsers.add_parser("resolve", help="Resolve assertions or UALs")
    resolve.add_argument("ids", nargs="+", help="Assertion ids or UALs")

    search = subparsers.add_parser("search", help="Search entities or assertions")
    search.add_argument("query", help="Search term")
    search.add_argument(
        "--type",
        dest="result_type",
        choices=SEARCH_RESULT_TYPES,
        default="entities",
        help="Kind of result to search for (default: %(default)s)",
    )
    search.add_argument("--limit", type=int, help="Maximum number of results per node")
    search.add_argument(
        "--prefix",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat the query as a prefix",
    )
    search.add_argument("--timeout", type=float, help="Seconds to keep collecting results")
    search.add_argument("--results", type=int, help="Stop after this many results")

    query = subparsers.add_parser("query", help="Run a SPARQL query")
    query.add_argument("sparql", help="SPARQL query text, or @file to read it from a file")
    query.add_argument("--type", dest="query_type", default="construct", help="Query type")
    query.add_argument("--graph-location", choices=[str(v) for v in GraphLocation])
    query.add_argument("--graph-state", choices=[str(v) for v in GraphState])

    validate = subparsers.add_parser("validate", help="Validate n-quads against their proofs")
    validate.add_argument("nquads", type=Path, help="File with one n-quad per line")

    ual = subparsers.add_parser("ual", help="Encode or decode UALs")
    ual_sub = ual.add_subparsers(dest="ual_command", required=True)
    encode = ual_sub.add_parser("encode", help="Build a UAL")
    encode.add_argument("blockchain")
    encode.add_argument("contract")
    encode.add_argument("token_id", type=int)
    decode = ual_sub.add_parser("decode", help="Split a UAL into its parts")
    decode.add_argument("ual")

    asset = subparsers.add_parser("asset", help="Knowledge asset commands")
    asset.add_argument("--blockchain", help="Blockchain name (defaults to DKG_BLOCKCHAIN)")
    asset_sub = asset.add_subparsers(dest="asset_command", required=True)
    create = asset_sub.add_parser("create", help="Create and publish an asset")
    create.add_argument("content", type=Path, help="JSON-LD document")
    create.add_argument("--holding-time", type=int, help="Holding time in years")
    create.add_argument("--token-amount", type=int, help="Tokens to pay for publishing")
    create.add_argument(
        "--visibility",
        choices=[v.name.lower() for v in Visibility],
        help="Asset visibility",
    )
    get = asset_sub.add_parser("get", help="Resolve an asset by UAL")
    get.add_argument("ual")
    owner = asset_sub.add_parser("owner", help="Show the owner of an asset")
    owner.add_argument("ual")
    commit = asset_sub.add_parser("commit-hash", help="Show an asset's commit hash")
    commit.add_argument("ual")
    commit.add_argument("--offset", type=int, default=0, help="Commit offset")
    transfer = asset_sub.add_parser("transfer", help="Transfer an asset to a new owner")
    transfer.add_argument("ual")
    transfer.add_argument("new_owner")

    return parser.parse_args(list(argv))


def _asset_options(args: argparse.Namespace) -> AssetOptions:
    options: dict[str, Any] = {
        "blockchain": args.blockchain,
        "frequency": args.frequency,
        "maxNumberOfRetries": args.max_retries,
    }
    if getattr(args, "holding_time", None) is not None:
        options["holdingTimeInYears"] = args.holding_time
    if getattr(args, "token_amount", None) is not None:
        options["tokenAmount"] = args.token_amount
    if getattr(args, "visibility", None) is not None:
        options["visibility"] = args.visibility
    if getattr(args, "offset", None) is not None:
        options["commitOffset"] = args.offset
    return AssetOptions.from_mapping(options)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FormatError(f"Unable to read {path}: {exc}") from exc


def _to_jsonable(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, list):
        return [_to_jsonable(item) for item in value]
    return value


def _run_offline(args: argparse.Namespace) -> Any:
    if args.ual_command == "encode":
        return derive_ual(args.blockchain, args.contract, args.token_id)
    decoded = resolve_ual(args.ual)
    return {
        "blockchain": decoded.blockchain,
        "contract": decoded.contract,
        "tokenId": decoded.token_id,
    }


async def _run(client: DkgClient, args: argparse.Namespace) -> Any:  # noqa: PLR0911
    polling = {"frequency": args.frequency, "max_number_of_retries": args.max_retries}
    async with client:
        match args.command:
            case "info":
                return dict(await client.node_info())
            case "resolve":
                return await client.resolve(args.ids, **polling)
            case "search":
                return dict(
                    await client.search(
                        args.query,
                        args.result_type,
                        prefix=args.prefix,
                        limit=args.limit,
                        timeout_in_seconds=args.timeout,
                        number_of_results=args.results,
                        frequency=args.frequency,
                    )
                )
            case "query":
                sparql = args.sparql
                if sparql.startswith("@"):
                    sparql = _read_text(Path(sparql[1:]))
                return await client.query(
                    sparql,
                    args.query_type,
                    graph_location=args.graph_location,
                    graph_state=args.graph_state,
                    **polling,
                )
            case "validate":
                nquads = [line for line in _read_text(args.nquads).splitlines() if line.strip()]
                return await client.validate(nquads, **polling)
            case "asset":
                return await _run_asset(client, args)
    raise FormatError(f"Unsupported command: {args.command}")


async def _run_asset(client: DkgClient, args: argparse.Namespace) -> Any:
    options = _asset_options(args)
    match args.asset_command:
        case "create":
            try:
                content = json.loads(_read_text(args.content))
            except json.JSONDecodeError as exc:
                raise FormatError(f"{args.content} is not valid JSON: {exc}") from exc
            return await client.asset.create(content, options)
        case "get":
            return await client.asset.get(args.ual, options)
        case "owner":
            return {"owner": await client.asset.get_owner(args.ual, options)}
        case "commit-hash":
            return {"commitHash": await client.asset.get_commit_hash(args.ual, options)}
        case "transfer":
            transaction_hash = await client.asset.transfer(args.ual, args.new_owner, options)
            return {"transactionHash": transaction_hash}
    raise FormatError(f"Unsupported asset command: {args.asset_command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    load_dotenv()
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=parsed_args.log_level)

    try:
        if parsed_args.command == "ual":
            result = _run_offline(parsed_args)
        else:
            result = asyncio.run(_run(build_client(), parsed_args))
    except FormatError as exc:
        log.error("Invalid input: %s", exc)  # noqa: TRY400
        sys.exit(2)
    except Exception:
        log.exception("Command %s failed", parsed_args.command)
        sys.exit(1)

    print(json.dumps(_to_jsonable(result), indent=2, default=str))


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    signal(SIGINT, sigint_handler)
    main()
