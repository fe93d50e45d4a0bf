"""
MCP server exposing batched contract reads.
"""

import argparse
import logging
import os
from collections.abc import Mapping
from typing import Any, List, Optional, Tuple, Union

from mcp.server.fastmcp import FastMCP

from .batch_call import BatchCall
from .config import load_config

server = FastMCP(
    name="batch-call",
    instructions="Batch read-only smart-contract calls into one JSON-RPC round trip; ABIs come from Etherscan.",
)

logger = logging.getLogger(__name__)

_batch_call: Optional[BatchCall] = None


def _get_batch_call() -> BatchCall:
    global _batch_call
    if _batch_call is None:
        _batch_call = BatchCall(load_config())
    return _batch_call


def _normalize_contracts(value: Any) -> list:
    """
    Contract requests must arrive as an array of objects:
    - a single object is wrapped
    - strings and other scalars are rejected with guidance
    """
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    raise ValueError(
        "contracts must be an array of {abi?, addresses, namespace?, methods?, allMethods?} objects."
    )


@server.tool(
    name="batch_call",
    title="Batch Contract Calls",
    description=(
        "Read many contract methods across many addresses in one batched RPC request. "
        "Each contract request: {abi?, addresses: [..], namespace?: str, methods?: [{name, args?}], allMethods?: bool}. "
        "Returns results grouped by namespace, or {error} when any call fails."
    ),
)
def batch_call(contracts: Any, block_number: Optional[Union[int, str]] = None) -> dict:
    svc = _get_batch_call()
    return svc.execute(_normalize_contracts(contracts), block_number)


@server.tool(
    name="readable_fields",
    title="List Readable Fields",
    description="List zero-argument view methods of a contract, resolving its ABI from Etherscan.",
)
def readable_fields(address: str) -> dict:
    svc = _get_batch_call()
    return {"address": address, "fields": svc.readable_fields(address)}


TRANSPORTS = ("stdio", "streamable-http", "sse")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve batched contract reads over MCP.", allow_abbrev=False)
    parser.add_argument(
        "--transport",
        choices=TRANSPORTS,
        default=os.getenv("MCP_TRANSPORT", "stdio"),
        help="MCP transport. Defaults to $MCP_TRANSPORT or stdio.",
    )
    parser.add_argument(
        "--bind",
        default="127.0.0.1:8000",
        help="HOST:PORT to listen on for network transports.",
    )
    return parser


def _parse_bind(value: str) -> Tuple[str, int]:
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"--bind must be HOST:PORT, got '{value}'.")
    return host, int(port)


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        host, port = _parse_bind(args.bind)
        # Surface configuration problems before the transport starts.
        _get_batch_call()
    except ValueError as exc:
        parser.error(str(exc))

    if args.transport != "stdio":
        server.settings.host = host
        server.settings.port = port
        logger.info("Serving %s on %s:%d", args.transport, host, port)
    server.run(transport=args.transport)


if __name__ == "__main__":
    main()
