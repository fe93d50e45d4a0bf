import argparse
import json
import logging
import os
import sys
from typing import Any, Optional

from .batch_call import BatchCall
from .config import load_config


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Batch read-only contract calls into one JSON-RPC round trip.",
        allow_abbrev=False,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    call_parser = subparsers.add_parser("call", help="Execute a batch of contract reads")
    call_parser.add_argument(
        "--contracts",
        required=True,
        help="Path to a JSON array of contract requests, or '-' for stdin.",
    )
    call_parser.add_argument(
        "--block",
        required=False,
        help="Block to read at: latest, decimal number, or 0x-prefixed hex. Defaults to latest.",
    )

    fields_parser = subparsers.add_parser("readable-fields", help="List zero-argument view methods")
    fields_parser.add_argument(
        "--address",
        required=True,
        help="Contract address (0x-prefixed).",
    )

    return parser


def _load_contracts(source: str) -> Any:
    if source == "-":
        return json.load(sys.stdin)
    with open(source, encoding="utf-8") as handle:
        return json.load(handle)


def _parse_block(value: Optional[str]) -> Optional[Any]:
    if value is None:
        return None
    candidate = value.strip()
    if candidate.isdigit():
        return int(candidate)
    return candidate


def main(argv: Optional[list[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING").upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        batch_call = BatchCall(load_config())

        if args.command == "call":
            contracts = _load_contracts(args.contracts)
            if not isinstance(contracts, list):
                raise ValueError("contracts file must hold a JSON array.")
            result = batch_call.execute(contracts, _parse_block(args.block))
            print(json.dumps(result, indent=2))
            if "error" in result and len(result) == 1 and isinstance(result["error"], str):
                sys.exit(1)
        elif args.command == "readable-fields":
            result = batch_call.readable_fields(args.address)
            print(json.dumps({"address": args.address, "fields": result}, indent=2))
    except Exception as exc:  # pylint: disable=broad-except
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
