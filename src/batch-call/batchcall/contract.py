"""
Contract handle over a JSON ABI: builds `eth_call` requests and decodes results.
"""

import re
from typing import Any, Callable, Dict, List, Optional, Union

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

from .abi import AbiEntry, find_function, function_signature, param_types
from .rpc_client import RpcRequest

BlockIdentifier = Union[int, str]

_ARRAY_SUFFIX = re.compile(r"\[\d*\]$")


def to_block_param(block_identifier: Optional[BlockIdentifier]) -> str:
    """Ints become hex quantities; tags and hex strings pass through."""
    if block_identifier is None:
        return "latest"
    if isinstance(block_identifier, bool):
        raise ValueError("block identifier must be an integer or a block tag.")
    if isinstance(block_identifier, int):
        if block_identifier < 0:
            raise ValueError("block number must be non-negative.")
        return hex(block_identifier)
    if isinstance(block_identifier, str):
        candidate = block_identifier.strip()
        if candidate.isdigit():
            return hex(int(candidate))
        return candidate
    raise ValueError("block identifier must be an integer or a block tag.")


def _coerce_arg(param: Dict[str, Any], value: Any) -> Any:
    typ = param.get("type", "")
    if _ARRAY_SUFFIX.search(typ) and isinstance(value, (list, tuple)):
        element = dict(param, type=_ARRAY_SUFFIX.sub("", typ))
        return [_coerce_arg(element, item) for item in value]
    if typ == "tuple" and isinstance(value, dict):
        return tuple(_coerce_arg(c, value.get(c.get("name"))) for c in param.get("components", []))
    if typ == "tuple" and isinstance(value, (list, tuple)):
        return tuple(_coerce_arg(c, v) for c, v in zip(param.get("components", []), value))
    if typ == "address" and isinstance(value, str):
        return to_checksum_address(value)
    if typ.startswith(("uint", "int")) and isinstance(value, str):
        return int(value, 0)
    if typ.startswith("bytes") and isinstance(value, str):
        text = value[2:] if value.startswith("0x") else value
        return bytes.fromhex(text)
    return value


def _format_output(param: Dict[str, Any], value: Any) -> Any:
    typ = param.get("type", "")
    if _ARRAY_SUFFIX.search(typ):
        element = dict(param, type=_ARRAY_SUFFIX.sub("", typ))
        return [_format_output(element, item) for item in value]
    if typ == "tuple":
        return _format_values(param.get("components", []), value)
    if typ == "address":
        return to_checksum_address(value)
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, bytes):
        return "0x" + value.hex()
    return value


def _format_values(params: List[Dict[str, Any]], values: Any) -> Dict[str, Any]:
    formatted: Dict[str, Any] = {}
    for idx, (param, value) in enumerate(zip(params, values)):
        formatted[param.get("name") or str(idx)] = _format_output(param, value)
    return formatted


class ContractFunction:
    """One callable ABI function bound to a contract address."""

    def __init__(self, contract: "Contract", entry: AbiEntry) -> None:
        self.contract = contract
        self.entry = entry
        self.name = entry.get("name", "")
        self.inputs = entry.get("inputs") or []
        self.outputs = entry.get("outputs") or []

    @property
    def signature(self) -> str:
        return function_signature(self.entry)

    @property
    def selector(self) -> str:
        return "0x" + function_signature_to_4byte_selector(self.signature).hex()

    def encode_input(self, args: Optional[List[Any]] = None) -> str:
        args = list(args or [])
        if len(args) != len(self.inputs):
            raise ValueError(
                f"Argument count mismatch for {self.signature}: expected {len(self.inputs)}, got {len(args)}."
            )
        coerced = [_coerce_arg(param, value) for param, value in zip(self.inputs, args)]
        encoded = encode(param_types(self.inputs), coerced)
        return self.selector + encoded.hex()

    def decode_output(self, result_hex: Any) -> Any:
        if not self.outputs:
            return None
        if not isinstance(result_hex, str):
            raise ValueError("Result must be a hex string.")
        text = result_hex[2:] if result_hex.startswith("0x") else result_hex
        if not text:
            raise ValueError(f"Empty result for {self.signature}; is the contract deployed at that block?")

        values = decode(param_types(self.outputs), bytes.fromhex(text))
        if len(self.outputs) == 1:
            return _format_output(self.outputs[0], values[0])
        return _format_values(self.outputs, values)

    def request(
        self,
        args: Optional[List[Any]],
        block_identifier: Optional[BlockIdentifier],
        callback: Callable[[Optional[Exception], Any], None],
        data: Optional[str] = None,
    ) -> RpcRequest:
        """Build a batchable `eth_call`; `callback` receives the decoded value.

        `data` is reused as call data when already encoded.
        """
        if data is None:
            data = self.encode_input(args)
        tx = {"to": self.contract.address, "data": data}

        def on_response(error: Optional[Exception], result: Any) -> None:
            if error is not None:
                callback(error, None)
                return
            try:
                value = self.decode_output(result)
            except Exception as exc:  # pylint: disable=broad-except
                callback(exc, None)
                return
            callback(None, value)

        return RpcRequest(method="eth_call", params=[tx, to_block_param(block_identifier)], callback=on_response)


class Contract:
    """Callable contract handle built from `(abi, address)`."""

    def __init__(self, abi: Optional[List[AbiEntry]], address: str) -> None:
        self.abi = abi or []
        self.address = address

    def get_function(self, name: str, arg_count: Optional[int] = None) -> Optional[ContractFunction]:
        entry = find_function(self.abi, name, arg_count)
        if entry is None:
            return None
        return ContractFunction(self, entry)
