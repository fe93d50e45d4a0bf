"""
ABI inspection helpers: signatures, function lookup, readable-field discovery.
"""

from typing import Any, Dict, List, Optional

from eth_utils.abi import collapse_if_tuple

AbiEntry = Dict[str, Any]


def param_types(params: Optional[List[Dict[str, Any]]]) -> List[str]:
    """Canonical types for an inputs/outputs list (tuples collapsed to `(t1,t2)`)."""
    types: List[str] = []
    for param in params or []:
        typ = param.get("type")
        if not isinstance(typ, str):
            raise ValueError("Invalid ABI parameter type.")
        types.append(collapse_if_tuple(param))
    return types


def function_signature(entry: AbiEntry) -> str:
    return f"{entry.get('name', '')}({','.join(param_types(entry.get('inputs')))})"


def find_function(abi: Optional[List[AbiEntry]], name: str, arg_count: Optional[int] = None) -> Optional[AbiEntry]:
    """
    Look up a function entry by plain name or canonical signature.

    Overloads sharing a name are narrowed by argument count when given;
    otherwise the first declared entry wins. Returns None when nothing matches.
    """
    if not abi or not name:
        return None

    functions = [
        entry for entry in abi if isinstance(entry, dict) and entry.get("type", "function") == "function"
    ]

    if "(" in name:
        for entry in functions:
            try:
                if function_signature(entry) == name:
                    return entry
            except ValueError:
                continue
        return None

    candidates = [entry for entry in functions if entry.get("name") == name]
    if not candidates:
        return None
    if arg_count is not None:
        for entry in candidates:
            if len(entry.get("inputs") or []) == arg_count:
                return entry
    return candidates[0]


def readable_fields(abi: Optional[List[AbiEntry]]) -> List[str]:
    """Names of zero-input `view` entries with at least one output, in declaration order."""
    fields: List[str] = []
    for entry in abi or []:
        if not isinstance(entry, dict):
            continue
        name = entry.get("name")
        has_inputs = len(entry.get("inputs") or []) > 0
        has_outputs = len(entry.get("outputs") or []) > 0
        viewable = entry.get("stateMutability") == "view"
        if not has_inputs and has_outputs and name and viewable:
            fields.append(name)
    return fields
