from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

DEFAULT_NAMESPACE = "default"


@dataclass
class MethodSpec:
    name: str
    args: Optional[List[Any]] = None

    @classmethod
    def from_value(cls, value: Any) -> "MethodSpec":
        if isinstance(value, MethodSpec):
            return value
        if isinstance(value, str):
            return cls(name=value)
        if not isinstance(value, Mapping):
            raise ValueError("method must be a name or a {name, args} mapping.")

        name = value.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("method name must be a non-empty string.")
        args = value.get("args")
        if args is not None:
            if isinstance(args, (str, bytes, bytearray)) or not isinstance(args, (list, tuple)):
                raise ValueError(f"args for method '{name}' must be an array.")
            args = list(args)
        return cls(name=name, args=args)


@dataclass
class ContractRequest:
    addresses: List[str]
    abi: Optional[List[Dict[str, Any]]] = None
    namespace: str = DEFAULT_NAMESPACE
    methods: List[MethodSpec] = field(default_factory=list)
    all_methods: bool = False

    @classmethod
    def from_value(cls, value: Any) -> "ContractRequest":
        if isinstance(value, ContractRequest):
            return value
        if not isinstance(value, Mapping):
            raise ValueError("contract request must be a mapping.")

        addresses = value.get("addresses")
        if isinstance(addresses, str) or not isinstance(addresses, (list, tuple)):
            raise ValueError("addresses must be an array of address strings.")

        abi = value.get("abi")
        if abi is not None and not isinstance(abi, list):
            raise ValueError("abi must be an array of ABI entries.")

        namespace = value.get("namespace", DEFAULT_NAMESPACE)
        if namespace is None:
            namespace = DEFAULT_NAMESPACE
        if not isinstance(namespace, str):
            raise ValueError("namespace must be a string.")

        all_methods = value.get("allMethods", value.get("all_methods", False))
        return cls(
            addresses=list(addresses),
            abi=abi,
            namespace=namespace,
            methods=[MethodSpec.from_value(m) for m in value.get("methods") or []],
            all_methods=bool(all_methods),
        )


@dataclass
class RawCallResult:
    method: str
    value: Any
    input: Optional[str] = None
    args: Optional[List[Any]] = None

    def to_entry(self) -> Dict[str, Any]:
        entry: Dict[str, Any] = {"value": self.value}
        if self.input:
            entry["input"] = self.input
        if self.args is not None:
            entry["args"] = self.args
        return entry


@dataclass
class AddressState:
    address: str
    namespace: str
    results: List[Optional[RawCallResult]] = field(default_factory=list)
