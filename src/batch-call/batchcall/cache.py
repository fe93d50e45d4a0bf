import hashlib
import json
import logging
import time
from typing import Any, Dict, List, Optional, Protocol

from .abi import readable_fields

logger = logging.getLogger(__name__)

Abi = List[Dict[str, Any]]


class AbiResolver(Protocol):
    def get_abi(self, address: str) -> Abi: ...


def abi_hash(abi: Abi) -> str:
    """md5 of the canonical JSON form, so equal ABI bodies share one hash."""
    canonical = json.dumps(abi, sort_keys=True, separators=(",", ":"))
    return hashlib.md5(canonical.encode("utf-8")).hexdigest()


class AbiCache:
    """Content-addressed in-memory ABI store: address -> hash -> ABI."""

    def __init__(self, resolver: AbiResolver, delay_time: float = 300) -> None:
        self.resolver = resolver
        # Milliseconds slept after each explorer fetch.
        self.delay_time = delay_time
        self._hash_by_address: Dict[str, str] = {}
        self._abi_by_hash: Dict[str, Abi] = {}

    def _key(self, address: str) -> str:
        return address.lower()

    def get(self, address: str) -> Optional[Abi]:
        abi_key = self._hash_by_address.get(self._key(address))
        if abi_key is None:
            return None
        return self._abi_by_hash.get(abi_key)

    def hash_for(self, address: str) -> Optional[str]:
        return self._hash_by_address.get(self._key(address))

    def put(self, address: str, abi: Abi) -> str:
        key = abi_hash(abi)
        self._abi_by_hash[key] = abi
        self._hash_by_address[self._key(address)] = key
        return key

    def ensure(self, address: str, provided_abi: Optional[Abi] = None) -> None:
        """
        Make sure an ABI is cached for `address`.

        A provided ABI always overwrites. Otherwise an uncached address is
        resolved from the explorer and followed by the throttle delay; a cached
        one is left alone.
        """
        if provided_abi is not None:
            self.put(address, provided_abi)
            return

        if self.get(address) is not None:
            logger.debug("ABI cache hit for %s", address)
            return

        abi = self.resolver.get_abi(address)
        self.put(address, abi)
        time.sleep(self.delay_time / 1000)

    def readable_fields(self, address: str) -> List[str]:
        return readable_fields(self.get(address))

    def __len__(self) -> int:
        return len(self._abi_by_hash)
