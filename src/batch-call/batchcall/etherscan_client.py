import json
import logging
from typing import Any, Dict, List, Optional

import requests

from .config import DEFAULT_BASE_URL
from .errors import ExplorerError

logger = logging.getLogger(__name__)


class EtherscanClient:
    """Thin wrapper around the Etherscan contract API. One attempt per request."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        chain_id: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.chain_id = chain_id
        self.timeout = timeout
        self.session = requests.Session()

    def get_abi(self, address: str) -> List[Dict[str, Any]]:
        """Fetch the verified ABI for `address`; the envelope's `result` is itself JSON."""
        params = {
            "module": "contract",
            "action": "getabi",
            "address": address,
        }
        payload = self._request(params)

        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, str):
            raise ExplorerError("Etherscan error: response carries no ABI string.", response=payload)
        try:
            abi = json.loads(result)
        except ValueError as exc:
            raise ExplorerError(f"Etherscan error: {result or 'invalid ABI'}.", response=payload) from exc
        if not isinstance(abi, list):
            raise ExplorerError("Etherscan error: ABI is not an array.", response=payload)

        logger.info("Fetched ABI for %s (%d entries)", address, len(abi))
        return abi

    def _request(self, params: Dict[str, Any]) -> Any:
        merged = {**params, "apikey": self.api_key}
        if self.chain_id:
            merged["chainid"] = self.chain_id

        response = None
        try:
            response = self.session.get(
                self.base_url,
                params=merged,
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            raw = response.text if response is not None else None
            raise ExplorerError(f"Etherscan request failed: {exc}", response=raw) from exc
        except ValueError as exc:
            raise ExplorerError("Failed to parse response from Etherscan.", response=response.text) from exc
