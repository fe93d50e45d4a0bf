import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

import requests

from .errors import RpcError

logger = logging.getLogger(__name__)

Callback = Callable[[Optional[Exception], Any], None]


def _error_from_payload(error_obj: Any) -> RpcError:
    if not isinstance(error_obj, dict):
        return RpcError(f"RPC error: {error_obj}.")

    code = error_obj.get("code")
    message = error_obj.get("message")
    err_data = error_obj.get("data")
    parts: list[str] = []
    if code is not None:
        parts.append(f"code {code}")
    if message:
        parts.append(str(message))
    if err_data:
        parts.append(str(err_data))
    detail = ": ".join(parts) if parts else "unknown error"
    return RpcError(f"RPC error: {detail}.", code=code, data=err_data)


def _result_from_response(data: Any) -> Any:
    if not isinstance(data, dict):
        raise RpcError("Unexpected JSON-RPC response (non-object).")
    if data.get("error") is not None:
        raise _error_from_payload(data["error"])
    if "result" not in data:
        raise RpcError("Unexpected JSON-RPC response (missing result).")
    return data["result"]


@dataclass
class RpcRequest:
    """A JSON-RPC call waiting in a batch; `callback(error, result)` fires once."""

    method: str
    params: List[Any]
    callback: Callback


class RpcClient:
    """Minimal JSON-RPC 2.0 client for EVM nodes (HTTP POST)."""

    def __init__(
        self,
        rpc_url: str,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> None:
        url = (rpc_url or "").strip()
        if not url:
            raise ValueError("rpc_url must be a non-empty string.")

        self.rpc_url = url
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if headers:
            self.session.headers.update(dict(headers))
        self._next_id = 1

    def _payload(self, method: str, params: Optional[List[Any]]) -> Dict[str, Any]:
        if not isinstance(method, str) or not method.strip():
            raise ValueError("method must be a non-empty string.")
        if params is None:
            params = []
        if not isinstance(params, list):
            raise ValueError("params must be a list.")

        payload = {
            "jsonrpc": "2.0",
            "id": self._next_id,
            "method": method,
            "params": params,
        }
        self._next_id += 1
        return payload

    def _post(self, body: Any) -> Any:
        response = self.session.post(
            self.rpc_url,
            json=body,
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    def call(self, method: str, params: Optional[List[Any]] = None) -> Any:
        return _result_from_response(self._post(self._payload(method, params)))

    def call_batch(self, payloads: List[Dict[str, Any]]) -> List[Any]:
        """POST several payloads as one JSON array; returns the raw response objects."""
        data = self._post(payloads)
        if isinstance(data, dict):
            # Some nodes answer a rejected batch with a single error object.
            raise _error_from_payload(data.get("error", data))
        if not isinstance(data, list):
            raise RpcError("Unexpected JSON-RPC batch response (non-array).")
        return data

    def batch(self) -> "RpcBatch":
        return RpcBatch(self)


class RpcBatch:
    """Collects requests and sends them to the node in a single round trip."""

    def __init__(self, client: RpcClient) -> None:
        self.client = client
        self._requests: List[RpcRequest] = []

    def add(self, request: RpcRequest) -> None:
        self._requests.append(request)

    def __len__(self) -> int:
        return len(self._requests)

    def execute(self) -> None:
        """
        Dispatch every added request as one JSON array.

        Responses are matched back by id. Each callback is invoked exactly
        once: with the result, with the JSON-RPC error, or with the transport
        failure when the whole POST fails.
        """
        if not self._requests:
            return

        pending: Dict[Any, RpcRequest] = {}
        payloads: List[Dict[str, Any]] = []
        for request in self._requests:
            payload = self.client._payload(request.method, request.params)
            pending[payload["id"]] = request
            payloads.append(payload)

        logger.info("Dispatching JSON-RPC batch of %d requests", len(payloads))
        try:
            responses = self.client.call_batch(payloads)
        except (requests.RequestException, ValueError, RpcError) as exc:
            logger.warning("JSON-RPC batch failed: %s", exc)
            for request in pending.values():
                request.callback(exc, None)
            return

        for data in responses:
            request = pending.pop(data.get("id"), None) if isinstance(data, dict) else None
            if request is None:
                logger.debug("Ignoring unmatched batch response: %r", data)
                continue
            try:
                result = _result_from_response(data)
            except RpcError as exc:
                request.callback(exc, None)
            else:
                request.callback(None, result)

        for request_id, request in pending.items():
            request.callback(RpcError(f"Missing JSON-RPC response for request id {request_id}."), None)
