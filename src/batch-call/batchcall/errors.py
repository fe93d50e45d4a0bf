from typing import Any, Optional


class BatchCallError(Exception):
    """Base exception for batch-call failures."""


class ConfigurationError(BatchCallError, ValueError):
    """Raised when the provider or explorer settings are missing or malformed."""


class ExplorerError(BatchCallError):
    """Raised when an ABI cannot be fetched or parsed from the explorer."""

    def __init__(self, message: str, response: Optional[Any] = None) -> None:
        super().__init__(message)
        self.response = response


class RpcError(BatchCallError):
    """Raised for JSON-RPC level failures (error objects, missing results)."""

    def __init__(self, message: str, code: Optional[int] = None, data: Optional[Any] = None) -> None:
        super().__init__(message)
        self.code = code
        self.data = data
