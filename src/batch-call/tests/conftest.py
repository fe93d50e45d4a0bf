"""
Pytest configuration and shared doubles for batch-call tests.
"""

from typing import Any, Callable, Dict, List, Optional

import pytest
from eth_abi import encode
from unittest.mock import Mock

TOKEN = "0x" + "aa" * 20
OTHER_TOKEN = "0x" + "bb" * 20
USER = "0x" + "11" * 20
OTHER_USER = "0x" + "22" * 20

SYMBOL_SELECTOR = "0x95d89b41"
BALANCE_OF_SELECTOR = "0x70a08231"

ERC20_ABI: List[Dict[str, Any]] = [
    {
        "name": "symbol",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
    },
    {
        "name": "decimals",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint8"}],
    },
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "owner", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "transfer",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "to", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
    {
        "name": "Transfer",
        "type": "event",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "name": "from", "type": "address"},
            {"indexed": True, "name": "to", "type": "address"},
            {"indexed": False, "name": "value", "type": "uint256"},
        ],
    },
]


def encoded(types: List[str], values: List[Any]) -> str:
    return "0x" + encode(types, values).hex()


def balance_of_input(owner: str) -> str:
    return BALANCE_OF_SELECTOR + "00" * 12 + owner[2:].lower()


class FakeBatch:
    """Batch double: answers each eth_call through `responder(request)`."""

    def __init__(self, responder: Callable[[Any], Any]) -> None:
        self.responder = responder
        self.requests: List[Any] = []
        self.executed = 0

    def add(self, request: Any) -> None:
        self.requests.append(request)

    def __len__(self) -> int:
        return len(self.requests)

    def execute(self) -> None:
        self.executed += 1
        for request in self.requests:
            try:
                result = self.responder(request)
            except Exception as exc:  # pylint: disable=broad-except
                request.callback(exc, None)
            else:
                request.callback(None, result)


class FakeTransport:
    """Transport double exposing `batch()`; results keyed by (to, data)."""

    def __init__(self, results: Optional[Dict[Any, Any]] = None) -> None:
        self.results = results or {}
        self.batches: List[FakeBatch] = []

    def respond(self, request: Any) -> Any:
        tx, _block = request.params
        outcome = self.results.get((tx["to"].lower(), tx["data"]))
        if outcome is None:
            outcome = self.results.get(tx["data"])
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is None:
            raise RuntimeError(f"no fake result for {tx['data']}")
        return outcome

    def batch(self) -> FakeBatch:
        batch = FakeBatch(self.respond)
        self.batches.append(batch)
        return batch


@pytest.fixture
def erc20_abi() -> List[Dict[str, Any]]:
    return [dict(entry) for entry in ERC20_ABI]


@pytest.fixture
def token_results() -> Dict[Any, Any]:
    """Canned eth_call results for the ERC20 methods."""
    return {
        SYMBOL_SELECTOR: encoded(["string"], ["TOK"]),
        "0x313ce567": encoded(["uint8"], [18]),
        balance_of_input(USER): encoded(["uint256"], [100]),
        balance_of_input(OTHER_USER): encoded(["uint256"], [250]),
    }


@pytest.fixture
def no_sleep(monkeypatch):
    sleep = Mock()
    monkeypatch.setattr("batchcall.cache.time.sleep", sleep)
    return sleep


@pytest.fixture
def resolver(erc20_abi):
    mock_resolver = Mock()
    mock_resolver.get_abi.return_value = erc20_abi
    return mock_resolver
