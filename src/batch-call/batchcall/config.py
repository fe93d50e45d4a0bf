import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from .errors import ConfigurationError

DEFAULT_BASE_URL = "https://api.etherscan.io/api"
DEFAULT_DELAY_TIME = 300


@dataclass
class EtherscanConfig:
    api_key: str
    # Milliseconds to wait after every explorer fetch.
    delay_time: int = DEFAULT_DELAY_TIME
    base_url: str = DEFAULT_BASE_URL
    chain_id: Optional[str] = None
    request_timeout: Optional[float] = None

    @classmethod
    def from_mapping(cls, data: Mapping) -> "EtherscanConfig":
        """Build from `{apiKey, delayTime}` style mappings (snake_case also accepted)."""
        api_key = data.get("apiKey", data.get("api_key"))
        if not api_key:
            raise ConfigurationError("No etherscan API key set.")

        delay_time = data.get("delayTime", data.get("delay_time"))
        if delay_time is None:
            delay_time = DEFAULT_DELAY_TIME

        return cls(
            api_key=api_key,
            delay_time=delay_time,
            base_url=data.get("baseUrl", data.get("base_url")) or DEFAULT_BASE_URL,
            chain_id=data.get("chainId", data.get("chain_id")),
            request_timeout=data.get("requestTimeout", data.get("request_timeout")),
        )


@dataclass
class Config:
    provider: Any
    etherscan: Optional[EtherscanConfig] = None

    @classmethod
    def from_mapping(cls, data: Mapping) -> "Config":
        etherscan = data.get("etherscan")
        if isinstance(etherscan, Mapping):
            etherscan = EtherscanConfig.from_mapping(etherscan)
        return cls(provider=data.get("provider"), etherscan=etherscan)


def validate_config(config: Any) -> Config:
    """Normalize a Config or mapping and check the required settings are present."""
    if isinstance(config, Mapping):
        config = Config.from_mapping(config)
    if not isinstance(config, Config):
        raise ConfigurationError("Config must be a Config instance or a mapping.")
    if isinstance(config.etherscan, Mapping):
        config.etherscan = EtherscanConfig.from_mapping(config.etherscan)

    if not config.provider:
        raise ConfigurationError("No provider set.")
    if not config.etherscan:
        raise ConfigurationError("No etherscan config set.")
    if not config.etherscan.api_key:
        raise ConfigurationError("No etherscan API key set.")

    delay_time = config.etherscan.delay_time
    if isinstance(delay_time, bool) or not isinstance(delay_time, (int, float)) or delay_time < 0:
        raise ConfigurationError("delay_time must be a non-negative number of milliseconds.")

    return config


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got: {raw}") from exc


def load_config() -> Config:
    """Load configuration from environment variables."""
    rpc_url = os.getenv("RPC_URL")
    if not rpc_url:
        raise ConfigurationError("RPC_URL is required but not set.")

    api_key = os.getenv("ETHERSCAN_API_KEY")
    if not api_key:
        raise ConfigurationError("ETHERSCAN_API_KEY is required but not set.")

    delay_raw = os.getenv("ETHERSCAN_DELAY_MS", str(DEFAULT_DELAY_TIME))
    try:
        delay_time = int(delay_raw)
    except ValueError as exc:
        raise ConfigurationError(f"ETHERSCAN_DELAY_MS must be an integer, got: {delay_raw}") from exc

    base_url = os.getenv("ETHERSCAN_BASE_URL", DEFAULT_BASE_URL).rstrip("/")
    chain_id_env = os.getenv("CHAIN_ID")
    chain_id = chain_id_env.strip() if chain_id_env else None

    return Config(
        provider=rpc_url.strip(),
        etherscan=EtherscanConfig(
            api_key=api_key,
            delay_time=delay_time,
            base_url=base_url,
            chain_id=chain_id,
            request_timeout=_optional_float("REQUEST_TIMEOUT"),
        ),
    )
