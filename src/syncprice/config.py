from __future__ import annotations
import os
from dataclasses import dataclass

import httpx
from dotenv import find_dotenv, load_dotenv

from .domain.value_types import OutputContext
from .errors import ConfigError

RPC_URL_ENV = "ALCHEMY_URL"


def validate_rpc_url(value: str | None) -> str:
    """Return the endpoint URL or raise ConfigError when missing/malformed."""
    if value is None or not value.strip():
        raise ConfigError(f"{RPC_URL_ENV} is not set; export it or add it to .env")
    value = value.strip()
    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as e:
        raise ConfigError(f"{RPC_URL_ENV} is not a valid URL: {e}") from e
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigError(f"{RPC_URL_ENV} must be an http(s) URL with a host, got {value!r}")
    return value


def load_rpc_url(explicit: str | None = None) -> str:
    load_dotenv(find_dotenv(usecwd=True))
    return validate_rpc_url(explicit if explicit is not None else os.getenv(RPC_URL_ENV))


@dataclass(slots=True, frozen=True)
class Settings:
    rpc_url: str
    lookback: int = 20
    from_block: int | None = None
    to_block: int | None = None
    step: int = 1_000
    out: str | None = None
    parquet_out: str | None = None
    context: OutputContext = "tx"
    concurrency: int = 1
    timeout_s: float = 20.0
