from __future__ import annotations


class SyncPriceError(Exception):
    """Base class for fatal errors that end a run."""


class ConfigError(SyncPriceError, ValueError):
    """Missing/invalid endpoint or block range."""


class RPCError(SyncPriceError, RuntimeError):
    """JSON-RPC error object or malformed response."""

    def __init__(self, method: str, message: str, code: int | None = None) -> None:
        super().__init__(f"{method} RPC error code={code} message={message}")
        self.method = method
        self.code = code
