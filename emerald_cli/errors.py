"""Error hierarchy shared by the emerald command layer.

Every failure raised while executing a command derives from
:class:`ExecutionError`, so the CLI driver can catch one type while library
callers branch on the concrete subclass instead of parsing message text.
"""

from __future__ import annotations

from typing import Any


class ExecutionError(RuntimeError):
    """Base class for failures raised while executing a command."""


class InvalidArgumentError(ExecutionError):
    """Raised when a required CLI argument is missing or unusable."""


class CodecError(ExecutionError):
    """Raised when hex, numeric, address, key, or key-file input is malformed."""


class KeyFileIOError(ExecutionError):
    """Raised when a key file cannot be read from disk."""


class StorageError(ExecutionError):
    """Raised when the key-file storage rejects an operation."""


class ConnectorUnavailableError(ExecutionError):
    """Raised when a remote call is attempted without a configured node."""

    def __init__(self, message: str = "Can't connect to client") -> None:
        super().__init__(message)


class RPCResponseError(ExecutionError):
    """Raised when the node replies with an unexpected result shape."""

    def __init__(self, expected: str, got: Any, message: str | None = None) -> None:
        got_name = type(got).__name__ if got is not None else "null"
        super().__init__(message or f"Expected {expected} in RPC response, got {got_name}")
        self.expected = expected
        self.got = got
