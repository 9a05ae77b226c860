"""Command executor tying argument parsing, storage and the node together."""

from __future__ import annotations

import logging
import re
import sys
from pathlib import Path
from typing import Any, TextIO

from . import values
from .arguments import CommandArgs
from .codec import to_hex, trim_hex
from .config import EnvVars
from .errors import (
    CodecError,
    ConnectorUnavailableError,
    KeyFileIOError,
    RPCResponseError,
    StorageError,
)
from .keyfile import KeyFile, KeyfileStorage
from .rpc_client import ClientMethod, RPCConnector
from .values import Address, PrivateKey

logger = logging.getLogger(__name__)

PASSPHRASE_PROMPT = "Enter passphrase: "
LATEST_BLOCK = "latest"

_HEX_DIGITS_RE = re.compile(r"[0-9a-fA-F]+")


class CmdExecutor:
    """Execute wallet commands for one CLI invocation.

    ``connector`` is ``None`` when no node endpoint is configured; the remote
    operations then fail with :class:`ConnectorUnavailableError`.
    """

    def __init__(
        self,
        storage: KeyfileStorage,
        args: CommandArgs,
        env_vars: EnvVars,
        connector: RPCConnector | None = None,
    ) -> None:
        self.storage = storage
        self.args = args
        self.vars = env_vars
        self.connector = connector

    # Key files ------------------------------------------------------------

    def import_keyfile(self, path: str | Path) -> None:
        """Read a key file from *path* and hand it to the storage."""

        try:
            with open(path, encoding="utf-8") as handle:
                text = handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise KeyFileIOError(f"Failed to read key file {path}: {exc}") from exc

        keyfile = KeyFile.decode(text)
        try:
            self.storage.put(keyfile)
        except StorageError:
            raise
        except (OSError, ValueError, KeyError) as exc:
            raise StorageError(f"Storage rejected key file {keyfile.uuid}: {exc}") from exc
        logger.info("Imported key file %s from %s", keyfile.uuid, path)

    # Argument parsing -------------------------------------------------------

    def parse_address(self) -> Address:
        return values.parse_address(self.args.address)

    def parse_from(self) -> Address:
        return values.parse_address(self.args.from_)

    def parse_to(self) -> Address | None:
        return values.parse_optional_address(self.args.to)

    def parse_pk(self) -> PrivateKey:
        return values.parse_private_key(self.args.path)

    def parse_path(self) -> Path:
        return values.parse_path(self.args.path, self.vars.base_path)

    def parse_gas(self) -> int:
        return values.parse_gas(self.args.gas, self.vars.gas)

    def parse_gas_price(self) -> bytes:
        return values.parse_gas_price(self.args.gas_price, self.vars.gas_price)

    def parse_value(self) -> bytes:
        return values.parse_value(self.args.value)

    def parse_data(self) -> bytes:
        return values.parse_data(self.args.data)

    # Interactive ------------------------------------------------------------

    @staticmethod
    def request_passphrase(stdin: TextIO | None = None, stdout: TextIO | None = None) -> str:
        """Prompt for a passphrase and return the line exactly as read.

        The trailing newline is kept; callers strip it when needed.
        """

        out = stdout or sys.stdout
        out.write(PASSPHRASE_PROMPT)
        out.flush()
        return (stdin or sys.stdin).readline()

    # Remote node ------------------------------------------------------------

    def _require_connector(self) -> RPCConnector:
        if self.connector is None:
            raise ConnectorUnavailableError()
        return self.connector

    def get_nonce(self, addr: Address) -> int:
        """Return the transaction count of *addr* at the latest block."""

        conn = self._require_connector()
        result: Any = conn.send_post(ClientMethod.ETH_GET_TX_COUNT, [str(addr), LATEST_BLOCK])
        if not isinstance(result, str):
            raise RPCResponseError("string", result, "Can't parse tx count")
        digits = trim_hex(result)
        if not _HEX_DIGITS_RE.fullmatch(digits):
            raise CodecError(f"Can't parse tx count: {result!r}")
        nonce = int(digits, 16)
        if nonce > values.MAX_U64:
            raise CodecError(f"Tx count overflows 64 bits: {result}")
        logger.debug("Nonce for %s is %d", addr, nonce)
        return nonce

    def send_transaction(self, raw: bytes) -> str:
        """Broadcast a signed raw transaction and return its hash."""

        conn = self._require_connector()
        result: Any = conn.send_post(
            ClientMethod.ETH_SEND_RAW_TRANSACTION, {"data": to_hex(raw)}
        )
        if not isinstance(result, str):
            raise RPCResponseError("string", result, "Can't parse tx hash")
        logger.info("Broadcast transaction %s", result)
        return result
