"""Encrypted key-file documents and the storage they are imported into.

Key files follow the Web3 Secret Storage (version 3) JSON layout. The
encrypted ``crypto`` section is carried through untouched; decrypting it is
left to the signer.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from .errors import CodecError, StorageError
from .values import Address

logger = logging.getLogger(__name__)

KEYFILE_VERSION = 3
_REQUIRED_CRYPTO_FIELDS = ("cipher", "ciphertext", "kdf", "mac")
_OPTIONAL_FIELD_TYPES = {"address": str, "name": str, "description": str, "visible": bool}


@dataclass
class KeyFile:
    """Decoded key-file document."""

    uuid: uuid.UUID
    crypto: dict[str, Any]
    address: Address | None = None
    name: str | None = None
    description: str | None = None
    visible: bool | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def decode(cls, text: str) -> "KeyFile":
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CodecError(f"Key file is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise CodecError("Key file must contain a JSON object")

        version = document.get("version")
        if version != KEYFILE_VERSION:
            raise CodecError(f"Unsupported key file version: {version!r}")

        try:
            key_id = uuid.UUID(str(document.get("id")))
        except ValueError as exc:
            raise CodecError(f"Invalid key file id: {document.get('id')!r}") from exc

        crypto = document.get("crypto", document.get("Crypto"))
        if not isinstance(crypto, dict):
            raise CodecError("Key file is missing its 'crypto' section")
        missing = [name for name in _REQUIRED_CRYPTO_FIELDS if name not in crypto]
        if missing:
            raise CodecError(f"Key file 'crypto' section lacks: {', '.join(missing)}")

        for name, expected in _OPTIONAL_FIELD_TYPES.items():
            member = document.get(name)
            if member is not None and not isinstance(member, expected):
                raise CodecError(f"Key file '{name}' must be a {expected.__name__}")

        raw_address = document.get("address")
        address = Address.from_str(raw_address) if raw_address else None

        known = {"version", "id", "crypto", "Crypto", "address", "name", "description", "visible"}
        return cls(
            uuid=key_id,
            crypto=crypto,
            address=address,
            name=document.get("name"),
            description=document.get("description"),
            visible=document.get("visible"),
            extra={k: v for k, v in document.items() if k not in known},
        )

    def encode(self) -> str:
        document: dict[str, Any] = dict(self.extra)
        document.update({"version": KEYFILE_VERSION, "id": str(self.uuid), "crypto": self.crypto})
        if self.address is not None:
            document["address"] = str(self.address)[2:]
        for name in ("name", "description", "visible"):
            value = getattr(self, name)
            if value is not None:
                document[name] = value
        return json.dumps(document, indent=2)


class KeyfileStorage(Protocol):
    """Destination for imported key files.

    Implementations report rejected writes as :class:`StorageError`.
    """

    def put(self, keyfile: KeyFile) -> None:
        ...


class DirectoryStorage:
    """Stores each key file as ``<uuid>.json`` inside a directory."""

    def __init__(self, base: str | Path) -> None:
        self.base = Path(base).expanduser()

    def put(self, keyfile: KeyFile) -> None:
        dest = self.base / f"{keyfile.uuid}.json"
        try:
            self.base.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(prefix="keyfile_", suffix=".tmp", dir=str(self.base))
            try:
                with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
                    handle.write(keyfile.encode())
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_path, dest)
            finally:
                if os.path.exists(tmp_path):
                    os.remove(tmp_path)
        except OSError as exc:
            raise StorageError(f"Failed to store key file {keyfile.uuid}: {exc}") from exc
        logger.info("Stored key file %s at %s", keyfile.uuid, dest)

    def list(self) -> list[uuid.UUID]:
        if not self.base.is_dir():
            return []
        stored = []
        for entry in sorted(self.base.glob("*.json")):
            try:
                stored.append(uuid.UUID(entry.stem))
            except ValueError:
                logger.debug("Ignoring non key-file entry %s", entry)
        return stored
