"""Typed domain values parsed from resolved command arguments."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric import ec

from .arguments import arg_or_default, arg_to_opt
from .codec import decode_hex, hex_to_32bytes, trim_hex
from .errors import CodecError

logger = logging.getLogger(__name__)

ADDRESS_BYTES = 20
PRIVATE_KEY_BYTES = 32
MAX_U64 = 2**64 - 1
SECP256K1_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

_DIGITS_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True)
class Address:
    """A 20-byte account address."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != ADDRESS_BYTES:
            raise CodecError(f"Address must be {ADDRESS_BYTES} bytes, got {len(self.raw)}")

    @classmethod
    def from_str(cls, value: str) -> "Address":
        """Parse a 40-digit hex address, with or without the ``0x`` prefix."""

        if len(trim_hex(value)) != ADDRESS_BYTES * 2:
            raise CodecError(f"Invalid address length: {value!r}")
        return cls(decode_hex(value, "address"))

    def __str__(self) -> str:
        return "0x" + self.raw.hex()


@dataclass(frozen=True)
class PrivateKey:
    """A secp256k1 private key scalar."""

    raw: bytes

    def __post_init__(self) -> None:
        if len(self.raw) != PRIVATE_KEY_BYTES:
            raise CodecError(f"Private key must be {PRIVATE_KEY_BYTES} bytes")
        scalar = int.from_bytes(self.raw, "big")
        if not 0 < scalar < SECP256K1_ORDER:
            raise CodecError("Private key is outside the secp256k1 range")
        try:
            ec.derive_private_key(scalar, ec.SECP256K1())
        except ValueError as exc:
            raise CodecError("Private key is outside the secp256k1 range") from exc

    @classmethod
    def from_str(cls, value: str) -> "PrivateKey":
        if len(trim_hex(value)) != PRIVATE_KEY_BYTES * 2:
            raise CodecError("Invalid private key length")
        return cls(decode_hex(value, "private key"))

    def __repr__(self) -> str:
        return "PrivateKey(<redacted>)"


def parse_address(arg: str) -> Address:
    return Address.from_str(arg)


def parse_optional_address(arg: str) -> Address | None:
    """Parse a destination address; an empty argument means contract creation."""

    value = arg_to_opt(arg)
    if value is None:
        return None
    return Address.from_str(value)


def parse_private_key(arg: str) -> PrivateKey:
    return PrivateKey.from_str(arg)


def parse_path(arg: str, base_path: str | None) -> Path:
    return Path(arg_or_default(arg, base_path))


def parse_gas(arg: str, fallback: str | None) -> int:
    """Resolve a gas limit and parse it as an unsigned 64-bit integer.

    The ``0x`` prefix is stripped before parsing, but the digits are read as
    decimal.
    """

    digits = trim_hex(arg_or_default(arg, fallback))
    if not _DIGITS_RE.fullmatch(digits):
        raise CodecError(f"Invalid gas amount: {digits!r}")
    gas = int(digits)
    if gas > MAX_U64:
        raise CodecError(f"Gas amount overflows 64 bits: {digits}")
    return gas


def parse_gas_price(arg: str, fallback: str | None) -> bytes:
    return hex_to_32bytes(arg_or_default(arg, fallback), "gas price")


def parse_value(arg: str) -> bytes:
    """Parse a transaction value into a 32-byte word; the value has no fallback."""

    return hex_to_32bytes(arg_or_default(arg, None), "value")


def parse_data(arg: str) -> bytes:
    data = decode_hex(arg, "data")
    logger.debug("Parsed %d bytes of call data", len(data))
    return data
