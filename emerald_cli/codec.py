"""Hex and fixed-width byte helpers used by the value parsers."""

from __future__ import annotations

import binascii
import re

from .errors import CodecError

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def trim_hex(value: str) -> str:
    """Strip a single leading ``0x``/``0X`` prefix, leaving the digits untouched."""

    if value[:2] in ("0x", "0X"):
        return value[2:]
    return value


def decode_hex(value: str, name: str = "hex value") -> bytes:
    """Decode *value* (optionally ``0x``-prefixed) into bytes.

    Only an even number of hex digits is accepted; an empty string decodes to
    ``b""``.
    """

    digits = trim_hex(value)
    if not _HEX_RE.fullmatch(digits) or len(digits) % 2 != 0:
        raise CodecError(f"Invalid hex for {name}: {value!r}")
    try:
        return binascii.unhexlify(digits)
    except binascii.Error as exc:  # pragma: no cover - regex already guards
        raise CodecError(f"Invalid hex for {name}: {value!r}") from exc


def to_hex(data: bytes) -> str:
    return "0x" + bytes(data).hex()


def align_bytes(data: bytes, width: int) -> bytes:
    """Return exactly *width* bytes, left-padding short input with zeros.

    Input longer than *width* is rejected rather than truncated: silently
    dropping high-order bytes would change monetary amounts.
    """

    if len(data) > width:
        raise CodecError(f"Value is {len(data)} bytes, exceeds {width} byte width")
    return bytes(width - len(data)) + bytes(data)


def to_arr(data: bytes, width: int) -> bytes:
    """Reinterpret *data* as a fixed-width value, failing on a length mismatch."""

    if len(data) != width:
        raise CodecError(f"Expected {width} bytes, got {len(data)}")
    return bytes(data)


def hex_to_32bytes(value: str, name: str = "value") -> bytes:
    """Decode a hex amount into a 32-byte big-endian word."""

    return to_arr(align_bytes(decode_hex(value, name), 32), 32)
