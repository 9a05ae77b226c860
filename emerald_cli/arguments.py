"""Raw command arguments and CLI-versus-environment resolution."""

from __future__ import annotations

import argparse
from dataclasses import dataclass

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class CommandArgs:
    """Raw string arguments supplied on the command line.

    Empty strings mean "not supplied"; resolution against environment
    fallbacks happens in the value parsers.
    """

    address: str = ""
    from_: str = ""
    to: str = ""
    path: str = ""
    value: str = ""
    data: str = ""
    gas: str = ""
    gas_price: str = ""

    @classmethod
    def from_namespace(cls, namespace: argparse.Namespace) -> "CommandArgs":
        def _get(name: str) -> str:
            raw = getattr(namespace, name, None)
            return "" if raw is None else str(raw)

        return cls(
            address=_get("address"),
            from_=_get("from_"),
            to=_get("to"),
            path=_get("path"),
            value=_get("value"),
            data=_get("data"),
            gas=_get("gas"),
            gas_price=_get("gas_price"),
        )


def arg_or_default(arg: str, fallback: str | None) -> str:
    """Return *arg* when supplied, otherwise the environment *fallback*.

    A non-empty *arg* always wins, even when a fallback is present. An
    environment variable set to the empty string counts as absent.
    """

    if arg:
        return arg
    if not fallback:
        raise InvalidArgumentError("Missed arguments")
    return fallback


def arg_to_opt(arg: str) -> str | None:
    return arg or None
