"""Environment snapshot and node connection configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml

from .errors import ExecutionError


class ConfigurationError(ExecutionError):
    """Raised when configuration is invalid."""


DEFAULT_CONFIG_PATH = Path.home() / ".emerald.yaml"
DEFAULT_RPC_PORT = 8545
DEFAULT_RPC_TIMEOUT = 30.0

ENV_NAMES = {
    "EMERALD_BASE_PATH": "base_path",
    "EMERALD_HOST": "host",
    "EMERALD_PORT": "port",
    "EMERALD_CHAIN": "chain",
    "EMERALD_CHAIN_ID": "chain_id",
    "EMERALD_GAS": "gas",
    "EMERALD_GAS_PRICE": "gas_price",
    "EMERALD_SECURITY_LEVEL": "security_level",
    "EMERALD_NODE": "node",
}


@dataclass(frozen=True)
class EnvVars:
    """Environment overrides captured once when the process starts.

    Each slot is ``None`` when the matching ``EMERALD_*`` variable was not set.
    Instances are immutable; later changes to the process environment are
    not observed.
    """

    base_path: str | None = None
    host: str | None = None
    port: str | None = None
    chain: str | None = None
    chain_id: str | None = None
    gas: str | None = None
    gas_price: str | None = None
    security_level: str | None = None
    node: str | None = None

    @classmethod
    def parse(cls, environ: Mapping[str, str] | None = None) -> "EnvVars":
        """Collect the recognised ``EMERALD_*`` variables from *environ*."""

        source = os.environ if environ is None else environ
        values: dict[str, str] = {}
        for key, value in source.items():
            slot = ENV_NAMES.get(key)
            if slot is not None:
                values[slot] = value
        return cls(**values)

    def as_dict(self) -> dict[str, str | None]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class RPCConfig:
    """Connection details for the remote node."""

    host: str = "127.0.0.1"
    port: int = DEFAULT_RPC_PORT
    use_https: bool = False
    path: str = ""
    timeout: float = DEFAULT_RPC_TIMEOUT

    @property
    def base_url(self) -> str:
        scheme = "https" if self.use_https else "http"
        return f"{scheme}://{self.host}:{self.port}{self.path}"


def _load_config_file(path: Path, *, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {path}")
        return {}

    try:
        loaded = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - delegated to PyYAML
        raise ConfigurationError(f"Invalid YAML in config file {path}: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigurationError(f"Expected {path} to contain a YAML object with an 'rpc' section")
    return loaded


def _coerce_port(raw: Any, *, source: str) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        port = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid port in {source}: {raw}") from exc
    if not 0 < port < 65536:
        raise ConfigurationError(f"Port out of range in {source}: {raw}")
    return port


def _coerce_timeout(raw: Any, *, source: str) -> float | None:
    if raw is None:
        return None
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid timeout in {source}: {raw}") from exc


def _first_value(*values: Any, default: Any = None) -> Any:
    for value in values:
        if value is not None and value != "":
            return value
    return default


def _parse_endpoint(raw: str | None) -> tuple[str | None, int | None, bool | None, str]:
    if not raw:
        return None, None, None, ""
    parsed = urlparse(raw if "://" in raw else f"http://{raw}")
    if not parsed.hostname:
        raise ConfigurationError(f"Invalid node endpoint URL: {raw}")
    try:
        port = parsed.port
    except ValueError as exc:
        raise ConfigurationError(f"Invalid port in node endpoint URL: {raw}") from exc
    use_https = parsed.scheme.lower() == "https"
    return parsed.hostname, port, use_https, parsed.path.rstrip("/")


def load_rpc_config(
    env_vars: EnvVars,
    *,
    config_path: str | Path | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> RPCConfig | None:
    """Resolve the node connection, or ``None`` when no node is configured.

    Precedence per field: *overrides* (CLI flags), then the ``EMERALD_*``
    snapshot, then the ``rpc`` section of the YAML config file, then defaults.
    A full endpoint URL (``node``) wins over separate host/port values at the
    same level.
    """

    explicit_path = config_path is not None
    path = Path(config_path).expanduser() if explicit_path else DEFAULT_CONFIG_PATH
    file_config = _load_config_file(path, required=explicit_path)
    rpc_section = file_config.get("rpc", {}) or {}
    if not isinstance(rpc_section, dict):
        raise ConfigurationError(f"Expected 'rpc' to be a mapping in {path}")

    override_map = dict(overrides or {})

    node_host, node_port, node_https, node_path = _parse_endpoint(
        _first_value(override_map.get("node"), env_vars.node)
    )
    file_host, file_port, file_https, file_path = _parse_endpoint(rpc_section.get("endpoint"))

    host = _first_value(
        override_map.get("host"),
        node_host,
        env_vars.host,
        file_host,
        rpc_section.get("host"),
    )
    if host is None:
        return None

    port = _first_value(
        _coerce_port(override_map.get("port"), source="overrides"),
        node_port,
        _coerce_port(env_vars.port, source="EMERALD_PORT"),
        file_port,
        _coerce_port(rpc_section.get("port"), source=f"{path} rpc.port"),
        default=DEFAULT_RPC_PORT,
    )

    # Scheme and path follow the endpoint URL the host was resolved against.
    if node_host is not None:
        use_https, url_path = node_https, node_path
    elif _first_value(override_map.get("host"), env_vars.host) is None and file_host is not None:
        use_https, url_path = file_https, file_path
    else:
        use_https, url_path = False, ""

    timeout = _first_value(
        _coerce_timeout(rpc_section.get("timeout"), source=f"{path} rpc.timeout"),
        default=DEFAULT_RPC_TIMEOUT,
    )

    return RPCConfig(
        host=str(host),
        port=port,
        use_https=bool(use_https),
        path=url_path,
        timeout=timeout,
    )
