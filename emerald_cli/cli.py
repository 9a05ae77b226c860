"""Command-line interface for the emerald wallet command layer."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from .arguments import CommandArgs
from .codec import decode_hex
from .config import EnvVars, load_rpc_config
from .errors import ExecutionError
from .executor import CmdExecutor
from .keyfile import DirectoryStorage
from .rpc_client import RPCConnector

logger = logging.getLogger(__name__)

COMPACT_JSON_SEPARATORS = (",", ":")
DEFAULT_KEYSTORE = Path.home() / ".emerald" / "keystore"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Emerald wallet CLI")
    parser.add_argument("--host", default=None, help="Node host (default: EMERALD_HOST)")
    parser.add_argument("--port", default=None, help="Node port (default: EMERALD_PORT or 8545)")
    parser.add_argument("--node", default=None, help="Full node URL, overrides host and port")
    parser.add_argument(
        "--config", default=None, help="YAML config file (default: ~/.emerald.yaml)"
    )
    parser.add_argument(
        "--keystore",
        default=str(DEFAULT_KEYSTORE),
        help="Directory imported key files are stored in (default: %(default)s)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser(
        "import", help="import an encrypted key file into the keystore"
    )
    import_parser.add_argument(
        "path", nargs="?", default="", help="Key file path (default: EMERALD_BASE_PATH)"
    )

    nonce_parser = subparsers.add_parser(
        "nonce", help="print the transaction count of an address"
    )
    nonce_parser.add_argument("address", help="Account address (0x-prefixed hex)")

    broadcast_parser = subparsers.add_parser(
        "broadcast", help="broadcast a signed raw transaction"
    )
    broadcast_parser.add_argument("raw", help="Signed transaction as hex")

    return parser


def build_executor(args: argparse.Namespace, env_vars: EnvVars) -> CmdExecutor:
    rpc_config = load_rpc_config(
        env_vars,
        config_path=args.config,
        overrides={"host": args.host, "port": args.port, "node": args.node},
    )
    connector = RPCConnector(rpc_config) if rpc_config is not None else None
    if connector is None:
        logger.debug("No node configured; remote commands are unavailable")
    return CmdExecutor(
        DirectoryStorage(args.keystore),
        CommandArgs.from_namespace(args),
        env_vars,
        connector,
    )


def cmd_import(executor: CmdExecutor) -> None:
    path = executor.parse_path()
    executor.import_keyfile(path)
    print(f"Imported key file from {path}")


def cmd_nonce(executor: CmdExecutor) -> None:
    address = executor.parse_address()
    nonce = executor.get_nonce(address)
    print(json.dumps({"address": str(address), "nonce": nonce}, separators=COMPACT_JSON_SEPARATORS))


def cmd_broadcast(executor: CmdExecutor, raw_hex: str) -> None:
    tx_hash = executor.send_transaction(decode_hex(raw_hex, "raw transaction"))
    print(json.dumps({"hash": tx_hash}, separators=COMPACT_JSON_SEPARATORS))


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    env_vars = EnvVars.parse()
    logger.debug("Environment overrides: %s", env_vars.as_dict())
    try:
        executor = build_executor(args, env_vars)
        if args.command == "import":
            cmd_import(executor)
        elif args.command == "nonce":
            cmd_nonce(executor)
        elif args.command == "broadcast":
            cmd_broadcast(executor, args.raw)
        else:  # pragma: no cover - argparse enforces choices
            parser.error(f"Unknown command: {args.command}")
    except KeyboardInterrupt:  # pragma: no cover - interactive use
        logger.info("Interrupted by user")
    except ExecutionError as exc:
        parser.exit(1, f"error: {exc}\n")


if __name__ == "__main__":
    main(sys.argv[1:])
