"""Command-execution layer of the emerald wallet CLI."""

from .arguments import CommandArgs, arg_or_default, arg_to_opt
from .codec import align_bytes, decode_hex, hex_to_32bytes, to_arr, to_hex, trim_hex
from .config import ConfigurationError, EnvVars, RPCConfig, load_rpc_config
from .errors import (
    CodecError,
    ConnectorUnavailableError,
    ExecutionError,
    InvalidArgumentError,
    KeyFileIOError,
    RPCResponseError,
    StorageError,
)
from .executor import CmdExecutor
from .keyfile import DirectoryStorage, KeyFile, KeyfileStorage
from .rpc_client import ClientMethod, RPCConnector, RPCError, RPCTransportError
from .values import Address, PrivateKey

__all__ = [
    "Address",
    "ClientMethod",
    "CmdExecutor",
    "CodecError",
    "CommandArgs",
    "ConfigurationError",
    "ConnectorUnavailableError",
    "DirectoryStorage",
    "EnvVars",
    "ExecutionError",
    "InvalidArgumentError",
    "KeyFile",
    "KeyFileIOError",
    "KeyfileStorage",
    "PrivateKey",
    "RPCConfig",
    "RPCConnector",
    "RPCError",
    "RPCResponseError",
    "RPCTransportError",
    "StorageError",
    "align_bytes",
    "arg_or_default",
    "arg_to_opt",
    "decode_hex",
    "hex_to_32bytes",
    "load_rpc_config",
    "to_arr",
    "to_hex",
    "trim_hex",
]
