"""JSON-RPC connector for Ethereum Classic style nodes.

The connector is intentionally thin: it posts one JSON-RPC 2.0 request per
call and returns the ``result`` member untouched. Interpreting the result
shape is the caller's job. There are no retries; a failed round trip aborts
the current command.
"""

from __future__ import annotations

import enum
import json
import logging
import uuid
from typing import Any

import requests
from requests import RequestException, Response

from .config import RPCConfig
from .errors import ExecutionError

logger = logging.getLogger(__name__)


class ClientMethod(str, enum.Enum):
    """Remote methods issued by the command layer."""

    ETH_GET_TX_COUNT = "eth_getTransactionCount"
    ETH_SEND_RAW_TRANSACTION = "eth_sendRawTransaction"


class RPCError(ExecutionError):
    """Raised when the node responds with a JSON-RPC error object."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message


class RPCTransportError(ExecutionError):
    """Raised when the node is unreachable or returns malformed data."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_request(method: ClientMethod, params: list[Any] | dict[str, Any]) -> dict[str, Any]:
    """Return the JSON-RPC payload for a single call."""

    return {
        "jsonrpc": "2.0",
        "id": str(uuid.uuid4()),
        "method": method.value,
        "params": params,
    }


class RPCConnector:
    """Posts JSON-RPC requests to a single node endpoint."""

    def __init__(self, config: RPCConfig, session: requests.Session | None = None) -> None:
        self.config = config
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self.config.base_url

    def send_post(self, method: ClientMethod, params: list[Any] | dict[str, Any]) -> Any:
        """Perform one request/response round trip and return ``result``."""

        payload = build_request(method, params)
        logger.debug("RPC call %s params=%s", method.value, params)
        try:
            response = self._session.post(
                self.url,
                data=json.dumps(payload),
                headers={"content-type": "application/json"},
                timeout=self.config.timeout,
            )
        except RequestException as exc:
            logger.error(
                "RPC connection failed: %s",
                exc,
                exc_info=logger.isEnabledFor(logging.DEBUG),
            )
            raise RPCTransportError(
                f"RPC connection to {self.url} failed. Check --node/--host/--port "
                "or the EMERALD_NODE, EMERALD_HOST and EMERALD_PORT variables."
            ) from exc
        return self._parse_response(response)

    def _parse_response(self, response: Response) -> Any:
        try:
            body = response.json()
        except ValueError as exc:
            logger.debug("RPC JSON parse error: %s", response.text, exc_info=True)
            if not response.ok:
                raise RPCTransportError(
                    f"RPC server returned HTTP {response.status_code}",
                    status_code=response.status_code,
                ) from exc
            raise RPCTransportError("RPC server returned malformed JSON") from exc

        # Nodes may report JSON-RPC errors with a non-2xx status; prefer the
        # structured error body when one is present.
        if isinstance(body, dict) and body.get("error"):
            error = body["error"]
            if isinstance(error, dict):
                raise RPCError(error.get("code", -1), error.get("message", "unknown"))
            raise RPCError(-1, str(error))
        if not response.ok:
            logger.error("RPC HTTP error %s from %s", response.status_code, response.url)
            raise RPCTransportError(
                f"RPC server returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not isinstance(body, dict) or "result" not in body:
            raise RPCTransportError("RPC response is missing a 'result' member")
        return body["result"]
