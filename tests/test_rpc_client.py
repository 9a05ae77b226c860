from __future__ import annotations

import json
from typing import Any

import pytest
import requests

from emerald_cli.config import RPCConfig
from emerald_cli.rpc_client import (
    ClientMethod,
    RPCConnector,
    RPCError,
    RPCTransportError,
    build_request,
)


class StubResponse:
    def __init__(self, body: Any, status_code: int = 200) -> None:
        self.body = body
        self.status_code = status_code
        self.ok = status_code < 400
        self.url = "http://127.0.0.1:8545"
        self.text = body if isinstance(body, str) else json.dumps(body)

    def json(self) -> Any:
        if isinstance(self.body, str):
            raise ValueError("not json")
        return self.body


class StubSession:
    def __init__(self, response: StubResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.requests: list[dict[str, Any]] = []

    def post(self, url: str, **kwargs: Any) -> StubResponse:
        self.requests.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        assert self.response is not None
        return self.response


def make_connector(session: StubSession) -> RPCConnector:
    return RPCConnector(RPCConfig(host="127.0.0.1", port=8545, timeout=5), session=session)  # type: ignore[arg-type]


def test_build_request_is_jsonrpc_2() -> None:
    payload = build_request(ClientMethod.ETH_GET_TX_COUNT, ["0x00", "latest"])
    assert payload["jsonrpc"] == "2.0"
    assert payload["method"] == "eth_getTransactionCount"
    assert payload["params"] == ["0x00", "latest"]
    assert payload["id"]


def test_send_post_returns_result_member() -> None:
    session = StubSession(StubResponse({"jsonrpc": "2.0", "id": "1", "result": "0x2a"}))
    connector = make_connector(session)

    result = connector.send_post(ClientMethod.ETH_SEND_RAW_TRANSACTION, {"data": "0xdead"})

    assert result == "0x2a"
    sent = session.requests[0]
    assert sent["url"] == "http://127.0.0.1:8545"
    assert sent["timeout"] == 5
    body = json.loads(sent["data"])
    assert body["method"] == "eth_sendRawTransaction"
    assert body["params"] == {"data": "0xdead"}


def test_send_post_passes_through_non_string_results() -> None:
    session = StubSession(StubResponse({"jsonrpc": "2.0", "id": "1", "result": None}))
    assert make_connector(session).send_post(ClientMethod.ETH_GET_TX_COUNT, []) is None


def test_rpc_error_object_is_raised() -> None:
    body = {"jsonrpc": "2.0", "id": "1", "error": {"code": -32000, "message": "nonce too low"}}
    session = StubSession(StubResponse(body, status_code=500))

    with pytest.raises(RPCError) as excinfo:
        make_connector(session).send_post(ClientMethod.ETH_SEND_RAW_TRANSACTION, {"data": "0x"})
    assert excinfo.value.code == -32000
    assert excinfo.value.message == "nonce too low"


def test_connection_failure_is_transport_error() -> None:
    session = StubSession(error=requests.ConnectionError("refused"))
    with pytest.raises(RPCTransportError, match="RPC connection"):
        make_connector(session).send_post(ClientMethod.ETH_GET_TX_COUNT, [])


def test_malformed_json_is_transport_error() -> None:
    session = StubSession(StubResponse("<html>oops</html>"))
    with pytest.raises(RPCTransportError, match="malformed JSON"):
        make_connector(session).send_post(ClientMethod.ETH_GET_TX_COUNT, [])


def test_http_error_without_body_keeps_status() -> None:
    session = StubSession(StubResponse("Bad Gateway", status_code=502))
    with pytest.raises(RPCTransportError) as excinfo:
        make_connector(session).send_post(ClientMethod.ETH_GET_TX_COUNT, [])
    assert excinfo.value.status_code == 502


def test_missing_result_member_is_transport_error() -> None:
    session = StubSession(StubResponse({"jsonrpc": "2.0", "id": "1"}))
    with pytest.raises(RPCTransportError):
        make_connector(session).send_post(ClientMethod.ETH_GET_TX_COUNT, [])
