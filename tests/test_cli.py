from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from emerald_cli import cli
from emerald_cli.config import ENV_NAMES

ADDRESS = "0x0e7c045110b8dbf29765047380898919c5cb56f4"
KEY_ID = "3198bc9c-6672-5ab3-d995-4942343ae5b6"


@pytest.fixture(autouse=True)
def clean_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("emerald_cli.config.DEFAULT_CONFIG_PATH", tmp_path / "absent.yaml")


class StubConnector:
    replies: dict[str, Any] = {}
    calls: list[tuple[str, Any]] = []

    def __init__(self, config: Any) -> None:
        self.config = config

    def send_post(self, method: Any, params: Any) -> Any:
        StubConnector.calls.append((method.value, params))
        return StubConnector.replies[method.value]


def test_import_uses_base_path_fallback(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    source = tmp_path / "UTC--key.json"
    source.write_text(
        json.dumps(
            {
                "version": 3,
                "id": KEY_ID,
                "crypto": {"cipher": "aes-128-ctr", "ciphertext": "00", "kdf": "pbkdf2", "mac": "00"},
            }
        )
    )
    keystore = tmp_path / "keystore"
    monkeypatch.setenv("EMERALD_BASE_PATH", str(source))

    cli.main(["--keystore", str(keystore), "import"])

    assert (keystore / f"{KEY_ID}.json").exists()
    assert "Imported key file" in capsys.readouterr().out


def test_nonce_without_node_exits_with_error(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["nonce", ADDRESS])

    assert excinfo.value.code == 1
    assert "Can't connect to client" in capsys.readouterr().err


def test_nonce_and_broadcast_through_node(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "RPCConnector", StubConnector)
    monkeypatch.setattr(StubConnector, "calls", [])
    monkeypatch.setattr(
        StubConnector,
        "replies",
        {"eth_getTransactionCount": "0x2a", "eth_sendRawTransaction": "0xfeed"},
    )

    cli.main(["--host", "127.0.0.1", "nonce", ADDRESS])
    cli.main(["--node", "http://127.0.0.1:8545", "broadcast", "0xdead"])

    lines = capsys.readouterr().out.splitlines()
    assert json.loads(lines[0]) == {"address": ADDRESS, "nonce": 42}
    assert json.loads(lines[1]) == {"hash": "0xfeed"}
    assert StubConnector.calls == [
        ("eth_getTransactionCount", [ADDRESS, "latest"]),
        ("eth_sendRawTransaction", {"data": "0xdead"}),
    ]


def test_invalid_address_is_reported(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr(cli, "RPCConnector", StubConnector)

    with pytest.raises(SystemExit):
        cli.main(["--host", "127.0.0.1", "nonce", "0x1234"])
    assert "Invalid address" in capsys.readouterr().err
