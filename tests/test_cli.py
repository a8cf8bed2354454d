import pytest

from gatewaychat import cli
from gatewaychat.store import SessionStore

from tests.helpers import FakeTransport, completion_body


@pytest.fixture
def env(monkeypatch, tmp_path):
    monkeypatch.setenv("GATEWAY_BASE_URL", "http://gateway.local:4000")
    monkeypatch.setenv("GATEWAY_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("GATEWAY_DEFAULT_MODEL", "gpt-4o")
    monkeypatch.setenv("GATEWAY_TRANSPORT", "httpx")
    monkeypatch.delenv("GATEWAY_TIMEOUT_SECONDS", raising=False)
    return tmp_path


def test_send_prints_reply_and_reasoning(env, monkeypatch, capsys):
    transport = FakeTransport(completion_body("Forty-two", reasoning="Counted carefully"))
    monkeypatch.setattr(cli, "build_transport", lambda config: transport)

    assert cli.main(["send", "What is the answer?", "--model", "claude-3-5-sonnet"]) == 0

    out = capsys.readouterr().out
    assert "Counted carefully" in out
    assert "Forty-two" in out
    assert transport.requests[0].body["model"] == "claude-3-5-sonnet"
    assert transport.closed

    session = SessionStore(env).current_session()
    assert [m.content for m in session.messages] == ["What is the answer?", "Forty-two"]


def test_send_failure_returns_error_code(env, monkeypatch, capsys):
    monkeypatch.setenv("GATEWAY_BASE_URL", "")
    assert cli.main(["send", "hi"]) == 1
    assert "not configured" in capsys.readouterr().err
    assert SessionStore(env).current_session().messages == []


def test_retry_without_pending_user_turn(env, monkeypatch, capsys):
    monkeypatch.setattr(cli, "build_transport", lambda config: FakeTransport())
    assert cli.main(["retry"]) == 1
    assert "nothing to retry" in capsys.readouterr().err


def test_session_management_commands(env, capsys):
    assert cli.main(["new", "--model", "deepseek-chat"]) == 0
    session_id = capsys.readouterr().out.strip()

    assert cli.main(["rename", session_id, "Reading list"]) == 0
    assert capsys.readouterr().out.strip() == "Reading list"

    assert cli.main(["sessions"]) == 0
    listing = capsys.readouterr().out
    assert f"* {session_id}" in listing
    assert "Reading list" in listing

    assert cli.main(["show"]) == 0
    assert "model=deepseek-chat" in capsys.readouterr().out

    assert cli.main(["switch", "missing"]) == 1
    assert cli.main(["delete", session_id]) == 0
    assert "Current session is now" in capsys.readouterr().out


def test_invalid_config_exits_early(env, monkeypatch):
    monkeypatch.setenv("GATEWAY_TRANSPORT", "smoke-signals")
    assert cli.main(["sessions"]) == 1
