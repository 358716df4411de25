"""
Tests for the console CLI commands.
"""

import pytest
from click.testing import CliRunner

from app.core.session import TokenStorage
from app.main import main
from tests.sample_data import ALICE, TASK, envelope, page


@pytest.fixture
def invoke(settings, notifier, backend, monkeypatch):
    """Run a CLI command against the fake backend."""
    monkeypatch.setattr("app.main.setup_logging", lambda **kwargs: None)
    monkeypatch.setattr("app.core.config.settings", settings)
    runner = CliRunner()

    def _invoke(*args, input=None):
        obj = {"settings": settings, "notifier": notifier, "transport": backend.transport()}
        return runner.invoke(main, list(args), obj=obj, input=input)

    return _invoke


def test_login_stores_token(invoke, backend, token_file):
    backend.json("POST", "/auth/login", envelope({"token": "t1", "user": ALICE}))

    result = invoke("login", "--username", "alice", "--password", "pw")

    assert result.exit_code == 0, result.output
    assert "Logged in as Alice" in result.output
    assert token_file.read_text() == "t1"


def test_login_prompts_for_credentials(invoke, backend):
    backend.json("POST", "/auth/login", envelope({"token": "t1", "user": ALICE}))

    result = invoke("login", input="alice\npw\n")

    assert result.exit_code == 0, result.output


def test_failed_login_exits_non_zero(invoke, backend, notifier, token_file):
    backend.json("POST", "/auth/login", envelope(code=10003, message="wrong password"))

    result = invoke("login", "--username", "alice", "--password", "bad")

    assert result.exit_code == 1
    assert notifier.errors == ["wrong password"]
    assert not token_file.exists()


def test_logout_removes_token(invoke, backend, token_file):
    TokenStorage(token_file).save("t1")
    backend.json("POST", "/auth/logout", envelope())

    result = invoke("logout")

    assert result.exit_code == 0, result.output
    assert not token_file.exists()


def test_whoami_requires_session(invoke, backend):
    result = invoke("whoami")

    assert result.exit_code == 1
    assert "Not logged in" in result.output
    assert backend.requests == []


def test_whoami_shows_profile(invoke, backend, token_file):
    TokenStorage(token_file).save("t1")
    backend.json("GET", "/user/current", envelope(ALICE))

    result = invoke("whoami")

    assert result.exit_code == 0, result.output
    assert "alice@example.com" in result.output
    assert "Administrator" in result.output


def test_open_protected_view_without_session_redirects(invoke):
    result = invoke("open", "/task")

    assert result.exit_code == 0, result.output
    assert "Redirected to /login" in result.output


def test_open_login_with_session_redirects_to_dashboard(invoke, token_file):
    TokenStorage(token_file).save("t1")

    result = invoke("open", "login")

    assert "Redirected to /dashboard" in result.output


def test_tasks_table(invoke, backend, token_file):
    TokenStorage(token_file).save("t1")
    backend.json("GET", "/task", envelope(page([TASK])))

    result = invoke("tasks", "--group-id", "2")

    assert result.exit_code == 0, result.output
    assert "nightly" in result.output
    assert backend.calls("GET", "/task")[0].url.params["group_id"] == "2"


def test_expired_session_exits_non_zero(invoke, backend, notifier, token_file):
    TokenStorage(token_file).save("t1")
    backend.json("GET", "/group", envelope(code=10005, message="token expired"))

    result = invoke("groups")

    assert result.exit_code == 1
    assert len(notifier.prompts) == 1
    assert token_file.read_text() == "t1"


def test_trigger(invoke, backend, token_file):
    TokenStorage(token_file).save("t1")
    backend.json("POST", "/task/11/trigger", envelope())

    result = invoke("trigger", "11", "--param", "x=1")

    assert result.exit_code == 0, result.output
    assert "Task 11 triggered" in result.output


def test_doctor_reports_valid_session(invoke, backend, token_file):
    TokenStorage(token_file).save("t1")
    backend.json("GET", "/user/current", envelope(ALICE))

    result = invoke("doctor")

    assert result.exit_code == 0, result.output
    assert "Session valid (alice)" in result.output


def test_doctor_without_session(invoke, backend):
    result = invoke("doctor")

    assert result.exit_code == 0, result.output
    assert "No stored session" in result.output
    assert backend.requests == []


def test_config_rejects_unknown_landing_view(invoke, settings):
    settings.landing_path = "/home"

    result = invoke("config")

    assert result.exit_code == 1
    assert "SCHEDULER_LANDING_PATH must be one of" in result.output


def test_unknown_landing_view_stops_commands(invoke, settings, backend, token_file):
    TokenStorage(token_file).save("t1")
    settings.landing_path = "/home"

    result = invoke("tasks")

    assert result.exit_code == 1
    assert "Configuration Error" in result.output
    assert backend.requests == []
