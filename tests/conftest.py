"""Configure pytest fixtures and environment for scheduler console tests."""

import pytest
from dotenv import load_dotenv

from app.console import build_console
from app.core.config import Settings
from app.core.notifier import RecordingNotifier
from tests.sample_data import BASE_URL, FakeScheduler


def pytest_sessionstart(session):
    """Load environment variables from a local .env when present."""
    load_dotenv()


@pytest.fixture
def token_file(tmp_path):
    return tmp_path / "config" / "token"


@pytest.fixture
def settings(token_file) -> Settings:
    """Settings pointing at the fake backend and a throwaway token file."""
    return Settings(
        api_base_url=BASE_URL,
        request_timeout=5.0,
        token_file=token_file,
        login_path="/login",
        landing_path="/dashboard",
    )


@pytest.fixture
def backend() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_console(settings, notifier, backend):
    """Build a console wired to the fake backend; use it with ``async with``."""

    def _make():
        return build_console(settings, notifier, transport=backend.transport())

    return _make
