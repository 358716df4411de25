"""
Test suite for the typed endpoint wrappers and the login flow end to end.
"""

import json

import httpx
import pytest

from app.core.exceptions import BusinessError, ResponseFormatError
from app.core.models import CreateGroupRequest, TaskListParams
from tests.sample_data import ALICE, TASK, envelope, page


class TestLoginFlow:
    """Session store driven through the real client against the fake backend."""

    @pytest.mark.asyncio
    async def test_login_persists_token(self, make_console, backend, token_file):
        backend.json("POST", "/auth/login", envelope({"token": "t1", "user": ALICE}))

        async with make_console() as app:
            session = await app.session.login("alice", "pw")

        assert session.token == "t1"
        assert session.profile.username == "alice"
        assert token_file.read_text() == "t1"
        body = json.loads(backend.calls("POST", "/auth/login")[0].content)
        assert body == {"username": "alice", "password": "pw"}

    @pytest.mark.asyncio
    async def test_wrong_password_keeps_session_empty(
        self, make_console, backend, notifier, token_file
    ):
        backend.json("POST", "/auth/login", envelope(code=10003, message="wrong password"))

        async with make_console() as app:
            with pytest.raises(BusinessError):
                await app.session.login("alice", "nope")

            assert app.session.token == ""

        assert notifier.errors == ["wrong password"]
        assert not token_file.exists()

    @pytest.mark.asyncio
    async def test_profile_refresh_then_logout(self, make_console, backend, token_file):
        backend.json("POST", "/auth/login", envelope({"token": "t1", "user": ALICE}))
        backend.json("GET", "/user/current", envelope(dict(ALICE, nickname="Al")))
        backend.json("POST", "/auth/logout", envelope())

        async with make_console() as app:
            await app.session.login("alice", "pw")
            profile = await app.session.fetch_profile()
            assert profile.display_name == "Al"
            assert app.session.session.profile.nickname == "Al"

            await app.session.logout()
            assert app.session.session.profile is None

        assert not token_file.exists()

    @pytest.mark.asyncio
    async def test_logout_when_server_unreachable(self, make_console, backend, token_file):
        backend.json("POST", "/auth/login", envelope({"token": "t1", "user": ALICE}))

        async with make_console() as app:
            await app.session.login("alice", "pw")
            backend.on("POST", "/auth/logout", httpx.ConnectError("reset"))
            await app.session.logout()

            assert app.session.token == ""

        assert not token_file.exists()

    @pytest.mark.asyncio
    async def test_login_reply_without_user_is_reported(
        self, make_console, backend, notifier, token_file
    ):
        backend.json("POST", "/auth/login", envelope({"token": "t1"}))

        async with make_console() as app:
            with pytest.raises(ResponseFormatError):
                await app.session.login("alice", "pw")

            assert app.session.token == ""

        assert notifier.errors == ["Unexpected response from server"]
        assert not token_file.exists()


class TestResourceEndpoints:
    """Test path, query and decoding of resource wrappers."""

    @pytest.mark.asyncio
    async def test_task_list_decodes_page(self, make_console, backend):
        backend.json("GET", "/task", envelope(page([TASK], total=21, page_size=20)))

        async with make_console() as app:
            result = await app.tasks.list(TaskListParams(page=1, page_size=20, group_id=2))

        assert result.total == 21
        assert result.items[0].name == "nightly-report"
        request = backend.calls("GET", "/task")[0]
        assert dict(request.url.params) == {"page": "1", "page_size": "20", "group_id": "2"}

    @pytest.mark.asyncio
    async def test_trigger_posts_param(self, make_console, backend):
        backend.json("POST", "/task/11/trigger", envelope())

        async with make_console() as app:
            await app.tasks.trigger(11, "date=2024-05-01")

        body = json.loads(backend.calls("POST", "/task/11/trigger")[0].content)
        assert body == {"param": "date=2024-05-01"}

    @pytest.mark.asyncio
    async def test_next_trigger_times(self, make_console, backend):
        times = ["2024-05-02 02:00:00", "2024-05-03 02:00:00"]
        backend.json("GET", "/task/next-trigger-times", envelope(times))

        async with make_console() as app:
            result = await app.tasks.next_trigger_times("0 0 2 * * ?", count=2)

        assert result == times
        params = backend.calls("GET", "/task/next-trigger-times")[0].url.params
        assert params["count"] == "2"

    @pytest.mark.asyncio
    async def test_group_create_omits_unset_fields(self, make_console, backend):
        backend.json("POST", "/group", envelope({"id": 5, "name": "etl", "app_name": "etl-app"}))

        async with make_console() as app:
            group = await app.groups.create(CreateGroupRequest(name="etl", app_name="etl-app"))

        assert group.id == 5
        body = json.loads(backend.calls("POST", "/group")[0].content)
        assert body == {"name": "etl", "app_name": "etl-app"}

    @pytest.mark.asyncio
    async def test_instance_statistics_and_recent(self, make_console, backend):
        backend.json(
            "GET",
            "/instance/statistics",
            envelope({"total": 10, "success": 8, "failed": 2, "rate": 80.0}),
        )
        backend.json("GET", "/instance/recent", envelope([{"id": 1, "task_id": 11, "status": 2}]))

        async with make_console() as app:
            stats = await app.instances.statistics(task_id=11)
            recent = await app.instances.recent()

        assert stats.rate == 80.0
        assert stats.running == 0
        assert recent[0].task_id == 11
        assert backend.calls("GET", "/instance/statistics")[0].url.params["task_id"] == "11"
        assert backend.calls("GET", "/instance/recent")[0].url.params["limit"] == "10"

    @pytest.mark.asyncio
    async def test_instance_logs(self, make_console, backend):
        log = {"id": 1, "instance_id": 3, "task_id": 11, "log_level": "INFO", "log_content": "hi"}
        backend.json("GET", "/instance/3/logs", envelope(page([log])))

        async with make_console() as app:
            logs = await app.instances.logs(3, page=2, page_size=5)

        assert logs.items[0].log_content == "hi"
        params = backend.calls("GET", "/instance/3/logs")[0].url.params
        assert (params["page"], params["page_size"]) == ("2", "5")

    @pytest.mark.asyncio
    async def test_online_executors(self, make_console, backend):
        node = {"id": "exec-1", "group_id": 2, "host": "10.0.0.9", "port": 9999}
        backend.json("GET", "/executor/online", envelope([node]))

        async with make_console() as app:
            nodes = await app.executors.online(2)

        assert nodes[0].host == "10.0.0.9"
        assert backend.calls("GET", "/executor/online")[0].url.params["group_id"] == "2"
