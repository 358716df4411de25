"""
Wiring for one console process.

The session store is built once and handed to the guard and the API client;
nothing looks it up globally.
"""

from dataclasses import dataclass
from typing import Optional

import httpx
import structlog

from app.core.config import Settings
from app.core.navigation import NavigationGuard, Router, build_routes
from app.core.notifier import Notifier
from app.core.session import SessionStore, TokenStorage
from app.data.api_client import ApiClient
from app.data.endpoints import AuthApi, ExecutorApi, GroupApi, InstanceApi, TaskApi

logger = structlog.get_logger(__name__)


@dataclass
class Console:
    """Everything a console command needs, built around one session store."""

    settings: Settings
    session: SessionStore
    router: Router
    client: ApiClient
    auth: AuthApi
    tasks: TaskApi
    groups: GroupApi
    instances: InstanceApi
    executors: ExecutorApi

    async def aclose(self) -> None:
        await self.client.wait_for_prompts()
        await self.client.aclose()

    async def __aenter__(self) -> "Console":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def build_console(
    settings: Settings,
    notifier: Notifier,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Console:
    """Construct the store, guard, router and client in dependency order."""
    store = SessionStore(TokenStorage(settings.token_file))
    guard = NavigationGuard(
        lambda: store.session,
        login_path=settings.login_path,
        landing_path=settings.landing_path,
    )
    router = Router(build_routes(settings.login_path), guard)
    client = ApiClient(settings, store, notifier, router, transport=transport)

    auth = AuthApi(client)
    store.bind(auth)

    logger.debug("Console built", base_url=settings.api_base_url)
    return Console(
        settings=settings,
        session=store,
        router=router,
        client=client,
        auth=auth,
        tasks=TaskApi(client),
        groups=GroupApi(client),
        instances=InstanceApi(client),
        executors=ExecutorApi(client),
    )
