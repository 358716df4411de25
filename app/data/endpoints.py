"""
Typed wrappers for the scheduler API endpoints.

Each method is a fixed path around ``ApiClient`` and returns the decoded
``data`` of a successful envelope. Failures are already classified and
reported by the client.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import structlog
from pydantic import TypeAdapter, ValidationError

from app.core.exceptions import ResponseFormatError
from app.core.models import (
    CreateGroupRequest,
    CreateTaskRequest,
    Envelope,
    ExecutorListParams,
    ExecutorNode,
    GroupListParams,
    InstanceListParams,
    InstanceStatistics,
    LoginResult,
    PageResult,
    TaskGroup,
    Task,
    TaskInstance,
    TaskListParams,
    TaskLog,
    UserProfile,
)
from app.data.api_client import ApiClient

logger = structlog.get_logger(__name__)

T = TypeVar("T")

UNEXPECTED_RESPONSE_MESSAGE = "Unexpected response from server"


class _Endpoints:
    def __init__(self, client: ApiClient):
        self.client = client

    def _decode(self, shape: Type[T], envelope: Envelope) -> T:
        try:
            return TypeAdapter(shape).validate_python(envelope.data)
        except ValidationError as e:
            logger.error("Response data has unexpected shape", shape=str(shape), error=str(e))
            self.client.notifier.error(UNEXPECTED_RESPONSE_MESSAGE)
            raise ResponseFormatError(
                UNEXPECTED_RESPONSE_MESSAGE, details={"errors": e.errors()}
            ) from e


class AuthApi(_Endpoints):
    """Login, logout and the current operator."""

    async def login(self, username: str, password: str) -> LoginResult:
        envelope = await self.client.post(
            "/auth/login", json={"username": username, "password": password}
        )
        return self._decode(LoginResult, envelope)

    async def logout(self) -> Envelope:
        return await self.client.post("/auth/logout")

    async def current_user(self) -> UserProfile:
        return self._decode(UserProfile, await self.client.get("/user/current"))

    async def change_password(self, old_password: str, new_password: str) -> None:
        await self.client.post(
            "/user/password",
            json={"old_password": old_password, "new_password": new_password},
        )


class TaskApi(_Endpoints):
    async def list(self, params: Optional[TaskListParams] = None) -> PageResult[Task]:
        params = params or TaskListParams()
        return self._decode(PageResult[Task], await self.client.get("/task", params.to_query()))

    async def detail(self, task_id: int) -> Task:
        return self._decode(Task, await self.client.get(f"/task/{task_id}"))

    async def create(self, data: CreateTaskRequest) -> Task:
        envelope = await self.client.post("/task", json=data.model_dump(exclude_none=True))
        return self._decode(Task, envelope)

    async def update(self, task_id: int, data: CreateTaskRequest) -> Task:
        envelope = await self.client.put(
            f"/task/{task_id}", json=data.model_dump(exclude_none=True)
        )
        return self._decode(Task, envelope)

    async def delete(self, task_id: int) -> None:
        await self.client.delete(f"/task/{task_id}")

    async def start(self, task_id: int) -> None:
        await self.client.post(f"/task/{task_id}/start")

    async def stop(self, task_id: int) -> None:
        await self.client.post(f"/task/{task_id}/stop")

    async def trigger(self, task_id: int, param: Optional[str] = None) -> None:
        await self.client.post(f"/task/{task_id}/trigger", json={"param": param})

    async def next_trigger_times(self, cron: str, count: int = 5) -> List[str]:
        envelope = await self.client.get(
            "/task/next-trigger-times", {"cron": cron, "count": count or 5}
        )
        return self._decode(List[str], envelope)


class GroupApi(_Endpoints):
    async def list(self, params: Optional[GroupListParams] = None) -> PageResult[TaskGroup]:
        params = params or GroupListParams()
        return self._decode(PageResult[TaskGroup], await self.client.get("/group", params.to_query()))

    async def all(self) -> List[TaskGroup]:
        return self._decode(List[TaskGroup], await self.client.get("/group/all"))

    async def detail(self, group_id: int) -> TaskGroup:
        return self._decode(TaskGroup, await self.client.get(f"/group/{group_id}"))

    async def create(self, data: CreateGroupRequest) -> TaskGroup:
        envelope = await self.client.post("/group", json=data.model_dump(exclude_none=True))
        return self._decode(TaskGroup, envelope)

    async def update(self, group_id: int, data: CreateGroupRequest) -> TaskGroup:
        envelope = await self.client.put(
            f"/group/{group_id}", json=data.model_dump(exclude_none=True)
        )
        return self._decode(TaskGroup, envelope)

    async def delete(self, group_id: int) -> None:
        await self.client.delete(f"/group/{group_id}")


class InstanceApi(_Endpoints):
    async def list(
        self, params: Optional[InstanceListParams] = None
    ) -> PageResult[TaskInstance]:
        params = params or InstanceListParams()
        envelope = await self.client.get("/instance", params.to_query())
        return self._decode(PageResult[TaskInstance], envelope)

    async def detail(self, instance_id: int) -> TaskInstance:
        return self._decode(TaskInstance, await self.client.get(f"/instance/{instance_id}"))

    async def cancel(self, instance_id: int) -> None:
        await self.client.post(f"/instance/{instance_id}/cancel")

    async def retry(self, instance_id: int) -> TaskInstance:
        return self._decode(TaskInstance, await self.client.post(f"/instance/{instance_id}/retry"))

    async def logs(self, instance_id: int, page: int = 1, page_size: int = 50) -> PageResult[TaskLog]:
        envelope = await self.client.get(
            f"/instance/{instance_id}/logs", {"page": page, "page_size": page_size}
        )
        return self._decode(PageResult[TaskLog], envelope)

    async def statistics(
        self,
        task_id: Optional[int] = None,
        start_time: Optional[str] = None,
        end_time: Optional[str] = None,
    ) -> InstanceStatistics:
        query: Dict[str, Any] = {
            key: value
            for key, value in (
                ("task_id", task_id),
                ("start_time", start_time),
                ("end_time", end_time),
            )
            if value is not None
        }
        envelope = await self.client.get("/instance/statistics", query or None)
        return self._decode(InstanceStatistics, envelope)

    async def recent(self, limit: int = 10) -> List[TaskInstance]:
        envelope = await self.client.get("/instance/recent", {"limit": limit or 10})
        return self._decode(List[TaskInstance], envelope)


class ExecutorApi(_Endpoints):
    async def list(
        self, params: Optional[ExecutorListParams] = None
    ) -> PageResult[ExecutorNode]:
        params = params or ExecutorListParams()
        envelope = await self.client.get("/executor", params.to_query())
        return self._decode(PageResult[ExecutorNode], envelope)

    async def detail(self, executor_id: str) -> ExecutorNode:
        return self._decode(ExecutorNode, await self.client.get(f"/executor/{executor_id}"))

    async def online(self, group_id: int) -> List[ExecutorNode]:
        envelope = await self.client.get("/executor/online", {"group_id": group_id})
        return self._decode(List[ExecutorNode], envelope)
