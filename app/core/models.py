"""
Data models and type definitions for the scheduler console.

Mirrors the JSON shapes served by the scheduler API. Every response body is
wrapped in an ``Envelope``; collections come back as a ``PageResult``.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ResponseCode(IntEnum):
    """Business codes carried in the envelope ``code`` field."""

    SUCCESS = 0
    ERROR = -1
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    SERVER_ERROR = 500

    PARAM_ERROR = 10001
    USER_NOT_FOUND = 10002
    PASSWORD_ERROR = 10003
    USER_DISABLED = 10004
    TOKEN_EXPIRED = 10005
    TOKEN_INVALID = 10006
    PERMISSION_DENIED = 10007
    TASK_NOT_FOUND = 10008
    GROUP_NOT_FOUND = 10009
    EXECUTOR_ERROR = 10010
    SCHEDULE_ERROR = 10011
    DUPLICATE_ENTRY = 10012


# Codes meaning "the credentials sent with this request are no longer valid"
AUTH_INVALID_CODES = frozenset(
    {ResponseCode.UNAUTHORIZED, ResponseCode.TOKEN_EXPIRED, ResponseCode.TOKEN_INVALID}
)


class ApiModel(BaseModel):
    """Base class for all API shapes."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# Envelope and pagination


class Envelope(ApiModel, Generic[T]):
    """Uniform wrapper around every response body."""

    code: int
    message: str = ""
    data: Optional[T] = None

    @property
    def ok(self) -> bool:
        return self.code == ResponseCode.SUCCESS


class PageResult(ApiModel, Generic[T]):
    """One page of a paginated collection."""

    items: List[T] = Field(default_factory=list, alias="list")
    total: int = 0
    page: int = 1
    page_size: int = 10


# Users


class Role(ApiModel):
    id: int
    name: str = ""
    code: str = ""
    description: str = ""


class UserProfile(ApiModel):
    """The signed-in operator."""

    id: int
    username: str
    nickname: str = ""
    email: str = ""
    phone: str = ""
    avatar: str = ""
    status: int = 1
    last_login_time: Optional[str] = None
    last_login_ip: str = ""
    created_at: Optional[str] = None
    roles: List[Role] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.nickname or self.username


class LoginResult(ApiModel):
    token: str
    user: UserProfile


# Scheduling entities


class TaskGroup(ApiModel):
    id: int
    name: str
    description: str = ""
    app_name: str = ""
    status: int = 1
    created_by: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class Task(ApiModel):
    id: int
    group_id: int
    name: str
    description: str = ""
    cron: str = ""
    executor_type: str = ""
    executor_handler: str = ""
    executor_param: str = ""
    route_strategy: str = ""
    block_strategy: str = ""
    shard_num: int = 1
    retry_count: int = 0
    retry_interval: int = 0
    timeout: int = 0
    alarm_email: str = ""
    priority: int = 0
    status: int = 0
    version: int = 0
    next_trigger_time: Optional[str] = None
    last_trigger_time: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    group: Optional[TaskGroup] = None


class TaskInstance(ApiModel):
    id: int
    task_id: int
    group_id: int = 0
    executor_id: str = ""
    executor_address: str = ""
    executor_handler: str = ""
    executor_param: str = ""
    shard_index: int = 0
    shard_total: int = 1
    trigger_type: str = ""
    trigger_time: Optional[str] = None
    schedule_time: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    status: int = 0
    result_code: int = 0
    result_msg: str = ""
    retry_count: int = 0
    alarm_status: int = 0
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    task: Optional[Task] = None


class TaskLog(ApiModel):
    id: int
    instance_id: int
    task_id: int
    log_time: Optional[str] = None
    log_level: str = ""
    log_content: str = ""
    created_at: Optional[str] = None


class ExecutorNode(ApiModel):
    id: str
    group_id: int = 0
    app_name: str = ""
    host: str = ""
    port: int = 0
    weight: int = 1
    max_concurrent: int = 0
    current_load: int = 0
    cpu_usage: float = 0.0
    memory_usage: float = 0.0
    status: int = 0
    last_heartbeat: Optional[str] = None
    registered_at: Optional[str] = None
    updated_at: Optional[str] = None


class InstanceStatistics(ApiModel):
    total: int = 0
    success: int = 0
    failed: int = 0
    running: int = 0
    pending: int = 0
    cancelled: int = 0
    rate: float = 0.0


# Request parameters


class PageParams(ApiModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=10, ge=1, le=100)

    def to_query(self) -> Dict[str, Any]:
        """Query parameters with unset filters dropped."""
        return self.model_dump(exclude_none=True)


class GroupListParams(PageParams):
    keyword: Optional[str] = None


class TaskListParams(PageParams):
    group_id: Optional[int] = None
    keyword: Optional[str] = None
    status: Optional[int] = None


class InstanceListParams(PageParams):
    task_id: Optional[int] = None
    status: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None


class ExecutorListParams(PageParams):
    group_id: Optional[int] = None
    status: Optional[int] = None


class CreateTaskRequest(ApiModel):
    group_id: int
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    cron: str = Field(..., min_length=1)
    executor_type: str
    executor_handler: str
    executor_param: Optional[str] = None
    route_strategy: Optional[str] = None
    block_strategy: Optional[str] = None
    shard_num: Optional[int] = None
    retry_count: Optional[int] = None
    retry_interval: Optional[int] = None
    timeout: Optional[int] = None
    alarm_email: Optional[str] = None
    priority: Optional[int] = None
    dependency_ids: Optional[List[int]] = None


class CreateGroupRequest(ApiModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    app_name: str = Field(..., min_length=1)
