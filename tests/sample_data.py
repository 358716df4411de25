"""Shared sample payloads and a scripted scheduler backend for pytest."""

from typing import Any, Callable, Dict, List, Tuple, Union

import httpx

BASE_URL = "http://scheduler.test/api/v1"

ALICE = {
    "id": 7,
    "username": "alice",
    "nickname": "Alice",
    "email": "alice@example.com",
    "phone": "",
    "avatar": "",
    "status": 1,
    "last_login_time": "2024-05-01 09:00:00",
    "last_login_ip": "10.0.0.5",
    "created_at": "2024-01-01 00:00:00",
    "roles": [{"id": 1, "name": "Administrator", "code": "admin", "description": ""}],
}

TASK = {
    "id": 11,
    "group_id": 2,
    "name": "nightly-report",
    "cron": "0 0 2 * * ?",
    "executor_type": "bean",
    "executor_handler": "reportHandler",
    "status": 1,
    "next_trigger_time": "2024-05-02 02:00:00",
}


def envelope(data: Any = None, code: int = 0, message: str = "success") -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        body["data"] = data
    return body


def page(items: List[Any], total: int = None, page_no: int = 1, page_size: int = 10) -> Dict[str, Any]:
    return {
        "list": items,
        "total": len(items) if total is None else total,
        "page": page_no,
        "page_size": page_size,
    }


Reply = Union[httpx.Response, Exception, Callable[[httpx.Request], httpx.Response]]


class FakeScheduler:
    """Answers requests from a (method, path) table and records what it saw."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Reply] = {}
        self.requests: List[httpx.Request] = []

    def on(self, method: str, path: str, reply: Reply) -> None:
        self.routes[(method.upper(), path)] = reply

    def json(self, method: str, path: str, body: Any, status: int = 200) -> None:
        self.on(method, path, httpx.Response(status, json=body))

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        full = "/api/v1" + path
        return [r for r in self.requests if r.method == method.upper() and r.url.path == full]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")
        reply = self.routes.get((request.method, path))

        if reply is None:
            return httpx.Response(404, text="404 page not found")
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(request)
        return reply

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)
