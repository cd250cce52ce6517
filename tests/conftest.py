"""Test fixtures for KanbanFlow MCP."""

import asyncio
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from kanbanflow_mcp.kanbanflow.client import KanbanFlowClient
from kanbanflow_mcp.kanbanflow.models import UsersResponse

BASE_URL = "https://kanbanflow.test/api/v1"


class FakeKanbanFlowApi:
    """Routes requests to canned JSON responses and records every request."""

    def __init__(self) -> None:
        """Initialize with no routes."""
        self.routes: dict[str, tuple[int, Any]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, body: Any, status: int = 200) -> None:
        """Register a response for a path below the API root."""
        self.routes[path] = (status, body)

    def calls(self, path: str) -> list[httpx.Request]:
        """Requests made to a path below the API root."""
        return [r for r in self.requests if r.url.path == f"/api/v1{path}"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        """httpx.MockTransport handler."""
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/v1")
        if path not in self.routes:
            return httpx.Response(404, text="Not Found")
        status, body = self.routes[path]
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, content=json.dumps(body).encode())


class FakeUsersSource:
    """Counts get_users calls; optionally blocks until a gate is set."""

    def __init__(self, users: UsersResponse, gate: asyncio.Event | None = None) -> None:
        """Initialize with the users to return."""
        self.users = users
        self.gate = gate
        self.calls = 0
        self.error: Exception | None = None

    async def get_users(self) -> UsersResponse:
        """Return the configured users, or raise the configured error."""
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.users


@pytest.fixture
def fake_api() -> FakeKanbanFlowApi:
    """Empty fake KanbanFlow API."""
    return FakeKanbanFlowApi()


@pytest.fixture
def make_client(fake_api: FakeKanbanFlowApi) -> Callable[[], KanbanFlowClient]:
    """Factory for clients wired to the fake API."""

    def factory() -> KanbanFlowClient:
        return KanbanFlowClient(
            "test-key", base_url=BASE_URL, transport=httpx.MockTransport(fake_api.handler)
        )

    return factory


@pytest.fixture
def board_json() -> dict[str, Any]:
    """Board with two columns, one swimlane and colors."""
    return {
        "_id": "b1",
        "name": "Product",
        "columns": [
            {"name": "To-do", "uniqueId": "c1"},
            {"name": "Done", "uniqueId": "c2"},
        ],
        "swimlanes": [{"name": "Team A", "uniqueId": "s1"}],
        "colors": [
            {"name": "Yellow", "value": "yellow"},
            {"name": "Red", "value": "red", "description": "Urgent"},
        ],
    }


@pytest.fixture
def task_json() -> dict[str, Any]:
    """Task with a responsible user, collaborators and opaque arrays."""
    return {
        "_id": "t1",
        "name": "Write release notes",
        "description": "For version 2.0",
        "color": "yellow",
        "columnId": "c1",
        "swimlaneId": "s1",
        "totalSecondsSpent": 3600,
        "totalSecondsEstimate": 7200,
        "pointsEstimate": 1.5,
        "number": {"prefix": "KV", "value": 12},
        "responsibleUserId": "u1",
        "collaborators": [{"userId": "u2"}, {"userId": "u9"}],
        "dates": [{"targetColumnId": "c2", "status": "active", "dateType": "dueDate"}],
        "subTasks": [{"name": "Draft", "finished": False}],
        "labels": [{"name": "docs", "pinned": False}],
        "customFields": [],
    }


@pytest.fixture
def users_json() -> list[dict[str, Any]]:
    """Two board users."""
    return [
        {"_id": "u1", "fullName": "Ana", "email": "ana@example.com"},
        {"_id": "u2", "fullName": "Bruno", "email": "bruno@example.com"},
    ]


@pytest.fixture
def comments_json() -> list[dict[str, Any]]:
    """Two comments, one by an unknown author."""
    return [
        {
            "_id": "m1",
            "taskId": "t1",
            "authorUserId": "u1",
            "text": "Looks good",
            "createdTimestamp": "2024-05-02T10:00:00Z",
        },
        {
            "_id": "m2",
            "taskId": "t1",
            "authorUserId": "u404",
            "text": "Who wrote this?",
            "createdTimestamp": "2024-05-03T08:30:00Z",
        },
    ]


@pytest.fixture
def tasks_page_json(task_json: dict[str, Any]) -> list[dict[str, Any]]:
    """Two columns, the first truncated with a cursor."""
    return [
        {
            "columnId": "c1",
            "columnName": "To-do",
            "tasksLimited": True,
            "nextTaskId": "t3",
            "tasks": [task_json, {"_id": "t2", "name": "Plain", "color": "red", "columnId": "c1"}],
        },
        {
            "columnId": "c2",
            "columnName": "Done",
            "tasksLimited": False,
            "tasks": [],
        },
    ]
