"""Tests for Enricher."""

from typing import Any

import pytest

from kanbanflow_mcp.enrichment import Enricher
from kanbanflow_mcp.kanbanflow.errors import TransportError
from kanbanflow_mcp.kanbanflow.models import (
    CommentsResponseAdapter,
    TaskAdapter,
    TasksResponseAdapter,
    UsersResponseAdapter,
)
from kanbanflow_mcp.user_directory import UserDirectory
from tests.conftest import FakeUsersSource


@pytest.fixture
def users_source(users_json: list[dict[str, Any]]) -> FakeUsersSource:
    """User source returning Ana (u1) and Bruno (u2)."""
    return FakeUsersSource(UsersResponseAdapter.validate_python(users_json))


@pytest.fixture
def enricher(users_source: FakeUsersSource) -> Enricher:
    """Enricher over a fresh directory."""
    return Enricher(UserDirectory(users_source))


@pytest.mark.asyncio
async def test_responsible_user_name_added(enricher: Enricher, task_json: dict[str, Any]) -> None:
    """A resolvable responsibleUserId gains responsibleUserName."""
    task = TaskAdapter.validate_python(task_json)

    enriched = await enricher.enrich_task(task)

    assert enriched["responsibleUserName"] == "Ana"
    assert enriched["responsibleUserId"] == "u1"


@pytest.mark.asyncio
async def test_unresolved_responsible_user_left_alone(
    enricher: Enricher, task_json: dict[str, Any]
) -> None:
    """An unknown responsible user adds nothing and keeps every original field."""
    task_json["responsibleUserId"] = "ghost"
    del task_json["collaborators"]
    task = TaskAdapter.validate_python(task_json)

    enriched = await enricher.enrich_task(task)

    assert "responsibleUserName" not in enriched
    assert enriched == task_json


@pytest.mark.asyncio
async def test_collaborators_decorated_in_place(
    enricher: Enricher, task_json: dict[str, Any]
) -> None:
    """Collaborators keep order and length; only resolvable ones get a name."""
    task = TaskAdapter.validate_python(task_json)

    enriched = await enricher.enrich_task(task)

    assert enriched["collaborators"] == [
        {"userId": "u2", "userName": "Bruno"},
        {"userId": "u9"},
    ]


@pytest.mark.asyncio
async def test_original_task_not_mutated(enricher: Enricher, task_json: dict[str, Any]) -> None:
    """Enrichment works on a copy."""
    task = TaskAdapter.validate_python(task_json)

    await enricher.enrich_task(task)

    assert task.to_json_dict() == task_json


@pytest.mark.asyncio
async def test_task_without_user_refs_skips_directory(users_source: FakeUsersSource) -> None:
    """No user ids to resolve means no user fetch."""
    enricher = Enricher(UserDirectory(users_source))
    task = TaskAdapter.validate_python({"_id": "t2", "name": "x", "color": "red", "columnId": "c1"})

    enriched = await enricher.enrich_task(task)

    assert enriched == {"_id": "t2", "name": "x", "color": "red", "columnId": "c1"}
    assert users_source.calls == 0


@pytest.mark.asyncio
async def test_enrich_tasks_keeps_columns(
    enricher: Enricher,
    users_source: FakeUsersSource,
    tasks_page_json: list[dict[str, Any]],
) -> None:
    """Column metadata is preserved and tasks are enriched with one user fetch."""
    columns = TasksResponseAdapter.validate_python(tasks_page_json)

    enriched = await enricher.enrich_tasks(columns)

    assert [c["columnId"] for c in enriched] == ["c1", "c2"]
    assert enriched[0]["tasksLimited"] is True
    assert enriched[0]["nextTaskId"] == "t3"
    assert "nextTaskId" not in enriched[1]
    assert enriched[0]["tasks"][0]["responsibleUserName"] == "Ana"
    assert "responsibleUserName" not in enriched[0]["tasks"][1]
    assert users_source.calls == 1


@pytest.mark.asyncio
async def test_enrich_comments(
    enricher: Enricher, comments_json: list[dict[str, Any]]
) -> None:
    """Known authors get authorUserName, unknown ones do not."""
    comments = CommentsResponseAdapter.validate_python(comments_json)

    enriched = await enricher.enrich_comments(comments)

    assert enriched[0]["authorUserName"] == "Ana"
    assert "authorUserName" not in enriched[1]
    assert enriched[1]["text"] == "Who wrote this?"


@pytest.mark.asyncio
async def test_enrich_single_comment(
    enricher: Enricher, comments_json: list[dict[str, Any]]
) -> None:
    """Single comment enrichment."""
    comment = CommentsResponseAdapter.validate_python(comments_json)[0]

    enriched = await enricher.enrich_comment(comment)

    assert enriched == {**comments_json[0], "authorUserName": "Ana"}


@pytest.mark.asyncio
async def test_directory_failure_returns_plain_data(
    users_source: FakeUsersSource, task_json: dict[str, Any]
) -> None:
    """If users cannot be loaded the task still comes back, undecorated."""
    users_source.error = TransportError("connection refused")
    enricher = Enricher(UserDirectory(users_source))
    task = TaskAdapter.validate_python(task_json)

    enriched = await enricher.enrich_task(task)

    assert "responsibleUserName" not in enriched
    assert enriched["collaborators"] == [{"userId": "u2"}, {"userId": "u9"}]
    assert enriched["name"] == "Write release notes"
