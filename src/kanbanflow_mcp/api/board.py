"""REST endpoints mirroring the MCP tools."""

import logging
from typing import Annotated, Any, Literal, NoReturn

from fastapi import APIRouter, HTTPException, Query

from kanbanflow_mcp.factory import get_operations
from kanbanflow_mcp.kanbanflow.client import TaskFilter
from kanbanflow_mcp.kanbanflow.errors import (
    KanbanFlowError,
    RemoteError,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _raise_http(operation: str, error: KanbanFlowError) -> NoReturn:
    """Translate a client error into an HTTPException.

    Remote 404s pass through, other remote failures become 502,
    unreachable API becomes 504.
    """
    logger.error(f"[API] {operation} failed: {error.to_dict()}")
    detail = error.to_dict()
    if isinstance(error, RemoteError):
        status = 404 if error.status_code == 404 else 502
        raise HTTPException(status_code=status, detail=detail) from error
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=502, detail=detail) from error
    if isinstance(error, TransportError):
        raise HTTPException(status_code=504, detail=detail) from error
    raise HTTPException(status_code=500, detail=detail) from error


@router.get("/board")
async def get_board() -> dict[str, Any]:
    """Board structure: columns, swimlanes, colors."""
    try:
        return await get_operations().get_board()
    except KanbanFlowError as e:
        _raise_http("get_board", e)


@router.get("/tasks")
async def list_tasks(
    column_id: Annotated[str | None, Query(alias="columnId")] = None,
    column_name: Annotated[str | None, Query(alias="columnName")] = None,
    column_index: Annotated[int | None, Query(alias="columnIndex", ge=0)] = None,
    start_task_id: Annotated[str | None, Query(alias="startTaskId")] = None,
    start_grouping_date: Annotated[str | None, Query(alias="startGroupingDate")] = None,
    limit: Annotated[int | None, Query(gt=0)] = None,
    order: Literal["asc", "desc"] | None = None,
    include_position: Annotated[bool, Query(alias="includePosition")] = False,
) -> dict[str, Any]:
    """Tasks grouped by column.

    Accepts the same query parameters as the KanbanFlow API. A pagination
    block is included whenever any of them is given.
    """
    filters = TaskFilter(
        column_id=column_id,
        column_name=column_name,
        column_index=column_index,
        start_task_id=start_task_id,
        start_grouping_date=start_grouping_date,
        limit=limit,
        order=order,
        include_position=include_position,
    )
    try:
        return await get_operations().get_tasks(filters)
    except KanbanFlowError as e:
        _raise_http("list_tasks", e)


@router.get("/tasks/{task_id}")
async def get_task(
    task_id: str,
    include_position: Annotated[bool, Query(alias="includePosition")] = False,
) -> dict[str, Any]:
    """Single task with user names."""
    try:
        return await get_operations().get_task_by_id(task_id, include_position)
    except KanbanFlowError as e:
        _raise_http("get_task", e)


@router.get("/tasks/{task_id}/comments")
async def list_comments(task_id: str) -> list[dict[str, Any]]:
    """Comments on a task with author names."""
    try:
        return await get_operations().get_comments(task_id)
    except KanbanFlowError as e:
        _raise_http("list_comments", e)


@router.get("/users")
async def list_users() -> list[dict[str, Any]]:
    """All board users."""
    try:
        return await get_operations().get_users()
    except KanbanFlowError as e:
        _raise_http("list_users", e)


@router.post("/cache/users/reload")
async def reload_user_cache() -> dict[str, bool]:
    """Drop cached users; the next enriched call fetches them again."""
    get_operations().clear_user_cache()
    logger.info("[API] User cache cleared")
    return {"cleared": True}
