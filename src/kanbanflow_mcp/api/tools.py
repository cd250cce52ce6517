"""MCP tools exposing the KanbanFlow read operations."""

import json
import logging
from typing import TYPE_CHECKING, Annotated, Any, Literal

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field

from kanbanflow_mcp.kanbanflow.client import TaskFilter
from kanbanflow_mcp.kanbanflow.errors import KanbanFlowError

if TYPE_CHECKING:
    from kanbanflow_mcp.operations import KanbanFlowOperations

logger = logging.getLogger(__name__)

INSTRUCTIONS = """Read-only access to a KanbanFlow board.

Use getBoard for columns and swimlanes, getTasksByColumn to page through
a column, getTaskById for one task and getComments for its discussion.
Tasks and comments carry user names next to user ids where known."""

# Global operations facade (injected via set_operations)
_operations: "KanbanFlowOperations | None" = None


def set_operations(operations: "KanbanFlowOperations") -> None:
    """Set global operations facade.

    Args:
        operations: KanbanFlowOperations instance
    """
    global _operations
    _operations = operations


def _get_operations() -> "KanbanFlowOperations":
    if _operations is None:
        logger.error("[MCP] Operations not initialized")
        raise ToolError("Server not ready")
    return _operations


def _fmt(data: Any) -> str:
    return json.dumps(data, indent=2)


def _fail(tool: str, action: str, error: KanbanFlowError, **context: Any) -> ToolError:
    logger.error(f"[MCP] {tool} failed: {error.to_dict()} context={context}")
    return ToolError(f"Error {action}: {error}")


async def get_board() -> str:
    """Get the board structure including columns, swimlanes, and colors."""
    logger.info("[MCP] getBoard invoked")
    try:
        board = await _get_operations().get_board()
    except KanbanFlowError as e:
        raise _fail("getBoard", "fetching board", e) from e
    logger.info(
        f"[MCP] getBoard succeeded: columns={len(board['columns'])} "
        f"swimlanes={len(board.get('swimlanes', []))}"
    )
    return _fmt(board)


async def get_all_tasks() -> str:
    """Get all tasks of the board, grouped by column."""
    logger.info("[MCP] getAllTasks invoked")
    try:
        result = await _get_operations().get_tasks()
    except KanbanFlowError as e:
        raise _fail("getAllTasks", "fetching tasks", e) from e
    total = sum(len(column["tasks"]) for column in result["columns"])
    logger.info(f"[MCP] getAllTasks succeeded: columns={len(result['columns'])} tasks={total}")
    return _fmt(result)


async def get_tasks_by_column(
    column_id: Annotated[str | None, Field(description="Filter by column ID")] = None,
    column_name: Annotated[str | None, Field(description="Filter by column name")] = None,
    column_index: Annotated[
        int | None, Field(ge=0, description="Filter by column index (0-based)")
    ] = None,
    start_task_id: Annotated[
        str | None, Field(description="Continue from this task ID (nextTaskId of a previous page)")
    ] = None,
    start_grouping_date: Annotated[
        str | None, Field(description="Continue from this grouping date (YYYY-MM-DD)")
    ] = None,
    limit: Annotated[int | None, Field(gt=0, description="Maximum tasks per column")] = None,
    order: Annotated[
        Literal["asc", "desc"] | None, Field(description="Order of tasks (asc or desc)")
    ] = None,
    include_position: Annotated[
        bool, Field(description="Include task position in the column")
    ] = False,
) -> str:
    """Get tasks filtered by column, with pagination.

    Select the column by column_id, column_name or column_index (first one
    given wins). When a column has more tasks, pass the returned
    pagination.nextTaskId as start_task_id to get the next page.
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
    logger.info(f"[MCP] getTasksByColumn invoked: {filters.to_echo()}")
    try:
        result = await _get_operations().get_tasks(filters)
    except KanbanFlowError as e:
        raise _fail(
            "getTasksByColumn", "fetching tasks by column", e, filters=filters.to_echo()
        ) from e
    total = sum(len(column["tasks"]) for column in result["columns"])
    logger.info(
        f"[MCP] getTasksByColumn succeeded: columns={len(result['columns'])} tasks={total} "
        f"pagination={result.get('pagination')}"
    )
    return _fmt(result)


async def get_task_by_id(
    task_id: Annotated[str, Field(description="The ID of the task to retrieve")],
    include_position: Annotated[
        bool, Field(description="Include the task's position in the column")
    ] = False,
) -> str:
    """Get a specific task by ID."""
    logger.info(f"[MCP] getTaskById invoked: task_id={task_id}")
    try:
        task = await _get_operations().get_task_by_id(task_id, include_position)
    except KanbanFlowError as e:
        raise _fail("getTaskById", f"fetching task {task_id}", e, task_id=task_id) from e
    logger.info(f"[MCP] getTaskById succeeded: task_id={task_id} name={task['name']!r}")
    return _fmt(task)


async def get_users() -> str:
    """Get all users of the board."""
    logger.info("[MCP] getUsers invoked")
    try:
        users = await _get_operations().get_users()
    except KanbanFlowError as e:
        raise _fail("getUsers", "fetching users", e) from e
    logger.info(f"[MCP] getUsers succeeded: users={len(users)}")
    return _fmt(users)


async def get_comments(
    task_id: Annotated[str, Field(description="The ID of the task whose comments to retrieve")],
) -> str:
    """Get the comments of a task, with author names."""
    logger.info(f"[MCP] getComments invoked: task_id={task_id}")
    try:
        comments = await _get_operations().get_comments(task_id)
    except KanbanFlowError as e:
        raise _fail(
            "getComments", f"fetching comments for task {task_id}", e, task_id=task_id
        ) from e
    logger.info(f"[MCP] getComments succeeded: task_id={task_id} comments={len(comments)}")
    return _fmt(comments)


async def clear_user_cache() -> str:
    """Forget cached users so names are re-fetched on the next call."""
    _get_operations().clear_user_cache()
    logger.info("[MCP] clearUserCache succeeded")
    return _fmt({"cleared": True})


TOOLS = {
    "getBoard": get_board,
    "getAllTasks": get_all_tasks,
    "getTasksByColumn": get_tasks_by_column,
    "getTaskById": get_task_by_id,
    "getUsers": get_users,
    "getComments": get_comments,
    "clearUserCache": clear_user_cache,
}


def create_mcp_server(name: str) -> FastMCP:
    """Create the MCP server with all tools registered."""
    server = FastMCP(name, instructions=INSTRUCTIONS)
    for tool_name, fn in TOOLS.items():
        server.add_tool(fn, name=tool_name)
    return server
