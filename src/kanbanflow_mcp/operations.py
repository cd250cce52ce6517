"""Read operations exposed to the MCP and REST layers."""

from typing import Any

from kanbanflow_mcp.enrichment import Enricher
from kanbanflow_mcp.kanbanflow.client import KanbanFlowClient, TaskFilter
from kanbanflow_mcp.kanbanflow.models import TasksResponse
from kanbanflow_mcp.user_directory import UserDirectory


def build_pagination(columns: TasksResponse, filters: TaskFilter) -> dict[str, Any]:
    """Summarize paging state across all returned columns.

    nextTaskId is the first cursor found in column order; cursors of
    further paginated columns are not reported.
    """
    next_task_id = next((c.next_task_id for c in columns if c.next_task_id), None)
    return {
        "hasMore": any(c.tasks_limited for c in columns),
        "nextTaskId": next_task_id,
        "filters": filters.to_echo(),
    }


class KanbanFlowOperations:
    """Fetch from KanbanFlow, then decorate with user names.

    Client errors propagate unchanged; enrichment only runs on a
    successful fetch and never fails the call.
    """

    def __init__(self, client: KanbanFlowClient, directory: UserDirectory) -> None:
        """Initialize with client and shared user directory."""
        self._client = client
        self._directory = directory
        self._enricher = Enricher(directory)

    async def get_board(self) -> dict[str, Any]:
        """Board structure: columns, swimlanes, colors."""
        board = await self._client.get_board()
        return board.to_json_dict()

    async def get_tasks(self, filters: TaskFilter | None = None) -> dict[str, Any]:
        """Tasks grouped by column.

        Returns:
            {"columns": [...]} plus a "pagination" block when any filter
            option was supplied
        """
        columns = await self._client.get_tasks(filters)
        result: dict[str, Any] = {"columns": await self._enricher.enrich_tasks(columns)}
        if filters is not None and not filters.is_empty():
            result["pagination"] = build_pagination(columns, filters)
        return result

    async def get_task_by_id(self, task_id: str, include_position: bool = False) -> dict[str, Any]:
        """Single task with responsible user and collaborator names."""
        task = await self._client.get_task_by_id(task_id, include_position)
        return await self._enricher.enrich_task(task)

    async def get_users(self) -> list[dict[str, Any]]:
        """All board users, fetched fresh."""
        users = await self._client.get_users()
        return [user.to_json_dict() for user in users]

    async def get_comments(self, task_id: str) -> list[dict[str, Any]]:
        """Comments on a task with author names."""
        comments = await self._client.get_comments(task_id)
        return await self._enricher.enrich_comments(comments)

    def clear_user_cache(self) -> None:
        """Forget the cached user directory."""
        self._directory.invalidate()
