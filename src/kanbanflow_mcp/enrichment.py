"""Decorate tasks and comments with user names."""

import logging
from typing import Any

from kanbanflow_mcp.kanbanflow.errors import KanbanFlowError
from kanbanflow_mcp.kanbanflow.models import (
    Comment,
    CommentsResponse,
    Task,
    TasksResponse,
    User,
)
from kanbanflow_mcp.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class Enricher:
    """Attaches user display names to tasks and comments.

    Best effort only: an id that does not resolve is left undecorated, and
    if the user list cannot be loaded at all the data is returned as is.
    """

    def __init__(self, directory: UserDirectory) -> None:
        """Initialize with the shared user directory."""
        self._directory = directory

    async def _users(self) -> dict[str, User]:
        try:
            return await self._directory.get_users_map()
        except KanbanFlowError as e:
            logger.warning(f"[Enricher] User directory unavailable, skipping enrichment: {e}")
            return {}

    async def enrich_task(self, task: Task) -> dict[str, Any]:
        """Enrich a single task."""
        users = await self._users() if _references_users(task) else {}
        return _decorate_task(task, users)

    async def enrich_tasks(self, columns: TasksResponse) -> list[dict[str, Any]]:
        """Enrich every task of a tasks response, keeping the column grouping."""
        tasks = [task for column in columns for task in column.tasks]
        users = await self._users() if any(map(_references_users, tasks)) else {}
        enriched = []
        for column in columns:
            data = column.to_json_dict()
            data["tasks"] = [_decorate_task(task, users) for task in column.tasks]
            enriched.append(data)
        return enriched

    async def enrich_comment(self, comment: Comment) -> dict[str, Any]:
        """Enrich a single comment with its author's name."""
        return _decorate_comment(comment, await self._users())

    async def enrich_comments(self, comments: CommentsResponse) -> list[dict[str, Any]]:
        """Enrich a list of comments with their authors' names."""
        users = await self._users() if comments else {}
        return [_decorate_comment(comment, users) for comment in comments]


def _references_users(task: Task) -> bool:
    return bool(task.responsible_user_id or task.collaborators)


def _decorate_task(task: Task, users: dict[str, User]) -> dict[str, Any]:
    data = task.to_json_dict()

    if task.responsible_user_id:
        responsible = users.get(task.responsible_user_id)
        if responsible:
            data["responsibleUserName"] = responsible.full_name

    if task.collaborators:
        collaborators = []
        for collaborator in task.collaborators:
            entry = collaborator.to_json_dict()
            user = users.get(collaborator.user_id)
            if user:
                entry["userName"] = user.full_name
            collaborators.append(entry)
        data["collaborators"] = collaborators

    return data


def _decorate_comment(comment: Comment, users: dict[str, User]) -> dict[str, Any]:
    data = comment.to_json_dict()
    author = users.get(comment.author_user_id)
    if author:
        data["authorUserName"] = author.full_name
    return data
