"""In-memory directory of board users."""

import asyncio
import logging
from typing import Protocol

from kanbanflow_mcp.kanbanflow.models import User, UsersResponse

logger = logging.getLogger(__name__)


class UsersSource(Protocol):
    """Anything that can list all board users (normally KanbanFlowClient)."""

    async def get_users(self) -> UsersResponse:
        """Fetch all users."""
        ...


class UserDirectory:
    """Lazily loaded id -> User mapping, shared for the process lifetime.

    The first lookup fetches the full user list once; concurrent first
    lookups join the same in-flight fetch. The mapping never expires on
    its own, only invalidate() drops it.
    """

    def __init__(self, source: UsersSource) -> None:
        """Initialize empty directory."""
        self._source = source
        self._users: dict[str, User] | None = None
        self._pending: asyncio.Task[dict[str, User]] | None = None
        self._generation = 0

    @property
    def is_loaded(self) -> bool:
        """Whether the mapping is currently held in memory."""
        return self._users is not None

    async def get_users_map(self) -> dict[str, User]:
        """Return the id -> User mapping, loading it on first use.

        Raises:
            KanbanFlowError: If the user list cannot be fetched. Failures are
                not memoized; the next call tries again.
        """
        if self._users is not None:
            logger.debug("[UserDirectory] Cache hit")
            return self._users

        if self._pending is None:
            self._pending = asyncio.create_task(
                self._load(self._generation), name="user-directory-load"
            )
            self._pending.add_done_callback(self._clear_pending)

        # Shielded so a cancelled caller does not cancel the load others joined
        return await asyncio.shield(self._pending)

    async def resolve(self, user_id: str) -> User | None:
        """Look up a single user, or None if the id is unknown."""
        users = await self.get_users_map()
        return users.get(user_id)

    def invalidate(self) -> None:
        """Drop the mapping so the next lookup fetches a fresh user list."""
        self._users = None
        self._pending = None
        self._generation += 1
        logger.debug("[UserDirectory] Cache cleared")

    async def _load(self, generation: int) -> dict[str, User]:
        logger.info("[UserDirectory] Fetching users")
        users = await self._source.get_users()
        mapping = {user.id: user for user in users}

        # Invalidated while in flight: hand the result to the joined callers only
        if generation == self._generation:
            self._users = mapping
        logger.info(f"[UserDirectory] Loaded {len(mapping)} users")
        return mapping

    def _clear_pending(self, task: "asyncio.Task[dict[str, User]]") -> None:
        if self._pending is task:
            self._pending = None
        # Retrieves the exception even if every caller was cancelled
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"[UserDirectory] Failed to load users: {task.exception()}")
