"""HTTP client for the KanbanFlow API."""

import base64
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Literal, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from kanbanflow_mcp.kanbanflow.errors import (
    ConfigurationError,
    RemoteError,
    TransportError,
    ValidationError,
)
from kanbanflow_mcp.kanbanflow.models import (
    Board,
    BoardAdapter,
    CommentsResponse,
    CommentsResponseAdapter,
    Task,
    TaskAdapter,
    TasksResponse,
    TasksResponseAdapter,
    UsersResponse,
    UsersResponseAdapter,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://kanbanflow.com/api/v1"
DEFAULT_TIMEOUT = 30.0

T = TypeVar("T")


@dataclass
class TaskFilter:
    """Column selection and paging options for GET /tasks.

    Column selection is exclusive: column_id wins over column_name,
    which wins over column_index. Everything else combines freely.
    """

    column_id: str | None = None
    column_name: str | None = None
    column_index: int | None = None  # zero-based
    start_task_id: str | None = None
    start_grouping_date: str | None = None  # YYYY-MM-DD
    limit: int | None = None
    order: Literal["asc", "desc"] | None = None
    include_position: bool = False

    def _wire_items(self) -> Iterator[tuple[str, Any]]:
        if self.column_id:
            yield "columnId", self.column_id
        elif self.column_name:
            yield "columnName", self.column_name
        elif self.column_index is not None:
            yield "columnIndex", self.column_index

        if self.start_task_id:
            yield "startTaskId", self.start_task_id
        if self.start_grouping_date:
            yield "startGroupingDate", self.start_grouping_date
        if self.limit:
            yield "limit", self.limit
        if self.order:
            yield "order", self.order
        if self.include_position:
            yield "includePosition", True

    def to_params(self) -> dict[str, str]:
        """Query parameters for the options that are present."""
        params: dict[str, str] = {}
        for name, value in self._wire_items():
            if isinstance(value, bool):
                params[name] = "true" if value else "false"
            else:
                params[name] = str(value)
        return params

    def to_echo(self) -> dict[str, Any]:
        """Options actually sent, keyed by wire name, with their native values."""
        return dict(self._wire_items())

    def is_empty(self) -> bool:
        """True if no option would be sent."""
        return not self.to_echo()


def _format_loc(loc: tuple[int | str, ...]) -> str:
    """Render a pydantic error location as a field path, e.g. [0].tasks[2]._id."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def _error_text(response: httpx.Response) -> str:
    """Body text of a failed response, or a placeholder if it cannot be read."""
    try:
        return response.text
    except (httpx.StreamError, UnicodeDecodeError, LookupError):
        return "Unknown error"


class KanbanFlowClient:
    """Read-only client for the KanbanFlow REST API.

    Every response is validated against its expected shape before it is
    returned. No retries and no caching happen at this layer.
    """

    def __init__(
        self,
        api_key: str | None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            api_key: KanbanFlow API token
            base_url: API root including the /api/v1 path
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)

        Raises:
            ConfigurationError: If no API key is given
        """
        if not api_key:
            raise ConfigurationError("KANBANFLOW_API_KEY is required")

        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._http = httpx.AsyncClient(
            headers={
                "Authorization": self._auth_header(),
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        """API root this client talks to."""
        return self._base_url

    async def __aenter__(self) -> "KanbanFlowClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._http.aclose()

    def _auth_header(self) -> str:
        credentials = f"apiToken:{self._api_key}".encode()
        return f"Basic {base64.b64encode(credentials).decode('ascii')}"

    async def _fetch(
        self,
        path: str,
        adapter: TypeAdapter[T],
        target: str,
        params: dict[str, str] | None = None,
    ) -> T:
        """GET a path under the API root and validate the JSON body.

        Raises:
            TransportError: If the API cannot be reached or the body cannot be read
            RemoteError: If the API answers with a non-2xx status
            ValidationError: If the body is not JSON or does not match the target shape
        """
        url = f"{self._base_url}{path}"
        logger.debug(f"[KanbanFlowClient] GET {path} params={params or {}}")

        try:
            response = await self._http.get(url, params=params or None)
        except httpx.RequestError as e:
            message = f"Request to KanbanFlow API at {url} failed: {e!r}"
            raise TransportError(message, url=url) from e

        if not response.is_success:
            raise RemoteError(response.status_code, _error_text(response))

        try:
            data = response.json()
        except ValueError as e:
            issue = {"path": "", "message": f"Body is not valid JSON: {e}", "type": "json_invalid"}
            raise ValidationError(target, [issue]) from e

        try:
            return adapter.validate_python(data)
        except PydanticValidationError as e:
            issues = [
                {"path": _format_loc(err["loc"]), "message": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]
            raise ValidationError(target, issues) from e

    async def get_board(self) -> Board:
        """Get the board structure (columns, swimlanes, colors)."""
        return await self._fetch("/board", BoardAdapter, "Board")

    async def get_tasks(self, filters: TaskFilter | None = None) -> TasksResponse:
        """Get tasks grouped by column, optionally filtered and paginated."""
        params = filters.to_params() if filters else None
        return await self._fetch("/tasks", TasksResponseAdapter, "TasksResponse", params)

    async def get_task_by_id(self, task_id: str, include_position: bool = False) -> Task:
        """Get a single task by ID."""
        params = {"includePosition": "true"} if include_position else None
        return await self._fetch(f"/tasks/{quote(task_id, safe='')}", TaskAdapter, "Task", params)

    async def get_users(self) -> UsersResponse:
        """Get all users on the board."""
        return await self._fetch("/users", UsersResponseAdapter, "UsersResponse")

    async def get_comments(self, task_id: str) -> CommentsResponse:
        """Get all comments on a task."""
        path = f"/tasks/{quote(task_id, safe='')}/comments"
        return await self._fetch(path, CommentsResponseAdapter, "CommentsResponse")
