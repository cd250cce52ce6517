"""Dependency injection factory."""

import logging
import time
import uuid
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version

from fastapi import FastAPI, Request, Response

from kanbanflow_mcp.api.tools import create_mcp_server, set_operations
from kanbanflow_mcp.config import Config
from kanbanflow_mcp.kanbanflow.client import KanbanFlowClient
from kanbanflow_mcp.operations import KanbanFlowOperations
from kanbanflow_mcp.user_directory import UserDirectory

logger = logging.getLogger(__name__)

# Global config instance for dependency injection
_config: Config | None = None

# Global client, user directory and operations facade
_client: KanbanFlowClient | None = None
_user_directory: UserDirectory | None = None
_operations: KanbanFlowOperations | None = None

MCP_PATH = "/mcp"


def get_version() -> str:
    """Installed package version."""
    try:
        return version("kanbanflow-mcp")
    except PackageNotFoundError:
        return "0.0.0"


def get_config() -> Config:
    """Get or create Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def get_client() -> KanbanFlowClient:
    """Get or create KanbanFlowClient singleton.

    Raises:
        ConfigurationError: If no API key is configured
    """
    global _client
    if _client is None:
        config = get_config()
        _client = KanbanFlowClient(
            config.kanbanflow_api_key,
            base_url=config.kanbanflow_base_url,
            timeout=config.kanbanflow_timeout,
        )
    return _client


def get_user_directory() -> UserDirectory:
    """Get or create UserDirectory singleton."""
    global _user_directory
    if _user_directory is None:
        _user_directory = UserDirectory(get_client())
    return _user_directory


def get_operations() -> KanbanFlowOperations:
    """Get or create KanbanFlowOperations singleton."""
    global _operations
    if _operations is None:
        _operations = KanbanFlowOperations(get_client(), get_user_directory())
    return _operations


async def close_client() -> None:
    """Close the shared HTTP client and forget all singletons built on it."""
    global _client, _user_directory, _operations
    if _client is not None:
        await _client.aclose()
    _client = None
    _user_directory = None
    _operations = None


async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Tag each request with an id and log it.

    MCP calls are not logged here, the tools log their own invocations.
    """
    request_id = uuid.uuid4().hex
    start = time.perf_counter()
    path = request.url.path
    logger.debug(f"[HTTP] Inbound request id={request_id} {request.method} {path}")

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    if not path.startswith(MCP_PATH):
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"[HTTP] Request handled id={request_id} {request.method} {path} "
            f"status={response.status_code} duration={duration_ms:.0f}ms"
        )
    return response


def create_app() -> FastAPI:
    """Create FastAPI application (composition root)."""
    from kanbanflow_mcp.api.board import router as board_router

    config = get_config()
    mcp_server = create_mcp_server(config.mcp_server_name)
    mcp_app = mcp_server.streamable_http_app()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Fail fast on missing API key, run the MCP session manager."""
        set_operations(get_operations())
        logger.info(f"[Lifespan] Using KanbanFlow API at {get_client().base_url}")
        async with mcp_server.session_manager.run():
            try:
                yield
            finally:
                logger.info("[Lifespan] Closing KanbanFlow client...")
                await close_client()

    app = FastAPI(
        title="KanbanFlow MCP",
        description="Read-only KanbanFlow board access for MCP clients",
        version=get_version(),
        lifespan=lifespan,
    )
    app.middleware("http")(log_requests)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Liveness probe."""
        return {"status": "ok"}

    # Mount API routes
    app.include_router(board_router, prefix="/api")

    # MCP streamable HTTP endpoint at /mcp
    app.mount("/", mcp_app)

    return app
