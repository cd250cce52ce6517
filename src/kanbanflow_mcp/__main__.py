"""KanbanFlow MCP server main application."""

import logging
import sys

import uvicorn

from kanbanflow_mcp.factory import create_app, get_config, get_version


def main() -> int:
    """Run the application."""
    config = get_config()

    # Configure logging
    logging.basicConfig(
        level=config.mcp_server_log_level,
        format="%(asctime)s %(levelname)-8s [%(name)s:%(lineno)d] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    app = create_app()

    logging.info(
        f"[Main] Starting {config.mcp_server_name} {get_version()} "
        f"on {config.mcp_server_host}:{config.mcp_server_port}"
    )
    uvicorn.run(
        app,
        host=config.mcp_server_host,
        port=config.mcp_server_port,
        log_level=config.mcp_server_log_level.lower(),
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
