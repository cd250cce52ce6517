"""Configuration for the KanbanFlow MCP server."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from kanbanflow_mcp.kanbanflow.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Config(BaseSettings):
    """Application configuration, read from the environment and .env."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    kanbanflow_api_key: str = Field(default="")
    kanbanflow_base_url: str = Field(default=DEFAULT_BASE_URL)
    kanbanflow_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    mcp_server_host: str = Field(default="127.0.0.1")
    mcp_server_port: int = Field(default=3000)
    mcp_server_name: str = Field(default="kanbanflow-mcp-server")
    mcp_server_log_level: LogLevel = Field(default="DEBUG")
