"""Errors raised by the KanbanFlow client."""

from typing import Any


class KanbanFlowError(Exception):
    """Base class for all KanbanFlow client failures."""

    def to_dict(self) -> dict[str, Any]:
        """Structured context for logging and API error payloads."""
        return {"error": type(self).__name__, "message": str(self)}


class ConfigurationError(KanbanFlowError):
    """No API key available. Raised at client construction, never retried."""


class TransportError(KanbanFlowError):
    """The remote API could not be reached, or its response body could not be read."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["url"] = self.url
        return data


class RemoteError(KanbanFlowError):
    """The remote API responded with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"KanbanFlow API error {status_code}: {body}")
        self.status_code = status_code
        self.body = body

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["status"] = self.status_code
        data["body"] = self.body
        return data


class ValidationError(KanbanFlowError):
    """Remote response does not match the expected shape.

    Attributes:
        target: Name of the shape that was expected (e.g. "Board")
        issues: One entry per violation, each with ``path``, ``message`` and ``type``
    """

    def __init__(self, target: str, issues: list[dict[str, Any]]) -> None:
        summary = "; ".join(f"{issue['path'] or '<root>'}: {issue['message']}" for issue in issues)
        super().__init__(f"Invalid response format for {target}: {summary}")
        self.target = target
        self.issues = issues

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["target"] = self.target
        data["issues"] = self.issues
        return data
