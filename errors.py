from __future__ import annotations

from typing import Any, Optional

from mcp.shared.exceptions import McpError
from mcp.types import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    ErrorData,
)

LINEAR_ERROR_PREFIX = "Linear API error: "


def linear_error_text(error: BaseException) -> str:
    return f"{LINEAR_ERROR_PREFIX}{error}"


class ConfigurationError(RuntimeError):
    """Startup configuration is missing or malformed."""


class LinearMCPError(Exception):
    """Base class for request-level failures raised by the dispatch layer."""

    code: int = INTERNAL_ERROR

    def to_error_data(self) -> ErrorData:
        return ErrorData(code=self.code, message=str(self))


class UnknownResource(LinearMCPError):
    code = INVALID_REQUEST

    def __init__(self, uri: str) -> None:
        super().__init__(f"Unknown resource: {uri}")
        self.uri = uri


class UnknownTool(LinearMCPError):
    code = METHOD_NOT_FOUND

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidArguments(LinearMCPError):
    code = INVALID_PARAMS

    def __init__(self, tool: str, details: Optional[Any] = None) -> None:
        message = f"Invalid arguments for {tool}"
        if details:
            message += f": {details}"
        super().__init__(message)
        self.tool = tool
        self.details = details


class BackendError(LinearMCPError):
    """A Linear API call failed while serving a resource read."""

    code = INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(f"{LINEAR_ERROR_PREFIX}{message}")
        self.backend_message = message


def to_mcp_error(error: LinearMCPError) -> McpError:
    """Translate a dispatch-layer failure into a protocol-level error."""
    return McpError(error.to_error_data())
