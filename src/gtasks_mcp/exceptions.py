"""Error taxonomy for the Google Tasks MCP server.

Every error a tool handler can raise derives from GTasksError and carries an
ErrorKind, so the dispatcher can render a typed error result instead of
letting the exception reach the MCP transport.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failed tool results."""

    CONFIGURATION_ERROR = "configuration_error"
    VALIDATION_ERROR = "validation_error"
    UNKNOWN_TOOL = "unknown_tool"
    NOT_FOUND = "not_found"
    OPERATION_ERROR = "operation_error"


class GTasksError(Exception):
    """Base class for all gtasks-mcp errors."""

    kind: ErrorKind = ErrorKind.OPERATION_ERROR


class ConfigurationError(GTasksError):
    """Raised when local authorization material is missing or unusable."""

    kind = ErrorKind.CONFIGURATION_ERROR


class ValidationError(GTasksError):
    """Raised when tool arguments do not match the declared input schema."""

    kind = ErrorKind.VALIDATION_ERROR


class UnknownToolError(GTasksError):
    """Raised when a tool name is not in the registry."""

    kind = ErrorKind.UNKNOWN_TOOL

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class OperationError(GTasksError):
    """Raised when a call to the Google Tasks API fails.

    Attributes:
        status_code: HTTP status returned by the API, or None for
            transport-level failures.
    """

    kind = ErrorKind.OPERATION_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(OperationError):
    """Raised when the requested task or task list does not exist."""

    kind = ErrorKind.NOT_FOUND
