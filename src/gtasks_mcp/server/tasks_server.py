"""Google Tasks MCP server.

Exposes the tool registry over the MCP stdio transport. Tool calls are
validated against their argument models, dispatched to TasksClient, and
wrapped in a CallToolResult. Errors never reach the transport: they come
back as results with isError set and a JSON body naming the error kind.
"""

import asyncio
import json
import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool
from pydantic import ValidationError as PydanticValidationError

from gtasks_mcp.__version__ import __version__
from gtasks_mcp.auth import StoredTokenProvider
from gtasks_mcp.client import TasksClient
from gtasks_mcp.config import SERVICE_NAME, get_log_level
from gtasks_mcp.exceptions import ErrorKind, GTasksError, UnknownToolError, ValidationError
from gtasks_mcp.server.tools import TOOL_REGISTRY, TOOL_SPECS

logger = logging.getLogger(__name__)


def _format_validation_error(name: str, error: PydanticValidationError) -> str:
    problems = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "arguments"
        problems.append(f"{field}: {detail['msg']}")
    return f"Invalid arguments for {name}: " + "; ".join(problems)


def _text_result(text: str, is_error: bool) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


class GoogleTasksServer:
    """MCP server for the Google Tasks API.

    Provides 8 tools: list_task_lists, list_tasks, get_task, create_task,
    update_task, complete_task, delete_task and move_task.

    Attributes:
        server: MCP Server instance.
        client: TasksClient used by every tool handler.
    """

    def __init__(self, client: TasksClient | None = None) -> None:
        """Initialize the server.

        Args:
            client: Data client to dispatch to. Defaults to one backed by the
                project's stored OAuth token.
        """
        self.server = Server(SERVICE_NAME, version=__version__)
        self.client = client or TasksClient(StoredTokenProvider())
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return self.list_tools()

        # Arguments are validated by the registry's pydantic models
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: dict[str, Any]) -> CallToolResult:
            return await self.call_tool(name, arguments)

    def list_tools(self) -> list[Tool]:
        """Return the tool descriptors in registry order."""
        return [spec.tool for spec in TOOL_SPECS]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        """Run a tool and wrap the outcome in a CallToolResult.

        Args:
            name: Tool name.
            arguments: Raw tool arguments from the caller.

        Returns:
            Result whose single text block holds the JSON-encoded return value,
            or {"error": ..., "error_type": ...} with isError=True.
        """
        try:
            result = await self._dispatch_tool(name, arguments or {})
        except GTasksError as e:
            logger.warning(f"Tool {name} failed ({e.kind.value}): {e}")
            return self._error_result(e.kind, str(e))
        except Exception as e:
            logger.exception(f"Unexpected error calling tool {name}")
            return self._error_result(ErrorKind.OPERATION_ERROR, str(e))

        return _text_result(json.dumps(result, indent=2), is_error=False)

    def _error_result(self, kind: ErrorKind, message: str) -> CallToolResult:
        body = {"error": message, "error_type": kind.value}
        return _text_result(json.dumps(body, indent=2), is_error=True)

    async def _dispatch_tool(self, name: str, arguments: dict[str, Any]) -> Any:
        """Validate arguments and invoke the matching handler.

        Raises:
            UnknownToolError: If name is not registered.
            ValidationError: If arguments don't match the tool's model.
        """
        spec = TOOL_REGISTRY.get(name)
        if spec is None:
            raise UnknownToolError(name)

        try:
            args = spec.arguments_model.model_validate(arguments)
        except PydanticValidationError as e:
            raise ValidationError(_format_validation_error(name, e)) from e

        return await spec.handler(self.client, args)

    async def close(self) -> None:
        await self.client.close()

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.close()


def main() -> None:
    """Entry point for the Google Tasks MCP server."""
    # stdout carries the MCP protocol; basicConfig logs to stderr
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    server = GoogleTasksServer()
    asyncio.run(server.run())


if __name__ == "__main__":
    main()
