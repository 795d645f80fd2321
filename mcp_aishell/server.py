"""Line-delimited JSON server exposing aishell tools to an external controller."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, TextIO

from mcp.types import (
    METHOD_NOT_FOUND,
    ErrorData,
    Implementation,
    InitializeResult,
    ServerCapabilities,
    TextContent,
    Tool,
    ToolsCapability,
)

from aishell import __version__
from aishell.shell.executor import ShellExecutor
from aishell.shell.tools import ToolError, execute_tool, get_tool_definitions

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
SERVER_NAME = "aishell"


def _dump(model: Any) -> dict[str, Any]:
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


class MCPServer:
    """Serves initialize, tools/list and tools/call, one request per line.

    Each tools/call is an isolated dispatch; there is no conversation state.
    """

    def __init__(self, executor: ShellExecutor | None = None):
        self.executor = executor or ShellExecutor()
        self._tools = get_tool_definitions()

    def run(self, input_stream: TextIO | None = None, output_stream: TextIO | None = None) -> None:
        """Process requests until end of stream.

        Lines that are not valid JSON are logged and skipped.
        """
        input_stream = input_stream or sys.stdin
        output_stream = output_stream or sys.stdout

        logger.info("Starting MCP server")

        for line in input_stream:
            try:
                request = json.loads(line)
            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse request: {e}")
                continue

            response = self.handle_request(request)
            output_stream.write(json.dumps(response) + "\n")
            output_stream.flush()

        logger.info("Input closed, MCP server stopping")

    def handle_request(self, request: Any) -> dict[str, Any]:
        """Answer a single decoded request."""
        if not isinstance(request, dict):
            request = {}

        method = request.get("method")
        method = method if isinstance(method, str) else ""
        params = request.get("params")
        params = params if isinstance(params, dict) else {}

        logger.debug(f"Handling request: method={method}")

        if method == "initialize":
            return self._initialize()
        if method == "tools/list":
            return self._list_tools()
        if method == "tools/call":
            return self._call_tool(params)

        logger.warning(f"Method not found: {method}")
        return {
            "error": _dump(
                ErrorData(code=METHOD_NOT_FOUND, message=f"Method not found: {method}")
            )
        }

    def _initialize(self) -> dict[str, Any]:
        return _dump(
            InitializeResult(
                protocolVersion=PROTOCOL_VERSION,
                capabilities=ServerCapabilities(tools=ToolsCapability()),
                serverInfo=Implementation(name=SERVER_NAME, version=__version__),
            )
        )

    def _list_tools(self) -> dict[str, Any]:
        return {
            "tools": [
                _dump(Tool(name=t.name, description=t.description, inputSchema=t.parameters))
                for t in self._tools
            ]
        }

    def _call_tool(self, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        name = name if isinstance(name, str) else ""
        arguments = json.dumps(params.get("arguments"))

        try:
            output = execute_tool(name, arguments, self.executor)
        except ToolError as e:
            return {
                "content": [_dump(TextContent(type="text", text=f"Error: {e}"))],
                "isError": True,
            }

        return {"content": [_dump(TextContent(type="text", text=output))]}


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    MCPServer().run()


if __name__ == "__main__":
    main()
