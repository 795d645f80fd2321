"""Local tool execution: shell executor and tool dispatcher."""

from aishell.shell.executor import ExecutorError, ShellExecutor
from aishell.shell.tools import (
    ToolError,
    ToolName,
    execute_tool,
    get_tool_definitions,
)

__all__ = [
    "ExecutorError",
    "ShellExecutor",
    "ToolError",
    "ToolName",
    "execute_tool",
    "get_tool_definitions",
]
