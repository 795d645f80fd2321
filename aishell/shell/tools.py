"""Tool catalog and dispatcher mapping tool calls onto the shell executor."""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ValidationError, field_validator

from aishell.schemas import ExecutionResult, ToolDefinition
from aishell.shell.executor import ExecutorError, ShellExecutor

logger = logging.getLogger(__name__)


class ToolName(str, Enum):
    """Available tools."""

    BASH = "bash"
    READ = "read"
    WRITE = "write"
    LIST = "list"


# --- Errors ---


class ToolError(Exception):
    """Base error for a tool call that could not be completed."""

    pass


class UnknownToolError(ToolError):
    """Raised when the requested tool does not exist."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class MissingArgumentError(ToolError):
    """Raised when a required argument is absent or not a string."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing '{field}' argument")


class InvalidPayloadError(ToolError):
    """Raised when the argument payload is not a JSON object."""

    pass


class ToolExecutionError(ToolError):
    """Raised when the executor fails while running a tool."""

    pass


# --- Arguments ---


class BashArguments(BaseModel):
    command: str


class ReadArguments(BaseModel):
    path: str


class WriteArguments(BaseModel):
    path: str
    content: str


class ListArguments(BaseModel):
    pattern: str | None = None

    @field_validator("pattern", mode="before")
    @classmethod
    def _ignore_non_string(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None


ToolArguments = Union[BashArguments, ReadArguments, WriteArguments, ListArguments]

ARGUMENT_MODELS: dict[ToolName, type[BaseModel]] = {
    ToolName.BASH: BashArguments,
    ToolName.READ: ReadArguments,
    ToolName.WRITE: WriteArguments,
    ToolName.LIST: ListArguments,
}


# --- Catalog ---

TOOL_DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name=ToolName.BASH.value,
        description=(
            "Execute a bash command and return the output. Use this for running "
            "shell commands, git operations, package management, etc."
        ),
        parameters={
            "type": "object",
            "properties": {
                "command": {
                    "type": "string",
                    "description": "The bash command to execute",
                },
            },
            "required": ["command"],
        },
    ),
    ToolDefinition(
        name=ToolName.READ.value,
        description="Read the contents of a file. Returns the file content as a string.",
        parameters={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "The path to the file to read",
                },
            },
            "required": ["path"],
        },
    ),
    ToolDefinition(
        name=ToolName.WRITE.value,
        description=(
            "Write content to a file. Creates the file if it doesn't exist, "
            "overwrites if it does."
        ),
        parameters={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "The path to the file to write",
                },
                "content": {
                    "type": "string",
                    "description": "The content to write to the file",
                },
            },
            "required": ["path", "content"],
        },
    ),
    ToolDefinition(
        name=ToolName.LIST.value,
        description="List files in the current directory. Optionally filter by pattern.",
        parameters={
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "description": "Optional glob pattern to filter files (e.g., '*.py')",
                },
            },
            "required": [],
        },
    ),
)


def get_tool_definitions() -> tuple[ToolDefinition, ...]:
    """Get the process-wide tool catalog."""
    return TOOL_DEFINITIONS


# --- Parsing ---


def _decode_payload(raw_arguments: str) -> dict[str, Any]:
    """Decode a raw argument payload into a dictionary.

    Empty text and JSON ``null`` both mean "no arguments".
    """
    if raw_arguments is None or raw_arguments.strip() == "":
        return {}

    try:
        payload = json.loads(raw_arguments)
    except json.JSONDecodeError as e:
        raise InvalidPayloadError(f"Invalid tool arguments: {e}") from e

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise InvalidPayloadError("Invalid tool arguments: expected a JSON object")
    return payload


def parse_tool_arguments(name: str, raw_arguments: str) -> ToolArguments:
    """Resolve a tool name and its raw payload into a typed argument model.

    Raises:
        UnknownToolError: If the tool name is not in the catalog
        InvalidPayloadError: If the payload is not a JSON object
        MissingArgumentError: If a required field is absent or not a string
    """
    try:
        tool = ToolName(name)
    except ValueError:
        raise UnknownToolError(name) from None

    payload = _decode_payload(raw_arguments)

    try:
        return ARGUMENT_MODELS[tool].model_validate(payload)
    except ValidationError as e:
        error = e.errors()[0]
        if error["type"] in ("missing", "string_type") and error["loc"]:
            raise MissingArgumentError(str(error["loc"][0])) from None
        raise InvalidPayloadError(f"Invalid tool arguments: {e}") from e


# --- Dispatch ---


def _format_bash_result(result: ExecutionResult) -> str:
    if result.success:
        lead = f"Exit code: {result.exit_code}"
    else:
        lead = f"Command failed with exit code: {result.exit_code}"
    return f"{lead}\n\nStdout:\n{result.stdout}\n\nStderr:\n{result.stderr}"


def execute_tool(name: str, raw_arguments: str, executor: ShellExecutor) -> str:
    """Execute a tool call and render its result as text.

    Args:
        name: Tool name (bash, read, write, list)
        raw_arguments: JSON-encoded argument object
        executor: Executor that performs the side effects

    Returns:
        Human-readable result text

    Raises:
        ToolError: If the call cannot be parsed or the executor fails
    """
    logger.info(f"Executing tool: {name} with args: {raw_arguments}")

    args = parse_tool_arguments(name, raw_arguments)

    try:
        if isinstance(args, BashArguments):
            return _format_bash_result(executor.execute(args.command))

        if isinstance(args, ReadArguments):
            return executor.read_file(args.path)

        if isinstance(args, WriteArguments):
            executor.write_file(args.path, args.content)
            return f"Successfully wrote to file: {args.path}"

        return "\n".join(executor.list_files(args.pattern))

    except ExecutorError as e:
        logger.warning(f"Tool '{name}' failed: {e}")
        raise ToolExecutionError(str(e)) from e
