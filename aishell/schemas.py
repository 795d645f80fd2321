"""Pydantic schemas for the aishell message model and tool contracts."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Role(str, Enum):
    """Author of a conversation message."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


# --- Tool Contracts ---


class ToolCall(BaseModel):
    """A backend-requested invocation of a named tool.

    The id is issued by the remote backend and only echoed back by us.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str
    arguments: str = ""


class ToolDefinition(BaseModel):
    """A tool catalog entry advertised to the backend and to controllers."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    parameters: dict[str, Any] = Field(default_factory=dict)


# --- Conversation ---


class Message(BaseModel):
    """A single conversation turn."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str = ""
    tool_calls: tuple[ToolCall, ...] | None = None
    tool_call_id: str | None = None

    @model_validator(mode="after")
    def _check_tool_fields(self) -> Message:
        if self.role == Role.TOOL and not self.tool_call_id:
            raise ValueError("tool messages require a tool_call_id")
        if self.role != Role.TOOL and self.tool_call_id is not None:
            raise ValueError(f"{self.role.value} messages cannot carry a tool_call_id")
        if self.tool_calls is not None and self.role != Role.ASSISTANT:
            raise ValueError("only assistant messages can carry tool_calls")
        return self

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(role=Role.USER, content=content)

    @classmethod
    def assistant(cls, content: str, tool_calls: list[ToolCall] | None = None) -> Message:
        return cls(
            role=Role.ASSISTANT,
            content=content,
            tool_calls=tuple(tool_calls) if tool_calls else None,
        )

    @classmethod
    def tool(cls, content: str, tool_call_id: str) -> Message:
        return cls(role=Role.TOOL, content=content, tool_call_id=tool_call_id)


class ChatResponse(BaseModel):
    """Normalized reply from a remote reasoning backend."""

    content: str = ""
    tool_calls: tuple[ToolCall, ...] | None = None
    finish_reason: str = ""

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


# --- Executor Results ---


class ExecutionResult(BaseModel):
    """Result of running a shell command."""

    stdout: str
    stderr: str
    exit_code: int
    success: bool
