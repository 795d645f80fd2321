"""Pytest configuration and fixtures for aishell tests."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import pytest

from aishell.llm.provider import LLMProvider, TransportError
from aishell.schemas import ChatResponse, Message, ToolCall, ToolDefinition
from aishell.shell.executor import ShellExecutor


class ScriptedProvider(LLMProvider):
    """Provider that replays a fixed list of responses and records each call."""

    def __init__(self, responses: Sequence[ChatResponse | Exception]):
        self._responses = list(responses)
        self.calls: list[tuple[tuple[Message, ...], tuple[ToolDefinition, ...] | None]] = []

    @property
    def model_name(self) -> str:
        return "scripted-model"

    def chat(self, messages, tools=None) -> ChatResponse:
        self.calls.append((tuple(messages), tuple(tools) if tools is not None else None))
        if not self._responses:
            raise TransportError("no scripted response left")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def tool_call(call_id: str, name: str, **arguments) -> ToolCall:
    """Build a ToolCall with JSON-encoded arguments."""
    return ToolCall(id=call_id, name=name, arguments=json.dumps(arguments))


def tool_response(*calls: ToolCall, content: str = "") -> ChatResponse:
    return ChatResponse(content=content, tool_calls=calls, finish_reason="tool_calls")


def final_response(content: str) -> ChatResponse:
    return ChatResponse(content=content, finish_reason="stop")


@pytest.fixture
def tmp_workspace(tmp_path: Path) -> Path:
    """Create a temporary workspace directory for tests."""
    workspace = tmp_path / "workspace"
    workspace.mkdir()
    return workspace


@pytest.fixture
def sample_files(tmp_workspace: Path) -> Path:
    """Populate the workspace with a few files."""
    (tmp_workspace / "main.py").write_text('print("Hello, aishell!")\n')
    (tmp_workspace / "notes.txt").write_text("first line\nsecond line\n")
    (tmp_workspace / ".hidden").write_text("secret\n")
    src = tmp_workspace / "src"
    src.mkdir()
    (src / "util.py").write_text("def add(a, b):\n    return a + b\n")
    return tmp_workspace


@pytest.fixture
def executor(tmp_workspace: Path) -> ShellExecutor:
    """Executor rooted in the temporary workspace with a short timeout."""
    return ShellExecutor(workdir=tmp_workspace, timeout=10)
