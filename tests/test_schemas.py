"""Tests for message and response schemas."""

import pytest
from pydantic import ValidationError

from aishell.schemas import ChatResponse, Message, Role, ToolCall


class TestMessage:
    """Test message constructors and invariants."""

    def test_constructors_set_roles(self):
        assert Message.system("s").role == Role.SYSTEM
        assert Message.user("u").role == Role.USER
        assert Message.assistant("a").role == Role.ASSISTANT
        assert Message.tool("t", "call_1").role == Role.TOOL

    def test_tool_message_requires_call_id(self):
        """Tool messages must reference a tool call."""
        with pytest.raises(ValidationError):
            Message(role=Role.TOOL, content="output")

    def test_non_tool_message_rejects_call_id(self):
        with pytest.raises(ValidationError):
            Message(role=Role.USER, content="hi", tool_call_id="call_1")

    def test_only_assistant_carries_tool_calls(self):
        call = ToolCall(id="c1", name="bash", arguments="{}")
        with pytest.raises(ValidationError):
            Message(role=Role.USER, content="hi", tool_calls=(call,))

    def test_assistant_empty_tool_calls_normalized_to_none(self):
        """An empty call list is stored as absent."""
        assert Message.assistant("done", []).tool_calls is None

    def test_assistant_keeps_call_order(self):
        calls = [ToolCall(id="c1", name="bash"), ToolCall(id="c2", name="list")]
        message = Message.assistant("", calls)

        assert [c.id for c in message.tool_calls] == ["c1", "c2"]

    def test_tool_call_requires_id(self):
        """A tool call with an empty id could never be answered."""
        with pytest.raises(ValidationError):
            ToolCall(id="", name="bash")

    def test_messages_are_immutable(self):
        message = Message.user("hi")
        with pytest.raises(ValidationError):
            message.content = "changed"


class TestChatResponse:
    """Test normalized backend replies."""

    def test_defaults(self):
        response = ChatResponse()

        assert response.content == ""
        assert response.tool_calls is None
        assert response.has_tool_calls is False

    def test_has_tool_calls(self):
        response = ChatResponse(tool_calls=(ToolCall(id="c1", name="read"),))
        assert response.has_tool_calls is True
