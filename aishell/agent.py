"""Agent loop: alternates backend calls and local tool dispatch for one session."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from enum import Enum

import click

from aishell.llm.provider import LLMProvider
from aishell.schemas import Message, Role, ToolCall
from aishell.shell.executor import ShellExecutor
from aishell.shell.tools import ToolError, execute_tool, get_tool_definitions

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 10

DEFAULT_SYSTEM_PROMPT = (
    "You are an AI assistant that helps users interact with their system through shell commands. "
    "You have access to tools like bash, read, write, and list to help users accomplish their tasks. "
    "When a user asks you to do something, use the appropriate tools to complete the task. "
    "Always explain what you're doing and show the results to the user."
)


class LoopOutcome(str, Enum):
    """How an agent run ended."""

    FINAL_ANSWER = "final_answer"
    NO_CONTENT = "no_content"
    ABORTED = "aborted"


@dataclass
class TurnResult:
    """Result of one top-level agent run."""

    outcome: LoopOutcome
    content: str
    iterations: int


class Conversation:
    """Ordered message history that always starts with one system message."""

    def __init__(self, system_prompt: str):
        self._messages: list[Message] = [Message.system(system_prompt)]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def append(self, message: Message) -> None:
        if message.role == Role.SYSTEM:
            raise ValueError("conversation already has its system message")
        self._messages.append(message)

    def clear(self) -> None:
        """Drop everything except the initial system message."""
        del self._messages[1:]


class Agent:
    """Drives one conversation through the tool-calling loop."""

    def __init__(
        self,
        provider: LLMProvider,
        executor: ShellExecutor,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        max_iterations: int = MAX_ITERATIONS,
        echo: Callable[[str], None] = click.echo,
    ):
        """Initialize the agent.

        Args:
            provider: Remote reasoning backend
            executor: Executor for tool side effects
            system_prompt: Content of the initial system message
            max_iterations: Maximum backend calls per run
            echo: Sink receiving tool names and results as they execute
        """
        self.provider = provider
        self.executor = executor
        self.max_iterations = max_iterations
        self.conversation = Conversation(system_prompt)
        self._echo = echo
        self._tools = get_tool_definitions()
        self._running = False

    def clear(self) -> None:
        """Reset the conversation to its system message."""
        if self._running:
            raise RuntimeError("cannot clear the conversation during a run")
        self.conversation.clear()
        logger.info("Conversation cleared")

    def run(self, user_input: str) -> TurnResult:
        """Process one user input until the backend stops requesting tools.

        Raises:
            TransportError: If a backend call fails; the run stops immediately
        """
        self._running = True
        try:
            return self._run(user_input)
        finally:
            self._running = False

    def _run(self, user_input: str) -> TurnResult:
        self.conversation.append(Message.user(user_input))

        for iteration in range(1, self.max_iterations + 1):
            logger.debug(f"Agent loop iteration {iteration}/{self.max_iterations}")

            response = self.provider.chat(self.conversation.messages, self._tools)

            if response.has_tool_calls:
                logger.info(f"LLM requested {len(response.tool_calls)} tool calls")
                self.conversation.append(
                    Message.assistant(response.content, list(response.tool_calls))
                )
                for call in response.tool_calls:
                    self._dispatch(call)
                continue

            if response.content:
                self.conversation.append(Message.assistant(response.content))
                return TurnResult(LoopOutcome.FINAL_ANSWER, response.content, iteration)

            logger.info("LLM returned neither content nor tool calls")
            return TurnResult(LoopOutcome.NO_CONTENT, "", iteration)

        logger.warning(f"Max iterations ({self.max_iterations}) reached. Stopping.")
        return TurnResult(LoopOutcome.ABORTED, "", self.max_iterations)

    def _dispatch(self, call: ToolCall) -> None:
        self._echo(f"\n[Executing tool: {call.name}]")

        try:
            result = execute_tool(call.name, call.arguments, self.executor)
        except ToolError as e:
            result = f"Error executing tool: {e}"

        self._echo(result)
        self.conversation.append(Message.tool(result, call.id))
