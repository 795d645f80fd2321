"""Interactive prompt on top of the agent loop."""

from __future__ import annotations

import logging
from collections.abc import Callable

import click

from aishell.agent import Agent, LoopOutcome
from aishell.llm.provider import TransportError

logger = logging.getLogger(__name__)

PROMPT = "aishell> "
EXIT_COMMANDS = {"exit", "quit"}
CLEAR_COMMAND = "clear"


class Repl:
    """Line-oriented prompt: free text goes to the agent, a few words are commands."""

    def __init__(
        self,
        agent: Agent,
        read_line: Callable[[str], str] = input,
        echo: Callable[..., None] = click.echo,
    ):
        self.agent = agent
        self._read_line = read_line
        self._echo = echo

    def run(self) -> None:
        self._echo("aishell - AI-powered shell automation")
        self._echo(f"Model: {self.agent.provider.model_name}")
        self._echo("Type 'exit' or 'quit' to exit, 'clear' to clear history\n")

        while True:
            try:
                line = self._read_line(PROMPT)
            except KeyboardInterrupt:
                self._echo("^C")
                continue
            except EOFError:
                self._echo("^D")
                break

            if not self.handle_line(line):
                break

    def handle_line(self, line: str) -> bool:
        """Handle one input line. Returns False when the session should end."""
        line = line.strip()

        if not line:
            return True

        if line in EXIT_COMMANDS:
            self._echo("Goodbye!")
            return False

        if line == CLEAR_COMMAND:
            self.agent.clear()
            self._echo("History cleared.")
            return True

        try:
            result = self.agent.run(line)
        except TransportError as e:
            logger.error(f"Agent run failed: {e}")
            self._echo(f"Error: {e}", err=True)
            return True

        if result.outcome == LoopOutcome.FINAL_ANSWER:
            self._echo(f"\n{result.content}\n")
        elif result.outcome == LoopOutcome.ABORTED:
            self._echo(
                f"\n[Stopped after {result.iterations} iterations without a final answer]\n",
                err=True,
            )
        return True
