"""CLI for aishell - interactive agent, single-shot execution and protocol server."""

from __future__ import annotations

import logging
import sys

import click

from aishell import __version__
from aishell.config import Config

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _setup_logging(level: str) -> None:
    # stdout belongs to the user and to the protocol channel
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
        force=True,
    )


def _load_config() -> Config:
    try:
        return Config.from_env()
    except ValueError as e:
        raise click.UsageError(str(e)) from e


def _build_agent(config: Config, provider: str | None, model: str | None):
    from aishell.agent import Agent
    from aishell.llm import ProviderConfigError, create_provider
    from aishell.shell.executor import ShellExecutor

    try:
        llm = create_provider(
            provider or config.llm.default_provider,
            model or config.llm.model,
            timeout=config.llm.request_timeout,
        )
    except (ProviderConfigError, ValueError) as e:
        raise click.UsageError(str(e)) from e

    executor = ShellExecutor(
        workdir=config.shell.workdir,
        timeout=config.shell.max_execution_time,
    )
    return Agent(llm, executor)


provider_option = click.option(
    "--provider", "-p",
    default=None,
    help="LLM provider (openai, ollama). Defaults to AISHELL_PROVIDER or openai.",
)
model_option = click.option(
    "--model", "-m",
    default=None,
    help="Model name (defaults to the provider's configured model)",
)


@click.group()
@click.version_option(version=__version__, prog_name="aishell")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="INFO",
    envvar="AISHELL_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity (logs go to stderr)",
)
def main(log_level: str) -> None:
    """aishell - AI-powered shell automation.

    Let an LLM run shell commands and read, write and list files.
    """
    _setup_logging(log_level.upper())


@main.command()
@provider_option
@model_option
def shell(provider: str | None, model: str | None) -> None:
    """Start the interactive AI shell.

    \b
    Example:
        aishell shell
        aishell shell --provider ollama --model llama3.2
    """
    from aishell.repl import Repl

    agent = _build_agent(_load_config(), provider, model)
    Repl(agent).run()


@main.command(name="exec")
@click.argument("prompt")
@provider_option
@model_option
def exec_(prompt: str, provider: str | None, model: str | None) -> None:
    """Execute a single request via the AI agent.

    \b
    Example:
        aishell exec "how much disk space is left?"
    """
    from aishell.agent import LoopOutcome
    from aishell.llm import TransportError

    agent = _build_agent(_load_config(), provider, model)

    try:
        result = agent.run(prompt)
    except TransportError as e:
        raise click.ClickException(str(e)) from e

    if result.outcome == LoopOutcome.FINAL_ANSWER:
        click.echo(f"\n{result.content}\n")
    elif result.outcome == LoopOutcome.ABORTED:
        click.echo(
            f"Stopped after {result.iterations} iterations without a final answer",
            err=True,
        )


@main.command()
def server() -> None:
    """Run the protocol server on stdin/stdout.

    Reads one JSON request per line and writes one JSON response per line.

    \b
    Configure in .mcp.json:
        {
            "mcpServers": {
                "aishell": {
                    "command": "aishell",
                    "args": ["server"]
                }
            }
        }
    """
    from aishell.shell.executor import ShellExecutor
    from mcp_aishell.server import MCPServer

    config = _load_config()
    executor = ShellExecutor(
        workdir=config.shell.workdir,
        timeout=config.shell.max_execution_time,
    )
    MCPServer(executor).run()


if __name__ == "__main__":
    main()
