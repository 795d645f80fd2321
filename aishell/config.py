"""Runtime configuration for aishell.

Settings come from the process environment via ``Config.from_env()`` or are
passed explicitly (tests, CLI overrides).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_PROVIDER = "openai"
DEFAULT_REQUEST_TIMEOUT = 120.0  # seconds
DEFAULT_MAX_EXECUTION_TIME = 300  # seconds


@dataclass(frozen=True)
class LLMConfig:
    """Remote reasoning backend selection."""

    default_provider: str = DEFAULT_PROVIDER
    model: str | None = None
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT


@dataclass(frozen=True)
class ShellConfig:
    """Executor settings, fixed for the lifetime of a session."""

    max_execution_time: int = DEFAULT_MAX_EXECUTION_TIME
    workdir: Path | None = None


@dataclass(frozen=True)
class Config:
    """Top-level configuration."""

    llm: LLMConfig = field(default_factory=LLMConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """Build configuration from AISHELL_* environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        env = os.environ if environ is None else environ

        workdir = env.get("AISHELL_WORKDIR")
        return cls(
            llm=LLMConfig(
                default_provider=env.get("AISHELL_PROVIDER", DEFAULT_PROVIDER),
                model=env.get("AISHELL_MODEL") or None,
                request_timeout=_parse_number(
                    env, "AISHELL_REQUEST_TIMEOUT", float, DEFAULT_REQUEST_TIMEOUT
                ),
            ),
            shell=ShellConfig(
                max_execution_time=_parse_number(
                    env, "AISHELL_MAX_EXECUTION_TIME", int, DEFAULT_MAX_EXECUTION_TIME
                ),
                workdir=Path(workdir).expanduser() if workdir else None,
            ),
        )


def _parse_number(env: Mapping[str, str], name: str, kind: type, default):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = kind(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value
