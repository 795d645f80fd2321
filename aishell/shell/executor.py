"""Shell executor: runs commands and touches files under a fixed working directory."""

from __future__ import annotations

import glob
import logging
import subprocess
from pathlib import Path

from aishell.config import DEFAULT_MAX_EXECUTION_TIME
from aishell.schemas import ExecutionResult

logger = logging.getLogger(__name__)

# Output limits
MAX_OUTPUT_BYTES = 32 * 1024  # 32KB per stream

SHELL = "/bin/sh"


class ExecutorError(Exception):
    """Raised when the executor cannot carry out an operation."""

    pass


def _truncate_output(output: str, max_bytes: int = MAX_OUTPUT_BYTES) -> str:
    """Truncate output to max_bytes."""
    if len(output.encode("utf-8", errors="replace")) <= max_bytes:
        return output

    # Truncate by bytes, preserving valid UTF-8
    encoded = output.encode("utf-8", errors="replace")[:max_bytes]
    truncated = encoded.decode("utf-8", errors="ignore")
    return truncated + "\n... [output truncated]"


class ShellExecutor:
    """Runs shell commands and file operations relative to ``workdir``.

    The working directory and timeout are set once and never change.
    """

    def __init__(
        self,
        workdir: Path | str | None = None,
        timeout: int = DEFAULT_MAX_EXECUTION_TIME,
    ):
        """Initialize the executor.

        Args:
            workdir: Working directory (defaults to current directory)
            timeout: Command timeout in seconds
        """
        self._workdir = Path(workdir) if workdir else Path.cwd()
        self._timeout = timeout

    @property
    def workdir(self) -> Path:
        return self._workdir

    @property
    def timeout(self) -> int:
        return self._timeout

    def execute(self, command: str) -> ExecutionResult:
        """Execute a command with ``sh -c``.

        A non-zero exit status is reported in the result, not raised.

        Args:
            command: The command to execute

        Returns:
            ExecutionResult with stdout, stderr and exit code

        Raises:
            ExecutorError: If the process cannot be started
        """
        logger.info(f"Executing command: {command}")

        try:
            result = subprocess.run(
                [SHELL, "-c", command],
                capture_output=True,
                timeout=self._timeout,
                text=True,
                errors="replace",
                cwd=self._workdir,
            )
        except subprocess.TimeoutExpired:
            logger.warning(f"Command timed out after {self._timeout}s: {command}")
            return ExecutionResult(
                stdout="",
                stderr=f"Command timed out after {self._timeout} seconds",
                exit_code=-1,
                success=False,
            )
        except (OSError, ValueError) as e:
            logger.error(f"Command execution failed: {e}")
            raise ExecutorError(f"Failed to execute command: {e}") from e

        logger.debug(
            f"Command result: exit_code={result.returncode}, "
            f"stdout_len={len(result.stdout)}, stderr_len={len(result.stderr)}"
        )

        return ExecutionResult(
            stdout=_truncate_output(result.stdout),
            stderr=_truncate_output(result.stderr),
            exit_code=result.returncode,
            success=result.returncode == 0,
        )

    def read_file(self, path: str) -> str:
        """Read a UTF-8 text file relative to the working directory."""
        full_path = self._workdir / path
        logger.info(f"Reading file: {full_path}")
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, ValueError) as e:
            raise ExecutorError(f"Failed to read file: {path}: {e}") from e

    def write_file(self, path: str, content: str) -> None:
        """Write a text file, creating parent directories if needed."""
        full_path = self._workdir / path
        logger.info(f"Writing file: {full_path} ({len(content)} chars)")
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(content, encoding="utf-8")
        except (OSError, ValueError) as e:
            raise ExecutorError(f"Failed to write file: {path}: {e}") from e

    def list_files(self, pattern: str | None = None) -> list[str]:
        """List entries matching a glob pattern (default ``*``).

        Hidden entries are skipped unless the pattern names them. Returns an
        empty list when nothing matches or the pattern is unusable.
        """
        pattern = pattern or "*"
        logger.info(f"Listing files: {pattern}")
        try:
            matches = glob.glob(pattern, root_dir=self._workdir)
        except (OSError, ValueError) as e:
            logger.warning(f"Listing failed for pattern {pattern!r}: {e}")
            return []

        return sorted(matches)
