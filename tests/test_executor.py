"""Tests for the shell executor."""

import pytest

from aishell.shell.executor import (
    MAX_OUTPUT_BYTES,
    ExecutorError,
    ShellExecutor,
    _truncate_output,
)


class TestExecute:
    """Test command execution."""

    def test_simple_command_succeeds(self, executor):
        """Simple command succeeds and captures stdout."""
        result = executor.execute("echo hello")

        assert result.exit_code == 0
        assert result.success is True
        assert result.stdout == "hello\n"
        assert result.stderr == ""

    def test_nonzero_exit_is_reported_not_raised(self, executor):
        """A failing command yields a result with success=False."""
        result = executor.execute("exit 3")

        assert result.exit_code == 3
        assert result.success is False

    def test_stderr_captured(self, executor):
        """Stderr is captured separately."""
        result = executor.execute("ls /nonexistent_path_12345")

        assert result.exit_code != 0
        assert result.stderr != ""
        assert result.stdout == ""

    def test_working_directory_respected(self, executor, tmp_workspace):
        """Command runs in the configured working directory."""
        (tmp_workspace / "test.txt").write_text("content")

        result = executor.execute("ls test.txt")

        assert result.exit_code == 0
        assert "test.txt" in result.stdout

    def test_command_timeout(self, tmp_workspace):
        """Long-running command times out with exit code -1."""
        executor = ShellExecutor(workdir=tmp_workspace, timeout=1)

        result = executor.execute("sleep 5")

        assert result.exit_code == -1
        assert result.success is False
        assert "timed out after 1 seconds" in result.stderr

    def test_output_truncation(self, executor, tmp_workspace):
        """Large output is truncated."""
        (tmp_workspace / "big.txt").write_text("x" * (MAX_OUTPUT_BYTES * 2))

        result = executor.execute("cat big.txt")

        assert result.stdout.endswith("[output truncated]")
        assert len(result.stdout) < MAX_OUTPUT_BYTES + 100

    def test_spawn_failure_raises(self, executor, monkeypatch):
        """Failure to start the shell raises ExecutorError."""
        monkeypatch.setattr("aishell.shell.executor.SHELL", "/nonexistent/sh")

        with pytest.raises(ExecutorError, match="Failed to execute command"):
            executor.execute("echo hi")

    def test_defaults_to_current_directory(self, tmp_path, monkeypatch):
        """Without a workdir the executor uses the current directory."""
        monkeypatch.chdir(tmp_path)

        executor = ShellExecutor()

        assert executor.workdir == tmp_path


class TestTruncateOutput:
    """Test output truncation helper."""

    def test_short_output_unchanged(self):
        assert _truncate_output("short") == "short"

    def test_multibyte_output_stays_valid(self):
        """Truncation never splits a UTF-8 sequence into garbage."""
        text = "é" * 100
        truncated = _truncate_output(text, max_bytes=51)

        assert truncated.startswith("é" * 25)
        assert "�" not in truncated


class TestFileOperations:
    """Test read, write and list."""

    def test_read_file(self, executor, sample_files):
        """Reading returns the literal file content."""
        assert executor.read_file("notes.txt") == "first line\nsecond line\n"

    def test_read_missing_file_raises(self, executor):
        """Reading a missing file raises ExecutorError naming the path."""
        with pytest.raises(ExecutorError, match="Failed to read file: missing.txt"):
            executor.read_file("missing.txt")

    def test_write_creates_parent_directories(self, executor, tmp_workspace):
        """Writing creates intermediate directories."""
        executor.write_file("a/b/c.txt", "deep")

        assert (tmp_workspace / "a" / "b" / "c.txt").read_text() == "deep"

    def test_write_overwrites(self, executor, sample_files):
        """Writing replaces existing content."""
        executor.write_file("notes.txt", "new")

        assert (sample_files / "notes.txt").read_text() == "new"

    def test_write_into_file_path_fails(self, executor, sample_files):
        """Writing below a regular file raises ExecutorError."""
        with pytest.raises(ExecutorError, match="Failed to write file"):
            executor.write_file("notes.txt/child.txt", "nope")

    def test_list_all_skips_hidden(self, executor, sample_files):
        """Default listing returns sorted visible entries."""
        assert executor.list_files() == ["main.py", "notes.txt", "src"]

    def test_list_with_pattern(self, executor, sample_files):
        """A glob pattern filters the listing."""
        assert executor.list_files("*.py") == ["main.py"]
        assert executor.list_files("src/*.py") == ["src/util.py"]

    def test_list_no_match_is_empty(self, executor, sample_files):
        """A pattern matching nothing yields an empty list."""
        assert executor.list_files("*.rs") == []


class TestInvalidInput:
    """Test inputs the OS rejects before running anything."""

    def test_command_with_nul_byte(self, executor):
        """A NUL byte in the command raises ExecutorError, not ValueError."""
        with pytest.raises(ExecutorError, match="Failed to execute command"):
            executor.execute("echo \x00")

    def test_read_path_with_nul_byte(self, executor):
        with pytest.raises(ExecutorError, match="Failed to read file"):
            executor.read_file("a\x00b")

    def test_write_path_with_nul_byte(self, executor):
        with pytest.raises(ExecutorError, match="Failed to write file"):
            executor.write_file("a\x00b", "content")
