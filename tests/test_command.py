"""Tests for command library."""

from pathlib import Path

import pytest

from kustomize_overlay.command import Command, format_path, run
from kustomize_overlay.exceptions import CommandException, KustomizeException


async def test_command() -> None:
    """Test stdout parsing of a command."""
    result = await run(Command(["echo", "Hello"]))
    assert result == "Hello\n"


async def test_command_arguments_not_shell_expanded() -> None:
    """Test arguments are passed to the program unchanged."""
    result = await run(Command(["echo", "$HOME;", "a b"]))
    assert result == "$HOME; a b\n"


async def test_command_env_and_cwd(tmp_path: Path) -> None:
    """Test the environment and working directory of the command."""
    result = await run(
        Command(["sh", "-c", 'echo "$GREETING $(pwd)"'], cwd=tmp_path, env={"GREETING": "Hi"})
    )
    assert result == f"Hi {tmp_path.resolve()}\n"


async def test_failed_command() -> None:
    """Test a failing command."""
    with pytest.raises(CommandException, match="return code 1"):
        await run(Command(["/bin/false"]))


async def test_failed_command_output() -> None:
    """Test the exception class and message of a failing command."""
    cmd = Command(["sh", "-c", "echo out; echo err >&2; exit 3"], exc=KustomizeException)
    with pytest.raises(KustomizeException, match=r"return code 3\nout\nerr"):
        await run(cmd)


async def test_missing_program() -> None:
    """Test a program that does not exist."""
    with pytest.raises(CommandException, match="could not be started"):
        await run(Command(["/does/not/exist/kustomize"]))


def test_format_path() -> None:
    """Test rendering paths for debug output."""
    assert format_path(Path("tests/testdata")) == "tests/testdata"
    assert format_path(Path.cwd() / "tests") == "tests (abs)"
    assert format_path(Path("/does/not/exist")) == "/does/not/exist"
