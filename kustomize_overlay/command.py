"""Library for running external commands using asyncio.

The kustomize build is not run in a shell so that paths containing spaces or
shell metacharacters are passed through unchanged.
"""

import asyncio
from abc import ABC, abstractmethod
import logging
import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .exceptions import CommandException

_LOGGER = logging.getLogger(__name__)


# No public API
__all__: list[str] = []


class Task(ABC):
    """An instance of an async task that produces output."""

    @abstractmethod
    async def run(self) -> bytes:
        """Execute the task and return the result."""


def format_path(path: Path) -> str:
    """Format path for debugging, relative to the working directory if possible."""
    if path.is_absolute():
        cwd = Path.cwd()
        if path.is_relative_to(cwd):
            return f"{path.relative_to(cwd)} (abs)"
    return str(path)


@dataclass
class Command(Task):
    """An external program to execute."""

    cmd: list[str]
    """Program and command line arguments."""

    cwd: Path | None = None
    """Working directory of the subprocess."""

    exc: type[CommandException] = CommandException
    """Exception to raise when the program exits with an error."""

    env: dict[str, str] | None = None
    """Environment variables added to the current environment."""

    @property
    def string(self) -> str:
        """Render the command as a single shell-quoted string."""
        return shlex.join(self.cmd)

    def __str__(self) -> str:
        """Render as a debug string."""
        if self.cwd:
            return f"({format_path(self.cwd)}) {self.string}"
        return self.string

    async def run(self) -> bytes:
        """Run the command, returning stdout."""
        _LOGGER.debug("Running command: %s", self)
        env = {**os.environ, **(self.env or {})}
        try:
            proc = await asyncio.create_subprocess_exec(
                *self.cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=self.cwd,
                env=env,
            )
        except OSError as err:
            raise self.exc(f"Command '{self}' could not be started: {err}") from err
        out, err = await proc.communicate()
        if proc.returncode:
            errors = [f"Command '{self}' failed with return code {proc.returncode}"]
            if out:
                errors.append(out.decode("utf-8").rstrip())
            if err:
                errors.append(err.decode("utf-8").rstrip())
            message = "\n".join(errors)
            _LOGGER.debug(message)
            raise self.exc(message)
        return out


async def run(task: Task) -> str:
    """Run the specified task and return stdout as a string."""
    out = await task.run()
    return out.decode("utf-8")
