"""
Error taxonomy for command execution.

Non-zero exit codes are not errors here: they come back as a normal
RunResult. Only resolution, configuration and lifecycle problems raise.
Spawn failures are passed through as the OSError raised by subprocess.
"""

from __future__ import annotations

from typing import Optional


class ShellError(RuntimeError):
    """Base class for errors raised by shpipe."""


class CommandNotFound(ShellError):
    """Path lookup found no executable for a command name."""

    def __init__(self, command: str):
        super().__init__(f"command '{command}' not found")
        self.command = command


class ShellSystemError(ShellError):
    """The environment answered a lookup in an unexpected way (call devops)."""

    def __init__(self, detail: Optional[str] = None):
        message = "unexpected system error"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.detail = detail


class AlreadyRunError(ShellError):
    """A runnable was asked to run a second time; processes are single-shot."""

    def __init__(self, runnable: object):
        super().__init__(f"{runnable!r} has already been run")
        self.runnable = runnable


class ConfigurationError(ShellError):
    """Tool configuration could not be loaded."""
