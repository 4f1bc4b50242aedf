"""Exceptions raised by the launch sequence."""

from __future__ import annotations

import shlex


class MplError(Exception):
    """Base class for all expected failures."""


class ToolNotFoundError(MplError):
    """A required external tool is not on the PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"{tool} is not installed.")
        self.tool = tool


class InvalidSSHKeyError(MplError):
    """The SSH public key file is missing or cannot be fingerprinted."""


class LaunchError(MplError):
    """The instance could not be launched."""


class CommandError(MplError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], returncode: int, stderr: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"Command failed ({returncode}): {shlex.join(self.command)}"
        if self.stderr:
            message = f"{message}\n{self.stderr}"
        super().__init__(message)
