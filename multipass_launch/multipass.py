"""
Thin wrapper around the `multipass` CLI.

Every call is made with an argument list; data destined for the instance is
sent over stdin rather than interpolated into a remote shell command.
"""

from __future__ import annotations

import json
import re
import subprocess
from dataclasses import dataclass

from multipass_launch.config import MULTIPASS, default_launch_options
from multipass_launch.console import console
from multipass_launch.errors import CommandError, LaunchError

LAUNCHED_RE = re.compile(r"Launched:\s+(\S+)")


@dataclass
class Instance:
    """A launched Multipass instance."""

    name: str
    ipv4: str | None = None


def parse_launched_name(output: str) -> str:
    """Extract the instance name from `multipass launch` output.

    Returns an empty string when no "Launched: <name>" line is present.
    """
    # Progress spinners are redrawn with carriage returns
    for line in output.replace("\r", "\n").splitlines():
        match = LAUNCHED_RE.search(line)
        if match:
            return match.group(1)
    return ""


def build_launch_args(launch_options: tuple[str, ...] | list[str]) -> list[str]:
    """Build the `multipass launch` argument list.

    Multipass keeps the last occurrence of a repeated option, so the defaults
    go first and anything supplied by the user overrides them.
    """
    return ["launch", *default_launch_options(), *launch_options]


class MultipassClient:
    """Run `multipass` subcommands."""

    def __init__(self, executable: str = MULTIPASS) -> None:
        self.executable = executable

    def run(
        self, args: list[str], input: str | None = None
    ) -> subprocess.CompletedProcess:
        """Run a multipass subcommand and capture its output."""
        cmd = [self.executable, *args]
        console.debug(cmd)
        return subprocess.run(cmd, input=input, capture_output=True, text=True)

    def check(self, args: list[str], input: str | None = None) -> str:
        """Run a subcommand, raising CommandError on failure. Returns stdout."""
        result = self.run(args, input=input)
        if result.returncode != 0:
            raise CommandError(
                [self.executable, *args], result.returncode, result.stderr
            )
        return result.stdout

    def launch(self, launch_options: tuple[str, ...] | list[str]) -> Instance:
        """Launch a new instance and return it."""
        args = build_launch_args(launch_options)
        with console.status("Waiting for multipass launch..."):
            result = self.run(args)

        name = parse_launched_name(result.stdout)
        if result.returncode != 0 or not name:
            detail = result.stderr.strip() or result.stdout.strip()
            message = "An error occurred when launching the instance."
            if detail:
                message = f"{message}\n{detail}"
            raise LaunchError(message)
        return Instance(name=name)

    def info(self, name: str) -> str:
        """Human-readable instance information."""
        return self.check(["info", name])

    def ipv4(self, name: str) -> str | None:
        """First IPv4 address reported for an instance, if any."""
        output = self.check(["info", "--format", "json", name])
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            raise CommandError(
                [self.executable, "info", "--format", "json", name],
                0,
                f"Invalid JSON from multipass info: {e}",
            ) from e

        try:
            addresses = data.get("info", {}).get(name, {}).get("ipv4") or []
            if not isinstance(addresses, list):
                raise TypeError(f"ipv4 is {type(addresses).__name__}, not a list")
            address = addresses[0] if addresses else None
        except (AttributeError, TypeError) as e:
            raise CommandError(
                [self.executable, "info", "--format", "json", name],
                0,
                f"Unexpected JSON from multipass info: {e}",
            ) from e

        if addresses and not isinstance(address, str):
            raise CommandError(
                [self.executable, "info", "--format", "json", name],
                0,
                f"Unexpected IPv4 value from multipass info: {address!r}",
            )
        return address

    def exec(self, name: str, command: list[str], input: str | None = None) -> str:
        """Run a command inside an instance."""
        return self.check(["exec", name, "--", *command], input=input)
