"""
Pytest fixtures for the launch sequence.

External tools are never run: `subprocess.run` and `shutil.which` are
replaced with fakes that record every command line and answer with canned
output, and HOME points at a temporary directory.
"""

import json
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from click.testing import CliRunner
from rich.console import Console as RichConsole

from multipass_launch.console import console

INSTANCE_NAME = "demo"
INSTANCE_IP = "192.168.64.5"
SSH_PUBLIC_KEY = "ssh-ed25519 AAAAC3NzaC1lZDI1NTE5AAAAIFakeKeyForTests user@host\n"


@dataclass
class Response:
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""


@dataclass
class FakeCommands:
    """Stand-in for subprocess.run that matches commands by prefix."""

    responses: dict[tuple[str, ...], Response] = field(default_factory=dict)
    calls: list[list[str]] = field(default_factory=list)
    inputs: list[str | None] = field(default_factory=list)

    def respond(self, *prefix: str, returncode: int = 0, stdout: str = "", stderr: str = "") -> None:
        self.responses[prefix] = Response(returncode, stdout, stderr)

    def find(self, *prefix: str) -> list[list[str]]:
        """Return recorded calls starting with prefix."""
        return [call for call in self.calls if tuple(call[: len(prefix)]) == prefix]

    def input_for(self, *prefix: str) -> str | None:
        for call, data in zip(self.calls, self.inputs):
            if tuple(call[: len(prefix)]) == prefix:
                return data
        return None

    def __call__(self, cmd, input=None, **kwargs) -> subprocess.CompletedProcess:
        cmd = list(cmd)
        self.calls.append(cmd)
        self.inputs.append(input)

        # Longest matching prefix wins
        best = None
        for prefix, response in self.responses.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                if best is None or len(prefix) > len(best[0]):
                    best = (prefix, response)
        response = best[1] if best else Response()
        return subprocess.CompletedProcess(
            cmd, response.returncode, response.stdout, response.stderr
        )


def multipass_info_json(name: str = INSTANCE_NAME, ipv4: list[str] | None = None) -> str:
    addresses = [INSTANCE_IP] if ipv4 is None else ipv4
    return json.dumps(
        {
            "errors": [],
            "info": {
                name: {
                    "state": "Running",
                    "image_release": "24.04 LTS",
                    "ipv4": addresses,
                }
            },
        }
    )


@pytest.fixture(autouse=True)
def plain_console(monkeypatch):
    """Uncoloured, unwrapped output so assertions see plain text."""
    monkeypatch.setattr(console, "console", RichConsole(color_system=None, soft_wrap=True))
    monkeypatch.setattr(
        console, "err_console", RichConsole(stderr=True, color_system=None, soft_wrap=True)
    )
    monkeypatch.setattr(console, "debug_enabled", False)


@pytest.fixture
def home(tmp_path: Path, monkeypatch) -> Path:
    """Temporary HOME with a default SSH public key."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("MPL_FAIL_FAST", raising=False)
    ssh_dir = tmp_path / ".ssh"
    ssh_dir.mkdir()
    (ssh_dir / "id_rsa.pub").write_text(SSH_PUBLIC_KEY)
    return tmp_path


@pytest.fixture
def ssh_config_file(home: Path) -> Path:
    return home / ".ssh" / "config"


@pytest.fixture
def fake_commands(monkeypatch) -> FakeCommands:
    """Fake multipass and ssh-keygen that succeed by default."""
    fake = FakeCommands()
    fake.respond("ssh-keygen", stdout="256 SHA256:abc user@host (ED25519)\n")
    fake.respond(
        "multipass",
        "launch",
        stdout=f"Launching {INSTANCE_NAME}\rStarting {INSTANCE_NAME}\rLaunched: {INSTANCE_NAME}\n",
    )
    fake.respond("multipass", "info", stdout=f"Name:           {INSTANCE_NAME}\nState:          Running\n")
    fake.respond("multipass", "info", "--format", "json", stdout=multipass_info_json())

    monkeypatch.setattr(subprocess, "run", fake)
    monkeypatch.setattr(
        shutil, "which", lambda cmd, *args, **kwargs: f"/usr/local/bin/{cmd}"
    )
    return fake


@pytest.fixture
def cli(home, fake_commands):
    """Invoke the CLI with faked external tools."""
    from multipass_launch.cli import main

    runner = CliRunner()

    def _invoke(*args: str):
        return runner.invoke(main, list(args))

    return _invoke


def resolve_host(config_text: str, alias: str) -> dict[str, str] | None:
    """Resolve an alias the way OpenSSH does: first matching Host block wins."""
    current = None
    for line in config_text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        key, _, value = stripped.partition(" ")
        if key.lower() == "host":
            if current is not None:
                return current
            current = {} if value.strip() == alias else None
        elif current is not None:
            current[key] = value.strip()
    return current
