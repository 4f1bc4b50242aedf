"""Checks that must pass before anything is created."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from multipass_launch.config import MULTIPASS, SSH_KEYGEN
from multipass_launch.console import console
from multipass_launch.errors import InvalidSSHKeyError, ToolNotFoundError

PRIVATE_KEY_MARKER = "-----BEGIN"

SSH_KEY_HINT = (
    "A valid SSH key is required. "
    "Run ssh-keygen to generate an SSH key and try again."
)


def check_multipass() -> None:
    """Ensure the multipass CLI is on the PATH."""
    if shutil.which(MULTIPASS) is None:
        raise ToolNotFoundError("Multipass")


def validate_ssh_key(ssh_key_file: Path) -> None:
    """Ensure the given SSH public key file exists and can be fingerprinted."""
    if not ssh_key_file.is_file():
        raise InvalidSSHKeyError(f"SSH key not found: {ssh_key_file}. {SSH_KEY_HINT}")

    # ssh-keygen -l also fingerprints private keys
    if ssh_key_file.read_text(errors="replace").lstrip().startswith(PRIVATE_KEY_MARKER):
        raise InvalidSSHKeyError(
            f"{ssh_key_file} is a private key. Pass the matching .pub file instead."
        )

    cmd = [SSH_KEYGEN, "-l", "-f", str(ssh_key_file)]
    console.debug(cmd)
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ToolNotFoundError(SSH_KEYGEN) from e

    if result.returncode != 0:
        raise InvalidSSHKeyError(SSH_KEY_HINT)


def check_prerequisites(ssh_key_file: Path) -> None:
    """Run all preflight checks."""
    check_multipass()

    console.info(f"Using SSH key: {ssh_key_file}")
    validate_ssh_key(ssh_key_file)
