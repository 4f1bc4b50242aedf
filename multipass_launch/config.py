"""
Launch configuration.

Settings are parsed once by the CLI into an immutable LaunchConfig and passed
explicitly to each step. Paths under the user's home are resolved at call
time so that HOME overrides take effect.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

# =============================================================================
# Constants
# =============================================================================

MULTIPASS = "multipass"
SSH_KEYGEN = "ssh-keygen"

# Instance login user for Ubuntu images
INSTANCE_USER = "ubuntu"
AUTHORIZED_KEYS = f"/home/{INSTANCE_USER}/.ssh/authorized_keys"

# Launch defaults, larger than Multipass's own (1 CPU, 5G disk, 1G memory)
DEFAULT_CPUS = 4
DEFAULT_DISK = "20G"
DEFAULT_MEMORY = "8G"

# https://code.visualstudio.com/docs/setup/linux#_visual-studio-code-is-unable-to-watch-for-file-changes-in-this-large-workspace-error-enospc
MAX_USER_WATCHES = 524288
SYSCTL_CONF = "/etc/sysctl.conf"


def default_ssh_key_file() -> Path:
    """Default SSH public key file."""
    return Path.home() / ".ssh" / "id_rsa.pub"


def default_ssh_config_file() -> Path:
    """The current user's SSH client config file."""
    return Path.home() / ".ssh" / "config"


def default_launch_options() -> list[str]:
    """Resource options placed ahead of any user-supplied launch options."""
    return [
        "--cpus",
        str(DEFAULT_CPUS),
        "--disk",
        DEFAULT_DISK,
        "--memory",
        DEFAULT_MEMORY,
    ]


@dataclass(frozen=True)
class LaunchConfig:
    """Settings for a single run."""

    ssh_key_file: Path
    launch_options: tuple[str, ...] = ()
    fail_fast: bool = False
    ssh_config_file: Path = field(default_factory=default_ssh_config_file)
