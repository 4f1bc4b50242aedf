"""
SSH client config updates.

OpenSSH uses the first matching Host block, so new entries are prepended to
the file. A stale block for a previously destroyed instance with the same
name stays in place but is shadowed.
"""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from multipass_launch.config import INSTANCE_USER


@dataclass(frozen=True)
class SSHConfigEntry:
    """A single Host block."""

    alias: str
    hostname: str
    user: str = INSTANCE_USER

    def render(self) -> str:
        return f"Host {self.alias}\n  HostName {self.hostname}\n  User {self.user}\n"


def prepend_entry(config_file: Path, entry: SSHConfigEntry) -> None:
    """Write entry at the top of config_file, keeping prior content intact.

    The new content goes to a sibling temp file that replaces the original,
    so an interrupted run never leaves a truncated config. A symlinked
    config is updated at its target.
    """
    if config_file.exists():
        target = config_file.resolve()
        existing = target.read_text()
        mode = stat.S_IMODE(target.stat().st_mode)
    else:
        target = config_file
        existing = ""
        mode = 0o600
        if not target.parent.exists():
            target.parent.mkdir(mode=0o700, parents=True)

    tmp = target.with_name(f".{target.name}.mpl-tmp")
    try:
        tmp.write_text(f"{entry.render()}\n{existing}")
        tmp.chmod(mode)
        os.replace(tmp, target)
    finally:
        tmp.unlink(missing_ok=True)
