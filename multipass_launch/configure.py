"""
Post-launch configuration.

Each step reports its own outcome and returns True on success. The caller
decides whether a failure stops the remaining steps.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from multipass_launch.config import (
    AUTHORIZED_KEYS,
    MAX_USER_WATCHES,
    SYSCTL_CONF,
    LaunchConfig,
)
from multipass_launch.console import console
from multipass_launch.errors import MplError
from multipass_launch.multipass import Instance, MultipassClient
from multipass_launch.ssh_config import SSHConfigEntry, prepend_entry


def set_max_user_watches(client: MultipassClient, instance: Instance) -> bool:
    """Increase the maximum number of inotify watches inside the instance."""
    console.info("Increasing maximum number of file watchers...")
    try:
        client.exec(
            instance.name,
            ["sudo", "tee", "-a", SYSCTL_CONF],
            input=f"fs.inotify.max_user_watches={MAX_USER_WATCHES}\n",
        )
        client.exec(instance.name, ["sudo", "sysctl", "-p"])
    except MplError as e:
        console.error(f"Failed to increase file watchers: {e}")
        return False
    return True


def add_ssh_key(
    client: MultipassClient, instance: Instance, config: LaunchConfig
) -> bool:
    """Append the public key to the instance user's authorized_keys."""
    console.info("Adding SSH key...")
    try:
        ssh_key = config.ssh_key_file.read_text()
    except OSError as e:
        console.error(f"Failed to read SSH key: {e}")
        return False

    if not ssh_key.endswith("\n"):
        ssh_key += "\n"

    try:
        client.exec(instance.name, ["tee", "-a", AUTHORIZED_KEYS], input=ssh_key)
    except MplError as e:
        console.error(f"Failed to add SSH key: {e}")
        return False
    return True


def update_ssh_config(
    client: MultipassClient, instance: Instance, config: LaunchConfig
) -> bool:
    """Prepend a Host block for the instance to the local SSH config."""
    try:
        instance.ipv4 = client.ipv4(instance.name)
    except MplError as e:
        console.error(f"Failed to look up instance address: {e}")
        return False

    if not instance.ipv4:
        console.error(f"No IPv4 address reported for {instance.name}")
        return False

    console.info("Updating SSH config...")
    entry = SSHConfigEntry(alias=instance.name, hostname=instance.ipv4)
    try:
        prepend_entry(config.ssh_config_file, entry)
    except OSError as e:
        console.error(f"Failed to update {config.ssh_config_file}: {e}")
        return False
    return True


@dataclass
class StepResult:
    name: str
    ok: bool


def configure_instance(
    client: MultipassClient, instance: Instance, config: LaunchConfig
) -> list[StepResult]:
    """Run the post-launch steps in order.

    With config.fail_fast set, steps after the first failure are skipped and
    left out of the result.
    """
    steps: list[tuple[str, Callable[[], bool]]] = [
        ("file watchers", lambda: set_max_user_watches(client, instance)),
        ("SSH key", lambda: add_ssh_key(client, instance, config)),
        ("SSH config", lambda: update_ssh_config(client, instance, config)),
    ]

    results = []
    for name, step in steps:
        ok = step()
        results.append(StepResult(name=name, ok=ok))
        if not ok and config.fail_fast:
            console.warn("Stopping after failed step (--fail-fast)")
            break
    return results
