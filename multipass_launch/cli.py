"""Command line entry point."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

import click

from multipass_launch import __version__
from multipass_launch.config import LaunchConfig, default_ssh_key_file
from multipass_launch.configure import configure_instance
from multipass_launch.console import console
from multipass_launch.errors import MplError
from multipass_launch.multipass import MultipassClient
from multipass_launch.preflight import check_prerequisites

SEPARATOR = "--"
DEBUG_VALUES = {"1", "yes", "true"}


# =============================================================================
# Argument Parsing
# =============================================================================


def split_passthrough(args: list[str]) -> tuple[list[str], list[str]]:
    """Split args at the first lone `--`.

    Everything after it is passed to `multipass launch` untouched.
    """
    if SEPARATOR not in args:
        return list(args), []
    index = args.index(SEPARATOR)
    return list(args[:index]), list(args[index + 1 :])


def count_option(args: list[str], name: str) -> int:
    """Count occurrences of a value-taking long option."""
    count = 0
    skip = False
    for arg in args:
        if skip:
            skip = False
            continue
        if arg == name:
            count += 1
            skip = True
        elif arg.startswith(f"{name}="):
            count += 1
    return count


class PassthroughCommand(click.Command):
    """Command that forwards everything after `--` as launch options."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        own, passthrough = split_passthrough(args)
        if count_option(own, "--ssh-key") > 1:
            raise click.UsageError("Option '--ssh-key' given more than once.", ctx)
        rest = super().parse_args(ctx, own)
        ctx.params["launch_options"] = tuple(passthrough)
        return rest

    def collect_usage_pieces(self, ctx: click.Context) -> list[str]:
        return [*super().collect_usage_pieces(ctx), "[-- LAUNCH_OPTIONS]"]


# =============================================================================
# CLI
# =============================================================================


def debug_from_env() -> bool:
    """DEBUG enables tracing only for 1/yes/true; anything else is ignored."""
    return os.environ.get("DEBUG", "").strip().lower() in DEBUG_VALUES


def run(config: LaunchConfig) -> bool:
    """Launch and configure an instance. Returns True if every step succeeded."""
    console.banner(f"Multipass Launch Script v{__version__}")

    check_prerequisites(config.ssh_key_file)

    client = MultipassClient()
    console.info("Launching Multipass instance...")
    instance = client.launch(config.launch_options)

    console.info("Instance launched:")
    try:
        console.raw(client.info(instance.name))
    except MplError as e:
        console.warn(f"Could not show instance info: {e}")

    results = configure_instance(client, instance, config)
    failed = [r.name for r in results if not r.ok]
    if failed:
        console.error(f"Instance {instance.name} launched but not fully configured.")
        console.error(f"Failed steps: {', '.join(failed)}")
        return False

    console.success(f"Instance ready. Connect with: ssh {instance.name}")
    return True


@click.command(
    cls=PassthroughCommand,
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=(
        "See the Multipass docs for available launch options: "
        "https://multipass.run/docs/launch-command"
    ),
)
@click.option(
    "--ssh-key",
    "ssh_key",
    metavar="FILE",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="SSH public key file (default: ~/.ssh/id_rsa.pub)",
)
@click.option(
    "--fail-fast/--best-effort",
    default=False,
    envvar="MPL_FAIL_FAST",
    help="Stop at the first failed post-launch step (default: best effort)",
)
@click.option(
    "--debug",
    is_flag=True,
    help="Print each external command before running it (also DEBUG=1)",
)
def main(
    ssh_key: Path | None,
    fail_fast: bool,
    debug: bool,
    launch_options: tuple[str, ...] = (),
) -> None:
    """Launch a Multipass instance with sensible defaults and configure it for
    SSH connections from the host.

    Any options after a `--` by itself are passed through to the
    `multipass launch` command under the hood.
    """
    console.debug_enabled = debug or debug_from_env()

    config = LaunchConfig(
        ssh_key_file=ssh_key or default_ssh_key_file(),
        launch_options=launch_options,
        fail_fast=fail_fast,
    )

    try:
        ok = run(config)
    except MplError as e:
        console.error(str(e))
        raise SystemExit(1)
    except (OSError, subprocess.SubprocessError) as e:
        console.error(f"Unexpected error: {e}")
        raise SystemExit(1)

    if not ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
