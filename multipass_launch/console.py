"""Pretty console output using rich."""

from __future__ import annotations

import shlex
from contextlib import AbstractContextManager

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.status import Status


class Console:
    """Progress and error reporting for the launch sequence."""

    def __init__(self, debug: bool = False) -> None:
        self.console = RichConsole(soft_wrap=True)
        self.err_console = RichConsole(stderr=True, soft_wrap=True)
        self.debug_enabled = debug

    def raw(self, text: str) -> None:
        """Print external command output untouched."""
        self.console.print(text, markup=False, highlight=False, end="")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]\\[*][/blue] {escape(message)}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]\\[+][/green] {escape(message)}")

    def warn(self, message: str) -> None:
        self.err_console.print(f"[yellow]\\[-][/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.err_console.print(f"[red]\\[!][/red] {escape(message)}")

    def debug(self, args: list[str]) -> None:
        """Echo a command line before it runs."""
        if self.debug_enabled:
            self.err_console.print(f"[dim]+ {escape(shlex.join(args))}[/dim]")

    def banner(self, title: str) -> None:
        self.console.print(Panel(escape(title), style="bold blue"))

    def status(self, message: str) -> AbstractContextManager[Status]:
        return self.console.status(escape(message))


console = Console()
