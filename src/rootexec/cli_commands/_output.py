"""Shared CLI output formatters."""

from __future__ import annotations

import logging
import shlex

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from rootexec.runtime.command.emulation import EMULATION_TABLE, required_interpreter
from rootexec.runtime.command.models import RunResult  # noqa: TC001

console = Console()


def setup_logging(*, verbose: bool = False) -> None:
    """Route log records, including captured command output, through rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, markup=False)],
        force=True,
    )


def print_argv(argv: list[str]) -> None:
    console.print(shlex.join(argv), markup=False, highlight=False, soft_wrap=True)


def print_run_result(result: RunResult) -> None:
    """Pretty-print a successful run."""
    console.print(f"[green]{escape(result.label or 'command')} finished[/green] (exit {result.exit_code})")
    if result.emulator:
        console.print(f"  Emulator: {result.emulator}")


def print_emulation_table(host_arch: str, architectures: list[str] | None = None) -> None:
    """Show which target architectures need a qemu interpreter on *host_arch*."""
    table = Table(title=f"Emulation on {host_arch}")
    table.add_column("Architecture", style="cyan")
    table.add_column("Interpreter")
    table.add_column("Native hosts")
    table.add_column("Needed")

    for arch in architectures or sorted(EMULATION_TABLE):
        binary, native = EMULATION_TABLE[arch]
        needed = required_interpreter(arch, host_arch) is not None
        table.add_row(
            arch,
            binary,
            ", ".join(sorted(native)) or "-",
            "yes" if needed else "no",
        )

    console.print(table)
