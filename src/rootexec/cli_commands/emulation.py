"""``rootexec emulation`` — show the qemu interpreter decision for an architecture."""

from __future__ import annotations

import sys

import click
from rich.markup import escape

from rootexec.cli_commands._output import console, print_emulation_table
from rootexec.runtime.command.emulation import host_architecture, required_interpreter
from rootexec.runtime.errors import UnknownArchitectureError


@click.command()
@click.argument("architecture", required=False)
@click.option("--host", default=None, help="Host architecture (Go-style name). Defaults to this machine.")
@click.option("--all", "show_all", is_flag=True, help="Show the whole compatibility table.")
def emulation(architecture: str | None, host: str | None, show_all: bool) -> None:
    """Tell whether ARCHITECTURE needs a qemu interpreter on this host."""
    host_arch = host or host_architecture()

    if show_all or architecture is None:
        print_emulation_table(host_arch)
        return

    try:
        binary = required_interpreter(architecture, host_arch)
    except UnknownArchitectureError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)

    if binary is None:
        console.print(f"{architecture} runs natively on {host_arch}")
    else:
        console.print(f"{architecture} needs {binary} on {host_arch}")
