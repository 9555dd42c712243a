"""rootexec CLI entrypoint."""

from __future__ import annotations

import click

from rootexec import __version__


@click.group()
@click.version_option(version=__version__, prog_name="rootexec")
def main() -> None:
    """rootexec — run commands on the host, in a chroot or in systemd-nspawn."""


# Register subcommands
from rootexec.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
