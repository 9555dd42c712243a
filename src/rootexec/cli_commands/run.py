"""``rootexec run`` — execute one command, optionally inside a chroot."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.markup import escape

from rootexec.cli_commands._output import console, print_argv, print_run_result, setup_logging
from rootexec.runtime.command.models import ChrootMethod, CommandConfig
from rootexec.runtime.command.runner import CommandRunner
from rootexec.runtime.errors import CommandFailedError, ConfigurationError, RootexecError
from rootexec.runtime.services.gate import NullServiceGate
from rootexec.sdk.loader import RunFileLoader
from rootexec.sdk.models import RunFile


@click.command()
@click.argument("cmdline", nargs=-1, type=click.UNPROCESSED)
@click.option("--config", "-c", "config_path", type=click.Path(exists=True), help="Run file (YAML).")
@click.option("--label", "-l", default=None, help="Prefix for captured output lines.")
@click.option("--chroot", default=None, help="Root filesystem to run in.")
@click.option("--arch", default=None, help="Target architecture of the root filesystem.")
@click.option(
    "--method",
    type=click.Choice([m.value for m in ChrootMethod]),
    default=None,
    help="How to enter the root filesystem.",
)
@click.option("--bind", "binds", multiple=True, help="Bind mount, SOURCE or SOURCE:TARGET (repeatable).")
@click.option("--env", "envs", multiple=True, help="Extra KEY=VALUE environment (repeatable).")
@click.option("--workdir", default=None, help="Working directory for the spawned process.")
@click.option("--no-service-gate", is_flag=True, help="Do not install policy-rc.d in the chroot.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.option("--telemetry", is_flag=True, help="Export tracing spans to the console.")
@click.option("--dry-run", is_flag=True, help="Print the argument vector only, do not execute.")
def run(
    cmdline: tuple[str, ...],
    config_path: str | None,
    label: str | None,
    chroot: str | None,
    arch: str | None,
    method: str | None,
    binds: tuple[str, ...],
    envs: tuple[str, ...],
    workdir: str | None,
    no_service_gate: bool,
    verbose: bool,
    telemetry: bool,
    dry_run: bool,
) -> None:
    """Run CMDLINE (put it after ``--``)."""
    setup_logging(verbose=verbose)

    try:
        run_file = RunFileLoader(Path(config_path)).load() if config_path else RunFile()
        config = _merge_command(run_file.command, chroot, arch, method, workdir, binds, envs)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        sys.exit(1)

    argv_in = list(cmdline) or run_file.cmdline
    if not argv_in:
        console.print("[red]Nothing to run:[/red] give a command after '--' or 'cmdline' in the run file")
        sys.exit(1)

    effective_label = label or run_file.label or Path(argv_in[0]).name
    gate = NullServiceGate() if no_service_gate or not run_file.service_gate else None
    runner = CommandRunner(config, settings=run_file.settings, service_gate=gate)

    if dry_run:
        print_argv(runner.build_argv(argv_in))
        return

    if telemetry:
        from rootexec.utils.telemetry import configure_telemetry

        configure_telemetry()

    try:
        result = runner.run(effective_label, *argv_in)
    except CommandFailedError as exc:
        console.print(f"[red]Command failed:[/red] {escape(str(exc))}")
        sys.exit(exc.returncode or 1)
    except RootexecError as exc:
        console.print(f"[red]Execution error:[/red] {escape(str(exc))}")
        sys.exit(1)

    print_run_result(result)


def _merge_command(
    base: CommandConfig,
    chroot: str | None,
    arch: str | None,
    method: str | None,
    workdir: str | None,
    binds: tuple[str, ...],
    envs: tuple[str, ...],
) -> CommandConfig:
    """Apply command-line overrides on top of the run file's command."""
    data = base.model_dump()
    if chroot is not None:
        data["chroot"] = chroot
        if method is None and base.method == ChrootMethod.NONE:
            data["method"] = ChrootMethod.NSPAWN
    if arch is not None:
        data["architecture"] = arch
    if method is not None:
        data["method"] = method
    if workdir is not None:
        data["workdir"] = workdir

    try:
        config = CommandConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc

    for spec in binds:
        source, _, target = spec.partition(":")
        config.add_bind_mount(source, target)
    for assignment in envs:
        config.add_env(assignment)
    return config
