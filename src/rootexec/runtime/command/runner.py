"""CommandRunner — runs one build-step command on the host, in a chroot or in nspawn.

Each ``run()`` call:
1. Injects the qemu interpreter when the chroot's architecture needs it.
2. Builds the argument vector for the configured :class:`ChrootMethod`.
3. Denies the service gate for the chroot.
4. Overlays the host's resolv.conf.
5. Spawns the command with stdout and stderr merged into one labeled capture.
6. Restores resolv.conf, but only after a successful command.
7. In a ``finally`` block: flushes output, allows the service gate again
   and removes the interpreter.
"""

from __future__ import annotations

import logging
import os
import subprocess
from typing import TYPE_CHECKING

from rootexec.runtime.command.capture import OutputCapture
from rootexec.runtime.command.emulation import EmulationHelper
from rootexec.runtime.command.models import ChrootMethod, CommandConfig, RunnerSettings, RunResult
from rootexec.runtime.command.resolv import ResolvConfGuard
from rootexec.runtime.errors import CommandFailedError, ExecutionError
from rootexec.runtime.services.gate import PolicyRcServiceGate
from rootexec.utils.telemetry import (
    ATTR_ARCHITECTURE,
    ATTR_CHROOT,
    ATTR_EMULATOR,
    ATTR_EXIT_CODE,
    ATTR_LABEL,
    ATTR_METHOD,
    get_tracer,
)

if TYPE_CHECKING:
    from rootexec.runtime.services.gate import ServiceGate

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

NSPAWN_OPTIONS = (
    "-q",
    "--resolv-conf=off",
    "--timezone=off",
    "--register=no",
    "--keep-unit",
    "--console=pipe",
)

_READ_SIZE = 65536


class CommandRunner:
    """Executes commands described by a :class:`CommandConfig`.

    Runs against the same chroot must not overlap: the resolv.conf side-car
    and the injected interpreter path are shared without locking.
    """

    def __init__(
        self,
        config: CommandConfig,
        *,
        settings: RunnerSettings | None = None,
        service_gate: ServiceGate | None = None,
    ) -> None:
        self._config = config
        self._settings = settings or RunnerSettings()
        self._gate = service_gate or PolicyRcServiceGate()

    @property
    def config(self) -> CommandConfig:
        return self._config

    def build_argv(self, cmdline: list[str] | tuple[str, ...]) -> list[str]:
        """Return the full argument vector for *cmdline* under the configured method."""
        cfg = self._config

        if cfg.method == ChrootMethod.NONE:
            return list(cmdline)

        if cfg.method == ChrootMethod.CHROOT:
            if cfg.bind_mounts:
                logger.warning(
                    "Bind mounts are not applied with the chroot method: %s",
                    ", ".join(cfg.bind_mounts),
                )
            return [self._settings.chroot_tool, cfg.chroot, *cmdline]

        argv: list[str] = [self._settings.container_tool, *NSPAWN_OPTIONS]
        for env in cfg.extra_env:
            argv.extend(["--setenv", env])
        for mount in cfg.bind_mounts:
            argv.extend(["--bind", mount])
        argv.extend(["-D", cfg.chroot])
        argv.extend(cmdline)
        return argv

    def run(self, label: str, *cmdline: str) -> RunResult:
        """Run *cmdline*, logging its output prefixed with *label*.

        Raises:
            UnknownArchitectureError: The architecture has no known interpreter.
            SetupError: The interpreter or resolv.conf could not be prepared or restored.
            ExecutionError: The command could not be started.
            CommandFailedError: The command exited with a nonzero status.
        """
        cfg = self._config

        with _tracer.start_as_current_span("rootexec.run") as span:
            span.set_attribute(ATTR_LABEL, label)
            span.set_attribute(ATTR_METHOD, cfg.method.value)
            span.set_attribute(ATTR_CHROOT, cfg.chroot)
            span.set_attribute(ATTR_ARCHITECTURE, cfg.architecture)

            emulation = EmulationHelper(
                cfg,
                host_arch=self._settings.host_architecture,
                host_root=self._settings.host_root,
            )
            emulation.setup()

            emulator = str(emulation.binding.target) if emulation.binding else None
            if emulator:
                span.set_attribute(ATTR_EMULATOR, emulator)

            capture = OutputCapture(label)
            gated = cfg.method != ChrootMethod.NONE
            argv = self.build_argv(cmdline)
            try:
                if gated:
                    self._deny_services()

                resolv = ResolvConfGuard(cfg.chroot, cfg.method, host_root=self._settings.host_root)
                digest = resolv.save()

                returncode = self._spawn(label, argv, capture)
                span.set_attribute(ATTR_EXIT_CODE, returncode)
                if returncode != 0:
                    raise CommandFailedError(label, returncode)

                resolv.restore(digest)
            finally:
                capture.flush()
                if gated:
                    self._allow_services()
                emulation.cleanup()

        return RunResult(label=label, argv=argv, exit_code=returncode, emulator=emulator)

    def _spawn(self, label: str, argv: list[str], capture: OutputCapture) -> int:
        """Run *argv* to completion, feeding its merged output into *capture*."""
        logger.debug("%s: running %s", label, argv)
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                cwd=self._config.workdir or None,
                env=self._process_env(),
            )
        except (OSError, ValueError) as exc:
            raise ExecutionError(label, str(exc)) from exc

        assert proc.stdout is not None
        with proc.stdout:
            while chunk := proc.stdout.read1(_READ_SIZE):
                capture.write(chunk)
        return proc.wait()

    def _process_env(self) -> dict[str, str] | None:
        """Environment for the child; nspawn receives extra env as ``--setenv`` instead."""
        cfg = self._config
        if not cfg.extra_env or cfg.method == ChrootMethod.NSPAWN:
            return None
        env = dict(os.environ)
        for assignment in cfg.extra_env:
            key, _, value = assignment.partition("=")
            env[key] = value
        return env

    def _deny_services(self) -> None:
        try:
            self._gate.deny(self._config.chroot)
        except Exception:
            logger.warning("Failed to deny services in %s", self._config.chroot, exc_info=True)

    def _allow_services(self) -> None:
        try:
            self._gate.allow(self._config.chroot)
        except Exception:
            logger.warning("Failed to allow services in %s", self._config.chroot, exc_info=True)
