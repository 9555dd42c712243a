"""Command subsystem — chroot-aware command execution."""

from rootexec.runtime.command.capture import OutputCapture
from rootexec.runtime.command.context import BuildContext, chroot_command_for_context
from rootexec.runtime.command.emulation import (
    EMULATION_TABLE,
    SUPPORTED_ARCHITECTURES,
    EmulationBinding,
    EmulationHelper,
    host_architecture,
    required_interpreter,
)
from rootexec.runtime.command.models import ChrootMethod, CommandConfig, RunnerSettings, RunResult
from rootexec.runtime.command.resolv import ResolvConfGuard
from rootexec.runtime.command.runner import CommandRunner

__all__ = [
    "EMULATION_TABLE",
    "SUPPORTED_ARCHITECTURES",
    "BuildContext",
    "ChrootMethod",
    "CommandConfig",
    "CommandRunner",
    "EmulationBinding",
    "EmulationHelper",
    "OutputCapture",
    "ResolvConfGuard",
    "RunResult",
    "RunnerSettings",
    "chroot_command_for_context",
    "host_architecture",
    "required_interpreter",
]
