"""Command runtime — chroot execution guards and service gating."""

from rootexec.runtime.errors import (
    CommandFailedError,
    ConfigurationError,
    ExecutionError,
    RootexecError,
    SetupError,
    UnknownArchitectureError,
)
from rootexec.runtime.command.runner import CommandRunner

__all__ = [
    "CommandFailedError",
    "CommandRunner",
    "ConfigurationError",
    "ExecutionError",
    "RootexecError",
    "SetupError",
    "UnknownArchitectureError",
]
