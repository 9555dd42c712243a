"""Static qemu interpreter injection for foreign-architecture chroots.

The compatibility table maps a target architecture to the qemu user-mode
interpreter it needs and to the host architectures able to execute its
binaries natively. Host architectures use Go-style names (``amd64``,
``386``, ``arm64``, ``arm``, ``mips64le``, ``mipsle``, ``riscv64``).
"""

from __future__ import annotations

import logging
import platform
import sys
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING

from rootexec.runtime.command.fsutil import copy_file
from rootexec.runtime.errors import SetupError, UnknownArchitectureError

if TYPE_CHECKING:
    from rootexec.runtime.command.models import CommandConfig

logger = logging.getLogger(__name__)

INTERPRETER_DIR = PurePosixPath("/usr/bin")
INTERPRETER_MODE = 0o755

# target architecture -> (interpreter binary, hosts that run it natively)
EMULATION_TABLE: dict[str, tuple[str, frozenset[str]]] = {
    "armhf": ("qemu-arm-static", frozenset({"arm64", "arm"})),
    "armel": ("qemu-arm-static", frozenset({"arm64", "arm"})),
    "arm": ("qemu-arm-static", frozenset({"arm64", "arm"})),
    "arm64": ("qemu-aarch64-static", frozenset({"arm64"})),
    "mips": ("qemu-mips-static", frozenset()),
    "mipsel": ("qemu-mipsel-static", frozenset({"mips64le", "mipsle"})),
    "mips64el": ("qemu-mips64el-static", frozenset({"mips64le"})),
    "riscv64": ("qemu-riscv64-static", frozenset({"riscv64"})),
    "i386": ("qemu-i386-static", frozenset({"amd64", "386"})),
    "amd64": ("qemu-x86_64-static", frozenset({"amd64"})),
}

SUPPORTED_ARCHITECTURES: frozenset[str] = frozenset(EMULATION_TABLE)

_MACHINE_ALIASES: dict[str, str] = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "armv8l": "arm",
    "arm": "arm",
    "riscv64": "riscv64",
}


def host_architecture(machine: str | None = None, byteorder: str | None = None) -> str:
    """Return the host architecture as a Go-style name.

    Unrecognised machine names are returned lower-cased; they never match
    an exemption in the table so emulation is always required for them.
    """
    machine = (machine if machine is not None else platform.machine()).lower()
    byteorder = byteorder or sys.byteorder

    if machine in _MACHINE_ALIASES:
        return _MACHINE_ALIASES[machine]
    if machine in ("mips64", "mips"):
        suffix = "le" if byteorder == "little" else ""
        return f"{machine}{suffix}"
    return machine


def required_interpreter(architecture: str, host_arch: str) -> str | None:
    """Return the interpreter name *architecture* needs on *host_arch*, or ``None``.

    Raises:
        UnknownArchitectureError: If *architecture* is not in the table.
    """
    entry = EMULATION_TABLE.get(architecture)
    if entry is None:
        raise UnknownArchitectureError(architecture)
    binary, native_hosts = entry
    if host_arch in native_hosts:
        return None
    return binary


@dataclass(frozen=True)
class EmulationBinding:
    """Host interpreter and its injected location inside the chroot."""

    source: Path
    target: Path


class EmulationHelper:
    """Copies the qemu interpreter into a chroot for one run and removes it after.

    Does nothing when the configuration has no chroot or no architecture,
    or when the host runs the target architecture natively.
    """

    def __init__(
        self,
        config: CommandConfig,
        *,
        host_arch: str | None = None,
        host_root: Path = Path("/"),
    ) -> None:
        self._binding: EmulationBinding | None = None
        self._installed = False

        if not config.chroot or not config.architecture:
            return

        binary = required_interpreter(config.architecture, host_arch or host_architecture())
        if binary is None:
            return

        relative = (INTERPRETER_DIR / binary).relative_to("/")
        self._binding = EmulationBinding(
            source=Path(host_root) / relative,
            target=Path(config.chroot) / relative,
        )

    @property
    def binding(self) -> EmulationBinding | None:
        return self._binding

    @property
    def required(self) -> bool:
        return self._binding is not None

    def setup(self) -> None:
        """Install the interpreter into the chroot."""
        if self._binding is None:
            return
        logger.debug("Injecting %s as %s", self._binding.source, self._binding.target)
        try:
            copy_file(self._binding.source, self._binding.target, INTERPRETER_MODE)
        except OSError as exc:
            raise SetupError(f"cannot install {self._binding.source}: {exc}") from exc
        self._installed = True

    def cleanup(self) -> None:
        """Remove the injected interpreter, if one was installed."""
        if self._binding is None or not self._installed:
            return
        try:
            self._binding.target.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to remove %s", self._binding.target, exc_info=True)
        self._installed = False
