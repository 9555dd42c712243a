"""Data models for command execution."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

from rootexec.runtime.command.emulation import SUPPORTED_ARCHITECTURES


class ChrootMethod(str, Enum):
    """How the command enters the target root filesystem."""

    NONE = "none"
    CHROOT = "chroot"
    NSPAWN = "nspawn"


class CommandConfig(BaseModel):
    """Description of one build step's execution environment.

    ``bind_mounts`` and ``extra_env`` keep declaration order; the order
    reaching ``systemd-nspawn`` matches the order they were added.
    """

    architecture: str = Field(default="", description="Target architecture, empty for the host's.")
    workdir: str = Field(default="", description="Working directory for the spawned process.")
    chroot: str = Field(default="", description="Root filesystem path, empty for none.")
    method: ChrootMethod = Field(default=ChrootMethod.NONE, description="Isolation mode.")
    bind_mounts: list[str] = Field(default_factory=list, description="'source' or 'source:target' specs.")
    extra_env: list[str] = Field(default_factory=list, description="Extra KEY=VALUE assignments.")

    @field_validator("architecture")
    @classmethod
    def _validate_architecture(cls, value: str) -> str:
        if value and value not in SUPPORTED_ARCHITECTURES:
            msg = f"unsupported architecture '{value}'"
            raise ValueError(msg)
        return value

    @model_validator(mode="after")
    def _validate_chroot(self) -> CommandConfig:
        if self.method != ChrootMethod.NONE and not self.chroot:
            msg = f"chroot method '{self.method.value}' requires a chroot path"
            raise ValueError(msg)
        return self

    def add_env(self, assignment: str) -> None:
        """Append a raw ``KEY=VALUE`` assignment."""
        self.extra_env.append(assignment)

    def add_env_key(self, key: str, value: str) -> None:
        self.extra_env.append(f"{key}={value}")

    def add_bind_mount(self, source: str, target: str = "") -> None:
        """Bind *source* at *target* inside the chroot, or onto itself if no target."""
        self.bind_mounts.append(f"{source}:{target}" if target else source)


class RunnerSettings(BaseModel):
    """Host-side settings shared by every run of a :class:`CommandRunner`."""

    host_root: Path = Field(
        default=Path("/"),
        description="Host root holding etc/resolv.conf and the qemu interpreters.",
    )
    host_architecture: str | None = Field(
        default=None,
        description="Override host architecture detection (Go-style name, e.g. 'amd64').",
    )
    chroot_tool: str = Field(default="chroot", description="Classic chroot executable.")
    container_tool: str = Field(default="systemd-nspawn", description="Namespace container executable.")


class RunResult(BaseModel):
    """Outcome of a successful run."""

    label: str
    argv: list[str]
    exit_code: int = 0
    emulator: str | None = Field(default=None, description="Interpreter injected for the run, if any.")
