"""Shared error types for the command runtime."""


class RootexecError(Exception):
    """Base error for all command runtime failures."""


class ConfigurationError(RootexecError):
    """A command configuration is invalid and cannot be run."""


class UnknownArchitectureError(ConfigurationError):
    """No static interpreter is known for the requested architecture."""

    def __init__(self, architecture: str) -> None:
        self.architecture = architecture
        super().__init__(f"Don't know qemu for architecture {architecture!r}")


class SetupError(RootexecError):
    """Preparing the chroot failed (emulator copy, resolv.conf handling)."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("Setup error" + (f": {detail}" if detail else ""))


class ExecutionError(RootexecError):
    """The command could not be started."""

    def __init__(self, label: str, detail: str = "") -> None:
        self.label = label
        self.detail = detail
        super().__init__(f"{label}: execution failed" + (f": {detail}" if detail else ""))


class CommandFailedError(ExecutionError):
    """The command ran but exited with a nonzero status."""

    def __init__(self, label: str, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(label, f"exit status {returncode}")
