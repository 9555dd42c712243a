"""rootexec — run build-step commands on the host, in a chroot or in a namespace container."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from rootexec.runtime.command.models import ChrootMethod as ChrootMethod
    from rootexec.runtime.command.models import CommandConfig as CommandConfig
    from rootexec.runtime.command.runner import CommandRunner as CommandRunner

_LAZY_EXPORTS = {
    "ChrootMethod": "rootexec.runtime.command.models",
    "CommandConfig": "rootexec.runtime.command.models",
    "CommandRunner": "rootexec.runtime.command.runner",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'rootexec' has no attribute {name!r}")
