"""Service gate protocol and implementations.

- ``ServiceGate`` — runtime-checkable protocol bracketing chrooted commands.
- ``PolicyRcServiceGate`` — installs a Debian ``policy-rc.d`` that refuses
  every service action.
- ``NullServiceGate`` — does nothing (host runs and tests).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

POLICY_RC = Path("usr/sbin/policy-rc.d")
POLICY_RC_SIDECAR_SUFFIX = ".debos"
DENY_SCRIPT = b"#!/bin/sh\nexit 101\n"


@runtime_checkable
class ServiceGate(Protocol):
    """Prevents service-manager activation inside a chroot."""

    def deny(self, chroot: str) -> None:
        """Stop services from being started or stopped inside *chroot*."""
        ...

    def allow(self, chroot: str) -> None:
        """Undo :meth:`deny` for *chroot*."""
        ...


class NullServiceGate:
    """Satisfies the :class:`ServiceGate` protocol without touching anything."""

    def deny(self, chroot: str) -> None:
        logger.debug("NullServiceGate: not denying services in %s", chroot)

    def allow(self, chroot: str) -> None:
        logger.debug("NullServiceGate: not allowing services in %s", chroot)


class PolicyRcServiceGate:
    """Denies service actions via ``invoke-rc.d``'s policy hook.

    Satisfies the :class:`ServiceGate` protocol. An existing
    ``policy-rc.d`` in the chroot is moved aside while denied and put back
    by :meth:`allow`.
    """

    def deny(self, chroot: str) -> None:
        script, saved = self._paths(chroot)

        if os.path.lexists(script):
            os.rename(script, saved)

        script.parent.mkdir(parents=True, exist_ok=True)
        script.write_bytes(DENY_SCRIPT)
        os.chmod(script, 0o755)

    def allow(self, chroot: str) -> None:
        script, saved = self._paths(chroot)

        script.unlink(missing_ok=True)
        if os.path.lexists(saved):
            os.rename(saved, script)

    @staticmethod
    def _paths(chroot: str) -> tuple[Path, Path]:
        script = Path(chroot) / POLICY_RC
        return script, script.with_name(script.name + POLICY_RC_SIDECAR_SUFFIX)
