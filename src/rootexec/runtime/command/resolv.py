"""Temporary resolv.conf overlay for chrooted commands.

Before the command runs, the chroot's own ``etc/resolv.conf`` is moved to a
side-car file and replaced by a copy of the host's, marked with a generated
header. Afterwards the overlay is swapped back only if the command left it
untouched; anything the command wrote in its place wins.
"""

from __future__ import annotations

import hashlib
import logging
import os
import stat
from pathlib import Path

from rootexec.runtime.command.models import ChrootMethod
from rootexec.runtime.errors import SetupError

logger = logging.getLogger(__name__)

RESOLV_CONF = Path("etc/resolv.conf")
SIDECAR_SUFFIX = ".debos"
GENERATED_MARKER = b"# Automatically generated by Debos\n"


def checksum(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


class ResolvConfGuard:
    """Saves and conditionally restores ``<chroot>/etc/resolv.conf``."""

    def __init__(
        self,
        chroot: str | Path,
        method: ChrootMethod,
        *,
        host_root: Path = Path("/"),
    ) -> None:
        self._method = method
        self._host_conf = Path(host_root) / RESOLV_CONF
        self.path = Path(chroot) / RESOLV_CONF
        self.sidecar = self.path.with_name(self.path.name + SIDECAR_SUFFIX)

    def save(self) -> bytes | None:
        """Overlay the host's resolv.conf and return the overlay's checksum.

        Returns ``None`` when no chroot is in use.
        """
        if self._method == ChrootMethod.NONE:
            return None

        try:
            if os.path.lexists(self.path):
                os.rename(self.path, self.sidecar)

            data = GENERATED_MARKER + self._host_conf.read_bytes()
            digest = checksum(data)
            self.path.write_bytes(data)
            os.chmod(self.path, 0o644)
        except OSError as exc:
            raise SetupError(f"cannot overlay {self.path}: {exc}") from exc

        return digest

    def restore(self, digest: bytes | None) -> None:
        """Put the chroot's original resolv.conf back if the overlay is untouched."""
        if self._method == ChrootMethod.NONE or digest is None:
            return

        try:
            self._restore(digest)
        finally:
            self._remove_sidecar()

    def _restore(self, digest: bytes) -> None:
        try:
            mode = os.lstat(self.path).st_mode
        except FileNotFoundError:
            logger.warning("%s was removed by the command, leaving it absent", self.path)
            return
        except OSError as exc:
            raise SetupError(f"cannot inspect {self.path}: {exc}") from exc

        if stat.S_ISLNK(mode):
            # Replaced by a link; leave it.
            return

        if not stat.S_ISREG(mode):
            logger.warning("%s inside the chroot is not a regular file", self.path)
            return

        try:
            current = checksum(self.path.read_bytes())
            if current != digest:
                logger.debug("%s was rewritten by the command, keeping it", self.path)
                return

            self.path.unlink()
            if os.path.lexists(self.sidecar):
                os.rename(self.sidecar, self.path)
        except OSError as exc:
            raise SetupError(f"cannot restore {self.path}: {exc}") from exc

    def _remove_sidecar(self) -> None:
        try:
            self.sidecar.unlink(missing_ok=True)
        except OSError:
            logger.warning("Failed to remove %s", self.sidecar, exc_info=True)
