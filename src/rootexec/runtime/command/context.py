"""Build context and the chroot command factory derived from it."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field

from rootexec.runtime.command.models import ChrootMethod, CommandConfig

logger = logging.getLogger(__name__)

DISK_BY_ID_DIR = "/dev/disk"


class BuildContext(BaseModel):
    """State shared by the steps of one image build."""

    architecture: str = ""
    rootdir: str
    environ_vars: dict[str, str] = Field(default_factory=dict)
    image: str | None = Field(default=None, description="Disk image file being populated, if any.")
    image_partitions: list[str] = Field(
        default_factory=list,
        description="Device paths of the image's partitions.",
    )


def chroot_command_for_context(context: BuildContext) -> CommandConfig:
    """Return an nspawn :class:`CommandConfig` for running inside *context*'s rootfs.

    When the build has a disk image, the image, each of its partition
    devices and ``/dev/disk`` are bind mounted so bootloader and fstab tools
    inside the chroot can see them.
    """
    cmd = CommandConfig(
        architecture=context.architecture,
        chroot=context.rootdir,
        method=ChrootMethod.NSPAWN,
    )

    for key, value in context.environ_vars.items():
        cmd.add_env_key(key, value)

    if context.image:
        path = _real_path(context.image)
        if path is not None:
            cmd.add_bind_mount(path)
        for device in context.image_partitions:
            path = _real_path(device)
            if path is not None:
                cmd.add_bind_mount(path)
        cmd.add_bind_mount(DISK_BY_ID_DIR)

    return cmd


def _real_path(path: str) -> str | None:
    try:
        return str(Path(path).resolve(strict=True))
    except OSError as exc:
        logger.warning("Failed to get realpath for %s: %s", path, exc)
        return None
