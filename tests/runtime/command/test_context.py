"""Tests for the build-context command factory."""

import logging
import os

from rootexec.runtime.command.context import BuildContext, chroot_command_for_context
from rootexec.runtime.command.models import ChrootMethod


class TestChrootCommandForContext:
    def test_minimal_context(self) -> None:
        cmd = chroot_command_for_context(BuildContext(rootdir="/build/root", architecture="arm64"))
        assert cmd.method == ChrootMethod.NSPAWN
        assert cmd.chroot == "/build/root"
        assert cmd.architecture == "arm64"
        assert cmd.bind_mounts == []
        assert cmd.extra_env == []

    def test_environment_added(self) -> None:
        ctx = BuildContext(rootdir="/r", environ_vars={"http_proxy": "http://proxy:3128", "LANG": "C"})
        cmd = chroot_command_for_context(ctx)
        assert cmd.extra_env == ["http_proxy=http://proxy:3128", "LANG=C"]

    def test_image_and_partitions_bound(self, tmp_path) -> None:
        image = tmp_path / "disk.img"
        image.write_bytes(b"")
        part = tmp_path / "loop0p1"
        part.write_bytes(b"")
        link = tmp_path / "by-label"
        os.symlink(part, link)

        ctx = BuildContext(rootdir="/r", image=str(image), image_partitions=[str(link)])
        cmd = chroot_command_for_context(ctx)

        assert cmd.bind_mounts == [
            os.path.realpath(image),
            os.path.realpath(part),
            "/dev/disk",
        ]

    def test_unresolvable_partition_skipped(self, tmp_path, caplog) -> None:
        image = tmp_path / "disk.img"
        image.write_bytes(b"")
        ctx = BuildContext(
            rootdir="/r",
            image=str(image),
            image_partitions=[str(tmp_path / "gone")],
        )

        with caplog.at_level(logging.WARNING):
            cmd = chroot_command_for_context(ctx)

        assert cmd.bind_mounts == [os.path.realpath(image), "/dev/disk"]
        assert any("Failed to get realpath" in r.getMessage() for r in caplog.records)

    def test_partitions_ignored_without_image(self, tmp_path) -> None:
        part = tmp_path / "p1"
        part.write_bytes(b"")
        cmd = chroot_command_for_context(BuildContext(rootdir="/r", image_partitions=[str(part)]))
        assert cmd.bind_mounts == []
