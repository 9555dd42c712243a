"""Tests for ResolvConfGuard."""

import hashlib
import logging
import os

import pytest

from rootexec.runtime.command.models import ChrootMethod
from rootexec.runtime.command.resolv import GENERATED_MARKER, ResolvConfGuard
from rootexec.runtime.errors import SetupError

HOST_CONF = b"nameserver 10.0.0.1\n"
CHROOT_CONF = b"nameserver 192.168.1.1\nsearch example.org\n"
OVERLAY = GENERATED_MARKER + HOST_CONF


@pytest.fixture
def host_root(tmp_path):
    host = tmp_path / "host"
    (host / "etc").mkdir(parents=True)
    (host / "etc/resolv.conf").write_bytes(HOST_CONF)
    return host


@pytest.fixture
def chroot(tmp_path):
    root = tmp_path / "root"
    (root / "etc").mkdir(parents=True)
    (root / "etc/resolv.conf").write_bytes(CHROOT_CONF)
    return root


def _guard(chroot, host_root, method=ChrootMethod.NSPAWN) -> ResolvConfGuard:
    return ResolvConfGuard(chroot, method, host_root=host_root)


class TestSave:
    def test_noop_without_chroot_method(self, chroot, host_root) -> None:
        guard = _guard(chroot, host_root, ChrootMethod.NONE)
        assert guard.save() is None
        assert guard.path.read_bytes() == CHROOT_CONF
        assert not guard.sidecar.exists()

    def test_overlays_host_conf(self, chroot, host_root) -> None:
        guard = _guard(chroot, host_root)
        digest = guard.save()

        assert digest == hashlib.sha256(OVERLAY).digest()
        assert guard.path.read_bytes() == OVERLAY
        assert guard.sidecar == chroot / "etc/resolv.conf.debos"
        assert guard.sidecar.read_bytes() == CHROOT_CONF

    def test_without_existing_conf(self, tmp_path, host_root) -> None:
        root = tmp_path / "bare"
        (root / "etc").mkdir(parents=True)
        guard = _guard(root, host_root)

        guard.save()
        assert guard.path.read_bytes() == OVERLAY
        assert not guard.sidecar.exists()

    def test_existing_symlink_moved_aside(self, tmp_path, host_root) -> None:
        root = tmp_path / "linked"
        (root / "etc").mkdir(parents=True)
        os.symlink("../run/systemd/resolve/stub-resolv.conf", root / "etc/resolv.conf")
        guard = _guard(root, host_root)

        guard.save()
        assert guard.sidecar.is_symlink()
        assert not guard.path.is_symlink()

    def test_missing_host_conf_is_setup_error(self, chroot, tmp_path) -> None:
        guard = _guard(chroot, tmp_path / "nohost")
        with pytest.raises(SetupError):
            guard.save()


class TestRestore:
    def test_untouched_overlay_restores_original(self, chroot, host_root) -> None:
        guard = _guard(chroot, host_root)
        guard.restore(guard.save())

        assert guard.path.read_bytes() == CHROOT_CONF
        assert not guard.sidecar.exists()

    def test_untouched_overlay_without_original(self, tmp_path, host_root) -> None:
        root = tmp_path / "bare"
        (root / "etc").mkdir(parents=True)
        guard = _guard(root, host_root)

        guard.restore(guard.save())
        assert not guard.path.exists()
        assert not guard.sidecar.exists()

    def test_rewritten_conf_is_kept(self, chroot, host_root) -> None:
        guard = _guard(chroot, host_root)
        digest = guard.save()
        guard.path.write_bytes(b"nameserver 1.1.1.1\n")

        guard.restore(digest)
        assert guard.path.read_bytes() == b"nameserver 1.1.1.1\n"
        assert not guard.sidecar.exists()

    def test_symlink_is_kept(self, chroot, host_root) -> None:
        guard = _guard(chroot, host_root)
        digest = guard.save()
        guard.path.unlink()
        os.symlink("/run/resolvconf/resolv.conf", guard.path)

        guard.restore(digest)
        assert guard.path.is_symlink()
        assert os.readlink(guard.path) == "/run/resolvconf/resolv.conf"
        assert not guard.sidecar.exists()

    def test_removed_conf_stays_removed(self, chroot, host_root, caplog) -> None:
        guard = _guard(chroot, host_root)
        digest = guard.save()
        guard.path.unlink()

        with caplog.at_level(logging.WARNING):
            guard.restore(digest)

        assert not os.path.lexists(guard.path)
        assert not guard.sidecar.exists()
        assert any("removed" in r.getMessage() for r in caplog.records)

    def test_non_regular_file_warns(self, chroot, host_root, caplog) -> None:
        guard = _guard(chroot, host_root)
        digest = guard.save()
        guard.path.unlink()
        guard.path.mkdir()

        with caplog.at_level(logging.WARNING):
            guard.restore(digest)

        assert guard.path.is_dir()
        assert not guard.sidecar.exists()
        assert any("not a regular file" in r.getMessage() for r in caplog.records)

    def test_noop_without_digest(self, chroot, host_root) -> None:
        guard = _guard(chroot, host_root)
        guard.sidecar.write_bytes(b"left over")
        guard.restore(None)
        assert guard.sidecar.exists()

    def test_noop_without_chroot_method(self, chroot, host_root) -> None:
        guard = _guard(chroot, host_root, ChrootMethod.NONE)
        guard.restore(b"\x00" * 32)
        assert guard.path.read_bytes() == CHROOT_CONF
