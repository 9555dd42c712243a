"""Tests for OutputCapture."""

import logging

import pytest

from rootexec.runtime.command.capture import OutputCapture


@pytest.fixture
def records(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    caplog.set_level(logging.INFO, logger="rootexec.output")
    return caplog


def _lines(caplog: pytest.LogCaptureFixture) -> list[str]:
    return [r.getMessage() for r in caplog.records if r.name == "rootexec.output"]


class TestOutputCapture:
    def test_complete_lines_emitted_immediately(self, records) -> None:
        capture = OutputCapture("apt")
        capture.write(b"one\ntwo\n")
        assert _lines(records) == ["apt | one", "apt | two"]

    def test_partial_line_held_until_flush(self, records) -> None:
        capture = OutputCapture("build")
        capture.write(b"a\nb")
        assert _lines(records) == ["build | a"]

        capture.flush()
        assert _lines(records) == ["build | a", "build | b"]

    def test_line_split_across_writes(self, records) -> None:
        capture = OutputCapture("x")
        capture.write(b"hel")
        capture.write(b"lo\nwor")
        capture.write(b"ld\n")
        assert _lines(records) == ["x | hello", "x | world"]

    def test_flush_with_empty_buffer_logs_nothing(self, records) -> None:
        capture = OutputCapture("x")
        capture.write(b"done\n")
        capture.flush()
        assert _lines(records) == ["x | done"]

    def test_empty_lines_preserved(self, records) -> None:
        capture = OutputCapture("x")
        capture.write(b"\n\n")
        assert _lines(records) == ["x | ", "x | "]

    def test_write_returns_length(self) -> None:
        assert OutputCapture("x").write(b"abc") == 3

    def test_invalid_utf8_replaced(self, records) -> None:
        capture = OutputCapture("x")
        capture.write(b"\xff\n")
        assert _lines(records) == ["x | \ufffd"]

    def test_custom_logger(self, caplog: pytest.LogCaptureFixture) -> None:
        log = logging.getLogger("test.capture")
        caplog.set_level(logging.INFO, logger="test.capture")
        capture = OutputCapture("lbl", logger=log)
        capture.write(b"hi\n")
        assert [r.getMessage() for r in caplog.records if r.name == "test.capture"] == ["lbl | hi"]
