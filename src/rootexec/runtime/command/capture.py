"""Line-buffered, labeled capture of process output.

stdout and stderr of the child are merged into one pipe before they reach
the capture, so a line written partly to each stream can come out split.
"""

from __future__ import annotations

import logging

output_logger = logging.getLogger("rootexec.output")


class OutputCapture:
    """Turns a raw byte stream into ``"<label> | <line>"`` log records.

    Complete lines are logged as soon as they arrive. A trailing partial
    line is held back until :meth:`flush` signals end of stream.
    """

    def __init__(self, label: str, *, logger: logging.Logger | None = None) -> None:
        self.label = label
        self._logger = logger or output_logger
        self._buffer = bytearray()

    def write(self, data: bytes) -> int:
        self._buffer.extend(data)
        self._emit_complete_lines()
        return len(data)

    def flush(self) -> None:
        """Emit any held-back partial line."""
        self._emit_complete_lines()
        if self._buffer:
            self._log(bytes(self._buffer))
            self._buffer.clear()

    def _emit_complete_lines(self) -> None:
        while True:
            idx = self._buffer.find(b"\n")
            if idx < 0:
                return
            line = bytes(self._buffer[:idx])
            del self._buffer[: idx + 1]
            self._log(line)

    def _log(self, line: bytes) -> None:
        self._logger.info("%s | %s", self.label, line.decode(errors="replace"))
