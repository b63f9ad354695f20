"""Byte-level access to the terminal device.

Wraps the stdin/stdout file descriptors with timed single-byte reads, a
buffered writer, termios attribute access, and size queries. This is the
only module that touches the device directly.
"""

from __future__ import annotations

import logging
import os
import select
import termios
import tty

from .events import TerminalSize

logger = logging.getLogger(__name__)

EOF = -1


class PosixChannel:
    """Raw channel bound to a pair of POSIX file descriptors."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._pending = bytearray()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def is_tty(self) -> bool:
        try:
            return os.isatty(self.stdin_fd)
        except OSError:
            return False

    def read_byte(self, timeout_ms: int | None = None) -> int | None:
        """Read one byte, waiting at most ``timeout_ms`` milliseconds.

        Returns ``None`` on timeout and ``EOF`` when the stream has ended or
        the device can no longer be read. ``timeout_ms=None`` blocks.
        """
        if self._closed:
            return EOF
        try:
            if timeout_ms is not None:
                ready, _, _ = select.select([self.stdin_fd], [], [], max(0.0, timeout_ms / 1000.0))
                if not ready:
                    return None
            ch = os.read(self.stdin_fd, 1)
        except (OSError, ValueError) as exc:
            logger.debug("read failed on fd %s: %s", self.stdin_fd, exc)
            return EOF
        if not ch:
            return EOF
        return ch[0]

    def write(self, data: bytes) -> None:
        if self._closed:
            return
        self._pending.extend(data)

    def flush(self) -> None:
        if self._closed or not self._pending:
            return
        view = memoryview(bytes(self._pending))
        self._pending.clear()
        while view:
            written = os.write(self.stdout_fd, view)
            view = view[written:]

    def get_attributes(self) -> list:
        return termios.tcgetattr(self.stdin_fd)

    def set_attributes(self, attributes: list) -> None:
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, attributes)

    def enter_raw_mode(self) -> None:
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)

    def get_size(self) -> TerminalSize:
        """Return the device size, or ``0x0`` when it cannot be determined."""
        try:
            size = os.get_terminal_size(self.stdout_fd)
        except (OSError, ValueError):
            return TerminalSize(0, 0)
        return TerminalSize(size.columns, size.lines)

    def close(self) -> None:
        if self._closed:
            return
        try:
            self.flush()
        finally:
            self._closed = True
            self._pending.clear()


__all__ = ["EOF", "PosixChannel"]
