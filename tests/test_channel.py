"""Tests for the POSIX raw channel.

Uses real pipes for timed reads and buffered writes, and mocks termios/tty
for attribute handling.
"""

from __future__ import annotations

import os
import termios
import unittest
from unittest import mock

from termbridge.channel import EOF, PosixChannel
from termbridge.events import TerminalSize


class PosixChannelPipeTests(unittest.TestCase):
    def setUp(self) -> None:
        self.read_fd, self.write_fd = os.pipe()
        self._open = {self.read_fd, self.write_fd}

    def tearDown(self) -> None:
        for fd in self._open:
            os.close(fd)

    def _close(self, fd: int) -> None:
        os.close(fd)
        self._open.discard(fd)

    def test_timed_read_returns_none_when_idle(self) -> None:
        channel = PosixChannel(self.read_fd, self.write_fd)

        self.assertIsNone(channel.read_byte(10))

    def test_read_returns_byte_values(self) -> None:
        os.write(self.write_fd, b"\x1bq")
        channel = PosixChannel(self.read_fd, self.write_fd)

        self.assertEqual(channel.read_byte(10), 0x1B)
        self.assertEqual(channel.read_byte(None), ord("q"))

    def test_end_of_stream_reads_as_eof(self) -> None:
        channel = PosixChannel(self.read_fd, self.write_fd)
        self._close(self.write_fd)

        self.assertEqual(channel.read_byte(10), EOF)
        self.assertEqual(channel.read_byte(None), EOF)

    def test_writes_are_buffered_until_flush(self) -> None:
        out_read, out_write = os.pipe()
        self._open.update({out_read, out_write})
        channel = PosixChannel(self.read_fd, out_write)

        channel.write(b"\x1b[2J")
        channel.write(b"hi")
        self.assertIsNone(PosixChannel(out_read, out_write).read_byte(0))

        channel.flush()
        self.assertEqual(os.read(out_read, 16), b"\x1b[2Jhi")

    def test_closed_channel_drops_writes_and_reads_eof(self) -> None:
        out_read, out_write = os.pipe()
        self._open.update({out_read, out_write})
        channel = PosixChannel(self.read_fd, out_write)
        channel.write(b"bye")
        channel.close()
        channel.close()
        channel.write(b"late")
        channel.flush()

        self.assertTrue(channel.closed)
        self.assertEqual(os.read(out_read, 16), b"bye")
        self.assertEqual(channel.read_byte(0), EOF)

    def test_read_error_is_reported_as_eof(self) -> None:
        channel = PosixChannel(self.read_fd, self.write_fd)

        with mock.patch("termbridge.channel.os.read", side_effect=OSError("EIO")):
            os.write(self.write_fd, b"x")
            self.assertEqual(channel.read_byte(10), EOF)

    def test_pipe_size_reads_as_zero(self) -> None:
        channel = PosixChannel(self.read_fd, self.write_fd)

        self.assertEqual(channel.get_size(), TerminalSize(0, 0))
        self.assertFalse(channel.is_tty())


class PosixChannelTermiosTests(unittest.TestCase):
    def test_attribute_access_uses_termios(self) -> None:
        channel = PosixChannel(stdin_fd=0, stdout_fd=1)
        saved_state = [1, 2, 3]

        with mock.patch("termbridge.channel.termios.tcgetattr", return_value=saved_state) as get_mock, mock.patch(
            "termbridge.channel.termios.tcsetattr"
        ) as set_mock, mock.patch("termbridge.channel.tty.setraw") as setraw_mock:
            self.assertEqual(channel.get_attributes(), saved_state)
            channel.enter_raw_mode()
            channel.set_attributes(saved_state)

        get_mock.assert_called_once_with(0)
        setraw_mock.assert_called_once_with(0, termios.TCSAFLUSH)
        set_mock.assert_called_once_with(0, termios.TCSAFLUSH, saved_state)

    def test_size_query_reads_stdout(self) -> None:
        channel = PosixChannel(stdin_fd=0, stdout_fd=1)

        with mock.patch(
            "termbridge.channel.os.get_terminal_size", return_value=os.terminal_size((120, 40))
        ) as size_mock:
            self.assertEqual(channel.get_size(), TerminalSize(120, 40))

        size_mock.assert_called_once_with(1)


if __name__ == "__main__":
    unittest.main()
