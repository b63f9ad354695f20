"""Tests for terminal command encoding.

Verifies the exact byte payloads for cursor, color and attribute commands,
flush-per-call behavior, and local cursor bookkeeping.
"""

from __future__ import annotations

import unittest

from termbridge.encoder import (
    AnsiColor,
    OutputEncoder,
    RgbColor,
    TextAttribute,
    sgr_attribute,
    sgr_foreground,
)
from termbridge.events import CursorPosition


class RecordingChannel:
    def __init__(self) -> None:
        self.buffer = bytearray()
        self.flushed: list[bytes] = []

    def write(self, data: bytes) -> None:
        self.buffer.extend(data)

    def flush(self) -> None:
        self.flushed.append(bytes(self.buffer))
        self.buffer.clear()


class OutputEncoderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.channel = RecordingChannel()
        self.encoder = OutputEncoder(self.channel)

    def test_move_cursor_uses_one_based_row_then_column(self) -> None:
        self.encoder.move_cursor(3, 4)

        self.assertEqual(self.channel.flushed, [b"\x1b[5;4H"])
        self.assertEqual(self.encoder.cursor_position, CursorPosition(3, 4))

    def test_tracked_position_matches_every_move(self) -> None:
        for column in range(0, 501, 25):
            for row in range(0, 501, 50):
                self.encoder.move_cursor(column, row)
                self.assertEqual(self.encoder.cursor_position, CursorPosition(column, row))

    def test_negative_coordinates_are_clamped(self) -> None:
        self.encoder.move_cursor(-3, -1)

        self.assertEqual(self.channel.flushed, [b"\x1b[1;1H"])
        self.assertEqual(self.encoder.cursor_position, CursorPosition(0, 0))

    def test_text_output_advances_column_by_character_count(self) -> None:
        self.encoder.move_cursor(2, 7)
        self.encoder.put_char("x")
        self.encoder.put_text("héllo")

        self.assertEqual(self.channel.flushed[1:], [b"x", "héllo".encode("utf-8")])
        self.assertEqual(self.encoder.cursor_position, CursorPosition(8, 7))

    def test_empty_text_writes_nothing(self) -> None:
        self.encoder.put_text("")

        self.assertEqual(self.channel.flushed, [])

    def test_clear_screen_homes_tracked_cursor(self) -> None:
        self.encoder.move_cursor(10, 10)
        self.encoder.clear_screen()

        self.assertEqual(self.channel.flushed[-1], b"\x1b[2J\x1b[H")
        self.assertEqual(self.encoder.cursor_position, CursorPosition(0, 0))

    def test_cursor_visibility_bell_and_reset(self) -> None:
        self.encoder.set_cursor_visible(False)
        self.encoder.set_cursor_visible(True)
        self.encoder.bell()
        self.encoder.reset_attributes()

        self.assertEqual(self.channel.flushed, [b"\x1b[?25l", b"\x1b[?25h", b"\x07", b"\x1b[0m"])

    def test_indexed_colors(self) -> None:
        self.encoder.set_foreground(AnsiColor.RED)
        self.encoder.set_background(AnsiColor.BLUE)
        self.encoder.set_foreground(AnsiColor.WHITE)
        self.encoder.set_background(AnsiColor.DEFAULT)

        self.assertEqual(self.channel.flushed, [b"\x1b[31m", b"\x1b[44m", b"\x1b[37m", b"\x1b[49m"])

    def test_rgb_colors_use_truecolor_form(self) -> None:
        self.encoder.set_foreground(RgbColor(1, 2, 3))
        self.encoder.set_background(RgbColor(300, -5, 128))

        self.assertEqual(self.channel.flushed, [b"\x1b[38;2;1;2;3m", b"\x1b[48;2;255;0;128m"])

    def test_unknown_color_and_attribute_are_ignored(self) -> None:
        self.encoder.set_foreground("purple")
        self.encoder.set_background(None)
        self.encoder.enable_attribute("strikethrough")
        self.encoder.disable_attribute(42)

        self.assertEqual(self.channel.flushed, [])
        self.assertIsNone(sgr_foreground(object()))

    def test_attribute_on_and_off_codes(self) -> None:
        expected = {
            TextAttribute.BOLD: ("1", "22"),
            TextAttribute.ITALIC: ("3", "23"),
            TextAttribute.UNDERLINE: ("4", "24"),
            TextAttribute.BLINK: ("5", "25"),
            TextAttribute.REVERSE: ("7", "27"),
        }
        for attribute, (on, off) in expected.items():
            with self.subTest(attribute=attribute):
                self.assertEqual(sgr_attribute(attribute, True), on)
                self.assertEqual(sgr_attribute(attribute, False), off)

        self.encoder.enable_attribute(TextAttribute.BOLD)
        self.encoder.disable_attribute(TextAttribute.REVERSE)
        self.assertEqual(self.channel.flushed, [b"\x1b[1m", b"\x1b[27m"])

    def test_flush_delegates_to_channel(self) -> None:
        self.channel.write(b"pending")
        self.encoder.flush()

        self.assertEqual(self.channel.flushed, [b"pending"])


if __name__ == "__main__":
    unittest.main()
