"""Terminal command encoding.

Turns drawing commands (cursor moves, colors, SGR attributes, bell) into
ANSI/xterm byte sequences and flushes each one immediately. The encoder keeps
its own model of the cursor position and never asks the device for it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .events import CursorPosition

CSI = "\x1b["
BELL = b"\x07"
RESET_SGR = b"\x1b[0m"
CLEAR_SCREEN = b"\x1b[2J\x1b[H"
SHOW_CURSOR = b"\x1b[?25h"
HIDE_CURSOR = b"\x1b[?25l"


class AnsiColor(Enum):
    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7
    DEFAULT = 9


@dataclass(frozen=True)
class RgbColor:
    """24-bit truecolor value."""

    red: int
    green: int
    blue: int

    def components(self) -> tuple[int, int, int]:
        return tuple(max(0, min(255, int(c))) for c in (self.red, self.green, self.blue))


Color = AnsiColor | RgbColor


class TextAttribute(Enum):
    BOLD = "bold"
    REVERSE = "reverse"
    UNDERLINE = "underline"
    BLINK = "blink"
    ITALIC = "italic"


# (enable, disable) SGR parameters per attribute.
_ATTRIBUTE_CODES = {
    TextAttribute.BOLD: ("1", "22"),
    TextAttribute.ITALIC: ("3", "23"),
    TextAttribute.UNDERLINE: ("4", "24"),
    TextAttribute.BLINK: ("5", "25"),
    TextAttribute.REVERSE: ("7", "27"),
}


def _sgr_color(color: object, base: int) -> str | None:
    if isinstance(color, AnsiColor):
        return str(base + color.value)
    if isinstance(color, RgbColor):
        r, g, b = color.components()
        return f"{base + 8};2;{r};{g};{b}"
    return None


def sgr_foreground(color: object) -> str | None:
    """Return the SGR parameters selecting ``color`` as foreground, if known."""
    return _sgr_color(color, 30)


def sgr_background(color: object) -> str | None:
    """Return the SGR parameters selecting ``color`` as background, if known."""
    return _sgr_color(color, 40)


def sgr_attribute(attribute: object, enabled: bool) -> str | None:
    codes = _ATTRIBUTE_CODES.get(attribute) if isinstance(attribute, TextAttribute) else None
    if codes is None:
        return None
    return codes[0] if enabled else codes[1]


def cursor_position_sequence(column: int, row: int) -> bytes:
    """Encode a 0-based cell as the 1-based ``CSI row;col H`` form."""
    return f"{CSI}{row + 1};{column + 1}H".encode("ascii")


class OutputEncoder:
    """Write terminal commands to a channel, one flushed write per call."""

    def __init__(self, channel) -> None:
        self.channel = channel
        self._cursor = CursorPosition(0, 0)

    @property
    def cursor_position(self) -> CursorPosition:
        return self._cursor

    def _emit(self, payload: bytes) -> None:
        self.channel.write(payload)
        self.channel.flush()

    def _emit_sgr(self, params: str | None) -> None:
        if params is None:
            return
        self._emit(f"{CSI}{params}m".encode("ascii"))

    def move_cursor(self, column: int, row: int) -> None:
        column = max(0, column)
        row = max(0, row)
        self._emit(cursor_position_sequence(column, row))
        self._cursor = CursorPosition(column, row)

    def set_cursor_visible(self, visible: bool) -> None:
        self._emit(SHOW_CURSOR if visible else HIDE_CURSOR)

    def clear_screen(self) -> None:
        """Erase the display and home the cursor."""
        self._emit(CLEAR_SCREEN)
        self._cursor = CursorPosition(0, 0)

    def put_char(self, ch: str) -> None:
        self.put_text(ch)

    def put_text(self, text: str) -> None:
        """Write ``text`` and advance the tracked column by its length.

        No wrapping or newline handling is modelled; callers position rows
        explicitly with ``move_cursor``.
        """
        if not text:
            return
        self._emit(text.encode("utf-8", errors="replace"))
        self._cursor = CursorPosition(self._cursor.column + len(text), self._cursor.row)

    def set_foreground(self, color: Color) -> None:
        self._emit_sgr(sgr_foreground(color))

    def set_background(self, color: Color) -> None:
        self._emit_sgr(sgr_background(color))

    def enable_attribute(self, attribute: TextAttribute) -> None:
        self._emit_sgr(sgr_attribute(attribute, True))

    def disable_attribute(self, attribute: TextAttribute) -> None:
        self._emit_sgr(sgr_attribute(attribute, False))

    def reset_attributes(self) -> None:
        self._emit(RESET_SGR)

    def bell(self) -> None:
        self._emit(BELL)

    def flush(self) -> None:
        self.channel.flush()


__all__ = [
    "AnsiColor",
    "RgbColor",
    "Color",
    "TextAttribute",
    "OutputEncoder",
    "cursor_position_sequence",
    "sgr_attribute",
    "sgr_background",
    "sgr_foreground",
]
