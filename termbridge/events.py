"""Domain datatypes for decoded terminal input and cell geometry.

Events are immutable once produced by the decoder and are consumed once by
the caller. Positions and sizes are plain value objects.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SpecialKey(Enum):
    ENTER = "enter"
    BACKSPACE = "backspace"
    TAB = "tab"
    ESCAPE = "escape"
    ARROW_UP = "arrow_up"
    ARROW_DOWN = "arrow_down"
    ARROW_LEFT = "arrow_left"
    ARROW_RIGHT = "arrow_right"
    HOME = "home"
    END = "end"
    F1 = "f1"
    F2 = "f2"
    F3 = "f3"
    F4 = "f4"
    EOF = "eof"


class MouseAction(Enum):
    CLICK_DOWN = "click_down"
    CLICK_RELEASE = "click_release"
    DRAG = "drag"
    MOVE = "move"
    SCROLL_UP = "scroll_up"
    SCROLL_DOWN = "scroll_down"


@dataclass(frozen=True)
class CharacterEvent:
    """A printable character or a ctrl-modified letter."""

    value: str
    ctrl: bool = False
    alt: bool = False
    shift: bool = False


@dataclass(frozen=True)
class SpecialEvent:
    """A named non-character key, including end of input."""

    kind: SpecialKey


@dataclass(frozen=True)
class MouseEvent:
    """A mouse report with zero-based cell coordinates."""

    action: MouseAction
    button: int
    column: int
    row: int


InputEvent = CharacterEvent | SpecialEvent | MouseEvent


@dataclass(frozen=True)
class CursorPosition:
    column: int
    row: int


@dataclass(frozen=True)
class TerminalSize:
    columns: int
    rows: int


__all__ = [
    "SpecialKey",
    "MouseAction",
    "CharacterEvent",
    "SpecialEvent",
    "MouseEvent",
    "InputEvent",
    "CursorPosition",
    "TerminalSize",
]
