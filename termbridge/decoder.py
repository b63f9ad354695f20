"""Low-level terminal input decoding.

Reads raw bytes from a channel and translates them into input events.
Handles ESC-sequence timing, CSI/SS3 keys, SGR mouse reports and UTF-8
text. Multi-byte characters are assembled with an incremental decoder.
Malformed or truncated sequences are dropped instead of raised.
"""

from __future__ import annotations

import codecs
import logging
import re
from collections.abc import Iterator

from .channel import EOF
from .events import (
    CharacterEvent,
    InputEvent,
    MouseAction,
    MouseEvent,
    SpecialEvent,
    SpecialKey,
)

logger = logging.getLogger(__name__)

ESC_SEQUENCE_TIMEOUT_MS = 50
MAX_SEQUENCE_BYTES = 64

ESC = 0x1B

_CSI_FINAL_KEYS = {
    "A": SpecialKey.ARROW_UP,
    "B": SpecialKey.ARROW_DOWN,
    "C": SpecialKey.ARROW_RIGHT,
    "D": SpecialKey.ARROW_LEFT,
    "H": SpecialKey.HOME,
    "F": SpecialKey.END,
}

_SS3_KEYS = {
    "P": SpecialKey.F1,
    "Q": SpecialKey.F2,
    "R": SpecialKey.F3,
    "S": SpecialKey.F4,
}

# Parameterised CSI forms sent by rxvt, tmux and the linux console.
_CSI_TILDE_KEYS = {
    "1": SpecialKey.HOME,
    "7": SpecialKey.HOME,
    "4": SpecialKey.END,
    "8": SpecialKey.END,
    "11": SpecialKey.F1,
    "12": SpecialKey.F2,
    "13": SpecialKey.F3,
    "14": SpecialKey.F4,
}

_CSI_MODIFIED_RE = re.compile(r"1;\d+([ABCDHF])")

MOUSE_SCROLL_UP_CODE = 64
MOUSE_SCROLL_DOWN_CODE = 65
MOUSE_MOTION_FLAG = 0x20
MOUSE_MOVE_NO_BUTTON_CODE = 35


def mouse_action_for(code: int, release: bool) -> MouseAction:
    """Classify an SGR mouse button code.

    A release terminator wins over everything. Code 35 is motion with no
    button held and is only reported under any-motion tracking; other codes
    carrying the motion flag are drags, so 32 is a left-button drag.
    """
    if release:
        return MouseAction.CLICK_RELEASE
    if code == MOUSE_SCROLL_UP_CODE:
        return MouseAction.SCROLL_UP
    if code == MOUSE_SCROLL_DOWN_CODE:
        return MouseAction.SCROLL_DOWN
    if code == MOUSE_MOVE_NO_BUTTON_CODE:
        return MouseAction.MOVE
    if code & MOUSE_MOTION_FLAG and code < MOUSE_SCROLL_UP_CODE:
        return MouseAction.DRAG
    return MouseAction.CLICK_DOWN


def mouse_button_for(code: int) -> int:
    """Map a button code to 1/2/3 (left/middle/right) or 4/5 for the wheel."""
    if code == MOUSE_SCROLL_UP_CODE:
        return 4
    if code == MOUSE_SCROLL_DOWN_CODE:
        return 5
    return (code & ~MOUSE_MOTION_FLAG) % 3 + 1


def decode_sgr_mouse(payload: str, terminator: str) -> MouseEvent | None:
    """Decode ``button;column;row`` from an SGR report body.

    Wire coordinates are 1-based; the event carries 0-based ones. Returns
    ``None`` for a wrong field count or a non-numeric field.
    """
    fields = payload.split(";")
    if len(fields) != 3:
        return None
    if not all(field.isascii() and field.isdigit() for field in fields):
        return None
    code, column, row = (int(field) for field in fields)
    return MouseEvent(
        action=mouse_action_for(code, terminator == "m"),
        button=mouse_button_for(code),
        column=column - 1,
        row=row - 1,
    )


def decode_control_byte(value: int) -> InputEvent:
    """Map a C0 control byte (or DEL) to its key event."""
    if value in (10, 13):
        return SpecialEvent(SpecialKey.ENTER)
    if value in (8, 127):
        return SpecialEvent(SpecialKey.BACKSPACE)
    if value == 9:
        return SpecialEvent(SpecialKey.TAB)
    return CharacterEvent(chr(value + 64), ctrl=True)


def _is_final_byte(value: int) -> bool:
    return value == ord("~") or (0x41 <= value <= 0x5A) or (0x61 <= value <= 0x7A)


class InputDecoder:
    """Byte-level state machine producing one input event per call.

    ``escape_timeout_ms`` bounds every wait for a follow-up byte inside an
    escape sequence. A lone ESC that sees nothing within that window is the
    Escape key.
    """

    def __init__(self, channel, escape_timeout_ms: int = ESC_SEQUENCE_TIMEOUT_MS) -> None:
        self.channel = channel
        self.escape_timeout_ms = escape_timeout_ms
        # Byte that ended a broken UTF-8 run; it starts the next event.
        self._held: int | None = None

    def _read(self, timeout_ms: int | None) -> int | None:
        if self._held is not None:
            value, self._held = self._held, None
            return value
        return self.channel.read_byte(timeout_ms)

    def poll(self, timeout_ms: int) -> InputEvent | None:
        """Return the next event if its first byte arrives within ``timeout_ms``.

        End of input yields an ``EOF`` special event rather than ``None``.
        """
        first = self._read(max(0, timeout_ms))
        if first is None:
            return None
        if first == EOF:
            logger.debug("poll -> EOF")
            return SpecialEvent(SpecialKey.EOF)
        return self.decode_byte(first)

    def read_blocking(self) -> InputEvent | None:
        """Block until one full event is decoded; ``None`` once input has ended."""
        while True:
            first = self._read(None)
            if first is None:
                continue
            if first == EOF:
                logger.debug("read_blocking -> EOF")
                return None
            event = self.decode_byte(first)
            if event is not None:
                return event

    def events(self) -> Iterator[InputEvent]:
        """Lazily yield events until the input stream ends."""
        while True:
            event = self.read_blocking()
            if event is None:
                return
            yield event

    def decode_byte(self, first: int) -> InputEvent | None:
        """Decode the event starting with ``first``, reading follow-ups as needed."""
        if first == ESC:
            event = self._decode_escape()
        elif first < 0x20 or first == 0x7F:
            event = decode_control_byte(first)
        elif first >= 0x80:
            event = self._decode_text(first)
        else:
            event = CharacterEvent(chr(first))
        logger.debug("decoded 0x%02x -> %r", first, event)
        return event

    def _decode_text(self, first: int) -> CharacterEvent:
        """Assemble one UTF-8 character; broken input becomes U+FFFD."""
        decode = codecs.getincrementaldecoder("utf-8")(errors="replace").decode
        text = decode(bytes([first]))
        while not text:
            value = self._next()
            if value is None:
                text = decode(b"", final=True)
            elif value & 0xC0 != 0x80:
                # Not a continuation byte: keep it for the next event.
                self._held = value
                text = decode(b"", final=True)
            else:
                text = decode(bytes([value]))
        return CharacterEvent(text[0])

    def _next(self) -> int | None:
        value = self._read(self.escape_timeout_ms)
        if value is None or value == EOF:
            return None
        return value

    def _decode_escape(self) -> InputEvent | None:
        follow = self._next()
        if follow is None:
            return SpecialEvent(SpecialKey.ESCAPE)
        if follow == ord("["):
            return self._decode_csi()
        if follow == ord("O"):
            code = self._next()
            if code is None:
                logger.debug("incomplete SS3 sequence")
                return None
            return self._special(_SS3_KEYS.get(chr(code)))
        if 0x20 <= follow <= 0x7E:
            return CharacterEvent(chr(follow), alt=True)
        logger.debug("unknown escape sequence ESC 0x%02x", follow)
        return None

    def _decode_csi(self) -> InputEvent | None:
        code = self._next()
        if code is None:
            logger.debug("incomplete CSI sequence")
            return None
        ch = chr(code)
        if ch in _CSI_FINAL_KEYS:
            return SpecialEvent(_CSI_FINAL_KEYS[ch])
        if ch == "<":
            return self._decode_mouse()
        if "0" <= ch <= "9" or ch in ";?":
            return self._decode_csi_params(ch)
        logger.debug("unknown CSI code %r", ch)
        return None

    def _decode_csi_params(self, first: str) -> InputEvent | None:
        seq = [first]
        while len(seq) < MAX_SEQUENCE_BYTES:
            value = self._next()
            if value is None:
                logger.debug("incomplete sequence ESC[%s", "".join(seq))
                return None
            seq.append(chr(value))
            if _is_final_byte(value):
                break
        else:
            logger.debug("oversized sequence ESC[%s dropped", "".join(seq))
            return None

        text = "".join(seq)
        if text.endswith("~"):
            return self._special(_CSI_TILDE_KEYS.get(text[:-1]))
        match = _CSI_MODIFIED_RE.fullmatch(text)
        if match:
            return SpecialEvent(_CSI_FINAL_KEYS[match.group(1)])
        logger.debug("consumed sequence ESC[%s", text)
        return None

    def _decode_mouse(self) -> MouseEvent | None:
        payload = bytearray()
        while True:
            value = self._next()
            if value is None:
                logger.debug("incomplete mouse sequence")
                return None
            if value in (ord("M"), ord("m")):
                break
            payload.append(value)
            if len(payload) > MAX_SEQUENCE_BYTES:
                logger.debug("oversized mouse sequence dropped")
                return None
        event = decode_sgr_mouse(payload.decode("ascii", errors="replace"), chr(value))
        if event is None:
            logger.debug("invalid mouse params %r", bytes(payload))
        return event

    @staticmethod
    def _special(kind: SpecialKey | None) -> SpecialEvent | None:
        if kind is None:
            return None
        return SpecialEvent(kind)


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "InputDecoder",
    "decode_control_byte",
    "decode_sgr_mouse",
    "mouse_action_for",
    "mouse_button_for",
]
