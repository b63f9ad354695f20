"""Terminal mode lifecycle for the adapter session.

Owns raw-mode entry, alternate-screen switching, and mouse tracking toggles.
Captures the original tty attributes once and restores them on exit/close.
"""

from __future__ import annotations

import contextlib
import copy
import logging
from collections.abc import Callable
from enum import Enum

from .encoder import OutputEncoder

logger = logging.getLogger(__name__)

ALT_SCREEN_ON = b"\x1b[?1049h"
ALT_SCREEN_OFF = b"\x1b[?1049l"

# Every tracking variant is switched off, not only the active one.
MOUSE_TRACKING_OFF = b"\x1b[?1000l\x1b[?1002l\x1b[?1003l\x1b[?1006l"
MOUSE_TRACKING_NORMAL = b"\x1b[?1000h\x1b[?1002h\x1b[?1006h"
MOUSE_TRACKING_ANY = b"\x1b[?1000h\x1b[?1003h\x1b[?1006h"

STATE_NORMAL = "normal"
STATE_PRIVATE = "private"


class MouseTracking(Enum):
    OFF = "off"
    NORMAL = "normal"
    ANY = "any"


_TRACKING_SEQUENCES = {
    MouseTracking.NORMAL: MOUSE_TRACKING_NORMAL,
    MouseTracking.ANY: MOUSE_TRACKING_ANY,
}


class ModeManager:
    """Manage private-mode transitions and attribute restoration."""

    def __init__(self, channel, encoder: OutputEncoder) -> None:
        """Capture the tty attribute snapshot from ``channel``."""
        self.channel = channel
        self.encoder = encoder
        self._state = STATE_NORMAL
        self._mouse_tracking = MouseTracking.OFF
        self._closed = False
        self._snapshot = None
        try:
            self._snapshot = copy.deepcopy(channel.get_attributes())
        except Exception as exc:
            logger.warning("could not capture terminal attributes: %s", exc)

    @property
    def state(self) -> str:
        return self._state

    @property
    def mouse_tracking(self) -> MouseTracking:
        return self._mouse_tracking

    @property
    def snapshot(self):
        return self._snapshot

    def _write(self, payload: bytes) -> None:
        self.channel.write(payload)
        self.channel.flush()

    def enter_private_mode(self, tracking: MouseTracking = MouseTracking.NORMAL) -> None:
        """Switch to the alternate screen, go raw, then enable mouse tracking.

        The screen switch comes first so anything the terminal echoes while
        changing modes lands on the alternate buffer.
        """
        if self._state == STATE_PRIVATE:
            return
        self._write(ALT_SCREEN_ON)
        self.channel.enter_raw_mode()
        self.set_mouse_tracking(tracking)
        self.channel.flush()
        self._state = STATE_PRIVATE
        logger.debug("entered private mode")

    def exit_private_mode(self) -> None:
        """Undo private mode and restore the captured attributes."""
        self._teardown()
        self._state = STATE_NORMAL
        logger.debug("exited private mode")

    def set_mouse_tracking(self, mode: MouseTracking) -> None:
        """Change mouse reporting granularity.

        ``OFF`` always writes the full disable set. Switching between two
        enabled modes disables the old one first.
        """
        if mode == MouseTracking.OFF:
            self._write(MOUSE_TRACKING_OFF)
            self._mouse_tracking = MouseTracking.OFF
            return
        sequence = _TRACKING_SEQUENCES.get(mode)
        if sequence is None or mode == self._mouse_tracking:
            return
        if self._mouse_tracking != MouseTracking.OFF:
            self._write(MOUSE_TRACKING_OFF)
        self._write(sequence)
        self._mouse_tracking = mode

    def restore_attributes(self) -> None:
        """Put the captured snapshot back; failures are logged, not raised."""
        if self._snapshot is None:
            return
        try:
            self.channel.set_attributes(copy.deepcopy(self._snapshot))
        except Exception as exc:
            logger.debug("error restoring attributes: %s", exc)
        else:
            logger.debug("terminal attributes restored")

    def clear_and_reset(self) -> None:
        """Clear the screen, home the cursor and drop all SGR state."""
        self.encoder.clear_screen()
        self.encoder.reset_attributes()

    def close(self) -> None:
        """Tear down regardless of state, then release the channel.

        Safe to call more than once; later calls do nothing.
        """
        if self._closed:
            return
        self._closed = True
        self._teardown()
        self._state = STATE_NORMAL
        self._guarded("close channel", self.channel.close)
        logger.debug("mode manager closed")

    def _teardown(self) -> None:
        # Tracking and SGR resets precede the buffer switch so nothing leaks
        # onto the restored main screen.
        steps: list[tuple[str, Callable[[], None]]] = [
            ("disable mouse tracking", lambda: self.set_mouse_tracking(MouseTracking.OFF)),
            ("reset attributes", self.encoder.reset_attributes),
            ("show cursor", lambda: self.encoder.set_cursor_visible(True)),
            ("leave alternate screen", lambda: self._write(ALT_SCREEN_OFF)),
            ("clear screen", self.encoder.clear_screen),
            ("restore attributes", self.restore_attributes),
        ]
        for name, step in steps:
            self._guarded(name, step)
        self._mouse_tracking = MouseTracking.OFF

    @staticmethod
    def _guarded(name: str, step: Callable[[], None]) -> None:
        try:
            step()
        except Exception as exc:
            logger.debug("teardown step %r failed: %s", name, exc)

    @contextlib.contextmanager
    def private_mode(self):
        """Context manager that brackets code with enter/exit calls."""
        try:
            self.enter_private_mode()
            yield
        finally:
            self.exit_private_mode()


__all__ = [
    "MouseTracking",
    "ModeManager",
    "STATE_NORMAL",
    "STATE_PRIVATE",
]
