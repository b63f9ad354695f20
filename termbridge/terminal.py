"""Terminal adapter facade.

One concrete type that wires the input decoder, output encoder, mode manager
and resize notifier over a single raw channel. This is the surface a
windowing layer talks to.
"""

from __future__ import annotations

import contextlib
import logging
import sys
from collections.abc import Iterator

from .channel import PosixChannel
from .config import TerminalConfig, load_config
from .decoder import InputDecoder
from .encoder import Color, OutputEncoder, TextAttribute
from .events import CursorPosition, InputEvent, TerminalSize
from .modes import ModeManager, MouseTracking
from .resize import ResizeListener, ResizeNotifier

logger = logging.getLogger(__name__)

TERMINAL_IDENTIFICATION = b"termbridge"


class TerminalAdapterError(RuntimeError):
    """Raised when no usable terminal channel can be opened or configured."""


def open_default_channel() -> PosixChannel:
    """Bind a channel to the process stdin/stdout descriptors."""
    try:
        stdin_fd = sys.stdin.fileno()
        stdout_fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError) as exc:
        raise TerminalAdapterError(f"stdin/stdout have no file descriptor: {exc}") from exc
    channel = PosixChannel(stdin_fd, stdout_fd)
    if not channel.is_tty():
        logger.warning("input is not a terminal (fd %s)", stdin_fd)
    return channel


class TerminalAdapter:
    """Structured event/command interface over a character-cell terminal."""

    def __init__(self, channel=None, config: TerminalConfig | None = None) -> None:
        self.config = config if config is not None else load_config()
        try:
            self._tracking = MouseTracking(self.config.mouse_tracking)
        except ValueError as exc:
            raise TerminalAdapterError(f"unknown mouse tracking mode: {self.config.mouse_tracking!r}") from exc
        self.channel = channel if channel is not None else open_default_channel()
        self.decoder = InputDecoder(self.channel, self.config.escape_timeout_ms)
        self.encoder = OutputEncoder(self.channel)
        self.modes = ModeManager(self.channel, self.encoder)
        self.resize = ResizeNotifier(
            self.channel.get_size,
            TerminalSize(self.config.fallback_columns, self.config.fallback_rows),
        )
        self._closed = False
        if self.config.install_resize_handler:
            self.resize.install()
        logger.debug("terminal adapter initialized")

    # Input

    def poll_input(self, timeout_ms: int = 1) -> InputEvent | None:
        return self.decoder.poll(timeout_ms)

    def read_input(self) -> InputEvent | None:
        return self.decoder.read_blocking()

    def events(self) -> Iterator[InputEvent]:
        return self.decoder.events()

    # Output

    @property
    def cursor_position(self) -> CursorPosition:
        return self.encoder.cursor_position

    def move_cursor(self, column: int, row: int) -> None:
        self.encoder.move_cursor(column, row)

    def set_cursor_visible(self, visible: bool) -> None:
        self.encoder.set_cursor_visible(visible)

    def clear_screen(self) -> None:
        self.encoder.clear_screen()

    def put_char(self, ch: str) -> None:
        self.encoder.put_char(ch)

    def put_text(self, text: str) -> None:
        self.encoder.put_text(text)

    def set_foreground(self, color: Color) -> None:
        self.encoder.set_foreground(color)

    def set_background(self, color: Color) -> None:
        self.encoder.set_background(color)

    def enable_attribute(self, attribute: TextAttribute) -> None:
        self.encoder.enable_attribute(attribute)

    def disable_attribute(self, attribute: TextAttribute) -> None:
        self.encoder.disable_attribute(attribute)

    def reset_attributes(self) -> None:
        self.encoder.reset_attributes()

    def bell(self) -> None:
        self.encoder.bell()

    def flush(self) -> None:
        self.encoder.flush()

    def enquire_terminal(self) -> bytes:
        """Return a fixed identification instead of querying the device."""
        return TERMINAL_IDENTIFICATION

    # Modes

    def enter_private_mode(self) -> None:
        """Enter private mode with the configured mouse granularity."""
        self.modes.enter_private_mode(self._tracking)

    def exit_private_mode(self) -> None:
        self.modes.exit_private_mode()

    def set_mouse_tracking(self, mode: MouseTracking) -> None:
        self.modes.set_mouse_tracking(mode)

    def clear_and_reset(self) -> None:
        self.modes.clear_and_reset()

    @contextlib.contextmanager
    def private_mode(self):
        """Context manager that brackets code with private-mode enter/exit."""
        try:
            self.enter_private_mode()
            yield self
        finally:
            self.exit_private_mode()

    # Resize

    def add_resize_listener(self, listener: ResizeListener) -> None:
        self.resize.add_listener(listener)

    def remove_resize_listener(self, listener: ResizeListener) -> None:
        self.resize.remove_listener(listener)

    def get_terminal_size(self) -> TerminalSize:
        return self.resize.current_size()

    # Lifecycle

    def close(self) -> None:
        """Restore the terminal and release the channel; repeat calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        try:
            self.resize.uninstall()
        except Exception as exc:
            logger.debug("error removing resize handler: %s", exc)
        self.modes.close()
        logger.debug("terminal adapter closed")

    def __enter__(self) -> TerminalAdapter:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "TERMINAL_IDENTIFICATION",
    "TerminalAdapter",
    "TerminalAdapterError",
    "open_default_channel",
]
