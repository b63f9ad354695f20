"""Window-size change notification.

Bridges ``SIGWINCH`` to an ordered registry of listeners. The registry is
guarded by a reentrant lock so listeners can be added or removed from any
thread, including from inside a notification or from the signal handler
itself, which runs on the main thread between bytecodes.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable

from .events import TerminalSize

logger = logging.getLogger(__name__)

DEFAULT_SIZE = TerminalSize(80, 25)

ResizeListener = Callable[[TerminalSize], None]


def normalize_size(size: TerminalSize, fallback: TerminalSize = DEFAULT_SIZE) -> TerminalSize:
    """Replace zero dimensions reported by dumb terminals with ``fallback``."""
    columns = size.columns if size.columns > 0 else fallback.columns
    rows = size.rows if size.rows > 0 else fallback.rows
    return TerminalSize(columns, rows)


class ResizeNotifier:
    """Dispatch terminal size changes to registered listeners in order."""

    def __init__(
        self,
        size_query: Callable[[], TerminalSize],
        fallback: TerminalSize = DEFAULT_SIZE,
    ) -> None:
        self._size_query = size_query
        self._fallback = fallback
        self._listeners: list[ResizeListener] = []
        # SIGWINCH may land while the main thread holds this lock.
        self._lock = threading.RLock()
        self._previous_handler = None
        self._installed = False

    def add_listener(self, listener: ResizeListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ResizeListener) -> None:
        """Remove the first registration of ``listener`` (by identity)."""
        with self._lock:
            for idx, registered in enumerate(self._listeners):
                if registered is listener:
                    del self._listeners[idx]
                    return

    def listeners(self) -> tuple[ResizeListener, ...]:
        with self._lock:
            return tuple(self._listeners)

    def current_size(self) -> TerminalSize:
        return normalize_size(self._size_query(), self._fallback)

    def notify(self) -> TerminalSize:
        """Query the size and hand it to every listener.

        A failing listener is logged and skipped; the rest still run.
        """
        size = self.current_size()
        logger.debug("terminal resized to %sx%s", size.columns, size.rows)
        for listener in self.listeners():
            try:
                listener(size)
            except Exception:
                logger.exception("resize listener %r failed", listener)
        return size

    def _handle_signal(self, signum, frame) -> None:
        self.notify()

    def install(self) -> bool:
        """Bind ``SIGWINCH`` to ``notify``; returns whether a handler was set."""
        if self._installed:
            return True
        sigwinch = getattr(signal, "SIGWINCH", None)
        if sigwinch is None:
            logger.debug("SIGWINCH not available on this platform")
            return False
        if threading.current_thread() is not threading.main_thread():
            logger.debug("resize handler not installed: not on the main thread")
            return False
        self._previous_handler = signal.signal(sigwinch, self._handle_signal)
        self._installed = True
        return True

    def uninstall(self) -> None:
        if not self._installed:
            return
        previous = self._previous_handler
        if previous is None:
            previous = signal.SIG_DFL
        try:
            signal.signal(signal.SIGWINCH, previous)
        except (ValueError, OSError) as exc:
            logger.debug("could not restore SIGWINCH handler: %s", exc)
        self._installed = False
        self._previous_handler = None


__all__ = ["DEFAULT_SIZE", "ResizeListener", "ResizeNotifier", "normalize_size"]
