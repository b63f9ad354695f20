"""Public package surface for termbridge.

Exposes the terminal adapter plus the event, color and mode types it speaks.
Most implementation lives in submodules under ``termbridge``.
"""

from __future__ import annotations

import logging

from .channel import EOF, PosixChannel
from .config import TerminalConfig, load_config, save_config
from .decoder import InputDecoder
from .encoder import AnsiColor, OutputEncoder, RgbColor, TextAttribute
from .events import (
    CharacterEvent,
    CursorPosition,
    InputEvent,
    MouseAction,
    MouseEvent,
    SpecialEvent,
    SpecialKey,
    TerminalSize,
)
from .modes import ModeManager, MouseTracking
from .resize import DEFAULT_SIZE, ResizeNotifier
from .terminal import TerminalAdapter, TerminalAdapterError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    "AnsiColor",
    "CharacterEvent",
    "CursorPosition",
    "DEFAULT_SIZE",
    "EOF",
    "InputDecoder",
    "InputEvent",
    "ModeManager",
    "MouseAction",
    "MouseEvent",
    "MouseTracking",
    "OutputEncoder",
    "PosixChannel",
    "ResizeNotifier",
    "RgbColor",
    "SpecialEvent",
    "SpecialKey",
    "TerminalAdapter",
    "TerminalAdapterError",
    "TerminalConfig",
    "TerminalSize",
    "TextAttribute",
    "load_config",
    "save_config",
]
