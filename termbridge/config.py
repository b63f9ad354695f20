"""Persistent JSON config helpers.

Stores escape-sequence timing, default mouse tracking, and the fallback size
used for terminals that report 0x0. Malformed or missing config falls back to
defaults field by field.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "termbridge"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
ESCAPE_TIMEOUT_ENV = "TERMBRIDGE_ESCAPE_TIMEOUT_MS"

MIN_ESCAPE_TIMEOUT_MS = 1
MAX_ESCAPE_TIMEOUT_MS = 1000
MOUSE_TRACKING_CHOICES = ("off", "normal", "any")


@dataclass(frozen=True)
class TerminalConfig:
    """Tunables for one adapter session."""

    escape_timeout_ms: int = 50
    mouse_tracking: str = "normal"
    fallback_columns: int = 80
    fallback_rows: int = 25
    install_resize_handler: bool = True


def _clamp_timeout(value: int) -> int:
    return max(MIN_ESCAPE_TIMEOUT_MS, min(MAX_ESCAPE_TIMEOUT_MS, value))


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def load_config_data(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except Exception:
        return {}
    return data if isinstance(data, dict) else {}


def config_from_data(data: dict[str, object]) -> TerminalConfig:
    """Build a config, keeping defaults for absent or wrongly typed values."""
    config = TerminalConfig()
    timeout = data.get("escape_timeout_ms")
    if _is_int(timeout):
        config = replace(config, escape_timeout_ms=_clamp_timeout(timeout))
    tracking = data.get("mouse_tracking")
    if isinstance(tracking, str) and tracking.lower() in MOUSE_TRACKING_CHOICES:
        config = replace(config, mouse_tracking=tracking.lower())
    columns = data.get("fallback_columns")
    if _is_int(columns) and columns > 0:
        config = replace(config, fallback_columns=columns)
    rows = data.get("fallback_rows")
    if _is_int(rows) and rows > 0:
        config = replace(config, fallback_rows=rows)
    install = data.get("install_resize_handler")
    if isinstance(install, bool):
        config = replace(config, install_resize_handler=install)
    return config


def load_config(path: Path | None = None) -> TerminalConfig:
    """Load config from disk, then apply the escape-timeout environment override."""
    config = config_from_data(load_config_data(path))
    raw_timeout = os.environ.get(ESCAPE_TIMEOUT_ENV, "").strip()
    if raw_timeout:
        try:
            config = replace(config, escape_timeout_ms=_clamp_timeout(int(raw_timeout)))
        except ValueError:
            pass
    return config


def save_config(config: TerminalConfig, path: Path | None = None) -> None:
    """Persist config as pretty-printed JSON.

    Any filesystem/serialization error is ignored to keep runtime behavior
    non-fatal when config cannot be written.
    """
    config_path = path if path is not None else CONFIG_PATH
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(asdict(config), indent=2) + "\n", encoding="utf-8")
    except Exception:
        pass


__all__ = [
    "CONFIG_PATH",
    "ESCAPE_TIMEOUT_ENV",
    "TerminalConfig",
    "config_from_data",
    "load_config",
    "load_config_data",
    "save_config",
]
