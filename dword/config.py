"""User configuration and logging setup.

The configuration lives in ``config.json`` in the platform's user config
directory. Every key is optional; unknown keys are ignored and invalid
values fall back to their defaults with a warning in the log.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import platformdirs

logger = logging.getLogger(__name__)

APP_NAME = "d-word"
APP_AUTHOR = "d-word"

SIZE_UNITS = ("auto", "B", "KB", "MB", "GB")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class EditorConfig:
    """Colours are 256-colour palette indices."""
    title_fg: int = 230
    title_bg: int = 62
    menu_fg: int = 250
    menu_bg: int = 235
    status_fg: int = 250
    status_bg: int = 236
    border_fg: int = 240
    size_unit: str = "auto"
    log_level: str = "WARNING"


def config_dir() -> Path:
    return Path(platformdirs.user_config_dir(APP_NAME, APP_AUTHOR))


def log_dir() -> Path:
    return Path(platformdirs.user_log_dir(APP_NAME, APP_AUTHOR))


def _valid(name: str, value: Any) -> bool:
    if name == "size_unit":
        return value in SIZE_UNITS
    if name == "log_level":
        return isinstance(value, str) and value.upper() in LOG_LEVELS
    # Colour indices; bool is an int subclass but never a colour
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 255


def load_config(path: Optional[Path] = None) -> EditorConfig:
    """Load the user configuration.

    Args:
        path: Config file to read. Defaults to ``config.json`` in the
            user config directory.

    Returns:
        The configuration; defaults for anything missing or invalid.
    """
    config_file = path or config_dir() / "config.json"
    config = EditorConfig()
    if not config_file.exists():
        return config

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config from {config_file}: {e}")
        return config

    if not isinstance(data, dict):
        logger.warning("Config file has invalid format (not a dict), ignoring")
        return config

    overrides = {}
    for field in fields(EditorConfig):
        if field.name not in data:
            continue
        value = data[field.name]
        if _valid(field.name, value):
            overrides[field.name] = value.upper() if field.name == "log_level" else value
        else:
            logger.warning(f"Invalid value {value!r} for {field.name!r}, using default")
    return replace(config, **overrides)


def configure_logging(config: EditorConfig, directory: Optional[Path] = None) -> Optional[Path]:
    """Send log records to ``d-word.log``; the terminal is owned by the UI.

    Returns:
        The log file path, or None if the log directory cannot be created.
    """
    target_dir = directory or log_dir()
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create log directory {target_dir}: {e}")
        return None
    log_file = target_dir / "d-word.log"
    logging.basicConfig(
        filename=str(log_file),
        level=getattr(logging, config.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return log_file
