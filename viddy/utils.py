"""Directories, logging set-up, version text and small layout helpers."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import platformdirs

APP_NAME = "viddy"
PROJECT_NAME = APP_NAME.upper()
VERSION = "1.3.0"
LOG_ENV = f"{PROJECT_NAME}_LOGLEVEL"
LOG_FILE = f"{APP_NAME}.log"


@dataclass(frozen=True)
class Rect:
    """A rectangular screen area."""

    x: int
    y: int
    width: int
    height: int


def _env_dir(suffix: str) -> Path | None:
    value = os.environ.get(f"{PROJECT_NAME}_{suffix}")
    return Path(value) if value is not None else None


def get_data_dir() -> Path:
    """Directory for data files; VIDDY_DATA overrides the platform default."""
    override = _env_dir("DATA")
    if override is not None:
        return override
    return platformdirs.user_data_path(APP_NAME, appauthor=False)


def get_config_dir() -> Path:
    """Directory for configuration files; VIDDY_CONFIG overrides the platform default."""
    override = _env_dir("CONFIG")
    if override is not None:
        return override
    return platformdirs.user_config_path(APP_NAME, appauthor=False)


def get_old_config_dir() -> Path:
    """The user's base configuration directory, where the legacy config lives."""
    return platformdirs.user_config_path()


def _log_level() -> int:
    raw = os.environ.get("RUST_LOG") or os.environ.get(LOG_ENV) or "info"
    name = raw.rsplit("=", 1)[-1].strip().upper()
    return logging.getLevelNamesMapping().get(name, logging.INFO)


def initialize_logging() -> Path:
    """Send the package's log records to a file in the data directory; return its path."""
    directory = get_data_dir()
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / LOG_FILE
    handler = logging.FileHandler(log_path, mode="w", encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(filename)s:%(lineno)d: %(message)s")
    )
    logger = logging.getLogger(APP_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)
    logger.setLevel(_log_level())
    return log_path


def version() -> str:
    """Version text together with the directories in use."""
    return (
        f"{VERSION}\n"
        "\n"
        f"Config directory: {get_config_dir()}\n"
        f"Data directory: {get_data_dir()}"
    )


def is_in_area(x: int, y: int, area: Rect) -> bool:
    """Whether the cell (x, y) lies within area."""
    return area.x <= x < area.x + area.width and area.y <= y < area.y + area.height