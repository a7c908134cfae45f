"""Log configuration: writers, format, level and file rotation settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

OUTPUT_CONSOLE = "console"
OUTPUT_FILE = "file"

ENCODER_TYPE_CONSOLE = "console"
ENCODER_TYPE_JSON = "json"

LEVELS = {
    "": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
}


@dataclass
class FileConfig:
    """Settings for a rotating log file."""

    filepath: str = ""
    max_age: int = 0  # days
    max_backups: int = 0
    compress: bool = False
    max_size: int = 0  # megabytes


@dataclass
class LogConfig:
    """Settings for one named logger."""

    log_name: str = ""
    writers: list[str] = field(default_factory=list)
    file_config: FileConfig = field(default_factory=FileConfig)
    format: str = ""
    level: str = ""
    caller_skip: int = 0


def default_config() -> LogConfig:
    """Return a fresh copy of the default log configuration."""
    return LogConfig(
        writers=[OUTPUT_CONSOLE],
        format=ENCODER_TYPE_CONSOLE,
        level="info",
        caller_skip=1,
    )


def level_for(name: str) -> int:
    """Map a level name to a logging level; unknown names mean info."""
    return LEVELS.get(name, logging.INFO)