"""Logger configuration from the environment and a rotating JSON file logger."""

from __future__ import annotations

import gzip
import json
import logging
import os
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

LOG_FILE = "LOG_FILE"
MAX_SIZE_MB = "LOG_MAX_SIZE_MB"
MAX_BACKUPS = "LOG_MAX_BACKUPS"
MAX_AGE_DAYS = "LOG_MAX_AGE_DAYS"
COMPRESS = "LOG_COMPRESS"
LOG_LEVEL = "LOG_LEVEL"
DEBUG_MODE = "DEBUG_MODE"

LOGGER_NAME = "vnbackend"
TRACE = 5
_DEFAULT_MAX_SIZE_MB = 100

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}

_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "panic": logging.CRITICAL,
    "disabled": logging.CRITICAL + 10,
}
_LEVEL_NAMES = {
    TRACE: "trace",
    logging.DEBUG: "debug",
    logging.INFO: "info",
    logging.WARNING: "warn",
    logging.ERROR: "error",
    logging.CRITICAL: "fatal",
}


@dataclass(frozen=True)
class LoggerConfig:
    """Settings of the file logger."""

    filename: str = "file.log"
    max_size_mb: int = 100
    max_backups: int = 5
    max_age_days: int = 30
    compress: bool = True
    level: str = "info"
    debug_mode: bool = False


def get_env(key: str, default: str) -> str:
    """Return the environment variable, or the default when it is unset."""
    return os.environ.get(key, default)


def get_env_int(key: str, default: int) -> int:
    """Return the variable as an integer; an unparsable value gives 0."""
    text = get_env(key, str(default))
    if not _INT_PATTERN.fullmatch(text):
        return 0
    value = int(text)
    if not -(2**63) <= value <= 2**63 - 1:
        return 0
    return value


def get_env_bool(key: str, default: bool) -> bool:
    """Return the variable as a boolean; an unparsable value gives False."""
    text = get_env(key, "true" if default else "false")
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return False


def new_logger_config() -> LoggerConfig:
    """Read the logger settings from the environment."""
    return LoggerConfig(
        filename=get_env(LOG_FILE, "file.log"),
        max_size_mb=get_env_int(MAX_SIZE_MB, 100),
        max_backups=get_env_int(MAX_BACKUPS, 5),
        max_age_days=get_env_int(MAX_AGE_DAYS, 30),
        compress=get_env_bool(COMPRESS, True),
        level=get_env(LOG_LEVEL, "info"),
        debug_mode=get_env_bool(DEBUG_MODE, False),
    )


def _parse_level(name: str) -> int:
    return _LEVELS.get(name.lower(), logging.INFO)


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname.lower()),
            "time": datetime.fromtimestamp(record.created, timezone.utc)
            .astimezone()
            .isoformat(timespec="seconds"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def _gzip_rotate(source: str, dest: str) -> None:
    with open(source, "rb") as src, gzip.open(dest, "wb") as dst:
        shutil.copyfileobj(src, dst)
    os.remove(source)


class _RotatingFileHandler(RotatingFileHandler):
    def __init__(self, config: LoggerConfig) -> None:
        size_mb = config.max_size_mb if config.max_size_mb > 0 else _DEFAULT_MAX_SIZE_MB
        super().__init__(
            config.filename,
            maxBytes=size_mb * 1024 * 1024,
            backupCount=max(config.max_backups, 0),
            encoding="utf-8",
        )
        self.max_age_days = config.max_age_days
        if config.compress:
            self.namer = lambda name: name + ".gz"
            self.rotator = _gzip_rotate

    def doRollover(self) -> None:
        super().doRollover()
        self._prune_old_backups()

    def _prune_old_backups(self) -> None:
        if self.max_age_days <= 0:
            return
        cutoff = time.time() - self.max_age_days * 86400
        base = Path(self.baseFilename)
        for path in base.parent.glob(base.name + ".*"):
            if path.stat().st_mtime < cutoff:
                path.unlink(missing_ok=True)


def new_logger() -> logging.Logger:
    """Create the application logger writing JSON lines to a rotating file."""
    config = new_logger_config()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    handler = _RotatingFileHandler(config)
    handler.setFormatter(_JsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(_parse_level(config.level))
    logger.propagate = False
    return logger