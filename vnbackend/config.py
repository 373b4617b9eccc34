"""Server configuration read from the environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

PORT_ENV = "PORT"
PORT_DEFAULT = ""
FALLBACK_PORT = 8080

_ENV_CONSTANTS = {PORT_ENV: ""}
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Config:
    """Runtime settings of the HTTP server."""

    port: int = FALLBACK_PORT


def _get_env(key: str, default: str) -> str:
    value = os.environ.get(key)
    if value is not None:
        return value
    return _ENV_CONSTANTS.get(key, default)


def _parse_int64(text: str) -> int:
    if not _INT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"integer out of range: {text!r}")
    return value


def new_config() -> Config:
    """Build a Config from PORT, falling back to 8080 when it is missing or invalid."""
    try:
        port = _parse_int64(_get_env(PORT_ENV, PORT_DEFAULT))
    except ValueError:
        return Config(port=FALLBACK_PORT)
    return Config(port=port)