from __future__ import annotations

from enum import Enum
from typing import Literal

LogLevelName = Literal[
    "trace",
    "debug",
    "info",
    "warn",
    "error",
    "critical",
    "fatal",
]


class LogLevel(Enum):
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    FATAL = "FATAL"

    @property
    def rank(self) -> int:
        return _LEVEL_RANKS[self]

    @classmethod
    def to_level(cls, level_name: str) -> LogLevel | None:
        try:
            return cls(level_name.upper())

        except ValueError:
            return None


_LEVEL_RANKS = {
    level: rank for rank, level in enumerate(LogLevel)
}
