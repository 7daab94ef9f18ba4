import contextvars
from typing import Literal

from stormnode.logging.models import LogLevel, LogLevelName

from .stream_type import StreamType

LogOutput = Literal["stdout", "stderr"]

_log_level = contextvars.ContextVar("_log_level", default=LogLevel.INFO)
_log_output = contextvars.ContextVar("_log_output", default=StreamType.STDOUT)
_log_directory = contextvars.ContextVar("_log_directory", default=None)


class LoggingConfig:
    """
    Logging settings held in context variables. Tasks created after an
    ``update`` inherit the new values.
    """

    def update(
        self,
        log_level: LogLevelName | None = None,
        log_output: LogOutput | None = None,
        log_directory: str | None = None,
    ):
        if log_level and (
            level := LogLevel.to_level(log_level)
        ):
            _log_level.set(level)

        if log_output:
            _log_output.set(StreamType(log_output))

        if log_directory:
            _log_directory.set(log_directory)

    def enabled(self, level: LogLevel) -> bool:
        return level.rank >= _log_level.get().rank

    @property
    def level(self) -> LogLevel:
        return _log_level.get()

    @property
    def output(self) -> StreamType:
        return _log_output.get()

    @property
    def directory(self) -> str | None:
        return _log_directory.get()
