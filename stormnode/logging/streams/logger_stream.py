import asyncio
import io
import os
import pathlib
import sys
from typing import TextIO

import msgspec

from stormnode.logging.config import LoggingConfig, StreamType
from stormnode.logging.exceptions import LogfileError
from stormnode.logging.models import Log

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {error}"


class LoggerStream:
    """
    One named log destination. Without a logfile, entries are rendered
    with the template to stdout or stderr. With one, each entry is
    appended to it as a msgspec JSON line. Blocking I/O runs in the
    default executor.
    """

    def __init__(
        self,
        name: str = "default",
        template: str | None = None,
        logfile: str | None = None,
    ) -> None:
        self.name = name
        self.template = template or DEFAULT_TEMPLATE
        self.logfile = logfile

        self._config = LoggingConfig()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._file: io.BufferedWriter | None = None
        self._file_lock = asyncio.Lock()

    @property
    def logfile_path(self) -> str | None:
        if self.logfile is None:
            return None

        path = pathlib.Path(self.logfile)
        if path.suffix != ".json":
            raise LogfileError(
                f"Err. - log file {self.logfile} must be a JSON file."
            )

        if not path.is_absolute():
            path = pathlib.Path(self._config.directory or os.getcwd()) / path

        return str(path)

    async def write(self, log: Log):
        if self._config.enabled(log.entry.level) is False:
            return

        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        if self.logfile is None:
            stream = sys.stdout if self._config.output == StreamType.STDOUT else sys.stderr

            await self._loop.run_in_executor(
                None,
                self._write_console,
                stream,
                log.entry.render(
                    self.template,
                    filename=log.filename,
                    function_name=log.function_name,
                    line_number=log.line_number,
                    thread_id=log.thread_id,
                    timestamp=log.timestamp,
                ),
            )

            return

        logfile_path = self.logfile_path

        async with self._file_lock:
            try:
                if self._file is None or self._file.closed:
                    self._file = await self._loop.run_in_executor(
                        None,
                        self._open,
                        logfile_path,
                    )

                await self._loop.run_in_executor(
                    None,
                    self._write_line,
                    msgspec.json.encode(log),
                )

            except OSError as err:
                await self._loop.run_in_executor(
                    None,
                    self._write_console,
                    sys.stderr,
                    log.entry.render(
                        ERROR_TEMPLATE,
                        filename=log.filename,
                        function_name=log.function_name,
                        line_number=log.line_number,
                        thread_id=log.thread_id,
                        timestamp=log.timestamp,
                        error=f"could not write {logfile_path}: {err}",
                    ),
                )

    async def close(self):
        if self._file is None or self._loop is None:
            return

        async with self._file_lock:
            await self._loop.run_in_executor(
                None,
                self._file.close,
            )

    def abort(self):
        if self._file and self._file.closed is False:
            self._file.close()

    def _open(self, logfile_path: str) -> io.BufferedWriter:
        path = pathlib.Path(logfile_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        return open(path, "ab")

    def _write_line(self, line: bytes):
        self._file.write(line + b"\n")
        self._file.flush()

    def _write_console(self, stream: TextIO, message: str):
        if stream.closed:
            return

        stream.write(message + "\n")
        stream.flush()
