from __future__ import annotations

import asyncio
import sys
from typing import Dict, TypeVar

from stormnode.logging.models import Entry, Log

from .logger_stream import LoggerStream

T = TypeVar("T", bound=Entry)


class Logger:
    """
    Entry point for structured logging. Streams are created by name on
    first use. ``configure`` swaps in a stream with its own template or
    ``.json`` logfile.
    """

    def __init__(self) -> None:
        self._streams: Dict[str, LoggerStream] = {}

    def __getitem__(self, name: str) -> LoggerStream:
        if (stream := self._streams.get(name)) is None:
            stream = LoggerStream(name=name)
            self._streams[name] = stream

        return stream

    def configure(
        self,
        name: str = "default",
        template: str | None = None,
        path: str | None = None,
    ):
        if previous := self._streams.get(name):
            previous.abort()

        self._streams[name] = LoggerStream(
            name=name,
            template=template,
            logfile=path,
        )

    async def log(
        self,
        entry: T,
        name: str = "default",
    ):
        await self[name].write(
            Log.at(entry, sys._getframe(1))
        )

    async def batch(
        self,
        *entries: T,
        name: str = "default",
    ):
        frame = sys._getframe(1)
        stream = self[name]

        for entry in entries:
            await stream.write(Log.at(entry, frame))

    async def close(self):
        await asyncio.gather(*[
            stream.close() for stream in self._streams.values()
        ])

    def abort(self):
        for stream in self._streams.values():
            stream.abort()
