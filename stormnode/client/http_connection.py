from __future__ import annotations

import asyncio
import socket
import ssl
from typing import Dict, List, Tuple

NEW_LINE = "\r\n"


class HTTPConnection:
    """
    A single-use HTTP/1.1 connection over asyncio streams. Each step
    (connect, TLS upgrade, write, read) is exposed separately so callers
    can stamp timing instants between them.
    """

    def __init__(self) -> None:
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    async def connect(
        self,
        addresses: List[Tuple[str, int]],
    ):
        last_error: OSError | None = None

        for address, port in addresses:
            try:
                self.reader, self.writer = await asyncio.open_connection(
                    address,
                    port,
                )

                return

            except OSError as err:
                last_error = err

        if last_error is None:
            last_error = OSError("No addresses to connect to.")

        raise last_error

    async def upgrade(
        self,
        ssl_context: ssl.SSLContext,
        server_hostname: str,
    ):
        await self.writer.start_tls(
            ssl_context,
            server_hostname=server_hostname,
        )

    @property
    def local_address(self) -> Tuple[str | None, int | None]:
        if self.writer is None:
            return None, None

        sockname = self.writer.get_extra_info("sockname")
        if sockname is None:
            return None, None

        return sockname[0], sockname[1]

    async def write(self, data: bytes):
        self.writer.write(data)
        await self.writer.drain()

    async def read_first_byte(self) -> bytes:
        first = await self.reader.read(1)
        if first == b"":
            raise ConnectionResetError("socket hang up")

        return first

    async def read_status_line(self, first: bytes = b"") -> Tuple[str, int, str]:
        line = first + await self.reader.readline()

        version, _, remainder = line.decode("latin-1").strip().partition(" ")
        status, _, message = remainder.partition(" ")

        if not version.startswith("HTTP/"):
            raise ValueError(f"Invalid HTTP status line: {line!r}")

        return (
            version.removeprefix("HTTP/"),
            int(status),
            message,
        )

    async def read_headers(self) -> Dict[str, str | List[str]]:
        headers: Dict[str, str | List[str]] = {}

        while True:
            line = await self.reader.readline()
            if line in (b"\r\n", b"\n", b""):
                break

            name, _, value = line.decode("latin-1").partition(":")
            name = name.strip().lower()
            value = value.strip()

            if name == "set-cookie":
                cookies = headers.setdefault(name, [])
                cookies.append(value)

            elif name in headers:
                headers[name] = f"{headers[name]}, {value}"

            else:
                headers[name] = value

        return headers

    async def read_chunked(self) -> Tuple[bytes, Dict[str, str]]:
        body = bytearray()

        while True:
            size_line = await self.reader.readline()
            if size_line == b"":
                raise asyncio.IncompleteReadError(bytes(body), None)

            chunk_size = int(size_line.split(b";", 1)[0].strip(), 16)
            if chunk_size == 0:
                break

            chunk = await self.reader.readexactly(chunk_size + 2)
            body.extend(chunk[:-2])

        trailers: Dict[str, str] = {}
        for name, value in (await self.read_headers()).items():
            trailers[name] = value if isinstance(value, str) else ", ".join(value)

        return bytes(body), trailers

    async def read_exactly(self, size: int) -> bytes:
        return await self.reader.readexactly(size)

    async def read_to_eof(self) -> bytes:
        return await self.reader.read()

    async def close(self):
        if self.writer is None:
            return

        self.writer.close()

        try:
            await self.writer.wait_closed()

        except (
            OSError,
            ssl.SSLError,
        ):
            pass

        self.reader = None
        self.writer = None


def encode_request(
    method: str,
    path: str,
    headers: List[Tuple[str, str]],
    body: bytes | None = None,
) -> bytes:
    request = f"{method} {path} HTTP/1.1{NEW_LINE}"

    for name, value in headers:
        request += f"{name}: {value}{NEW_LINE}"

    request += NEW_LINE

    encoded = request.encode()
    if body:
        encoded += body

    return encoded


def is_ip_address(host: str) -> bool:
    for family in (socket.AF_INET, socket.AF_INET6):
        try:
            socket.inet_pton(family, host)
            return True

        except OSError:
            continue

    return False
