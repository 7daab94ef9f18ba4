from __future__ import annotations

import asyncio
import socket
import ssl
from typing import List, Tuple

from .http_connection import (
    HTTPConnection,
    encode_request,
    is_ip_address,
)
from .models import (
    RequestConfig,
    RequestTimings,
    ResponseRecord,
    TimingRecord,
)

NO_BODY_STATUSES = (204, 304)


class RequestTimer:
    """
    Executes one HTTP(S) request per call and records the instant each
    phase completes (DNS, TCP, TLS, first byte, end of body). Failures of
    any kind are reported on the returned record and never raised.
    """

    def __init__(
        self,
        timeout: float | None = None,
        verify_ssl: bool = True,
    ) -> None:
        self.timeout = timeout
        self._verify_ssl = verify_ssl
        self._ssl_context: ssl.SSLContext | None = None

    @property
    def ssl_context(self) -> ssl.SSLContext:
        if self._ssl_context is None:
            context = ssl.create_default_context()

            if self._verify_ssl is False:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE

            self._ssl_context = context

        return self._ssl_context

    async def execute(self, config: RequestConfig) -> ResponseRecord:
        record = ResponseRecord(request_id=config.request_id)
        timings = RequestTimings()
        connection = HTTPConnection()

        try:
            if self.timeout:
                await asyncio.wait_for(
                    self._execute(config, connection, record, timings),
                    timeout=self.timeout,
                )

            else:
                await self._execute(config, connection, record, timings)

            record.timings = TimingRecord.from_timings(timings)

        except asyncio.TimeoutError:
            record.error_message = "Request timed out."

        except Exception as err:
            record.error_message = str(err) or err.__class__.__name__

        finally:
            await connection.close()

        if record.failed:
            return ResponseRecord(
                request_id=config.request_id,
                error_message=record.error_message,
            )

        return record

    async def _execute(
        self,
        config: RequestConfig,
        connection: HTTPConnection,
        record: ResponseRecord,
        timings: RequestTimings,
    ):
        host = config.target_host
        port = config.target_port

        addresses = [(host, port)]
        if not is_ip_address(host):
            addresses = await self._resolve(host, port)
            timings.mark("dns_lookup_at")

        await connection.connect(addresses)
        timings.mark("tcp_connection_at")

        if config.secure:
            await connection.upgrade(
                self.ssl_context,
                server_hostname=host,
            )
            timings.mark("tls_handshake_at")

        body = config.body.encode() if config.body else None

        await connection.write(
            encode_request(
                config.method.upper(),
                config.path,
                self._encode_headers(config, host, port, body),
                body=body,
            )
        )

        first = await connection.read_first_byte()
        timings.mark("first_byte_at")

        http_version, status, status_message = await connection.read_status_line(first)
        headers = await connection.read_headers()

        while 100 <= status < 200 and status != 101:
            http_version, status, status_message = await connection.read_status_line()
            headers = await connection.read_headers()

        content, trailers = await self._read_body(
            connection,
            config.method.upper(),
            status,
            headers,
        )
        timings.mark("end_at")

        local_address, local_port = connection.local_address

        record.http_version = http_version
        record.status_code = status
        record.status_message = status_message
        record.headers = headers
        record.trailers = trailers
        record.local_address = local_address
        record.local_port = local_port

        if config.include_body:
            record.body = content.decode(errors="replace")

    async def _resolve(
        self,
        host: str,
        port: int,
    ) -> List[Tuple[str, int]]:
        loop = asyncio.get_running_loop()
        infos = await loop.getaddrinfo(
            host,
            port,
            type=socket.SOCK_STREAM,
        )

        addresses: List[Tuple[str, int]] = []
        for _, _, _, _, sockaddr in infos:
            address = (sockaddr[0], sockaddr[1])
            if address not in addresses:
                addresses.append(address)

        return addresses

    def _encode_headers(
        self,
        config: RequestConfig,
        host: str,
        port: int,
        body: bytes | None,
    ) -> List[Tuple[str, str]]:
        headers: List[Tuple[str, str]] = []

        if not config.has_header("host"):
            authority = f"[{host}]" if ":" in host and not host.startswith("[") else host
            default_port = 443 if config.secure else 80
            headers.append(
                ("Host", authority if port == default_port else f"{authority}:{port}")
            )

        if config.headers:
            for name, value in config.headers.items():
                if isinstance(value, list):
                    headers.extend([
                        (name, str(item)) for item in value
                    ])

                else:
                    headers.append((name, str(value)))

        if not config.has_header("connection"):
            headers.append(("Connection", "close"))

        # Content-Length is only added to frame a body the caller did not frame.
        if body and not (
            config.has_header("content-length") or config.has_header("transfer-encoding")
        ):
            headers.append(("Content-Length", str(len(body))))

        return headers

    async def _read_body(
        self,
        connection: HTTPConnection,
        method: str,
        status: int,
        headers: dict,
    ):
        trailers: dict[str, str] = {}

        if method == "HEAD" or status in NO_BODY_STATUSES:
            return b"", trailers

        transfer_encoding = headers.get("transfer-encoding", "")
        content_length = headers.get("content-length")

        if isinstance(transfer_encoding, str) and "chunked" in transfer_encoding.lower():
            return await connection.read_chunked()

        elif content_length is not None:
            return await connection.read_exactly(int(content_length)), trailers

        return await connection.read_to_eof(), trailers
