"""
Tests for RequestTimer against local asyncio servers.

Covers:
- Phase timings, with and without a DNS lookup
- Status line, header, chunked body and trailer parsing
- Request encoding (Host, Connection, Content-Length)
- Failures reported on the record instead of raised
"""

import asyncio
import contextlib
import socket

import pytest

from stormnode.client import RequestConfig, RequestTimer, ResponseRecord


@contextlib.asynccontextmanager
async def http_server(
    response: bytes,
    requests: list[bytes] | None = None,
    respond: bool = True,
):
    if requests is None:
        requests = []

    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        try:
            head = await reader.readuntil(b"\r\n\r\n")
            content_length = 0
            for line in head.split(b"\r\n"):
                name, _, value = line.partition(b":")
                if name.strip().lower() == b"content-length":
                    content_length = int(value.strip())

            body = await reader.readexactly(content_length) if content_length else b""
            requests.append(head + body)

            if respond:
                writer.write(response)
                await writer.drain()

            else:
                await reader.read()

        except (asyncio.IncompleteReadError, ConnectionError):
            pass

        finally:
            writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]

    try:
        yield port

    finally:
        server.close()
        await server.wait_closed()


@contextlib.asynccontextmanager
async def closing_server():
    async def handle(reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)

    try:
        yield server.sockets[0].getsockname()[1]

    finally:
        server.close()
        await server.wait_closed()


def closed_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


def request_config(port: int, **kwargs) -> RequestConfig:
    return RequestConfig.model_validate({
        "id": kwargs.pop("id", "req-1"),
        "protocol": "http:",
        "hostname": kwargs.pop("hostname", "127.0.0.1"),
        "port": port,
        **kwargs,
    })


OK_RESPONSE = (
    b"HTTP/1.1 201 Created\r\n"
    b"Content-Length: 2\r\n"
    b"Set-Cookie: a=1\r\n"
    b"Set-Cookie: b=2\r\n"
    b"X-Trace: one\r\n"
    b"X-Trace: two\r\n"
    b"\r\n"
    b"ok"
)

CHUNKED_RESPONSE = (
    b"HTTP/1.1 200 OK\r\n"
    b"Transfer-Encoding: chunked\r\n"
    b"Trailer: X-Checksum\r\n"
    b"\r\n"
    b"5\r\nhello\r\n"
    b"6;ext=1\r\n world\r\n"
    b"0\r\n"
    b"X-Checksum: abc\r\n"
    b"\r\n"
)


class TestRequestTimerResponses:
    """Successful requests produce a full response record."""

    @pytest.mark.asyncio
    async def test_status_and_headers(self) -> None:
        async with http_server(OK_RESPONSE) as port:
            record = await RequestTimer().execute(request_config(port))

        assert record.failed is False
        assert record.request_id == "req-1"
        assert record.http_version == "1.1"
        assert record.status_code == 201
        assert record.status_message == "Created"
        assert record.headers["content-length"] == "2"
        assert record.headers["set-cookie"] == ["a=1", "b=2"]
        assert record.headers["x-trace"] == "one, two"
        assert record.local_address == "127.0.0.1"
        assert isinstance(record.local_port, int)

    @pytest.mark.asyncio
    async def test_body_omitted_unless_requested(self) -> None:
        async with http_server(OK_RESPONSE) as port:
            record = await RequestTimer().execute(request_config(port))

        assert record.body is None
        assert "body" not in record.to_data()

    @pytest.mark.asyncio
    async def test_body_included_when_requested(self) -> None:
        async with http_server(OK_RESPONSE) as port:
            record = await RequestTimer().execute(
                request_config(port, includeBody=True)
            )

        assert record.body == "ok"

    @pytest.mark.asyncio
    async def test_chunked_body_and_trailers(self) -> None:
        async with http_server(CHUNKED_RESPONSE) as port:
            record = await RequestTimer().execute(
                request_config(port, includeBody=True)
            )

        assert record.status_code == 200
        assert record.body == "hello world"
        assert record.trailers == {"x-checksum": "abc"}

    @pytest.mark.asyncio
    async def test_body_read_to_eof_without_framing(self) -> None:
        response = b"HTTP/1.0 200 OK\r\n\r\nuntil close"

        async with http_server(response) as port:
            record = await RequestTimer().execute(
                request_config(port, includeBody=True)
            )

        assert record.http_version == "1.0"
        assert record.body == "until close"

    @pytest.mark.asyncio
    async def test_informational_response_skipped(self) -> None:
        response = (
            b"HTTP/1.1 100 Continue\r\n\r\n"
            b"HTTP/1.1 200 OK\r\nContent-Length: 4\r\n\r\ndone"
        )

        async with http_server(response) as port:
            record = await RequestTimer().execute(
                request_config(port, includeBody=True)
            )

        assert record.status_code == 200
        assert record.body == "done"

    @pytest.mark.asyncio
    async def test_head_request_has_no_body(self) -> None:
        response = b"HTTP/1.1 200 OK\r\nContent-Length: 100\r\n\r\n"

        async with http_server(response) as port:
            record = await RequestTimer().execute(
                request_config(port, method="HEAD", includeBody=True)
            )

        assert record.status_code == 200
        assert record.body == ""


class TestRequestTimerTimings:
    """Phase instants and the durations derived from them."""

    @pytest.mark.asyncio
    async def test_ip_literal_skips_dns(self) -> None:
        async with http_server(OK_RESPONSE) as port:
            record = await RequestTimer().execute(request_config(port))

        timings = record.timings
        assert timings.dns_lookup is None
        assert timings.tls_handshake is None
        assert timings.tcp_connection >= 0
        assert timings.first_byte >= 0
        assert timings.content_transfer >= 0
        assert timings.total == pytest.approx(timings.phases_total())

        data = record.to_data()["timings"]
        assert "dnsLookup" not in data
        assert "tlsHandshake" not in data
        assert data["startAtMs"] > 0

    @pytest.mark.asyncio
    async def test_hostname_records_dns(self) -> None:
        async with http_server(OK_RESPONSE) as port:
            record = await RequestTimer().execute(
                request_config(port, hostname="localhost")
            )

        assert record.failed is False
        assert record.timings.dns_lookup >= 0
        assert record.timings.total == pytest.approx(record.timings.phases_total())
        assert "dnsLookup" in record.to_data()["timings"]


class TestRequestTimerEncoding:
    """What goes out on the wire."""

    @pytest.mark.asyncio
    async def test_default_headers(self) -> None:
        requests: list[bytes] = []

        async with http_server(OK_RESPONSE, requests=requests) as port:
            await RequestTimer().execute(
                request_config(port, path="/health?full=1")
            )

        sent = requests[0].decode()
        assert sent.startswith("GET /health?full=1 HTTP/1.1\r\n")
        assert f"Host: 127.0.0.1:{port}\r\n" in sent
        assert "Connection: close\r\n" in sent
        assert "content-length" not in sent.lower()
        assert "content-type" not in sent.lower()

    @pytest.mark.asyncio
    async def test_body_gets_content_length(self) -> None:
        requests: list[bytes] = []

        async with http_server(OK_RESPONSE, requests=requests) as port:
            await RequestTimer().execute(
                request_config(
                    port,
                    method="post",
                    body='{"probe": true}',
                    headers={"X-Probe": "1"},
                )
            )

        sent = requests[0].decode()
        assert sent.startswith("POST / HTTP/1.1\r\n")
        assert "Content-Length: 15\r\n" in sent
        assert "X-Probe: 1\r\n" in sent
        assert "content-type" not in sent.lower()
        assert sent.endswith('{"probe": true}')

    @pytest.mark.asyncio
    async def test_caller_headers_win(self) -> None:
        requests: list[bytes] = []

        async with http_server(OK_RESPONSE, requests=requests) as port:
            await RequestTimer().execute(
                request_config(
                    port,
                    headers={
                        "host": "example.test",
                        "connection": "keep-alive",
                    },
                )
            )

        sent = requests[0].decode()
        assert "host: example.test\r\n" in sent
        assert "Host:" not in sent
        assert "Connection: close" not in sent

    @pytest.mark.parametrize(
        "hostname,port,expected",
        [
            ("::1", 8080, "[::1]:8080"),
            ("::1", 80, "[::1]"),
            ("127.0.0.1", 8080, "127.0.0.1:8080"),
            ("example.test", 80, "example.test"),
        ],
    )
    def test_host_header_authority(
        self,
        hostname: str,
        port: int,
        expected: str,
    ) -> None:
        config = RequestConfig(protocol="http:", hostname=hostname, port=port)

        headers = RequestTimer()._encode_headers(config, hostname, port, None)

        assert ("Host", expected) in headers


class TestRequestTimerFailures:
    """Network failures land in error_message; nothing raises."""

    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        record = await RequestTimer().execute(request_config(closed_port()))

        assert isinstance(record, ResponseRecord)
        assert record.failed is True
        assert record.request_id == "req-1"
        assert record.status_code is None
        assert record.timings is None
        assert set(record.to_data()) == {"requestId", "error_message"}

    @pytest.mark.asyncio
    async def test_unresolvable_host(self) -> None:
        record = await RequestTimer().execute(
            request_config(80, hostname="does-not-exist.invalid")
        )

        assert record.failed is True
        assert record.timings is None

    @pytest.mark.asyncio
    async def test_tls_against_plain_server(self) -> None:
        async with closing_server() as port:
            record = await RequestTimer().execute(
                request_config(port, protocol="https:")
            )

        assert record.failed is True
        assert record.status_code is None

    @pytest.mark.asyncio
    async def test_server_hangs_up(self) -> None:
        async with http_server(b"") as port:
            record = await RequestTimer().execute(request_config(port))

        assert record.failed is True
        assert record.error_message == "socket hang up"

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        async with http_server(b"", respond=False) as port:
            record = await RequestTimer(timeout=0.2).execute(request_config(port))

        assert record.error_message == "Request timed out."
        assert record.timings is None


class TestRequestConfig:
    """Accepted field names and derived targets."""

    def test_defaults(self) -> None:
        config = RequestConfig.model_validate({"hostname": "example.test"})

        assert config.secure is True
        assert config.target_port == 443
        assert config.path == "/"
        assert config.method == "GET"

    def test_host_fallback_and_plain_port(self) -> None:
        config = RequestConfig.model_validate({
            "protocol": "http:",
            "host": "example.test",
        })

        assert config.target_host == "example.test"
        assert config.target_port == 80

    def test_header_lookup_is_case_insensitive(self) -> None:
        config = RequestConfig.model_validate({
            "headers": {"Content-Length": "3"},
        })

        assert config.has_header("content-length") is True
        assert config.has_header("host") is False
