from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from .request_timings import RequestTimings

MS_PER_SECOND = 1000


def _duration_ms(start: float | None, end: float | None) -> float | None:
    if start is None or end is None:
        return None

    return (end - start) * MS_PER_SECOND


class TimingRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start_at_ms: int = Field(alias="startAtMs")
    dns_lookup: float | None = Field(default=None, alias="dnsLookup")
    tcp_connection: float | None = Field(default=None, alias="tcpConnection")
    tls_handshake: float | None = Field(default=None, alias="tlsHandshake")
    first_byte: float | None = Field(default=None, alias="firstByte")
    content_transfer: float | None = Field(default=None, alias="contentTransfer")
    total: float | None = None

    @classmethod
    def from_timings(cls, timings: RequestTimings) -> TimingRecord:
        connected_at = timings.tcp_connection_at
        if timings.tls_handshake_at is not None:
            connected_at = timings.tls_handshake_at

        return cls(
            start_at_ms=timings.start_at_ms,
            dns_lookup=_duration_ms(
                timings.start_at,
                timings.dns_lookup_at,
            ),
            tcp_connection=_duration_ms(
                timings.dns_lookup_at or timings.start_at,
                timings.tcp_connection_at,
            ),
            tls_handshake=_duration_ms(
                timings.tcp_connection_at,
                timings.tls_handshake_at,
            ),
            first_byte=_duration_ms(
                connected_at,
                timings.first_byte_at,
            ),
            content_transfer=_duration_ms(
                timings.first_byte_at,
                timings.end_at,
            ),
            total=_duration_ms(
                timings.start_at,
                timings.end_at,
            ),
        )

    def phases_total(self) -> float:
        return sum(
            phase for phase in (
                self.dns_lookup,
                self.tcp_connection,
                self.tls_handshake,
                self.first_byte,
                self.content_transfer,
            ) if phase is not None
        )
