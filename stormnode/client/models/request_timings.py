import time

from pydantic import BaseModel, Field


class RequestTimings(BaseModel):
    """
    Monotonic instants (seconds) captured at each phase boundary
    of a single request. Phases that never happened stay ``None``.
    """

    start_at: float = Field(default_factory=time.monotonic)
    start_at_ms: int = Field(default_factory=lambda: int(time.time() * 1000))
    dns_lookup_at: float | None = None
    tcp_connection_at: float | None = None
    tls_handshake_at: float | None = None
    first_byte_at: float | None = None
    end_at: float | None = None

    def mark(self, phase: str):
        setattr(self, phase, time.monotonic())
