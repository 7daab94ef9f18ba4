from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class RequestConfig(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    request_id: int | str | None = Field(default=None, alias="id")
    protocol: str = "https:"
    hostname: str | None = None
    host: str | None = None
    port: int | None = None
    path: str = "/"
    method: str = "GET"
    headers: Dict[str, Any] | None = None
    body: str | None = None
    include_body: bool = Field(default=False, alias="includeBody")

    @property
    def secure(self) -> bool:
        return self.protocol != "http:"

    @property
    def target_host(self) -> str:
        return self.hostname or self.host or "localhost"

    @property
    def target_port(self) -> int:
        if self.port:
            return self.port

        return 443 if self.secure else 80

    def has_header(self, name: str) -> bool:
        if not self.headers:
            return False

        lowered = name.lower()
        return any(
            header.lower() == lowered for header in self.headers
        )
