from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from .timing_record import TimingRecord


class ResponseRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    request_id: int | str | None = Field(default=None, alias="requestId")
    http_version: str | None = Field(default=None, alias="httpVersion")
    status_code: int | None = Field(default=None, alias="statusCode")
    status_message: str | None = Field(default=None, alias="statusMessage")
    headers: Dict[str, str | List[str]] | None = None
    trailers: Dict[str, str] | None = None
    body: str | None = None
    error_message: str | None = None
    local_address: str | None = Field(default=None, alias="localAddress")
    local_port: int | None = Field(default=None, alias="localPort")
    timings: TimingRecord | None = None

    @property
    def failed(self) -> bool:
        return self.error_message is not None

    def to_data(self) -> Dict[str, Any]:
        return self.model_dump(
            by_alias=True,
            exclude_none=True,
        )
