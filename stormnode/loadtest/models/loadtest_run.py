from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from stormnode.client.models import RequestConfig


class LoadtestRun(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )

    run_uuid: str | None = Field(default=None, alias="uuid")
    run_id: str | int = Field(alias="id")
    requests: List[RequestConfig] = Field(default_factory=list)
    additional_data: Dict[str, Any] | None = Field(default=None, alias="additionalData")
    top_level_iterate_until_ts: float | None = Field(default=None, alias="iterateUntilTs")

    @property
    def iterate_until_ts(self) -> float | None:
        if self.additional_data and (
            iterate_until_ts := self.additional_data.get("iterateUntilTs")
        ) is not None:
            return float(iterate_until_ts)

        return self.top_level_iterate_until_ts
