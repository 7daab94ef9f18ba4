from typing import Any

from pydantic import BaseModel, ConfigDict


class CommandEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    command: str | None = None
    authtype: str | None = None
    authdata: Any = None
    signature: str | None = None
