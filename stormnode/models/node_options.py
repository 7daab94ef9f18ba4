from __future__ import annotations

import pathlib

import orjson
from pydantic import BaseModel, ConfigDict, Field


class NodeOptions(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
    )

    node_id: str = Field(alias="nodeId")
    username: str | None = None
    password: str | None = None

    @classmethod
    def load(cls, path: str | pathlib.Path) -> NodeOptions:
        with open(path, "rb") as config_file:
            return cls.model_validate(
                orjson.loads(config_file.read())
            )
