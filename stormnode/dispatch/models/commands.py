from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from stormnode.client.models import RequestConfig


class TaskCommand(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
    )


class ManageLoadtestCommand(TaskCommand):
    action: str | None = None


class EndpointHealthCommand(TaskCommand):
    task_id: str | int = Field(alias="id")
    request: RequestConfig


class HostMonitoringCommand(TaskCommand):
    task_id: str | int = Field(alias="id")
    arguments: Any = None


class CustomCommand(TaskCommand):
    task_id: str | int = Field(alias="id")
    customcommand: str
    arguments: Any = None


class ExecuteCommand(TaskCommand):
    modulepath: str
    arguments: Any = None
    channel: str | int | None = None


class TopicCommand(TaskCommand):
    newtopic: str


class SetTimeCommand(TaskCommand):
    stormdevtime: int | float
