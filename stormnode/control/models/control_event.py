from pydantic import BaseModel, ConfigDict


class ControlEvent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    action: str | None = None

    @property
    def is_halt(self) -> bool:
        return self.action == "halt"
