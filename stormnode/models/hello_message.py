from typing import Literal

from pydantic import BaseModel


class HelloMessage(BaseModel):
    command: Literal["hello"] = "hello"
    version: str
