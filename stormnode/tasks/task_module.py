from abc import ABC, abstractmethod
from typing import Any, ClassVar

from stormnode.models import NodeOptions


class TaskModule(ABC):
    """
    A pluggable task. The dispatcher calls ``configure`` with the agent's
    node options and the command's arguments, then awaits ``run``; the
    returned value is published as the task result.
    """

    name: ClassVar[str]

    def __init__(self) -> None:
        self.options: NodeOptions | None = None
        self.arguments: Any = None

    def configure(
        self,
        options: NodeOptions | None = None,
        arguments: Any = None,
    ):
        self.options = options
        self.arguments = arguments

    @abstractmethod
    async def run(self) -> Any:
        ...
