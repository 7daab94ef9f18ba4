import asyncio
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List

from .models import ControlEvent


ControlHandler = Callable[[ControlEvent], Awaitable[None]]


class ControlEventBus:
    """
    In-process registry mapping a load-test run id to the handlers of the
    runs bound to it. Signals for ids nobody registered are dropped.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[ControlHandler]] = defaultdict(list)

    def register(
        self,
        run_id: str,
        handler: ControlHandler,
    ):
        self._handlers[run_id].append(handler)

    def unregister(
        self,
        run_id: str,
        handler: ControlHandler,
    ) -> bool:
        handlers = self._handlers.get(run_id)
        if handlers is None or handler not in handlers:
            return False

        handlers.remove(handler)

        if len(handlers) == 0:
            del self._handlers[run_id]

        return True

    async def signal(
        self,
        run_id: str,
        event: ControlEvent,
    ) -> int:
        handlers = self._handlers.get(run_id)
        if not handlers:
            return 0

        handlers = list(handlers)
        await asyncio.gather(*[
            handler(event) for handler in handlers
        ])

        return len(handlers)

    def registered(self, run_id: str) -> bool:
        return len(self._handlers.get(run_id, [])) > 0

    def __len__(self):
        return len(self._handlers)
