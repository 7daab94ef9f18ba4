from typing import (
    AsyncIterator,
    Awaitable,
    Callable,
    Protocol,
)

import msgspec


class TransportError(Exception):
    pass


class TransportMessage(msgspec.Struct):
    topic: str
    payload: bytes


ConnectedCallback = Callable[[], Awaitable[None]]
DuplicateConnectionCallback = Callable[[], Awaitable[None]]


class Transport(Protocol):
    async def connect(
        self,
        on_connected: ConnectedCallback | None = None,
        on_duplicate_connection: DuplicateConnectionCallback | None = None,
    ) -> None:
        ...

    async def publish(self, topic: str, payload: bytes) -> None:
        ...

    async def subscribe(self, topic: str) -> None:
        ...

    async def unsubscribe(self, topic: str) -> None:
        ...

    def messages(self) -> AsyncIterator[TransportMessage]:
        ...

    async def close(self) -> None:
        ...
