from __future__ import annotations

import asyncio
import contextvars
from typing import Any
from urllib.parse import urlparse

import paho.mqtt.client as mqtt
from paho.mqtt.client import CallbackAPIVersion

from .transport import (
    ConnectedCallback,
    DuplicateConnectionCallback,
    TransportError,
    TransportMessage,
)

SESSION_TAKEN_OVER = 142
SECURE_SCHEMES = ("mqtts", "ssl", "wss")
DEFAULT_PORTS = {
    "mqtt": 1883,
    "tcp": 1883,
    "mqtts": 8883,
    "ssl": 8883,
    "ws": 80,
    "wss": 443,
}


class MQTTTransport:
    """
    paho-mqtt client bridged onto the event loop. paho runs its network
    loop in its own thread; every callback is handed back to the loop with
    ``call_soon_threadsafe`` so the rest of the agent stays single-threaded.
    """

    def __init__(
        self,
        url: str,
        client_id: str,
        username: str | None = None,
        password: str | None = None,
        keepalive: int = 60,
        verify_ssl: bool = True,
    ) -> None:
        self.url = url
        self.client_id = client_id
        self._username = username
        self._password = password
        self._keepalive = keepalive
        self._verify_ssl = verify_ssl

        self._client: mqtt.Client | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._queue: asyncio.Queue[TransportMessage | None] = asyncio.Queue()
        self._connected = asyncio.Event()
        self._on_connected: ConnectedCallback | None = None
        self._on_duplicate_connection: DuplicateConnectionCallback | None = None
        self._callback_tasks: set[asyncio.Task] = set()
        self._context: contextvars.Context | None = None
        self._closed = False

    async def connect(
        self,
        on_connected: ConnectedCallback | None = None,
        on_duplicate_connection: DuplicateConnectionCallback | None = None,
    ):
        self._loop = asyncio.get_running_loop()
        self._context = contextvars.copy_context()
        self._on_connected = on_connected
        self._on_duplicate_connection = on_duplicate_connection

        parsed = urlparse(self.url)
        scheme = parsed.scheme or "mqtt"

        client = self._create_client(scheme)
        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_message = self._on_message

        self._client = client

        client.connect_async(
            parsed.hostname,
            parsed.port or DEFAULT_PORTS.get(scheme, 1883),
            keepalive=self._keepalive,
        )
        client.loop_start()

        await self._connected.wait()

    def _create_client(self, scheme: str) -> mqtt.Client:
        client = mqtt.Client(
            CallbackAPIVersion.VERSION2,
            client_id=self.client_id,
            protocol=mqtt.MQTTv5,
            transport="websockets" if scheme in ("ws", "wss") else "tcp",
        )

        if self._username:
            client.username_pw_set(
                self._username,
                self._password,
            )

        if scheme in SECURE_SCHEMES:
            client.tls_set()
            client.tls_insecure_set(self._verify_ssl is False)

        return client

    async def publish(self, topic: str, payload: bytes):
        info = self._client.publish(topic, payload)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(
                f"Err. - could not publish to {topic}: {mqtt.error_string(info.rc)}"
            )

    async def subscribe(self, topic: str):
        result, _ = self._client.subscribe(topic)
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(
                f"Err. - could not subscribe in {topic}: {mqtt.error_string(result)}"
            )

    async def unsubscribe(self, topic: str):
        result, _ = self._client.unsubscribe(topic)
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise TransportError(
                f"Err. - could not unsubscribe {topic}: {mqtt.error_string(result)}"
            )

    async def messages(self):
        while True:
            message = await self._queue.get()
            if message is None:
                break

            yield message

    async def close(self):
        if self._closed:
            return

        self._closed = True

        if self._client:
            self._client.disconnect()
            self._client.loop_stop()

        self._queue.put_nowait(None)

    def _on_connect(
        self,
        client: mqtt.Client,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any,
    ):
        if reason_code.is_failure:
            return

        self._loop.call_soon_threadsafe(
            self._connected.set,
            context=self._context,
        )

        if self._on_connected:
            self._loop.call_soon_threadsafe(
                self._schedule,
                self._on_connected,
                context=self._context,
            )

    def _on_disconnect(
        self,
        client: mqtt.Client,
        userdata: Any,
        disconnect_flags: Any,
        reason_code: Any,
        properties: Any,
    ):
        if getattr(reason_code, "value", reason_code) != SESSION_TAKEN_OVER:
            return

        if self._on_duplicate_connection:
            self._loop.call_soon_threadsafe(
                self._schedule,
                self._on_duplicate_connection,
                context=self._context,
            )

    def _on_message(
        self,
        client: mqtt.Client,
        userdata: Any,
        message: mqtt.MQTTMessage,
    ):
        self._loop.call_soon_threadsafe(
            self._queue.put_nowait,
            TransportMessage(
                topic=message.topic,
                payload=message.payload,
            ),
        )

    def _schedule(self, callback):
        task = asyncio.ensure_future(callback())
        self._callback_tasks.add(task)
        task.add_done_callback(self._callback_tasks.discard)
