from __future__ import annotations

import asyncio
import os

import orjson

from stormnode.auth import AuthorizationVerifier
from stormnode.client import RequestTimer
from stormnode.control import ControlEventBus
from stormnode.dispatch import CommandDispatcher
from stormnode.env import Env
from stormnode.logging import Logger, LoggingConfig
from stormnode.logging.stormnode_logging_models import (
    NodeDebug,
    NodeError,
    NodeInfo,
)
from stormnode.models import HelloMessage, NodeOptions
from stormnode.tasks import TaskRegistry
from stormnode.transport import (
    GENERAL_TOPIC,
    MQTTTransport,
    Transport,
    TransportError,
    direct_topic,
    status_topic,
)
from stormnode.version import __version__

from .node_lock import NodeLock


class StormNode:
    """
    A fleet worker. Connects to the broker, announces itself on its
    status topic and hands every inbound message to the dispatcher in
    arrival order until the transport closes or ``shutdown`` is called.
    """

    def __init__(
        self,
        options: NodeOptions,
        env: Env | None = None,
        transport: Transport | None = None,
        verifier: AuthorizationVerifier | None = None,
        registry: TaskRegistry | None = None,
        logger: Logger | None = None,
    ) -> None:
        if env is None:
            env = Env()

        if logger is None:
            logger = Logger()

        self.options = options
        self.env = env
        self.node_id = options.node_id
        self.client_id = env.STORM_NODEID or options.node_id

        self.lock = NodeLock(
            options.node_id,
            env.lock_directory,
        )

        if transport is None:
            transport = MQTTTransport(
                env.STORM_CONNECT_URL,
                self.client_id,
                username=options.username,
                password=options.password,
                keepalive=env.STORM_MQTT_KEEPALIVE,
                verify_ssl=env.STORM_VERIFY_SSL_CERT,
            )

        if verifier is None:
            verifier = AuthorizationVerifier(
                freshness_window_ms=env.STORM_FRESHNESS_WINDOW_MS,
            )

        self._transport = transport
        self._logger = logger
        self.verifier = verifier

        self.control_bus = ControlEventBus()
        self.dispatcher = CommandDispatcher(
            options,
            transport,
            verifier,
            control_bus=self.control_bus,
            request_timer=RequestTimer(
                timeout=env.STORM_REQUEST_TIMEOUT,
                verify_ssl=env.STORM_VERIFY_SSL_CERT,
            ),
            registry=registry,
            logger=logger,
        )

        self._running = False
        self._shutdown_task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._running

    def configure_logging(self):
        logging_config = LoggingConfig()
        logging_config.update(**self.env.get_logging_config())

        if self.env.STORM_LOGS_DIRECTORY:
            self._logger.configure(
                path=os.path.join(
                    self.env.STORM_LOGS_DIRECTORY,
                    f"storm-node-{self.node_id}.json",
                ),
            )

    async def run(self):
        await self.start()

        try:
            async for message in self._transport.messages():
                try:
                    await self.dispatcher.on_message(
                        message.topic,
                        message.payload,
                    )

                except Exception as err:
                    await self._logger.log(
                        NodeError(
                            message=f"Could not handle message on {message.topic}: {err}",
                            node_id=self.node_id,
                        )
                    )

        finally:
            await self.shutdown()

    async def start(self):
        self.lock.check()
        self.configure_logging()

        await self._logger.log(
            NodeInfo(
                message=f"Starting node ver. {__version__}",
                node_id=self.node_id,
            )
        )

        self._running = True

        await self._transport.connect(
            on_connected=self._on_connected,
            on_duplicate_connection=self._on_duplicate_connection,
        )

    async def shutdown(self):
        if self._running is False:
            return

        self._running = False

        await self.dispatcher.shutdown()
        await self._transport.close()

        await self._logger.log(
            NodeInfo(
                message="Node stopped",
                node_id=self.node_id,
            )
        )

        await self._logger.close()

    async def _on_connected(self):
        await self._logger.log(
            NodeDebug(
                message="connected",
                node_id=self.node_id,
            )
        )

        try:
            await self._transport.subscribe(GENERAL_TOPIC)
            await self._transport.subscribe(direct_topic(self.node_id))

            hello = HelloMessage(version=__version__)
            await self._transport.publish(
                status_topic(self.node_id),
                orjson.dumps(hello.model_dump()),
            )

        except TransportError as err:
            await self._logger.log(
                NodeError(
                    message=f"Could not announce node: {err}",
                    node_id=self.node_id,
                )
            )

    async def _on_duplicate_connection(self):
        lock_path = self.lock.acquire()

        await self._logger.log(
            NodeError(
                message=f"New connection from same node id, closing this one. Lock file created at {lock_path}, remove it to restart the node",
                node_id=self.node_id,
            )
        )

        await self.shutdown()
