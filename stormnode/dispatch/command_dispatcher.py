from __future__ import annotations

import asyncio
import time
from typing import Any, Callable, Coroutine, Dict

import orjson
from pydantic import ValidationError

from stormnode.auth import AuthorizationVerifier
from stormnode.client import RequestTimer
from stormnode.control import ControlEvent, ControlEventBus
from stormnode.loadtest import LoadtestRun, LoadtestRunner
from stormnode.logging import Logger
from stormnode.logging.stormnode_logging_models import (
    CommandDebug,
    CommandError,
    TaskDebug,
    TaskError,
)
from stormnode.models import NodeOptions
from stormnode.tasks import TaskModule, TaskRegistry
from stormnode.transport import (
    Transport,
    TransportError,
    results_topic,
    topic_to_loadtest_uuid,
    wildcard_topic,
)

from .models import (
    CommandEnvelope,
    CommandType,
    CustomCommand,
    EndpointHealthCommand,
    ExecuteCommand,
    HostMonitoringCommand,
    ManageLoadtestCommand,
    SetTimeCommand,
    TopicCommand,
)


class CommandDispatcher:
    """
    Top-level handler for inbound messages. Messages are parsed,
    authorized and routed in arrival order; each task handler then runs
    as its own asyncio task so a slow or failing handler never holds up
    the next message.

    Malformed and unauthorized messages are dropped without any reply.
    """

    def __init__(
        self,
        options: NodeOptions,
        transport: Transport,
        verifier: AuthorizationVerifier,
        control_bus: ControlEventBus | None = None,
        request_timer: RequestTimer | None = None,
        registry: TaskRegistry | None = None,
        logger: Logger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if control_bus is None:
            control_bus = ControlEventBus()

        if request_timer is None:
            request_timer = RequestTimer()

        if registry is None:
            registry = TaskRegistry.with_system_modules()

        if logger is None:
            logger = Logger()

        self.options = options
        self.node_id = options.node_id
        self.control_bus = control_bus
        self.registry = registry

        self._transport = transport
        self._verifier = verifier
        self._request_timer = request_timer
        self._logger = logger
        self._clock = clock

        self._tasks: set[asyncio.Task] = set()
        self.runners: set[LoadtestRunner] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def on_message(
        self,
        topic: str,
        payload: bytes,
    ):
        envelope = self._parse(payload)
        if envelope is None:
            return

        if not self._verifier.authorize(envelope.authtype, envelope.authdata):
            await self._debug(topic, envelope.command, "Command discarded")
            return

        if not self._verifier.verify(envelope.signature):
            await self._debug(topic, envelope.command, "Invalid signature")
            return

        command = CommandType.parse(envelope.command)
        if command is None:
            return

        data = envelope.model_dump()

        try:
            await self._route(topic, command, data)

        except ValidationError as err:
            await self._debug(
                topic,
                command.value,
                f"Malformed {command.value} command discarded: {err.error_count()} errors",
            )

    async def _route(
        self,
        topic: str,
        command: CommandType,
        data: Dict[str, Any],
    ):
        match command:
            case CommandType.LOADTEST:
                runner = self._create_runner(
                    LoadtestRun.model_validate(data),
                )

                task = self._spawn(
                    topic,
                    command,
                    self._handle_loadtest(runner),
                )

                task.add_done_callback(
                    lambda _: self._release_runner(runner)
                )

            case CommandType.MANAGE_LOADTEST:
                await self._handle_manage_loadtest(
                    topic,
                    ManageLoadtestCommand.model_validate(data),
                )

            case CommandType.ENDPOINT_HEALTH:
                self._spawn(
                    topic,
                    command,
                    self._handle_endpoint_health(
                        EndpointHealthCommand.model_validate(data),
                    ),
                )

            case CommandType.HOST_MONITORING:
                self._spawn(
                    topic,
                    command,
                    self._handle_host_monitoring(
                        HostMonitoringCommand.model_validate(data),
                    ),
                )

            case CommandType.CUSTOM_COMMAND:
                self._spawn(
                    topic,
                    command,
                    self._handle_custom_command(
                        CustomCommand.model_validate(data),
                    ),
                )

            case CommandType.EXECUTE:
                self._spawn(
                    topic,
                    command,
                    self._handle_execute(
                        ExecuteCommand.model_validate(data),
                    ),
                )

            case CommandType.SUBSCRIBE_TOPIC:
                self._spawn(
                    topic,
                    command,
                    self._handle_subscribe_topic(
                        TopicCommand.model_validate(data),
                    ),
                )

            case CommandType.UNSUBSCRIBE_TOPIC:
                self._spawn(
                    topic,
                    command,
                    self._handle_unsubscribe_topic(
                        TopicCommand.model_validate(data),
                    ),
                )

            case CommandType.SET_TIME:
                await self._handle_set_time(
                    topic,
                    SetTimeCommand.model_validate(data),
                )

    def _parse(self, payload: bytes | str) -> CommandEnvelope | None:
        try:
            data = orjson.loads(payload)

        except orjson.JSONDecodeError:
            return None

        if not isinstance(data, dict):
            return None

        try:
            return CommandEnvelope.model_validate(data)

        except ValidationError:
            return None

    def _spawn(
        self,
        topic: str,
        command: CommandType,
        handler: Coroutine[Any, Any, None],
    ):
        task = asyncio.create_task(
            self._run_handler(topic, command, handler)
        )

        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        return task

    async def _run_handler(
        self,
        topic: str,
        command: CommandType,
        handler: Coroutine[Any, Any, None],
    ):
        try:
            await handler

        except Exception as err:
            await self._logger.log(
                CommandError(
                    message=f"Handling {command.value} failed: {err}",
                    node_id=self.node_id,
                    topic=topic,
                    command=command.value,
                )
            )

    def _create_runner(self, run: LoadtestRun) -> LoadtestRunner:
        runner = LoadtestRunner(
            run,
            self.node_id,
            self._transport,
            self.control_bus,
            self._request_timer,
            self._logger,
            clock=self._clock,
        )

        runner.register()
        self.runners.add(runner)

        return runner

    async def _handle_loadtest(self, runner: LoadtestRunner):
        await runner.execute()

    def _release_runner(self, runner: LoadtestRunner):
        runner.unregister()
        self.runners.discard(runner)

    async def _handle_manage_loadtest(
        self,
        topic: str,
        command: ManageLoadtestCommand,
    ):
        run_uuid = topic_to_loadtest_uuid(topic)
        if run_uuid is None:
            await self._debug(
                topic,
                CommandType.MANAGE_LOADTEST.value,
                "No loadtest id in topic, ignoring",
            )

            return

        await self.control_bus.signal(
            run_uuid,
            ControlEvent(action=command.action),
        )

    async def _handle_endpoint_health(self, command: EndpointHealthCommand):
        record = await self._request_timer.execute(command.request)

        await self._publish(
            results_topic("endpointhealth", command.task_id, self.node_id),
            {
                "responsesData": record.to_data(),
            },
        )

    async def _handle_host_monitoring(self, command: HostMonitoringCommand):
        task_data = await self._run_module(
            "system/hostmonitoring",
            lambda: self.registry.system("hostmonitoring"),
            command.arguments,
        )

        await self._publish(
            results_topic("hostmonitoring", command.task_id, self.node_id),
            {
                "taskData": task_data,
            },
        )

    async def _handle_custom_command(self, command: CustomCommand):
        task_data = await self._run_module(
            f"custom/{command.customcommand}",
            lambda: self.registry.custom(command.customcommand),
            command.arguments,
        )

        await self._publish(
            results_topic("customcommand", command.task_id, self.node_id),
            {
                "taskData": task_data,
            },
        )

    async def _handle_execute(self, command: ExecuteCommand):
        module_return = await self._run_module(
            command.modulepath,
            lambda: self.registry.resolve_module_path(command.modulepath),
            command.arguments,
        )

        if command.channel is None:
            return

        await self._publish(
            results_topic("execute", command.channel, self.node_id),
            {
                "nodeId": self.node_id,
                "modulepath": command.modulepath,
                "return": module_return,
            },
        )

    async def _handle_subscribe_topic(self, command: TopicCommand):
        topic = wildcard_topic(command.newtopic)

        try:
            await self._transport.subscribe(topic)

        except TransportError as err:
            await self._task_error(
                "subscribetopic",
                f"Error could not subscribe in {command.newtopic}: {err}",
            )

    async def _handle_unsubscribe_topic(self, command: TopicCommand):
        topic = wildcard_topic(command.newtopic)

        try:
            await self._transport.unsubscribe(topic)

        except TransportError as err:
            await self._task_error(
                "unsubscribetopic",
                f"Error could not unsubscribe {command.newtopic}: {err}",
            )

    async def _handle_set_time(
        self,
        topic: str,
        command: SetTimeCommand,
    ):
        offset = self._verifier.calibrate(command.stormdevtime)

        await self._debug(
            topic,
            CommandType.SET_TIME.value,
            f"Clock offset set to {offset}ms",
        )

    async def _run_module(
        self,
        task_name: str,
        resolve: Callable[[], TaskModule],
        arguments: Any,
    ) -> Any:
        await self._logger.log(
            TaskDebug(
                message=f"Running task module {task_name}",
                node_id=self.node_id,
                task=task_name,
            )
        )

        module = resolve()
        module.configure(
            options=self.options,
            arguments=arguments,
        )

        return await module.run()

    async def _publish(
        self,
        topic: str,
        result: Dict[str, Any],
    ):
        await self._transport.publish(
            topic,
            orjson.dumps(result),
        )

    async def _debug(
        self,
        topic: str,
        command: str | None,
        message: str,
    ):
        await self._logger.log(
            CommandDebug(
                message=message,
                node_id=self.node_id,
                topic=topic,
                command=command,
            )
        )

    async def _task_error(
        self,
        task_name: str,
        message: str,
    ):
        await self._logger.log(
            TaskError(
                message=message,
                node_id=self.node_id,
                task=task_name,
                error=message,
            )
        )

    async def join(self):
        while self._tasks:
            await asyncio.gather(
                *list(self._tasks),
                return_exceptions=True,
            )

    async def shutdown(self):
        tasks = list(self._tasks)

        for task in tasks:
            task.cancel()

        await asyncio.gather(
            *tasks,
            return_exceptions=True,
        )
