from __future__ import annotations

import math
import time
from typing import Callable

import orjson

from stormnode.client import RequestTimer
from stormnode.control import ControlEvent, ControlEventBus
from stormnode.logging import Logger
from stormnode.logging.stormnode_logging_models import (
    LoadtestDebug,
    LoadtestError,
    LoadtestInfo,
)
from stormnode.transport import (
    Transport,
    TransportError,
    loadtest_manage_topic,
    results_topic,
)

from .models import LoadtestRun, RunState
from .run_state_machine import RunStateMachine


class LoadtestRunner:
    """
    Executes one load-test run. Requests in a batch run strictly one
    after another; the batch repeats while ``iterateUntilTs`` lies in the
    future and no halt was received on the run's control topic.

    While a run carries a ``uuid`` it holds exactly one control-topic
    subscription and one control bus registration, both released once
    when the run ends.
    """

    def __init__(
        self,
        run: LoadtestRun,
        node_id: str,
        transport: Transport,
        control_bus: ControlEventBus,
        request_timer: RequestTimer,
        logger: Logger,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.run = run
        self.node_id = node_id
        self._transport = transport
        self._control_bus = control_bus
        self._request_timer = request_timer
        self._logger = logger
        self._clock = clock

        self._state = RunState.INITIALIZING
        self._halt_requested = False
        self._registered = False
        self._subscribed = False
        self.batches_completed = 0
        self.requests_completed = 0

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def halted(self) -> bool:
        return self._halt_requested

    @property
    def control_topic(self) -> str | None:
        if self.run.run_uuid is None:
            return None

        return loadtest_manage_topic(self.run.run_uuid)

    @property
    def results_topic(self) -> str:
        return results_topic(
            "loadtest",
            self.run.run_id,
            self.node_id,
        )

    def register(self):
        """
        Attach the run to the control bus. Called synchronously when the
        run is accepted so a halt queued right behind the start command
        already finds a handler.
        """
        if self.run.run_uuid is None or self._registered:
            return

        self._control_bus.register(self.run.run_uuid, self._on_control)
        self._registered = True

    def unregister(self):
        if self._registered is False:
            return

        self._control_bus.unregister(self.run.run_uuid, self._on_control)
        self._registered = False

    async def execute(self):
        try:
            self.register()
            await self._subscribe_control()

            await self._logger.log(
                LoadtestInfo(
                    message="Starting loadtest",
                    node_id=self.node_id,
                    run_id=str(self.run.run_id),
                    run_uuid=self.run.run_uuid,
                    requests=len(self.run.requests),
                )
            )

            self._transition(RunState.RUNNING)

            while True:
                await self._run_batch()

                if self._should_repeat() is False:
                    break

            if self._halt_requested:
                self._transition(RunState.HALTING)

        finally:
            await self._release_control()
            self._transition(RunState.COMPLETED)

        await self._logger.log(
            LoadtestInfo(
                message=f"Loadtest finished after {self.batches_completed} batches, halted: {self._halt_requested}",
                node_id=self.node_id,
                run_id=str(self.run.run_id),
                run_uuid=self.run.run_uuid,
                requests=self.requests_completed,
            )
        )

    async def _run_batch(self):
        for config in self.run.requests:
            if self._halt_requested:
                await self._logger.log(
                    LoadtestDebug(
                        message="Halting loadtest execution",
                        node_id=self.node_id,
                        run_id=str(self.run.run_id),
                        run_uuid=self.run.run_uuid,
                        requests=self.requests_completed,
                    )
                )

                return

            record = await self._request_timer.execute(config)
            self.requests_completed += 1

            try:
                await self._transport.publish(
                    self.results_topic,
                    orjson.dumps({
                        "responsesData": [record.to_data()],
                    }),
                )

            except TransportError as err:
                await self._logger.log(
                    LoadtestError(
                        message=f"Could not publish result for request {config.request_id}: {err}",
                        node_id=self.node_id,
                        run_id=str(self.run.run_id),
                        run_uuid=self.run.run_uuid,
                        requests=self.requests_completed,
                    )
                )

        self.batches_completed += 1

    def _should_repeat(self) -> bool:
        iterate_until_ts = self.run.iterate_until_ts

        return (
            self._halt_requested is False
            and len(self.run.requests) > 0
            and iterate_until_ts is not None
            and iterate_until_ts > math.floor(self._clock())
        )

    async def _subscribe_control(self):
        if self.run.run_uuid is None:
            return

        await self._transport.subscribe(self.control_topic)
        self._subscribed = True

    async def _release_control(self):
        self.unregister()

        if self._subscribed:
            self._subscribed = False

            try:
                await self._transport.unsubscribe(self.control_topic)

            except TransportError as err:
                await self._logger.log(
                    LoadtestDebug(
                        message=f"Could not unsubscribe {self.control_topic}: {err}",
                        node_id=self.node_id,
                        run_id=str(self.run.run_id),
                        run_uuid=self.run.run_uuid,
                        requests=self.requests_completed,
                    )
                )

    async def _on_control(self, event: ControlEvent):
        if event.is_halt:
            self._halt_requested = True
            return

        if event.action:
            message = f"Loadtest event received with unhandled action {event.action}, ignoring"

        else:
            message = "Loadtest event received without action, ignoring"

        await self._logger.log(
            LoadtestDebug(
                message=message,
                node_id=self.node_id,
                run_id=str(self.run.run_id),
                run_uuid=self.run.run_uuid,
                requests=self.requests_completed,
            )
        )

    def _transition(self, state: RunState):
        self._state = RunStateMachine.try_transition(self._state, state)
