from .models import RunState


class RunStateMachine:
    """
    Valid load-test run transitions:
    INITIALIZING -> RUNNING -> (HALTING ->) COMPLETED.
    A run that fails while initializing goes straight to COMPLETED.
    """

    VALID_TRANSITIONS: dict[RunState, set[RunState]] = {
        RunState.INITIALIZING: {RunState.RUNNING, RunState.COMPLETED},
        RunState.RUNNING: {RunState.HALTING, RunState.COMPLETED},
        RunState.HALTING: {RunState.COMPLETED},
        RunState.COMPLETED: set(),
    }

    @classmethod
    def can_transition(cls, from_state: RunState, to_state: RunState) -> bool:
        if from_state == to_state:
            return False
        return to_state in cls.VALID_TRANSITIONS.get(from_state, set())

    @classmethod
    def try_transition(cls, from_state: RunState, to_state: RunState) -> RunState:
        if cls.can_transition(from_state, to_state):
            return to_state
        return from_state
