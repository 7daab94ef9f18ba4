from .loadtest_runner import LoadtestRunner as LoadtestRunner
from .models import (
    LoadtestRun as LoadtestRun,
    RunState as RunState,
)
from .run_state_machine import RunStateMachine as RunStateMachine
