from .loadtest_run import LoadtestRun as LoadtestRun
from .run_state import RunState as RunState
