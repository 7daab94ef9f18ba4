from enum import Enum


class RunState(Enum):
    INITIALIZING = "INITIALIZING"
    RUNNING = "RUNNING"
    HALTING = "HALTING"
    COMPLETED = "COMPLETED"
