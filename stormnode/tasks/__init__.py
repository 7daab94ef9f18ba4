from .task_module import TaskModule as TaskModule
from .task_registry import (
    CUSTOM_NAMESPACE as CUSTOM_NAMESPACE,
    SYSTEM_NAMESPACE as SYSTEM_NAMESPACE,
    TaskModuleNotFound as TaskModuleNotFound,
    TaskRegistry as TaskRegistry,
)

