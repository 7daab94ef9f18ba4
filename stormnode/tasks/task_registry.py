from __future__ import annotations

import posixpath
from typing import Dict, Type

from .task_module import TaskModule

SYSTEM_NAMESPACE = "system"
CUSTOM_NAMESPACE = "custom"


class TaskModuleNotFound(Exception):
    pass


class TaskRegistry:
    """
    Maps ``system/<name>`` and ``custom/<name>`` to task module classes.
    Every resolve hands out a fresh, unconfigured instance.
    """

    def __init__(self) -> None:
        self._modules: Dict[str, Type[TaskModule]] = {}

    def register(
        self,
        module_type: Type[TaskModule],
        namespace: str = CUSTOM_NAMESPACE,
        name: str | None = None,
    ):
        if name is None:
            name = module_type.name

        self._modules[f"{namespace}/{name}"] = module_type

    def system(self, name: str) -> TaskModule:
        return self.resolve(f"{SYSTEM_NAMESPACE}/{name}")

    def custom(self, name: str) -> TaskModule:
        return self.resolve(f"{CUSTOM_NAMESPACE}/{posixpath.basename(name)}")

    def resolve_module_path(self, module_path: str) -> TaskModule:
        namespace = CUSTOM_NAMESPACE if module_path.startswith(f"{CUSTOM_NAMESPACE}/") else SYSTEM_NAMESPACE
        return self.resolve(f"{namespace}/{posixpath.basename(module_path)}")

    def resolve(self, path: str) -> TaskModule:
        module_type = self._modules.get(path)
        if module_type is None:
            raise TaskModuleNotFound(f"Err. - no task module registered at {path}")

        return module_type()

    def __contains__(self, path: str):
        return path in self._modules

    @classmethod
    def with_system_modules(cls) -> TaskRegistry:
        from .system import HostMonitoring

        registry = cls()
        registry.register(HostMonitoring, namespace=SYSTEM_NAMESPACE)

        return registry
