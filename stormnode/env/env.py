from __future__ import annotations

import tempfile
from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictBool, StrictFloat, StrictInt, StrictStr

PrimaryType = Union[str, int, float, bytes, bool]


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Env(BaseModel):
    STORM_CONNECT_URL: StrictStr = "mqtts://nodenet.storm.dev:8883"
    STORM_NODEID: StrictStr | None = None
    STORM_LOG_LEVEL: StrictStr = "info"
    STORM_LOG_OUTPUT: Literal["stdout", "stderr"] = "stdout"
    STORM_LOGS_DIRECTORY: StrictStr | None = None
    STORM_REQUEST_TIMEOUT: StrictFloat | None = None
    STORM_VERIFY_SSL_CERT: StrictBool = True
    STORM_FRESHNESS_WINDOW_MS: StrictInt = 1_800_000
    STORM_MQTT_KEEPALIVE: StrictInt = 60
    STORM_LOCK_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "STORM_CONNECT_URL": str,
            "STORM_NODEID": str,
            "STORM_LOG_LEVEL": str,
            "STORM_LOG_OUTPUT": str,
            "STORM_LOGS_DIRECTORY": str,
            "STORM_REQUEST_TIMEOUT": float,
            "STORM_VERIFY_SSL_CERT": _to_bool,
            "STORM_FRESHNESS_WINDOW_MS": int,
            "STORM_MQTT_KEEPALIVE": int,
            "STORM_LOCK_DIRECTORY": str,
        }

    @property
    def lock_directory(self) -> str:
        if self.STORM_LOCK_DIRECTORY:
            return self.STORM_LOCK_DIRECTORY

        return tempfile.gettempdir()

    def get_logging_config(self) -> dict:
        return {
            "log_level": self.STORM_LOG_LEVEL,
            "log_output": self.STORM_LOG_OUTPUT,
            "log_directory": self.STORM_LOGS_DIRECTORY,
        }


