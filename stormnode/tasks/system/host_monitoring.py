import asyncio
import os
import time
from typing import Any, Dict

import psutil

from stormnode.tasks.task_module import TaskModule


class HostMonitoring(TaskModule):
    name = "hostmonitoring"

    DEFAULT_SAMPLE_INTERVAL = 1.0

    @property
    def sample_interval(self) -> float:
        if isinstance(self.arguments, dict):
            return float(
                self.arguments.get("interval", self.DEFAULT_SAMPLE_INTERVAL)
            )

        return self.DEFAULT_SAMPLE_INTERVAL

    async def run(self) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            self._collect,
        )

    def _collect(self) -> Dict[str, Any]:
        memory = psutil.virtual_memory()
        disk = psutil.disk_usage(os.path.abspath(os.sep))
        network = psutil.net_io_counters()

        load_avg: list[float] | None = None
        try:
            load_avg = list(psutil.getloadavg())

        except (AttributeError, OSError):
            pass

        return {
            "cpu": {
                "percent": psutil.cpu_percent(interval=self.sample_interval),
                "count": psutil.cpu_count(logical=True),
                "physical_count": psutil.cpu_count(logical=False),
                "load_avg": load_avg,
            },
            "memory": {
                "total": memory.total,
                "available": memory.available,
                "percent": memory.percent,
            },
            "disk": {
                "total": disk.total,
                "used": disk.used,
                "percent": disk.percent,
            },
            "network": {
                "bytes_sent": network.bytes_sent if network else None,
                "bytes_recv": network.bytes_recv if network else None,
            },
            "uptime": int(time.time() - psutil.boot_time()),
        }
