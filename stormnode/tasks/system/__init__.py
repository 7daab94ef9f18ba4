from .host_monitoring import HostMonitoring as HostMonitoring
