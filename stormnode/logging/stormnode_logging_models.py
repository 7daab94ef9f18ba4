from .models import Entry, LogLevel


class NodeDebug(Entry, kw_only=True):
    node_id: str
    level: LogLevel = LogLevel.DEBUG


class NodeInfo(Entry, kw_only=True):
    node_id: str
    level: LogLevel = LogLevel.INFO


class NodeError(Entry, kw_only=True):
    node_id: str
    level: LogLevel = LogLevel.ERROR


class CommandDebug(Entry, kw_only=True):
    node_id: str
    topic: str
    command: str | None = None
    level: LogLevel = LogLevel.DEBUG


class CommandError(Entry, kw_only=True):
    node_id: str
    topic: str
    command: str | None = None
    level: LogLevel = LogLevel.ERROR


class LoadtestDebug(Entry, kw_only=True):
    node_id: str
    run_id: str
    run_uuid: str | None = None
    requests: int
    level: LogLevel = LogLevel.DEBUG


class LoadtestInfo(Entry, kw_only=True):
    node_id: str
    run_id: str
    run_uuid: str | None = None
    requests: int
    level: LogLevel = LogLevel.INFO


class TaskDebug(Entry, kw_only=True):
    node_id: str
    task: str
    level: LogLevel = LogLevel.DEBUG


class TaskError(Entry, kw_only=True):
    node_id: str
    task: str
    error: str
    level: LogLevel = LogLevel.ERROR


class LoadtestError(Entry, kw_only=True):
    node_id: str
    run_id: str
    run_uuid: str | None = None
    requests: int
    level: LogLevel = LogLevel.ERROR
