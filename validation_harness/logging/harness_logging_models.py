from typing import Literal

from .models import Entry, LogLevel


class HarnessInfo(Entry, kw_only=True):
    test: str
    groups: int
    nodes: int
    level: LogLevel = LogLevel.INFO

class HarnessWarning(Entry, kw_only=True):
    test: str
    groups: int
    nodes: int
    level: LogLevel = LogLevel.WARN

class HarnessFatal(Entry, kw_only=True):
    test: str
    groups: int
    nodes: int
    level: LogLevel = LogLevel.FATAL

class GroupInfo(Entry, kw_only=True):
    test: str
    group: int
    modules: list[str]
    level: LogLevel = LogLevel.INFO

class ModuleDebug(Entry, kw_only=True):
    module: str
    group: int
    level: LogLevel = LogLevel.DEBUG

class ModuleError(Entry, kw_only=True):
    module: str
    group: int
    level: LogLevel = LogLevel.ERROR

class FailureSignal(Entry, kw_only=True):
    module: str
    level: LogLevel = LogLevel.WARN

class FailureReport(Entry, kw_only=True):
    module: str
    level: LogLevel = LogLevel.ERROR

class ClusterDebug(Entry, kw_only=True):
    cluster_name: str
    node_count: int
    level: LogLevel = LogLevel.DEBUG

class ClusterInfo(Entry, kw_only=True):
    cluster_name: str
    node_count: int
    level: LogLevel = LogLevel.INFO

class ClusterWarning(Entry, kw_only=True):
    cluster_name: str
    node_count: int
    level: LogLevel = LogLevel.WARN

class CommandDebug(Entry, kw_only=True):
    command: str
    args: list[str]
    working_directory: str
    level: LogLevel = LogLevel.DEBUG

class CommandOutput(Entry, kw_only=True):
    command: str
    stream: Literal["stdout", "stderr"] = "stdout"
    level: LogLevel = LogLevel.INFO

class CommandError(Entry, kw_only=True):
    command: str
    return_code: int
    stream: Literal["stdout", "stderr"] = "stderr"
    level: LogLevel = LogLevel.ERROR
