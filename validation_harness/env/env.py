import os
from typing import Callable, Dict, Union

import psutil
from pydantic import BaseModel, StrictInt, StrictStr

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    HARNESS_WORKING_DIRECTORY: StrictStr = os.getcwd()
    HARNESS_LOG_ROOT: StrictStr = "build/test/logs/validation"
    HARNESS_CLUSTER_NAME: StrictStr = "CVH"
    HARNESS_REMOTE_HOME: StrictStr = "/home/automaton/cassandra"
    HARNESS_INSTALL_SOURCE: StrictStr | None = None
    HARNESS_CTOOL_EXECUTABLE: StrictStr = "ctool"
    HARNESS_TASK_RUNNER_MAX_THREADS: StrictInt = psutil.cpu_count(logical=False) or 1
    HARNESS_LOG_LEVEL: StrictStr = "info"

    @classmethod
    def types_map(self) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "HARNESS_WORKING_DIRECTORY": str,
            "HARNESS_LOG_ROOT": str,
            "HARNESS_CLUSTER_NAME": str,
            "HARNESS_REMOTE_HOME": str,
            "HARNESS_INSTALL_SOURCE": str,
            "HARNESS_CTOOL_EXECUTABLE": str,
            "HARNESS_TASK_RUNNER_MAX_THREADS": int,
            "HARNESS_LOG_LEVEL": str,
        }

    @property
    def log_root(self) -> str:
        if os.path.isabs(self.HARNESS_LOG_ROOT):
            return self.HARNESS_LOG_ROOT

        return os.path.join(self.HARNESS_WORKING_DIRECTORY, self.HARNESS_LOG_ROOT)

    @property
    def install_source(self) -> str:
        if self.HARNESS_INSTALL_SOURCE:
            return self.HARNESS_INSTALL_SOURCE

        return self.HARNESS_WORKING_DIRECTORY
