from .run_status import RunStatus as RunStatus, RunStatusName as RunStatusName
from .task_run import TaskRun as TaskRun
