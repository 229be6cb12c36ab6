from .models import RunStatus as RunStatus, TaskRun as TaskRun
from .run import Run as Run
from .task_runner import TaskRunner as TaskRunner
