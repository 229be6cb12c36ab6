import asyncio
import functools
import itertools
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Dict, TypeVar

from validation_harness.env import Env

from .run import Run

T = TypeVar("T")


class TaskRunner:
    """
    Schedules coroutines on the running loop and plain callables on a
    bounded thread pool. Every scheduled call gets a ``Run`` handle the
    caller can await, inspect, or cancel.
    """

    def __init__(self, config: Env | None = None) -> None:
        if config is None:
            config = Env()

        max_threads = max(config.HARNESS_TASK_RUNNER_MAX_THREADS, 1)

        self.runs: Dict[str, Run] = {}
        self._run_ids = itertools.count(1)
        self._executor = ThreadPoolExecutor(max_workers=max_threads)
        self._executor_semaphore = asyncio.Semaphore(value=max_threads)

    def all_runs(self):
        for run in list(self.runs.values()):
            yield run

    def run(
        self,
        call: Callable[..., Awaitable[T]] | Callable[..., T],
        *args: Any,
        alias: str | None = None,
        **kwargs: Any,
    ) -> Run:
        task_name = alias
        if task_name is None and isinstance(call, functools.partial):
            task_name = call.func.__name__

        elif task_name is None:
            task_name = getattr(call, "__name__", call.__class__.__name__)

        run = Run(
            next(self._run_ids),
            task_name,
            call,
            self._executor,
            self._executor_semaphore,
        )

        self.runs[run.token] = run
        run.execute(*args, **kwargs)

        return run

    async def cancel_all(self):
        await asyncio.gather(
            *[run.cancel() for run in self.all_runs() if not run.done]
        )

    async def shutdown(self):
        await self.cancel_all()
        self._executor.shutdown(wait=False, cancel_futures=True)
        self.runs.clear()

