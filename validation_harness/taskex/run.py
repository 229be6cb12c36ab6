import asyncio
import functools
import inspect
import time
import traceback
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Awaitable, Callable, Optional

from .models import RunStatus, TaskRun


class Run:
    __slots__ = (
        "run_id",
        "task_name",
        "status",
        "error",
        "trace",
        "start",
        "end",
        "elapsed",
        "call",
        "result",
        "_task",
        "_loop",
        "_executor",
        "_semaphore",
    )

    def __init__(
        self,
        run_id: int,
        task_name: str,
        call: Callable[..., Awaitable[Any]] | Callable[..., Any],
        executor: ThreadPoolExecutor | None,
        semaphore: asyncio.Semaphore,
    ) -> None:
        self.run_id = run_id
        self.task_name = task_name
        self.status = RunStatus.CREATED

        self.error: Optional[str] = None
        self.trace: Optional[str] = None
        self.start = time.monotonic()
        self.end = 0
        self.elapsed = 0

        self.call = call
        self.result: Any | None = None

        self._task: Optional[asyncio.Task] = None
        self._loop = asyncio.get_running_loop()
        self._executor = executor
        self._semaphore = semaphore

    @property
    def token(self):
        return f"{self.task_name}:{self.run_id}"

    @property
    def task(self) -> asyncio.Task | None:
        return self._task

    @property
    def cancelled(self):
        return self.status == RunStatus.CANCELLED

    @property
    def failed(self):
        return self.status == RunStatus.FAILED

    @property
    def done(self):
        return self._task is not None and self._task.done()

    def execute(self, *args, **kwargs):
        self._task = asyncio.ensure_future(self._execute(*args, **kwargs))
        return self._task

    async def complete(self) -> TaskRun:
        if self._task is None:
            return self.to_task_run()

        try:
            return await self._task

        except asyncio.CancelledError:
            self.status = RunStatus.CANCELLED
            return self.to_task_run()

    async def cancel(self):
        if self._task and not self._task.done():
            self._task.cancel()

            try:
                await self._task

            except asyncio.CancelledError:
                pass

        if self.status in [RunStatus.CREATED, RunStatus.RUNNING]:
            self.status = RunStatus.CANCELLED

    def to_task_run(self):
        return TaskRun(
            run_id=self.run_id,
            task_name=self.task_name,
            status=self.status,
            error=self.error,
            trace=self.trace,
            start=self.start,
            end=self.end,
            elapsed=self.elapsed,
            result=self.result,
        )

    async def _execute(self, *args, **kwargs):
        try:
            self.status = RunStatus.RUNNING

            is_coroutine = (
                inspect.iscoroutinefunction(self.call)
                or (
                    isinstance(self.call, functools.partial)
                    and inspect.iscoroutinefunction(self.call.func)
                )
            )

            if is_coroutine:
                self.result = await self.call(*args, **kwargs)

            else:
                async with self._semaphore:
                    self.result = await self._loop.run_in_executor(
                        self._executor,
                        functools.partial(
                            self.call,
                            *args,
                            **kwargs,
                        ),
                    )

            self.status = RunStatus.COMPLETE

        except asyncio.CancelledError:
            self.status = RunStatus.CANCELLED
            raise

        except Exception as e:
            self.error = str(e) or e.__class__.__name__
            self.trace = traceback.format_exc()
            self.status = RunStatus.FAILED

        finally:
            self.end = time.monotonic()
            self.elapsed = self.end - self.start

        return self.to_task_run()
