from __future__ import annotations

import asyncio
import concurrent.futures
from typing import Any, Awaitable, Callable, TYPE_CHECKING

from validation_harness.bridges import Bridge
from validation_harness.logging import Logger
from validation_harness.logging.harness_logging_models import FailureSignal
from validation_harness.taskex import Run, TaskRunner

from .failure_store import FailureStore
from .join_set import JoinSet

if TYPE_CHECKING:
    from validation_harness.specs import HarnessSpec


class HarnessContext:
    """
    What a module sees of the running harness: the live cluster, the
    definition it was loaded from and a way to report failures without
    raising.
    """

    def __init__(
        self,
        spec: HarnessSpec,
        bridge: Bridge,
        task_runner: TaskRunner,
        failures: FailureStore,
    ) -> None:
        self.spec = spec
        self._bridge = bridge
        self._task_runner = task_runner
        self._failures = failures
        self._join_set: JoinSet | None = None
        self._loop = asyncio.get_running_loop()
        self._logger = Logger()

    @property
    def bridge(self) -> Bridge:
        return self._bridge

    def bind(self, join_set: JoinSet):
        self._join_set = join_set

    def unbind(self):
        self._join_set = None

    def submit(
        self,
        module_name: str,
        call: Callable[..., Awaitable[Any]] | Callable[..., Any],
        *args: Any,
        **kwargs: Any,
    ) -> Run:
        run = self._task_runner.run(
            call,
            *args,
            alias=module_name,
            **kwargs,
        )

        if self._join_set is not None:
            self._join_set.add_run(run)

        return run

    def track(
        self,
        module_name: str,
        handle: Run | Awaitable[Any] | concurrent.futures.Future | None,
    ) -> Run | None:
        """
        Add the handle returned by a module's ``validate()`` to the active
        group. Runs are tracked once; any other future or awaitable is
        awaited through a run of its own so it fails and cancels the same
        way.
        """

        if handle is None:
            return None

        if isinstance(handle, Run):
            if self._join_set is not None:
                self._join_set.add_run(handle)

            return handle

        return self.submit(module_name, self._resolve, handle)

    def signal_failure(self, module_name: str, message: str):
        """
        Record a failure for ``module_name`` as its own task. Safe to call
        from the event loop or from a worker thread.
        """

        join_set = self._join_set
        if join_set is None:
            self._failures.append(module_name, message)
            return

        if self._on_loop_thread():
            run = self._task_runner.run(
                self._record,
                module_name,
                message,
                alias="signal_failure",
            )

            join_set.add_signal(run.task)

        else:
            join_set.add_signal(
                asyncio.run_coroutine_threadsafe(
                    self._record(module_name, message),
                    self._loop,
                )
            )

    async def _resolve(
        self,
        handle: Awaitable[Any] | concurrent.futures.Future,
    ):
        if isinstance(handle, concurrent.futures.Future):
            handle = asyncio.wrap_future(handle)

        return await handle

    async def _record(self, module_name: str, message: str):
        self._failures.append(module_name, message)

        async with self._logger.context(name="harness", nested=True) as ctx:
            await ctx.log(
                FailureSignal(
                    message=f"{module_name}: {message}",
                    module=module_name,
                )
            )

    def _on_loop_thread(self):
        try:
            return asyncio.get_running_loop() is self._loop

        except RuntimeError:
            return False
