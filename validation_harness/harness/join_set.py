import asyncio
import concurrent.futures
import threading
from typing import Dict, List

from validation_harness.taskex import Run

SignalFuture = asyncio.Future | concurrent.futures.Future


class JoinSet:
    """
    Tracks the module runs of one group plus every failure signal task
    spawned while the group is active, so the engine can wait for all
    of them, including signals that arrive while it is already waiting.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._runs: List[Run] = []
        self._signals: List[SignalFuture] = []
        self._wrapped: Dict[int, asyncio.Future] = {}

    @property
    def runs(self):
        return list(self._runs)

    def add_run(self, run: Run):
        with self._lock:
            if not any(tracked is run for tracked in self._runs):
                self._runs.append(run)

    def add_signal(self, signal: SignalFuture):
        with self._lock:
            self._signals.append(signal)

    async def wait(self) -> Run | None:
        """
        Wait until every run and signal has finished. The first run to
        fail cancels the runs still outstanding; signal tasks are always
        drained. Returns the first failed run, if any.
        """

        failed: Run | None = None

        pending = self._pending()
        while pending:
            await asyncio.wait(
                pending,
                return_when=asyncio.FIRST_COMPLETED,
            )

            if failed is None:
                failed = self._first_failure()

                if failed:
                    await self.cancel()

            pending = self._pending()

        return failed

    async def cancel(self):
        """Cancel every run still outstanding. Signals are left to finish."""
        await asyncio.gather(
            *[run.cancel() for run in self.runs if not run.done]
        )

    def _first_failure(self):
        for run in self.runs:
            if run.failed:
                return run

    def _pending(self):
        with self._lock:
            runs = list(self._runs)
            signals = list(self._signals)

        pending = {
            run.task
            for run in runs
            if run.task is not None and not run.task.done()
        }

        for signal in signals:
            if isinstance(signal, concurrent.futures.Future):
                signal = self._wrap(signal)

            if not signal.done():
                pending.add(signal)

        return pending

    def _wrap(self, signal: concurrent.futures.Future):
        wrapped = self._wrapped.get(id(signal))
        if wrapped is None:
            wrapped = asyncio.wrap_future(signal)
            self._wrapped[id(signal)] = wrapped

        return wrapped
