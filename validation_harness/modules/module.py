from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, TYPE_CHECKING

from validation_harness.taskex import Run

if TYPE_CHECKING:
    from validation_harness.harness.context import HarnessContext
    from validation_harness.specs import HarnessSpec


class Module(ABC):
    """
    A unit of validation run against the live cluster.

    Subclasses implement ``run()`` as either a coroutine or a plain
    function. Coroutines run on the event loop, plain functions on the
    harness worker pool. Raising from ``run()`` fails the module and
    aborts the remaining groups. Use ``signal_failure()`` to report a
    problem without stopping the run.

    Overriding ``validate()`` is allowed as long as it returns something the
    engine can wait on: a ``Run``, an asyncio future or task, or a
    ``concurrent.futures.Future``.
    """

    name: str | None = None

    def __init__(
        self,
        spec: HarnessSpec,
        context: HarnessContext,
        options: Dict[str, Any] | None = None,
    ) -> None:
        if self.name is None:
            self.name = self.__class__.__name__

        self.spec = spec
        self.context = context
        self.options = options or {}

    @property
    def bridge(self):
        return self.context.bridge

    def validate(self) -> Run:
        return self.context.submit(self.name, self.run)

    def signal_failure(self, message: str):
        self.context.signal_failure(self.name, message)

    @abstractmethod
    def run(self) -> Any: ...
