import time
import traceback
from typing import Any, Awaitable, Callable, List, Tuple, TypeVar

from validation_harness.bridges import Bridge, CToolBridge
from validation_harness.env import Env
from validation_harness.exceptions import (
    HarnessError,
    LogAssertionFailed,
    ModuleFailuresReported,
    ModuleValidationFailed,
    RequiredErrorMissing,
)
from validation_harness.logging import Logger, LoggingConfig
from validation_harness.logging.harness_logging_models import (
    FailureReport,
    GroupInfo,
    HarnessWarning,
    HarnessFatal,
    HarnessInfo,
    ModuleDebug,
    ModuleError,
)
from validation_harness.modules import Module, ModuleRegistry, default_registry
from validation_harness.oracle import LogOracle
from validation_harness.results import (
    GroupOutcome,
    HarnessOutcome,
    HarnessResult,
    HarnessState,
)
from validation_harness.specs import ClusterTarget, HarnessSpec, ModuleSpec
from validation_harness.taskex import TaskRunner

from .context import HarnessContext
from .error_filter import filter_failures
from .failure_store import FailureStore
from .join_set import JoinSet

BridgeFactory = Callable[[ClusterTarget, Env], Bridge]

T = TypeVar("T")


class HarnessEngine:
    """
    Runs one harness definition end to end: provision the cluster, run
    each module group in order, tear the cluster down and decide the
    verdict. ``run()`` always returns a ``HarnessOutcome``.
    """

    def __init__(
        self,
        registry: ModuleRegistry | None = None,
        env: Env | None = None,
        bridge_factory: BridgeFactory | None = None,
        oracle: LogOracle | None = None,
    ) -> None:
        if registry is None:
            registry = default_registry()

        if env is None:
            env = Env()

        if bridge_factory is None:
            bridge_factory = CToolBridge

        if oracle is None:
            oracle = LogOracle()

        self.state = HarnessState.INIT

        self._registry = registry
        self._env = env
        self._bridge_factory = bridge_factory
        self._oracle = oracle
        self._logger = Logger()

    async def run(self, spec: HarnessSpec) -> HarnessOutcome:
        start = time.monotonic()
        self.state = HarnessState.INIT

        self._configure_logging(spec)

        filters = spec.error_filter
        failures = FailureStore()
        task_runner = TaskRunner(self._env)

        groups: List[GroupOutcome] = []
        error: str | None = None
        bridge: Bridge | None = None
        transcript = ""
        satisfied: set[str] = set()

        async with self._logger.context(name="harness", nested=True) as ctx:
            await ctx.log(
                HarnessInfo(
                    message=f"Starting harness {spec.name}",
                    test=spec.name,
                    groups=len(spec.modules),
                    nodes=spec.node_count,
                )
            )

            try:
                target = spec.to_target(self._env)
                bridge = self._bridge_factory(target, self._env)

                await bridge.provision()

                if target.config_overrides:
                    await bridge.apply_config(target.config_overrides)

                await bridge.start()
                self.state = HarnessState.PROVISIONED

                context = HarnessContext(spec, bridge, task_runner, failures)

                for index, group in enumerate(spec.modules):
                    if error is not None:
                        groups.append(
                            GroupOutcome(
                                group=index,
                                modules=[module.name for module in group],
                                result=HarnessResult.SKIPPED,
                            )
                        )

                        continue

                    self.state = HarnessState.RUNNING_GROUP

                    outcome, failed_module, failure = await self._run_group(
                        spec,
                        index,
                        group,
                        context,
                    )

                    groups.append(outcome)

                    if failure is not None:
                        error = str(failure)

                        await ctx.log(
                            ModuleError(
                                message=error,
                                module=failed_module or "",
                                group=index,
                            )
                        )

            except HarnessError as err:
                error = str(err)
                await self._log_fatal(spec, error)

            except Exception as err:
                error = f"Unexpected {err.__class__.__name__} - {err}"
                await self._log_fatal(spec, error)

            for module_name, messages in failures.snapshot().items():
                for message in messages:
                    await ctx.log(
                        FailureReport(
                            message=message,
                            module=module_name,
                        )
                    )

            if bridge is not None:
                transcript, satisfied, teardown_error = await self._teardown(
                    spec,
                    bridge,
                    best_effort=error is not None,
                )

                if error is None:
                    error = teardown_error

            self.state = HarnessState.TORN_DOWN

            await task_runner.shutdown()

            surviving, missing = filter_failures(
                failures.snapshot(),
                filters.ignored_errors,
                filters.required_errors - satisfied,
            )

            verdict_errors: List[str] = []
            if surviving:
                verdict_errors.append(str(ModuleFailuresReported(surviving)))

            if missing:
                verdict_errors.append(str(RequiredErrorMissing(missing)))

            if error is None and verdict_errors:
                error = "\n".join(verdict_errors)

            self.state = HarnessState.VERDICT

            result = HarnessResult.FAILED if error else HarnessResult.PASSED

            outcome = HarnessOutcome(
                name=spec.name,
                result=result,
                duration_seconds=time.monotonic() - start,
                groups=groups,
                failures=surviving,
                missing_required=missing,
                transcript=transcript,
                error=error,
                state=self.state,
            )

            await ctx.log(
                HarnessInfo(
                    message=outcome.summary(),
                    test=spec.name,
                    groups=len(spec.modules),
                    nodes=spec.node_count,
                )
            )

        return outcome

    async def _run_group(
        self,
        spec: HarnessSpec,
        index: int,
        group: List[ModuleSpec],
        context: HarnessContext,
    ) -> Tuple[GroupOutcome, str | None, HarnessError | None]:
        group_start = time.monotonic()
        module_names = [module.name for module in group]

        join_set = JoinSet()
        context.bind(join_set)

        failed_module: str | None = None
        failure: HarnessError | None = None

        async with self._logger.context(name="harness", nested=True) as ctx:
            await ctx.log(
                GroupInfo(
                    message=f"Running group {index} - {', '.join(module_names)}",
                    test=spec.name,
                    group=index,
                    modules=module_names,
                )
            )

            try:
                failed_module, failure = await self._submit_group(
                    spec,
                    index,
                    group,
                    context,
                )

                if failure is not None:
                    await join_set.cancel()

                failed = await join_set.wait()

                if failure is None and failed is not None:
                    failed_module = failed.task_name
                    failure = ModuleValidationFailed(
                        failed.task_name,
                        index,
                        failed.error,
                        failed.trace,
                    )

            finally:
                context.unbind()

        errors = {
            run.task_name: run.error or run.status.value
            for run in join_set.runs
            if run.failed or run.cancelled
        }

        if failed_module is not None and failed_module not in errors:
            errors[failed_module] = str(failure)

        return (
            GroupOutcome(
                group=index,
                modules=module_names,
                result=HarnessResult.FAILED if failure is not None else HarnessResult.PASSED,
                errors=errors,
                elapsed=time.monotonic() - group_start,
            ),
            failed_module,
            failure,
        )

    async def _submit_group(
        self,
        spec: HarnessSpec,
        index: int,
        group: List[ModuleSpec],
        context: HarnessContext,
    ) -> Tuple[str | None, HarnessError | None]:
        """
        Create every module of the group, then submit each through its
        ``validate()``. Stops at the first module that cannot be created or
        submitted and returns its name with the error.
        """

        modules: List[Module] = []
        for module_spec in group:
            try:
                modules.append(self._registry.create(module_spec, spec, context))

            except HarnessError as err:
                return module_spec.name, err

            except Exception as err:
                return module_spec.name, ModuleValidationFailed(
                    module_spec.name,
                    index,
                    f"{err.__class__.__name__} - {err}",
                    traceback.format_exc(),
                )

        async with self._logger.context(name="harness", nested=True) as ctx:
            for module in modules:
                try:
                    context.track(module.name, module.validate())

                except Exception as err:
                    return module.name, ModuleValidationFailed(
                        module.name,
                        index,
                        f"{err.__class__.__name__} - {err}",
                        traceback.format_exc(),
                    )

                await ctx.log(
                    ModuleDebug(
                        message=f"Submitted module {module.name}",
                        module=module.name,
                        group=index,
                    )
                )

        return None, None

    async def _teardown(
        self,
        spec: HarnessSpec,
        bridge: Bridge,
        best_effort: bool = False,
    ) -> Tuple[str, set[str], str | None]:
        filters = spec.error_filter
        transcript = ""

        if best_effort:
            await self._attempt(spec, "stop", bridge.stop)
            await self._attempt(spec, "capture_logs", bridge.capture_logs, spec.name)

            transcript = await self._attempt(
                spec,
                "read_cluster_logs",
                bridge.read_cluster_logs,
                spec.name,
            ) or ""

            await self._attempt(spec, "destroy", bridge.destroy, True)

        else:
            try:
                await bridge.stop()
                await bridge.capture_logs(spec.name)
                transcript = await bridge.read_cluster_logs(spec.name)
                await bridge.destroy()

            except HarnessError as err:
                await self._log_fatal(spec, str(err))
                return transcript, set(), str(err)

            except Exception as err:
                message = f"Unexpected {err.__class__.__name__} during teardown - {err}"
                await self._log_fatal(spec, message)
                return transcript, set(), message

        remaining, satisfied = self._oracle.filter_transcript(
            transcript,
            filters.ignored_errors,
            filters.required_errors,
        )

        if remaining:
            return (
                transcript,
                satisfied,
                str(LogAssertionFailed(spec.name, remaining)),
            )

        return transcript, satisfied, None

    async def _attempt(
        self,
        spec: HarnessSpec,
        step: str,
        call: Callable[..., Awaitable[T]],
        *args: Any,
    ) -> T | None:
        try:
            return await call(*args)

        except Exception as err:
            async with self._logger.context(name="harness", nested=True) as ctx:
                await ctx.log(
                    HarnessWarning(
                        message=f"Teardown step {step} failed - {err}",
                        test=spec.name,
                        groups=len(spec.modules),
                        nodes=spec.node_count,
                    )
                )

    def _configure_logging(self, spec: HarnessSpec):
        config = LoggingConfig()
        config.update(
            log_level=spec.logging.level or self._env.HARNESS_LOG_LEVEL,
            log_directory=spec.logging.directory,
            log_output=spec.logging.output,
        )

    async def _log_fatal(self, spec: HarnessSpec, message: str):
        async with self._logger.context(name="harness", nested=True) as ctx:
            await ctx.log(
                HarnessFatal(
                    message=message,
                    test=spec.name,
                    groups=len(spec.modules),
                    nodes=spec.node_count,
                )
            )
