import asyncio
import tarfile
import time
from typing import List

import pytest

from validation_harness.bridges import CToolBridge
from validation_harness.env import Env
from validation_harness.harness import HarnessEngine
from validation_harness.modules import Module, ModuleRegistry, default_registry
from validation_harness.results import HarnessResult, HarnessState
from validation_harness.specs import ClusterTarget, HarnessSpec

from tests.unit.mocks import FakeCluster, FakeCommandRunner


def create_registry(events: List[str]) -> ModuleRegistry:
    registry = default_registry()

    class Recorder(Module):
        async def run(self):
            tag = self.options.get("tag", self.name)
            events.append(f"start:{tag}")
            await asyncio.sleep(self.options.get("delay", 0))
            events.append(f"end:{tag}")

    class Signaler(Module):
        def run(self):
            time.sleep(self.options.get("delay", 0))
            self.signal_failure(self.options.get("message", "signaled"))
            events.append(f"signaled:{self.name}")

    class Raiser(Module):
        async def run(self):
            events.append("start:raiser")
            raise RuntimeError("validation exploded")

    class OwnHandle(Module):
        def validate(self):
            return asyncio.ensure_future(self.run())

        async def run(self):
            events.append("start:own")
            await asyncio.sleep(self.options.get("delay", 0.1))

            if self.options.get("fail"):
                raise RuntimeError("own handle broke")

            events.append("end:own")

    class BadValidate(Module):
        def validate(self):
            raise RuntimeError("cannot submit")

        async def run(self):
            events.append("start:bad")

    registry.register("Recorder", Recorder)
    registry.register("Signaler", Signaler)
    registry.register("Raiser", Raiser)
    registry.register("OwnHandle", OwnHandle)
    registry.register("BadValidate", BadValidate)

    return registry


def create_spec(name: str = "engine", **overrides) -> HarnessSpec:
    definition = {
        "nodeCount": 3,
        "modules": [["EndpointCount"], ["NodeToolFlush"]],
    }
    definition.update(overrides)

    return HarnessSpec.from_dict(definition, name=name)


@pytest.fixture
def events() -> List[str]:
    return []


@pytest.fixture
def engine(events: List[str], env: Env, bridge_factory) -> HarnessEngine:
    return HarnessEngine(
        registry=create_registry(events),
        env=env,
        bridge_factory=bridge_factory,
    )


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_clean_run_passes(
        self,
        engine: HarnessEngine,
        fake_runner: FakeCommandRunner,
        fake_cluster: FakeCluster,
    ):
        outcome = await engine.run(create_spec())

        assert outcome.result == HarnessResult.PASSED
        assert outcome.error is None
        assert outcome.transcript == ""
        assert outcome.failures == {}
        assert outcome.state == HarnessState.VERDICT
        assert [group.result for group in outcome.groups] == [
            HarnessResult.PASSED,
            HarnessResult.PASSED,
        ]

        operations = fake_runner.operations()
        assert operations[:3] == ["list", "launch", "scp"]
        assert operations[-1] == "reset"
        assert fake_cluster.clusters == {"CVH": 3}

    @pytest.mark.asyncio
    async def test_error_in_node_log_fails_with_transcript(
        self,
        engine: HarnessEngine,
        fake_cluster: FakeCluster,
    ):
        fake_cluster.node_logs[2] = "INFO compaction done\nERROR: disk full\n"

        outcome = await engine.run(create_spec())

        assert outcome.result == HarnessResult.FAILED
        assert "ERROR: disk full" in outcome.error
        assert outcome.transcript == "ERROR: disk full\n"

    @pytest.mark.asyncio
    async def test_ignored_log_lines_do_not_fail(
        self,
        engine: HarnessEngine,
        fake_cluster: FakeCluster,
    ):
        fake_cluster.node_logs[1] = "ERROR gossip flap\n"

        outcome = await engine.run(create_spec(ignoredErrors=["gossip flap"]))

        assert outcome.result == HarnessResult.PASSED

    @pytest.mark.asyncio
    async def test_config_overrides_applied_before_start(
        self,
        engine: HarnessEngine,
        fake_runner: FakeCommandRunner,
    ):
        await engine.run(create_spec(cassandrayaml={"concurrent_reads": 64}))

        operations = fake_runner.operations()
        assert operations.index("change_config") < operations.index("run")


class TestGroups:
    @pytest.mark.asyncio
    async def test_groups_run_in_sequence(
        self,
        engine: HarnessEngine,
        events: List[str],
    ):
        spec = create_spec(
            modules=[
                [
                    {"name": "Recorder", "options": {"tag": "g1-slow", "delay": 0.05}},
                    {"name": "Recorder", "options": {"tag": "g1-fast"}},
                ],
                [
                    {"name": "Recorder", "options": {"tag": "g2"}},
                ],
            ]
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.PASSED
        assert events.index("end:g1-slow") < events.index("start:g2")
        assert events.index("end:g1-fast") < events.index("start:g2")

    @pytest.mark.asyncio
    async def test_signal_arriving_while_waiting_is_joined(
        self,
        engine: HarnessEngine,
        events: List[str],
    ):
        spec = create_spec(
            modules=[
                [
                    {"name": "Signaler", "options": {"delay": 0.05, "message": "late"}},
                    {"name": "Recorder", "options": {"tag": "quick"}},
                ],
                [
                    {"name": "Recorder", "options": {"tag": "next"}},
                ],
            ]
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.FAILED
        assert outcome.failures == {"Signaler": ["Signaler: late"]}
        assert events.index("signaled:Signaler") < events.index("start:next")

    @pytest.mark.asyncio
    async def test_module_exception_skips_remaining_groups(
        self,
        engine: HarnessEngine,
        events: List[str],
        fake_runner: FakeCommandRunner,
    ):
        spec = create_spec(
            modules=[
                ["Raiser"],
                [{"name": "Recorder", "options": {"tag": "skipped"}}],
            ]
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.FAILED
        assert "Raiser" in outcome.error
        assert "validation exploded" in outcome.error
        assert [group.result for group in outcome.groups] == [
            HarnessResult.FAILED,
            HarnessResult.SKIPPED,
        ]
        assert "start:skipped" not in events
        assert fake_runner.operations()[-1] == "reset"

    @pytest.mark.asyncio
    async def test_failing_module_cancels_slow_sibling(
        self,
        engine: HarnessEngine,
        events: List[str],
    ):
        spec = create_spec(
            modules=[
                [
                    "Raiser",
                    {"name": "Recorder", "options": {"tag": "slow", "delay": 30}},
                ],
            ]
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.FAILED
        assert "end:slow" not in events
        assert outcome.groups[0].errors["Recorder"] == "CANCELLED"

    @pytest.mark.asyncio
    async def test_unknown_module_fails_run(self, engine: HarnessEngine):
        outcome = await engine.run(create_spec(modules=[["DoesNotExist"]]))

        assert outcome.result == HarnessResult.FAILED
        assert "Unknown module 'DoesNotExist'" in outcome.error
        assert [group.result for group in outcome.groups] == [HarnessResult.FAILED]

    @pytest.mark.asyncio
    async def test_handle_returned_by_validate_is_waited_on(
        self,
        engine: HarnessEngine,
        events: List[str],
    ):
        spec = create_spec(
            modules=[
                ["OwnHandle"],
                [{"name": "Recorder", "options": {"tag": "g2"}}],
            ]
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.PASSED
        assert events == ["start:own", "end:own", "start:g2", "end:g2"]

    @pytest.mark.asyncio
    async def test_failed_handle_returned_by_validate_fails_group(
        self,
        engine: HarnessEngine,
        events: List[str],
    ):
        spec = create_spec(
            modules=[
                [{"name": "OwnHandle", "options": {"fail": True, "delay": 0.01}}],
                [{"name": "Recorder", "options": {"tag": "skipped"}}],
            ]
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.FAILED
        assert outcome.error == "Module 'OwnHandle' in group 0 failed - own handle broke"
        assert [group.result for group in outcome.groups] == [
            HarnessResult.FAILED,
            HarnessResult.SKIPPED,
        ]
        assert "start:skipped" not in events

    @pytest.mark.asyncio
    async def test_validate_raising_cancels_siblings_before_teardown(
        self,
        engine: HarnessEngine,
        events: List[str],
        fake_runner: FakeCommandRunner,
    ):
        spec = create_spec(
            modules=[
                [
                    {"name": "Recorder", "options": {"tag": "slow", "delay": 0.2}},
                    "BadValidate",
                ],
                ["EndpointCount"],
            ]
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.FAILED
        assert outcome.error == (
            "Module 'BadValidate' in group 0 failed - RuntimeError - cannot submit"
        )
        assert [group.result for group in outcome.groups] == [
            HarnessResult.FAILED,
            HarnessResult.SKIPPED,
        ]
        assert outcome.groups[0].errors["Recorder"] == "CANCELLED"
        assert "cannot submit" in outcome.groups[0].errors["BadValidate"]
        assert "end:slow" not in events
        assert fake_runner.operations()[-1] == "reset"


class TestVerdict:
    @pytest.mark.asyncio
    async def test_ignored_signal_passes(self, engine: HarnessEngine):
        spec = create_spec(
            modules=[[{"name": "Signaler", "options": {"message": "known badpattern"}}]],
            ignoredErrors=["badpattern"],
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.PASSED
        assert outcome.failures == {}

    @pytest.mark.asyncio
    async def test_required_error_in_transcript_passes(
        self,
        engine: HarnessEngine,
        fake_cluster: FakeCluster,
    ):
        fake_cluster.node_logs[3] = "ERROR expectedSignature observed\n"

        outcome = await engine.run(create_spec(requiredErrors=["expectedSignature"]))

        assert outcome.result == HarnessResult.PASSED
        assert outcome.missing_required == set()

    @pytest.mark.asyncio
    async def test_required_error_never_seen_fails(self, engine: HarnessEngine):
        outcome = await engine.run(create_spec(requiredErrors=["expectedSignature"]))

        assert outcome.result == HarnessResult.FAILED
        assert outcome.missing_required == {"expectedSignature"}
        assert "expectedSignature" in outcome.error

    @pytest.mark.asyncio
    async def test_failures_and_missing_required_both_reported(self, engine: HarnessEngine):
        spec = create_spec(
            modules=[[{"name": "Signaler", "options": {"message": "real problem"}}]],
            requiredErrors=["expectedSignature"],
        )

        outcome = await engine.run(spec)

        assert outcome.result == HarnessResult.FAILED
        assert "Signaler: real problem" in outcome.error
        assert "expectedSignature" in outcome.error


class TestTeardown:
    @pytest.mark.asyncio
    async def test_provision_failure_still_tears_down(
        self,
        events: List[str],
        env: Env,
        bridge_factory,
        fake_cluster: FakeCluster,
        fake_runner: FakeCommandRunner,
    ):
        fake_cluster.fail("launch")
        engine = HarnessEngine(
            registry=create_registry(events),
            env=env,
            bridge_factory=bridge_factory,
        )

        outcome = await engine.run(create_spec())

        assert outcome.result == HarnessResult.FAILED
        assert "Failed to provision cluster 'CVH'" in outcome.error
        assert outcome.groups == []
        assert fake_runner.operations()[-1] == "reset"
        assert outcome.state == HarnessState.VERDICT

    @pytest.mark.asyncio
    async def test_unexpected_teardown_errors_do_not_escape(
        self,
        events: List[str],
        env: Env,
        fake_runner: FakeCommandRunner,
    ):
        class BrokenArchiveBridge(CToolBridge):
            async def capture_logs(self, test_name: str):
                raise tarfile.TarError("archive truncated")

            async def destroy(self, best_effort: bool = False):
                raise RuntimeError("reset lost")

        def create_bridge(target: ClusterTarget, env: Env):
            return BrokenArchiveBridge(target, env, runner=fake_runner)

        engine = HarnessEngine(
            registry=create_registry(events),
            env=env,
            bridge_factory=create_bridge,
        )

        outcome = await engine.run(create_spec(modules=[["Raiser"]]))

        assert outcome.result == HarnessResult.FAILED
        assert "validation exploded" in outcome.error
        assert outcome.state == HarnessState.VERDICT
