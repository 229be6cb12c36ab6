import pathlib

import pytest

from validation_harness.bridges import CToolBridge
from validation_harness.env import Env
from validation_harness.specs import ClusterTarget

from tests.unit.mocks import FakeCluster, FakeCommandRunner


@pytest.fixture
def env(tmp_path: pathlib.Path) -> Env:
    return Env(
        HARNESS_WORKING_DIRECTORY=str(tmp_path),
        HARNESS_LOG_ROOT="logs",
        HARNESS_INSTALL_SOURCE=str(tmp_path.joinpath("install")),
        HARNESS_TASK_RUNNER_MAX_THREADS=4,
        HARNESS_LOG_LEVEL="error",
    )


@pytest.fixture
def log_root(env: Env) -> pathlib.Path:
    return pathlib.Path(env.log_root)


@pytest.fixture
def fake_cluster() -> FakeCluster:
    return FakeCluster()


@pytest.fixture
def fake_runner(fake_cluster: FakeCluster, tmp_path: pathlib.Path) -> FakeCommandRunner:
    return FakeCommandRunner(fake_cluster, working_directory=str(tmp_path))


@pytest.fixture
def target() -> ClusterTarget:
    return ClusterTarget(cluster_name="CVH", node_count=3)


@pytest.fixture
def bridge(target: ClusterTarget, env: Env, fake_runner: FakeCommandRunner) -> CToolBridge:
    return CToolBridge(target, env, runner=fake_runner)


@pytest.fixture
def bridge_factory(fake_runner: FakeCommandRunner):
    def create(target: ClusterTarget, env: Env):
        return CToolBridge(target, env, runner=fake_runner)

    return create
