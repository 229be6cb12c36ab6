import pathlib
from typing import List

from validation_harness.env import Env, load_env
from validation_harness.harness import HarnessEngine
from validation_harness.harness.engine import BridgeFactory
from validation_harness.modules import ModuleRegistry
from validation_harness.results import HarnessOutcome
from validation_harness.specs import HarnessSpec

DEFINITION_SUFFIXES = (".yaml", ".yml", ".json")


def discover_definitions(folder: str | pathlib.Path) -> List[pathlib.Path]:
    folder = pathlib.Path(folder)

    return sorted(
        path
        for path in folder.iterdir()
        if path.is_file() and path.suffix.lower() in DEFINITION_SUFFIXES
    )


async def run_from_file(
    path: str | pathlib.Path,
    registry: ModuleRegistry | None = None,
    env: Env | None = None,
    bridge_factory: BridgeFactory | None = None,
) -> HarnessOutcome:
    """
    Load a harness definition and run it, raising ``AssertionError`` with
    the verdict message when the run fails. Intended to be awaited from a
    pytest test, one per definition file.
    """

    spec = HarnessSpec.from_file(path)

    if env is None:
        env = load_env(Env)

    engine = HarnessEngine(
        registry=registry,
        env=env,
        bridge_factory=bridge_factory,
    )

    outcome = await engine.run(spec)
    if not outcome.passed:
        raise AssertionError(outcome.error)

    return outcome
