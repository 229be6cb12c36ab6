from .env import Env as Env, load_env as load_env
from .harness import HarnessEngine as HarnessEngine
from .modules import (
    Module as Module,
    ModuleRegistry as ModuleRegistry,
    default_registry as default_registry,
)
from .results import HarnessOutcome as HarnessOutcome, HarnessResult as HarnessResult
from .runner import run_from_file as run_from_file
from .specs import HarnessSpec as HarnessSpec

__version__ = "0.1.0"
