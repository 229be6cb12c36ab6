from .group_outcome import GroupOutcome as GroupOutcome
from .harness_outcome import HarnessOutcome as HarnessOutcome
from .harness_result import HarnessResult as HarnessResult
from .harness_state import HarnessState as HarnessState
