from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

from .group_outcome import GroupOutcome
from .harness_result import HarnessResult
from .harness_state import HarnessState


class HarnessOutcome(BaseModel):
    name: StrictStr
    result: HarnessResult
    duration_seconds: StrictInt | StrictFloat = 0
    groups: List[GroupOutcome] = Field(default_factory=list)
    failures: Dict[StrictStr, List[StrictStr]] = Field(default_factory=dict)
    missing_required: Set[StrictStr] = Field(default_factory=set)
    transcript: StrictStr = ""
    error: Optional[StrictStr] = None
    state: HarnessState = HarnessState.INIT

    @property
    def passed(self):
        return self.result == HarnessResult.PASSED

    def summary(self):
        if self.passed:
            return f"{self.name} PASSED in {round(self.duration_seconds, 2)}s"

        return f"{self.name} FAILED in {round(self.duration_seconds, 2)}s - {self.error}"
