from typing import Dict, List

from pydantic import BaseModel, Field, StrictFloat, StrictInt, StrictStr

from .harness_result import HarnessResult


class GroupOutcome(BaseModel):
    group: StrictInt
    modules: List[StrictStr]
    result: HarnessResult
    errors: Dict[StrictStr, StrictStr] = Field(default_factory=dict)
    elapsed: StrictInt | StrictFloat = 0
