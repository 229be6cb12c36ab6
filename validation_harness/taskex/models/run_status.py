from enum import Enum
from typing import Literal


class RunStatus(Enum):
    CREATED = "CREATED"
    RUNNING = "RUNNING"
    COMPLETE = "COMPLETE"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


RunStatusName = Literal[
    "CREATED",
    "RUNNING",
    "COMPLETE",
    "CANCELLED",
    "FAILED",
]
