from enum import Enum


class HarnessState(Enum):
    INIT = "INIT"
    PROVISIONED = "PROVISIONED"
    RUNNING_GROUP = "RUNNING_GROUP"
    TORN_DOWN = "TORN_DOWN"
    VERDICT = "VERDICT"
