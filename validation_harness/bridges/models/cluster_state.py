from enum import Enum


class ClusterState(Enum):
    ABSENT = "ABSENT"
    EXISTS_WRONG_SIZE = "EXISTS_WRONG_SIZE"
    EXISTS_CORRECT_SIZE = "EXISTS_CORRECT_SIZE"
