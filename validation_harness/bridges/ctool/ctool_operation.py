from enum import Enum


class CToolOperation(Enum):
    LIST = "list"
    LAUNCH = "launch"
    DESTROY = "destroy"
    RESET = "reset"
    INFO = "info"
    SCP = "scp"
    RUN = "run"
    CHANGE_CONFIG = "change_config"
