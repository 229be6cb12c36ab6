from .bridge import Bridge as Bridge
from .ctool import (
    CToolBridge as CToolBridge,
    CToolCommand as CToolCommand,
    CToolOperation as CToolOperation,
)
from .models import ClusterState as ClusterState
