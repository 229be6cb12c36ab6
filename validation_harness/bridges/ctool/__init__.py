from .ctool_bridge import CToolBridge as CToolBridge
from .ctool_command import CToolCommand as CToolCommand
from .ctool_operation import CToolOperation as CToolOperation
