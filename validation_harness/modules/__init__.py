from .default_registry import (
    EndpointCount as EndpointCount,
    NodeToolFlush as NodeToolFlush,
    default_registry as default_registry,
)
from .module import Module as Module
from .module_registry import ModuleRegistry as ModuleRegistry
