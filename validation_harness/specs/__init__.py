from .cluster_target import ClusterTarget as ClusterTarget
from .error_filter_config import ErrorFilterConfig as ErrorFilterConfig
from .harness_spec import (
    HarnessSpec as HarnessSpec,
    LoggingSection as LoggingSection,
    ModuleSpec as ModuleSpec,
    definition_name as definition_name,
)
