from typing import Dict

from pydantic import BaseModel, Field, StrictStr

ConfigValue = str | int | float | bool


class ClusterTarget(BaseModel):
    cluster_name: StrictStr
    node_count: int = Field(ge=1)
    config_overrides: Dict[StrictStr, ConfigValue] = Field(default_factory=dict)
