from typing import Any, Set

from pydantic import BaseModel, Field, field_validator


def normalize_patterns(value: Any) -> Set[str]:
    if value is None:
        return set()

    if isinstance(value, str):
        return {value}

    return {str(pattern) for pattern in value if pattern}


class ErrorFilterConfig(BaseModel):
    ignored_errors: Set[str] = Field(default_factory=set)
    required_errors: Set[str] = Field(default_factory=set)

    @field_validator("ignored_errors", "required_errors", mode="before")
    @classmethod
    def normalize(cls, value: Any):
        return normalize_patterns(value)
