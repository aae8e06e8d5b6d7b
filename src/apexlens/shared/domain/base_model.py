"""
Base domain model with camelCase JSON compatibility.

Scan results are handed to callers (CLI, agent tools, batch jobs) as JSON
with camelCase keys; Python code keeps snake_case field names.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Type, TypeVar

T = TypeVar("T", bound="BaseDomainModel")


def to_camel_case(snake_str: str) -> str:
    """
    Convert snake_case to camelCase.

    Examples:
        >>> to_camel_case("line_number")
        'lineNumber'
        >>> to_camel_case("snippet_before")
        'snippetBefore'
    """
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def _to_json_value(value: Any) -> Any:
    if isinstance(value, BaseDomainModel):
        return value.to_json()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_to_json_value(item) for item in value]
    if isinstance(value, dict):
        return {k: _to_json_value(v) for k, v in value.items()}
    return value


@dataclass
class BaseDomainModel:
    """
    Base class for domain records.

    - to_json() serializes to camelCase, Enum members as their values
    - from_json() accepts the same camelCase shape back
    """

    def to_json(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return {to_camel_case(f.name): _to_json_value(getattr(self, f.name)) for f in fields(self)}

    @classmethod
    def from_json(cls: Type[T], data: Dict[str, Any]) -> T:
        """
        Deserialize from camelCase JSON.

        Nested models and enums are left to subclasses that need them.

        Raises:
            ValueError: If a required field is missing
        """
        kwargs: Dict[str, Any] = {}

        for field in fields(cls):
            json_key = to_camel_case(field.name)
            if json_key not in data:
                if field.default is not dataclasses.MISSING or field.default_factory is not dataclasses.MISSING:  # type: ignore[misc]
                    continue
                raise ValueError(f"Missing required field: {json_key}")
            kwargs[field.name] = data[json_key]

        return cls(**kwargs)
