"""
Serialization Utilities

Converts the engine's dataclasses into plain dictionaries and JSON. Enums are
reduced to their values, datetimes and dates to ISO-8601 strings, sets to
sorted lists.
"""

import json
import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import is_dataclass, fields


def serialize(obj: Any, exclude_none: bool = False, exclude_fields: Optional[List[str]] = None) -> Any:
    """
    Serialize an object into JSON-compatible Python values.

    Args:
        obj: The object to serialize
        exclude_none: Whether to drop keys whose value is None
        exclude_fields: Field names to drop from every mapping

    Returns:
        Serialized value
    """
    exclude_fields = exclude_fields or []

    if obj is None or isinstance(obj, (str, int, float, bool)):
        return obj

    if isinstance(obj, Enum):
        return obj.value

    # datetime is a date subclass, so one branch covers both
    if isinstance(obj, datetime.date):
        return obj.isoformat()

    if isinstance(obj, (list, tuple)):
        return [serialize(item, exclude_none, exclude_fields) for item in obj]

    if isinstance(obj, (set, frozenset)):
        return sorted(serialize(item, exclude_none, exclude_fields) for item in obj)

    if isinstance(obj, dict):
        result = {}
        for key, value in obj.items():
            if key in exclude_fields:
                continue
            if exclude_none and value is None:
                continue
            result[serialize(key)] = serialize(value, exclude_none, exclude_fields)
        return result

    # Dataclasses are walked field by field so nested to_dict overrides are skipped
    if is_dataclass(obj) and not isinstance(obj, type):
        return serialize(
            {f.name: getattr(obj, f.name) for f in fields(obj)},
            exclude_none,
            exclude_fields
        )

    if hasattr(obj, 'to_dict') and callable(getattr(obj, 'to_dict')):
        return serialize(obj.to_dict(), exclude_none, exclude_fields)

    return str(obj)


def to_json(obj: Any, pretty: bool = False, exclude_none: bool = False) -> str:
    """
    Serialize an object to a JSON string.

    Args:
        obj: The object to serialize
        pretty: Whether to format the JSON with indentation
        exclude_none: Whether to exclude None values

    Returns:
        JSON string representation
    """
    indent = 2 if pretty else None
    return json.dumps(serialize(obj, exclude_none), indent=indent, ensure_ascii=False)


class SerializableMixin:
    """
    Mixin giving dataclass models ``to_dict`` and ``to_json``.

    Subclasses may list derived attributes (properties) in
    ``__computed_fields__`` to have them included in the output.
    """

    __computed_fields__: List[str] = []

    def to_dict(self) -> Dict[str, Any]:
        """Convert the object to a dictionary."""
        result = serialize({f.name: getattr(self, f.name) for f in fields(self)})
        for name in self.__computed_fields__:
            result[name] = serialize(getattr(self, name))
        return result

    def to_json(self, pretty: bool = False) -> str:
        """Convert the object to a JSON string."""
        return json.dumps(self.to_dict(), indent=2 if pretty else None, ensure_ascii=False)
