import dataclasses
import json
import re
from dataclasses import fields, is_dataclass
from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Sequence, Type, TypeVar

T = TypeVar("T")

_DATETIME_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}(:\d{2}(\.\d+)?)?([+-]\d{2}:?\d{2}|Z)?$')
_DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def _looks_like_datetime(value: str) -> bool:
    """Check if a string looks like an ISO datetime format."""
    # Match ISO 8601 datetime formats like "2024-01-15T10:30:45+00:00" or "2024-01-15 10:30:45.123Z"
    return bool(_DATETIME_PATTERN.match(value))


def _parse_datetime(value: str) -> datetime:
    """Parse various datetime string formats back to datetime objects."""
    if value.endswith('Z'):
        value = value[:-1] + '+00:00'

    # Replace space with T for ISO format if needed
    if ' ' in value and 'T' not in value:
        parts = value.split(' ')
        if len(parts) == 2:
            value = f"{parts[0]}T{parts[1]}"

    try:
        return datetime.fromisoformat(value)
    except ValueError:
        # Last resort: drop the offset and assume UTC
        dt = datetime.fromisoformat(value.split('+')[0])
        return dt.replace(tzinfo=timezone.utc)


def coerce_datetime(value: Any) -> Optional[datetime]:
    """Coerce ISO strings, dates, epoch millis and datetimes to an aware datetime.

    Naive values are assumed to be UTC. A bare ``YYYY-MM-DD`` is UTC midnight.
    Returns None for empty values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)):
        # Exported vaults store epoch milliseconds
        dt = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    elif isinstance(value, str) and _DATE_PATTERN.match(value):
        dt = datetime.fromisoformat(value)
    elif isinstance(value, str):
        dt = _parse_datetime(value)
    else:
        raise TypeError(f"Cannot interpret {type(value).__name__} as a datetime")
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def _convert_value(v: Any) -> Any:
    # Preserve Python types (datetime, Enum, etc.)
    # Only recurse into dataclasses, mappings, and sequences
    if is_dataclass(v):
        return _convert_dict(dataclasses.asdict(v))
    if isinstance(v, Mapping):
        return {k: _convert_value(val) for k, val in v.items()}
    if isinstance(v, Sequence) and not isinstance(v, (str, bytes, bytearray)):
        return [_convert_value(i) for i in v]
    return v


def _convert_dict(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: _convert_value(v) for k, v in d.items()}


def get_field_names(cls: Type[Any]) -> set[str]:
    """Return data field names for dataclasses."""
    if dataclasses.is_dataclass(cls):
        return {f.name for f in fields(cls)}
    return set()


class DataclassModelMixin:
    """
    Common (de)serialization helpers shared by every dataclass model in the engine.
    """

    def to_dict(self) -> Dict[str, Any]:
        if is_dataclass(self):
            return _convert_dict(dataclasses.asdict(self))
        return _convert_dict(dict(self.__dict__))

    def to_json(self) -> str:
        def _default(o: Any):
            if isinstance(o, (datetime, date, time)):
                return o.isoformat()
            if isinstance(o, Enum):
                return o.value
            if dataclasses.is_dataclass(o):
                return dataclasses.asdict(o)
            if isinstance(o, (set, frozenset)):
                return sorted(o)
            raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

        return json.dumps(self.to_dict(), ensure_ascii=False, default=_default)

    @classmethod
    def from_dict(cls: Type[T], d: Dict[str, Any]) -> T:
        names = get_field_names(cls)
        data = {k: v for k, v in d.items() if k in names} if names else d

        # Parse datetime strings back to datetime objects
        parsed_data = {}
        for key, value in data.items():
            if isinstance(value, str) and _looks_like_datetime(value):
                try:
                    parsed_data[key] = _parse_datetime(value)
                except (ValueError, TypeError):
                    parsed_data[key] = value  # Keep as string if parsing fails
            else:
                parsed_data[key] = value

        return cls(**parsed_data)  # type: ignore[misc]
