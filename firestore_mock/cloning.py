"""
Value tagging and deep cloning.

Every stored value is tagged once with a `ValueKind`; cloning and the query
comparator switch on that tag instead of probing attributes. Timestamps are
rebuilt from their instant, never shared, so a clone stays convertible on
its own.
"""

from collections.abc import Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional

from firestore_mock.timestamp import Timestamp

# Serialized shape a timestamp takes after a JSON round-trip.
_RAW_TIMESTAMP_KEYS = frozenset({"_seconds", "_nanoseconds"})


class ValueKind(Enum):
    PLAIN = "plain"
    TIMESTAMP = "timestamp"
    DATETIME = "datetime"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


def classify(value: Any) -> ValueKind:
    if isinstance(value, Timestamp):
        return ValueKind.TIMESTAMP
    if isinstance(value, Mapping):
        if value.keys() == _RAW_TIMESTAMP_KEYS:
            return ValueKind.TIMESTAMP
        return ValueKind.MAPPING
    if isinstance(value, date):
        return ValueKind.DATETIME
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.PLAIN


def as_timestamp(value: Any) -> Timestamp:
    """Normalize a TIMESTAMP-tagged value (model or raw mapping) to a `Timestamp`."""
    if isinstance(value, Timestamp):
        return value
    seconds = int(value["_seconds"])
    return Timestamp(seconds=seconds, nanoseconds=int(value["_nanoseconds"]))


def deep_clone(value: Any) -> Any:
    """Structurally independent copy of `value`; primitives pass through."""
    kind = classify(value)

    if kind is ValueKind.TIMESTAMP:
        source = as_timestamp(value)
        return Timestamp(seconds=source.seconds, nanoseconds=source.nanoseconds)

    if kind is ValueKind.DATETIME:
        return value.replace()

    if kind is ValueKind.SEQUENCE:
        cloned = [deep_clone(item) for item in value]
        return cloned if isinstance(value, list) else tuple(cloned)

    if kind is ValueKind.MAPPING:
        return {key: deep_clone(item) for key, item in value.items()}

    return value


def to_instant_millis(value: Any, coerce_strings: bool = True) -> Optional[int]:
    """
    Millisecond instant of a date-like value, or None when it has none.
    Strings count only when they are non-numeric ISO-8601 text.
    """
    kind = classify(value)
    if kind is ValueKind.TIMESTAMP:
        return as_timestamp(value).to_millis()
    if kind is ValueKind.DATETIME:
        return Timestamp.from_date(value).to_millis()
    if coerce_strings and isinstance(value, str):
        return _parse_date_string(value)
    return None


def _parse_date_string(text: str) -> Optional[int]:
    text = text.strip()
    if not text:
        return None
    try:
        float(text)
        return None  # "20240101" is a number here, not a date
    except ValueError:
        pass

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return Timestamp.from_date(parsed).to_millis()
