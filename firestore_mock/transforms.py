"""
Write sentinels: SERVER_TIMESTAMP and DELETE_FIELD.

Sentinels from the real google-cloud-firestore package are recognised by
type name and description, so code under test can keep importing them from
the real SDK.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any, Optional

from firestore_mock.timestamp import Timestamp


class Sentinel:
    __slots__ = ("description",)

    def __init__(self, description: str):
        self.description = description

    def __repr__(self) -> str:
        return f"Sentinel: {self.description}"


# Descriptions match the real SDK's so both are read the same way.
SERVER_TIMESTAMP = Sentinel("Value used to set a document field to the server timestamp.")
DELETE_FIELD = Sentinel("Value used to delete a field in a document.")


class SentinelKind(Enum):
    SERVER_TIMESTAMP = "server_timestamp"
    DELETE_FIELD = "delete_field"


def sentinel_kind(value: Any) -> Optional[SentinelKind]:
    """Return the sentinel kind for SERVER_TIMESTAMP / DELETE_FIELD objects, else None."""
    type_name = type(value).__name__
    if type_name == "ServerTimestamp":
        return SentinelKind.SERVER_TIMESTAMP
    if type_name != "Sentinel":
        return None

    description = str(getattr(value, "description", "")).lower()
    if "server timestamp" in description:
        return SentinelKind.SERVER_TIMESTAMP
    if "delete" in description:
        return SentinelKind.DELETE_FIELD
    return None


def resolve_write(data: Mapping) -> tuple[dict, list[str]]:
    """
    Split a write payload into concrete fields and top-level keys to delete.
    SERVER_TIMESTAMP resolves to one shared instant per write, at any depth.
    """
    now = Timestamp.now()
    fields: dict = {}
    deletes: list[str] = []

    for key, value in data.items():
        if sentinel_kind(value) is SentinelKind.DELETE_FIELD:
            deletes.append(key)
        else:
            fields[key] = _resolve_value(value, now)
    return fields, deletes


def _resolve_value(value: Any, now: Timestamp) -> Any:
    kind = sentinel_kind(value)
    if kind is SentinelKind.SERVER_TIMESTAMP:
        return now
    if isinstance(value, Mapping):
        return {
            k: _resolve_value(v, now)
            for k, v in value.items()
            if sentinel_kind(v) is not SentinelKind.DELETE_FIELD
        }
    if isinstance(value, list):
        return [_resolve_value(v, now) for v in value]
    return value
