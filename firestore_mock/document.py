"""
Document handles and document snapshots.

A `DocumentReference` is bound to one address and memoized by the owning
mock, so two lookups of the same path return the same object. Writes go
straight to the store; `get()` copies the current fields into a snapshot.
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

from firestore_mock.cloning import deep_clone
from firestore_mock.store import Address, join

if TYPE_CHECKING:
    from firestore_mock.client import FirestoreMock
    from firestore_mock.query import CollectionReference


DOCUMENT_ID = "__name__"


class _Missing:
    """Marker for a field path that is absent from a document."""

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def lookup_field(fields: Mapping, field_path: str) -> Any:
    """Field value by name, falling back to a dotted path into nested maps."""
    if field_path in fields:
        return fields[field_path]

    current: Any = fields
    for part in field_path.split("."):
        if not isinstance(current, Mapping) or part not in current:
            return MISSING
        current = current[part]
    return current


class DocumentSnapshot:
    def __init__(self, reference: "DocumentReference", data: Optional[dict]):
        self.ref = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self) -> bool:
        return self._data is not None

    @property
    def reference(self) -> "DocumentReference":
        return self.ref

    def data(self) -> Optional[dict]:
        return dict(self._data) if self._data is not None else None

    def to_dict(self) -> Optional[dict]:
        return self.data()

    def get(self, field_path: str) -> Any:
        if self._data is None:
            return None
        value = lookup_field(self._data, field_path)
        return None if value is MISSING else value

    def __repr__(self) -> str:
        return f"DocumentSnapshot(path={self.ref.path!r}, exists={self.exists})"


class DocumentReference:
    def __init__(self, client: "FirestoreMock", address: Address):
        self._client = client
        self._address = address

    @property
    def id(self) -> str:
        return self._address.document_id

    @property
    def path(self) -> str:
        return self._address.path

    @property
    def address(self) -> Address:
        return self._address

    @property
    def parent(self) -> "CollectionReference":
        return self._client.collection(self._address.collection_path)

    def get(self) -> DocumentSnapshot:
        fields = self._client._store.read(self._address)
        return DocumentSnapshot(self, self._client._snapshot_fields(fields))

    def set(self, data: Mapping, merge: bool = False) -> None:
        """Replace the document, or shallow-merge into it when `merge` is set."""
        if merge:
            self._client._store.merge(self._address, data)
        else:
            self._client._store.write(self._address, data)

    def update(self, data: Mapping) -> None:
        """Shallow-merge into an existing document. A missing document is left alone."""
        self._client._store.update(self._address, data)

    def delete(self) -> None:
        self._client._store.delete(self._address)

    def collection(self, name: str) -> "CollectionReference":
        return self._client.collection(join(self.path, name))

    def __repr__(self) -> str:
        return f"DocumentReference({self.path!r})"


def snapshot_fields(fields: Optional[dict], clone: bool) -> Optional[dict]:
    if fields is None:
        return None
    return deep_clone(fields) if clone else dict(fields)
