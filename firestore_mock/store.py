"""
In-memory store and path resolution.

The store maps a collection path (``users`` or ``users/u1/posts``) to an
ordered dict of document id -> fields. A document exists exactly when its id
is present in that inner dict. Everything the mock reads or writes goes
through one `MemoryStore` owned by one mock instance.
"""

import logging
from collections.abc import Mapping
from typing import NamedTuple, Optional

from firestore_mock.cloning import deep_clone
from firestore_mock.exceptions import InvalidPathError
from firestore_mock.transforms import resolve_write

logger = logging.getLogger(__name__)

SEPARATOR = "/"


class Address(NamedTuple):
    collection_path: str
    document_id: str

    @property
    def path(self) -> str:
        return f"{self.collection_path}{SEPARATOR}{self.document_id}"


def _segments(path: str) -> list[str]:
    if not isinstance(path, str) or not path:
        raise InvalidPathError(str(path), "path must be a non-empty string")
    segments = path.split(SEPARATOR)
    if any(not segment for segment in segments):
        raise InvalidPathError(path, "path contains an empty segment")
    return segments


def resolve(path: str) -> Address:
    """
    Resolve a document path into its (collection path, document id) slot.
    The last segment is the document id, everything before it the collection.
    """
    segments = _segments(path)
    if len(segments) < 2:
        raise InvalidPathError(path, "a document path needs a collection and a document id")
    if len(segments) % 2:
        raise InvalidPathError(path, "a document path needs an even number of segments")
    return Address(SEPARATOR.join(segments[:-1]), segments[-1])


def validate_collection_path(path: str) -> str:
    segments = _segments(path)
    if len(segments) % 2 == 0:
        raise InvalidPathError(path, "a collection path needs an odd number of segments")
    return path


def join(*parts: str) -> str:
    return SEPARATOR.join(parts)


class MemoryStore:
    def __init__(self, initial_data: Optional[Mapping] = None):
        self._collections: dict[str, dict[str, dict]] = {}
        for collection_path, documents in (initial_data or {}).items():
            validate_collection_path(collection_path)
            bucket = self.ensure_collection(collection_path)
            for doc_id, fields in documents.items():
                bucket[doc_id] = deep_clone(fields)

    def ensure_collection(self, collection_path: str) -> dict[str, dict]:
        if collection_path not in self._collections:
            self._collections[collection_path] = {}
        return self._collections[collection_path]

    # ------------------------------------------------------------------ #
    # Reads                                                               #
    # ------------------------------------------------------------------ #
    def exists(self, address: Address) -> bool:
        return address.document_id in self._collections.get(address.collection_path, {})

    def read(self, address: Address) -> Optional[dict]:
        """Live fields of the document, or None when it does not exist."""
        return self._collections.get(address.collection_path, {}).get(address.document_id)

    def documents(self, collection_path: str) -> list[tuple[str, dict]]:
        """(id, fields) pairs in insertion order; a missing collection is empty."""
        return list(self._collections.get(collection_path, {}).items())

    def collection_paths(self) -> list[str]:
        return list(self._collections)

    def dump(self) -> dict[str, dict[str, dict]]:
        """The raw backing dict. For inspection in tests, not for mutation."""
        return self._collections

    # ------------------------------------------------------------------ #
    # Writes                                                              #
    # ------------------------------------------------------------------ #
    def write(self, address: Address, data: Mapping) -> None:
        """Replace the document's fields entirely."""
        fields, _ = resolve_write(data)
        self.ensure_collection(address.collection_path)[address.document_id] = deep_clone(fields)
        logger.debug(f"[STORE] set {address.path}")

    def merge(self, address: Address, data: Mapping) -> None:
        """Shallow-merge over existing fields, creating the document if absent."""
        bucket = self.ensure_collection(address.collection_path)
        merged = dict(bucket.get(address.document_id) or {})
        self._apply(merged, data)
        bucket[address.document_id] = merged
        logger.debug(f"[STORE] merge {address.path}")

    def update(self, address: Address, data: Mapping) -> bool:
        """Shallow-merge only when the document exists. Returns whether it applied."""
        current = self.read(address)
        if current is None:
            logger.debug(f"[STORE] update skipped, {address.path} does not exist")
            return False
        updated = dict(current)
        self._apply(updated, data)
        self._collections[address.collection_path][address.document_id] = updated
        logger.debug(f"[STORE] update {address.path}")
        return True

    def delete(self, address: Address) -> bool:
        bucket = self._collections.get(address.collection_path)
        if bucket is None or address.document_id not in bucket:
            return False
        del bucket[address.document_id]
        logger.debug(f"[STORE] delete {address.path}")
        return True

    @staticmethod
    def _apply(target: dict, data: Mapping) -> None:
        fields, deletes = resolve_write(data)
        target.update(deep_clone(fields))
        for key in deletes:
            target.pop(key, None)
