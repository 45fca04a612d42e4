"""
FirestoreMock: synchronous in-memory Firestore stand-in for unit tests.

Supports: collection(), doc()/document(), batch(), and the query, document
and batch operations hanging off them. One mock owns one store and one
reference registry; build a fresh mock per test.
"""

import logging
import secrets
from collections.abc import Mapping
from typing import Callable, Optional, TypeVar

from firestore_mock.batch import WriteBatch
from firestore_mock.config import Settings, settings as default_settings
from firestore_mock.document import DocumentReference, snapshot_fields
from firestore_mock.query import CollectionReference
from firestore_mock.store import SEPARATOR, Address, MemoryStore, resolve, validate_collection_path

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReferenceRegistry:
    """Path -> handle caches. Returns the existing handle when there is one."""

    def __init__(self):
        self._collections: dict[str, CollectionReference] = {}
        self._documents: dict[str, DocumentReference] = {}

    @staticmethod
    def _get_or_create(cache: dict[str, T], key: str, factory: Callable[[], T]) -> T:
        if key not in cache:
            cache[key] = factory()
            logger.debug(f"[REGISTRY] Created handle for {key}")
        return cache[key]

    def collection(self, path: str, factory: Callable[[], CollectionReference]) -> CollectionReference:
        return self._get_or_create(self._collections, path, factory)

    def document(self, path: str, factory: Callable[[], DocumentReference]) -> DocumentReference:
        return self._get_or_create(self._documents, path, factory)


class FirestoreMock:
    def __init__(self, initial_data: Optional[Mapping] = None, settings: Optional[Settings] = None):
        self._settings = settings or default_settings
        self._store = MemoryStore(initial_data)
        self._registry = ReferenceRegistry()
        self._batch = WriteBatch(self._store)

    # ------------------------------------------------------------------ #
    # Public surface                                                      #
    # ------------------------------------------------------------------ #
    def collection(self, path: str) -> CollectionReference:
        validate_collection_path(path)
        return self._registry.collection(path, lambda: CollectionReference(self, path))

    def doc(self, path: str) -> DocumentReference:
        """Handle for a `collection/docId` path. Raises InvalidPathError otherwise."""
        return self._document_ref(resolve(path))

    def document(self, path: str) -> DocumentReference:
        return self.doc(path)

    def batch(self) -> WriteBatch:
        """The mock's single shared batch."""
        return self._batch

    def collections(self) -> list[CollectionReference]:
        """Top-level collections that currently hold a bucket in the store."""
        return [
            self.collection(path)
            for path in self._store.collection_paths()
            if SEPARATOR not in path
        ]

    def get_internal_data(self) -> dict[str, dict[str, dict]]:
        """Raw store contents, for checking the mock itself. Not part of the Firestore API."""
        return self._store.dump()

    # ------------------------------------------------------------------ #
    # Internals shared with handles                                       #
    # ------------------------------------------------------------------ #
    def _document_ref(self, address: Address) -> DocumentReference:
        return self._registry.document(address.path, lambda: DocumentReference(self, address))

    def _snapshot_fields(self, fields: Optional[dict]) -> Optional[dict]:
        return snapshot_fields(fields, clone=self._settings.clone_snapshots)

    def _auto_id(self) -> str:
        alphabet = self._settings.auto_id_alphabet
        return "".join(secrets.choice(alphabet) for _ in range(self._settings.auto_id_length))


def create_mock(initial_data: Optional[Mapping] = None, settings: Optional[Settings] = None) -> FirestoreMock:
    """Build a mock seeded with `initial_data` ({collection path: {doc id: fields}})."""
    return FirestoreMock(initial_data, settings=settings)
