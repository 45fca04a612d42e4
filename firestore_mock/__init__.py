from firestore_mock.aio import AsyncFirestoreMock, Resolved
from firestore_mock.batch import WriteBatch
from firestore_mock.client import FirestoreMock, create_mock
from firestore_mock.config import Settings, settings
from firestore_mock.document import DocumentReference, DocumentSnapshot
from firestore_mock.exceptions import FirestoreMockError, InvalidPathError
from firestore_mock.query import (
    ASCENDING,
    DESCENDING,
    CollectionReference,
    FieldFilter,
    Query,
    QuerySnapshot,
)
from firestore_mock.timestamp import Timestamp
from firestore_mock.transforms import DELETE_FIELD, SERVER_TIMESTAMP

__all__ = [
    "ASCENDING",
    "DESCENDING",
    "DELETE_FIELD",
    "SERVER_TIMESTAMP",
    "AsyncFirestoreMock",
    "CollectionReference",
    "DocumentReference",
    "DocumentSnapshot",
    "FieldFilter",
    "FirestoreMock",
    "FirestoreMockError",
    "InvalidPathError",
    "Query",
    "QuerySnapshot",
    "Resolved",
    "Settings",
    "Timestamp",
    "WriteBatch",
    "create_mock",
    "settings",
]
