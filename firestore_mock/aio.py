"""
Asynchronous facade over FirestoreMock, shaped like the SDK's AsyncClient.

Every operation does its store work when it is called and hands back a
`Resolved` awaitable. Awaiting only collects the result, so a write that is
never awaited still lands, and no two operations can interleave.
"""

from collections.abc import Mapping
from typing import Any, AsyncIterator, Generic, Optional, TypeVar

from firestore_mock.batch import WriteBatch, WriteKind
from firestore_mock.client import FirestoreMock, ReferenceRegistry
from firestore_mock.config import Settings
from firestore_mock.document import DocumentReference, DocumentSnapshot
from firestore_mock.query import ASCENDING, FieldFilter, Query, QuerySnapshot
from firestore_mock.store import Address, join
from firestore_mock.timestamp import Timestamp


T = TypeVar("T")


class Resolved(Generic[T]):
    """An awaitable whose result already exists."""

    __slots__ = ("_value",)

    def __init__(self, value: T = None):
        self._value = value

    def result(self) -> T:
        return self._value

    def __await__(self):
        return self._value
        yield  # pragma: no cover


class AsyncDocumentReference:
    def __init__(self, facade: "AsyncFirestoreMock", reference: DocumentReference):
        self._facade = facade
        self._reference = reference

    @property
    def id(self) -> str:
        return self._reference.id

    @property
    def path(self) -> str:
        return self._reference.path

    @property
    def address(self) -> Address:
        return self._reference.address

    @property
    def parent(self) -> "AsyncCollectionReference":
        return self._facade.collection(self.address.collection_path)

    def get(self) -> Resolved[DocumentSnapshot]:
        snapshot = self._reference.get()
        return Resolved(DocumentSnapshot(self, snapshot.to_dict()))

    def set(self, document_data: Mapping, merge: bool = False) -> Resolved[None]:
        self._reference.set(document_data, merge=merge)
        return Resolved()

    def update(self, field_updates: Mapping) -> Resolved[None]:
        self._reference.update(field_updates)
        return Resolved()

    def delete(self) -> Resolved[None]:
        self._reference.delete()
        return Resolved()

    def collection(self, name: str) -> "AsyncCollectionReference":
        return self._facade.collection(join(self.path, name))

    def __repr__(self) -> str:
        return f"AsyncDocumentReference({self.path!r})"


class AsyncQuery:
    def __init__(self, facade: "AsyncFirestoreMock", query: Query):
        self._facade = facade
        self._query = query

    def where(
        self,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        *,
        filter: Optional[FieldFilter] = None,
    ) -> "AsyncQuery":
        return AsyncQuery(self._facade, self._query.where(field_path, op_string, value, filter=filter))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "AsyncQuery":
        return AsyncQuery(self._facade, self._query.order_by(field_path, direction))

    def limit(self, count: int) -> "AsyncQuery":
        return AsyncQuery(self._facade, self._query.limit(count))

    def start_after(self, cursor: Any) -> "AsyncQuery":
        return AsyncQuery(self._facade, self._query.start_after(cursor))

    def _snapshot(self) -> QuerySnapshot:
        collection_path = self._query._collection_path
        client = self._facade.sync
        return QuerySnapshot([
            DocumentSnapshot(
                self._facade._document_ref(Address(collection_path, doc_id)),
                client._snapshot_fields(fields),
            )
            for doc_id, fields in self._query._evaluate()
        ])

    def get(self) -> Resolved[QuerySnapshot]:
        return Resolved(self._snapshot())

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        for doc in self._snapshot().docs:
            yield doc


class AsyncCollectionReference(AsyncQuery):
    def __init__(self, facade: "AsyncFirestoreMock", collection):
        super().__init__(facade, collection)
        self._collection = collection

    @property
    def id(self) -> str:
        return self._collection.id

    @property
    def path(self) -> str:
        return self._collection.path

    @property
    def parent(self) -> Optional[AsyncDocumentReference]:
        parent = self._collection.parent
        return self._facade.document(parent.path) if parent is not None else None

    def doc(self, document_id: Optional[str] = None) -> AsyncDocumentReference:
        return self._facade._document_ref(self._collection.doc(document_id).address)

    def document(self, document_id: Optional[str] = None) -> AsyncDocumentReference:
        return self.doc(document_id)

    def add(
        self, document_data: Mapping, document_id: Optional[str] = None
    ) -> Resolved[tuple[Timestamp, AsyncDocumentReference]]:
        update_time, reference = self._collection.add(document_data, document_id)
        return Resolved((update_time, self._facade._document_ref(reference.address)))

    async def list_documents(self) -> AsyncIterator[AsyncDocumentReference]:
        for reference in self._collection.list_documents():
            yield self._facade._document_ref(reference.address)

    def __repr__(self) -> str:
        return f"AsyncCollectionReference({self.path!r})"


class AsyncWriteBatch:
    def __init__(self, batch: WriteBatch):
        self._batch = batch

    def __len__(self) -> int:
        return len(self._batch)

    def set(self, reference, document_data: Mapping, merge: bool = False) -> "AsyncWriteBatch":
        self._batch.set(reference, document_data, merge=merge)
        return self

    def update(self, reference, field_updates: Mapping) -> "AsyncWriteBatch":
        self._batch.update(reference, field_updates)
        return self

    def delete(self, reference) -> "AsyncWriteBatch":
        self._batch.delete(reference)
        return self

    def commit(self) -> Resolved[list[WriteKind]]:
        return Resolved(self._batch.commit())


class AsyncFirestoreMock:
    def __init__(
        self,
        initial_data: Optional[Mapping] = None,
        settings: Optional[Settings] = None,
        *,
        client: Optional[FirestoreMock] = None,
    ):
        self._client = client or FirestoreMock(initial_data, settings=settings)
        self._registry = ReferenceRegistry()
        self._batch = AsyncWriteBatch(self._client.batch())

    @property
    def sync(self) -> FirestoreMock:
        """The synchronous mock sharing this facade's store."""
        return self._client

    def collection(self, path: str) -> AsyncCollectionReference:
        collection = self._client.collection(path)
        return self._registry.collection(path, lambda: AsyncCollectionReference(self, collection))

    def doc(self, path: str) -> AsyncDocumentReference:
        return self._document_ref(self._client.doc(path).address)

    def document(self, path: str) -> AsyncDocumentReference:
        return self.doc(path)

    def batch(self) -> AsyncWriteBatch:
        return self._batch

    def get_internal_data(self) -> dict[str, dict[str, dict]]:
        return self._client.get_internal_data()

    def _document_ref(self, address: Address) -> AsyncDocumentReference:
        return self._registry.document(
            address.path,
            lambda: AsyncDocumentReference(self, self._client._document_ref(address)),
        )
