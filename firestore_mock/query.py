"""
Query engine: directive chain, evaluation and collection handles.

A query is an immutable `QueryState` (filters, one ordering, one limit, one
cursor) bound to a collection path. Every chaining call returns a new
`Query`, so two continuations of a shared prefix never see each other.

`get()` evaluates against the store in a fixed order:
filter -> order -> cursor -> limit.
"""

import logging
import operator
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Iterator, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from firestore_mock.cloning import deep_clone, to_instant_millis
from firestore_mock.document import (
    DOCUMENT_ID,
    MISSING,
    DocumentReference,
    DocumentSnapshot,
    lookup_field,
)
from firestore_mock.store import SEPARATOR, Address, join
from firestore_mock.timestamp import Timestamp

if TYPE_CHECKING:
    from firestore_mock.client import FirestoreMock

logger = logging.getLogger(__name__)

ASCENDING = "ASCENDING"
DESCENDING = "DESCENDING"

_DIRECTIONS = {
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}
_MEMBERSHIP = ("in", "not-in", "array-contains", "array-contains-any")
OPERATORS = frozenset(_COMPARISONS) | frozenset(_MEMBERSHIP)

# The Python SDK spells these with underscores.
_OP_ALIASES = {
    "array_contains": "array-contains",
    "array_contains_any": "array-contains-any",
    "not_in": "not-in",
}

_COLLECTIONS = (list, tuple, set, frozenset)


# ---------------------------------------------------------------------------
# Directive chain
# ---------------------------------------------------------------------------


class FieldFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_path: str
    op_string: str
    value: Any = None

    def __init__(self, field_path: str, op_string: str, value: Any = None, **data):
        super().__init__(field_path=field_path, op_string=op_string, value=value, **data)

    @property
    def op(self) -> str:
        return _OP_ALIASES.get(self.op_string, self.op_string)


class OrderBy(BaseModel):
    model_config = ConfigDict(frozen=True)

    field_path: str
    direction: str = ASCENDING

    @field_validator("direction", mode="before")
    @classmethod
    def _normalize_direction(cls, value: Any) -> str:
        direction = _DIRECTIONS.get(str(value).lower())
        if direction is None:
            raise ValueError(f"Unknown order direction: {value!r}")
        return direction

    @property
    def descending(self) -> bool:
        return self.direction == DESCENDING


class QueryState(BaseModel):
    model_config = ConfigDict(frozen=True)

    filters: tuple[FieldFilter, ...] = ()
    order: Optional[OrderBy] = None
    limit: Optional[int] = Field(None, ge=0)
    # One-element tuple so that a cursor value of None is still a cursor.
    cursor: Optional[tuple[Any]] = None

    def evolve(self, **changes) -> "QueryState":
        """A new, validated state with `changes` applied; self is untouched."""
        return QueryState(**{**dict(self), **changes})


# ---------------------------------------------------------------------------
# Evaluation helpers
# ---------------------------------------------------------------------------


def _field_value(doc_id: str, fields: Mapping, field_path: str) -> Any:
    if field_path == DOCUMENT_ID:
        return doc_id
    return lookup_field(fields, field_path)


def _as_document_id(value: Any) -> Any:
    if isinstance(value, DocumentReference):
        return value.id
    if isinstance(value, _COLLECTIONS):
        return [_as_document_id(item) for item in value]
    return value


def _matches(value: Any, op: str, target: Any, coerce_strings: bool) -> bool:
    if value is MISSING:
        return op in ("!=", "not-in")

    try:
        if op in _COMPARISONS:
            left = to_instant_millis(value, coerce_strings)
            right = to_instant_millis(target, coerce_strings)
            if left is not None and right is not None:
                value, target = left, right
            return bool(_COMPARISONS[op](value, target))

        if op == "in":
            return isinstance(target, _COLLECTIONS) and value in target
        if op == "not-in":
            return not (isinstance(target, _COLLECTIONS) and value in target)
        if op == "array-contains":
            return isinstance(value, (list, tuple)) and target in value
        if op == "array-contains-any":
            return (
                isinstance(value, (list, tuple))
                and isinstance(target, _COLLECTIONS)
                and any(item in value for item in target)
            )
    except TypeError:
        # Values of unrelated types never satisfy an ordering.
        return False

    return False


def _order_key(value: Any) -> tuple:
    """Rank by type first (Firestore's cross-type order), then by value."""
    if value is MISSING or value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    millis = to_instant_millis(value, coerce_strings=False)
    if millis is not None:
        return (3, millis)
    if isinstance(value, str):
        return (4, value)
    if isinstance(value, bytes):
        return (5, value)
    return (6, 0)


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


class QuerySnapshot:
    def __init__(self, docs: list[DocumentSnapshot]):
        self.docs = docs

    @property
    def size(self) -> int:
        return len(self.docs)

    @property
    def empty(self) -> bool:
        return not self.docs

    def for_each(self, callback: Callable[[DocumentSnapshot], Any]) -> None:
        for doc in self.docs:
            callback(doc)

    def __iter__(self) -> Iterator[DocumentSnapshot]:
        return iter(self.docs)

    def __len__(self) -> int:
        return len(self.docs)

    def __repr__(self) -> str:
        return f"QuerySnapshot(size={self.size})"


# ---------------------------------------------------------------------------
# Query / CollectionReference
# ---------------------------------------------------------------------------


class Query:
    def __init__(
        self,
        client: "FirestoreMock",
        collection_path: str,
        state: Optional[QueryState] = None,
    ):
        self._client = client
        self._collection_path = collection_path
        self._state = state or QueryState()

    @property
    def state(self) -> QueryState:
        return self._state

    def _with(self, **changes) -> "Query":
        return Query(self._client, self._collection_path, self._state.evolve(**changes))

    # ------------------------------------------------------------------ #
    # Chaining                                                            #
    # ------------------------------------------------------------------ #
    def where(
        self,
        field_path: Optional[str] = None,
        op_string: Optional[str] = None,
        value: Any = None,
        *,
        filter: Optional[FieldFilter] = None,
    ) -> "Query":
        """Add a filter, either positionally or as `where(filter=FieldFilter(...))`."""
        if filter is None:
            if field_path is None or op_string is None:
                raise ValueError("where() needs a field path and an operator, or a filter")
            filter = FieldFilter(field_path, op_string, deep_clone(value))
        return self._with(filters=self._state.filters + (filter,))

    def order_by(self, field_path: str, direction: str = ASCENDING) -> "Query":
        return self._with(order=OrderBy(field_path=field_path, direction=direction))

    def limit(self, count: int) -> "Query":
        return self._with(limit=count)

    def start_after(self, cursor: Any) -> "Query":
        """
        Skip results up to and including `cursor`: a DocumentSnapshot, a
        mapping of field values, or a bare value of the ordered field.
        """
        return self._with(cursor=(cursor,))

    # ------------------------------------------------------------------ #
    # Evaluation                                                          #
    # ------------------------------------------------------------------ #
    def get(self) -> QuerySnapshot:
        docs = [
            DocumentSnapshot(
                self._client._document_ref(Address(self._collection_path, doc_id)),
                self._client._snapshot_fields(fields),
            )
            for doc_id, fields in self._evaluate()
        ]
        return QuerySnapshot(docs)

    def stream(self) -> Iterator[DocumentSnapshot]:
        yield from self.get().docs

    def _evaluate(self) -> list[tuple[str, dict]]:
        """(id, fields) pairs that survive the directive chain, in result order."""
        state = self._state
        coerce = self._client._settings.coerce_date_strings
        documents = self._client._store.documents(self._collection_path)

        for flt in state.filters:
            op = flt.op
            if op not in OPERATORS:
                logger.warning(
                    f"[QUERY] Unknown operator {flt.op_string!r} on {self._collection_path}; "
                    f"filter matches nothing"
                )
            target = _as_document_id(flt.value) if flt.field_path == DOCUMENT_ID else flt.value
            documents = [
                (doc_id, fields)
                for doc_id, fields in documents
                if _matches(_field_value(doc_id, fields, flt.field_path), op, target, coerce)
            ]

        if state.order is not None:
            field_path = state.order.field_path
            documents = sorted(
                documents,
                key=lambda item: _order_key(_field_value(item[0], item[1], field_path)),
                reverse=state.order.descending,
            )

        if state.cursor is not None:
            documents = self._after_cursor(documents, state.cursor[0])

        if state.limit is not None:
            documents = documents[: state.limit]

        logger.debug(f"[QUERY] {self._collection_path} -> {len(documents)} document(s)")
        return documents

    def _after_cursor(self, documents: list[tuple[str, dict]], cursor: Any) -> list[tuple[str, dict]]:
        order = self._state.order

        if isinstance(cursor, DocumentSnapshot):
            for index, (doc_id, _) in enumerate(documents):
                if doc_id == cursor.id:
                    return documents[index + 1:]
            if order is None:
                return [item for item in documents if item[0] > cursor.id]
            cursor_value = _field_value(cursor.id, cursor.to_dict() or {}, order.field_path)
        elif order is None:
            raise ValueError("start_after() with field values requires order_by()")
        elif isinstance(cursor, Mapping):
            cursor_value = _field_value("", cursor, order.field_path)
        else:
            cursor_value = cursor

        pivot = _order_key(cursor_value)
        field_path = order.field_path
        if order.descending:
            return [item for item in documents if _order_key(_field_value(item[0], item[1], field_path)) < pivot]
        return [item for item in documents if _order_key(_field_value(item[0], item[1], field_path)) > pivot]


class CollectionReference(Query):
    def __init__(self, client: "FirestoreMock", path: str):
        super().__init__(client, path)

    @property
    def id(self) -> str:
        return self._collection_path.rsplit(SEPARATOR, 1)[-1]

    @property
    def path(self) -> str:
        return self._collection_path

    @property
    def parent(self) -> Optional[DocumentReference]:
        """The owning document for a subcollection, None at the top level."""
        if SEPARATOR not in self._collection_path:
            return None
        return self._client.document(self._collection_path.rsplit(SEPARATOR, 1)[0])

    def doc(self, document_id: Optional[str] = None) -> DocumentReference:
        """Handle for `document_id`, or for a fresh auto-generated id when omitted."""
        if document_id is None:
            document_id = self._client._auto_id()
        return self._client.document(join(self._collection_path, document_id))

    def document(self, document_id: Optional[str] = None) -> DocumentReference:
        return self.doc(document_id)

    def add(self, document_data: Mapping, document_id: Optional[str] = None) -> tuple[Timestamp, DocumentReference]:
        """Create a document and return (write time, reference) like the Python SDK."""
        ref = self.doc(document_id)
        ref.set(document_data)
        return Timestamp.now(), ref

    def list_documents(self) -> list[DocumentReference]:
        return [
            self._client._document_ref(Address(self._collection_path, doc_id))
            for doc_id, _ in self._client._store.documents(self._collection_path)
        ]

    def __repr__(self) -> str:
        return f"CollectionReference({self._collection_path!r})"
