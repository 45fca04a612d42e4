"""
WriteBatch: queued writes applied in one pass on commit().

Queueing never touches the store. commit() applies every pending write in
the order it was queued, then empties the queue so the batch can be reused.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import TYPE_CHECKING, NamedTuple, Optional

from firestore_mock.cloning import deep_clone
from firestore_mock.store import Address

if TYPE_CHECKING:
    from firestore_mock.document import DocumentReference
    from firestore_mock.store import MemoryStore

logger = logging.getLogger(__name__)


class WriteKind(Enum):
    SET = "set"
    MERGE = "merge"
    UPDATE = "update"
    DELETE = "delete"


class PendingWrite(NamedTuple):
    kind: WriteKind
    address: Address
    data: Optional[dict] = None


class WriteBatch:
    def __init__(self, store: "MemoryStore"):
        self._store = store
        self._writes: list[PendingWrite] = []

    @property
    def pending(self) -> tuple[PendingWrite, ...]:
        return tuple(self._writes)

    def __len__(self) -> int:
        return len(self._writes)

    def set(self, reference: "DocumentReference", document_data: Mapping, merge: bool = False) -> "WriteBatch":
        kind = WriteKind.MERGE if merge else WriteKind.SET
        self._writes.append(PendingWrite(kind, reference.address, deep_clone(document_data)))
        return self

    def update(self, reference: "DocumentReference", field_updates: Mapping) -> "WriteBatch":
        self._writes.append(PendingWrite(WriteKind.UPDATE, reference.address, deep_clone(field_updates)))
        return self

    def delete(self, reference: "DocumentReference") -> "WriteBatch":
        self._writes.append(PendingWrite(WriteKind.DELETE, reference.address))
        return self

    def commit(self) -> list[WriteKind]:
        """Apply all pending writes in order and reset. Returns the kinds applied."""
        writes, self._writes = self._writes, []
        for write in writes:
            if write.kind is WriteKind.DELETE:
                self._store.delete(write.address)
            elif write.kind is WriteKind.UPDATE:
                self._store.update(write.address, write.data)
            elif write.kind is WriteKind.MERGE:
                self._store.merge(write.address, write.data)
            else:
                self._store.write(write.address, write.data)

        logger.debug(f"[BATCH] Committed {len(writes)} write(s)")
        return [write.kind for write in writes]
