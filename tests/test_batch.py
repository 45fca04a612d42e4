"""
Unit tests for firestore_mock/batch.py.
"""

from firestore_mock import FirestoreMock
from firestore_mock.batch import WriteKind


def _db() -> FirestoreMock:
    return FirestoreMock({
        "items": {
            "item1": {"name": "Item One", "count": 1},
            "item2": {"name": "Item Two", "count": 2},
        }
    })


# ---------------------------------------------------------------------------
# Individual write kinds
# ---------------------------------------------------------------------------


def test_batch_delete_on_commit():
    db = _db()
    item1, item2 = db.doc("items/item1"), db.doc("items/item2")

    db.batch().delete(item1)
    assert item1.get().exists  # nothing applied before commit

    db.batch().commit()

    assert item1.get().exists is False
    assert item2.get().exists is True


def test_batch_update_on_commit():
    db = _db()
    ref = db.doc("items/item1")

    batch = db.batch()
    batch.update(ref, {"name": "New Name"})
    batch.commit()

    assert ref.get().data() == {"name": "New Name", "count": 1}


def test_batch_update_on_missing_document_is_a_no_op():
    db = _db()
    ghost = db.doc("items/ghost")

    batch = db.batch()
    batch.update(ghost, {"name": "Ghost"})
    batch.commit()

    assert ghost.get().exists is False


def test_batch_set_on_commit():
    db = FirestoreMock()
    ref = db.collection("items").doc("item1")

    batch = db.batch()
    batch.set(ref, {"name": "Brand New Item"})
    batch.commit()

    assert ref.get().data() == {"name": "Brand New Item"}


def test_batch_set_with_merge_on_commit():
    db = _db()
    ref = db.doc("items/item1")

    batch = db.batch()
    batch.set(ref, {"name": "New Merged Name"}, merge=True)
    batch.commit()

    assert ref.get().data() == {"name": "New Merged Name", "count": 1}


# ---------------------------------------------------------------------------
# Commit semantics
# ---------------------------------------------------------------------------


def test_delete_and_update_commit_together():
    db = _db()
    item1, item2 = db.doc("items/item1"), db.doc("items/item2")

    batch = db.batch().delete(item1).update(item2, {"count": 20})
    assert len(batch) == 2
    assert item2.get().data()["count"] == 2

    kinds = batch.commit()

    assert kinds == [WriteKind.DELETE, WriteKind.UPDATE]
    assert item1.get().exists is False
    assert item2.get().data() == {"name": "Item Two", "count": 20}


def test_writes_apply_in_queue_order():
    db = _db()
    ref = db.doc("items/item1")

    db.batch().set(ref, {"name": "Reborn"}).delete(ref).commit()
    assert ref.get().exists is False

    db.batch().delete(ref).set(ref, {"name": "Reborn"}).commit()
    assert ref.get().data() == {"name": "Reborn"}


def test_commit_clears_queue_and_batch_is_reusable():
    db = _db()
    batch = db.batch()

    batch.update(db.doc("items/item1"), {"count": 5})
    batch.commit()
    assert len(batch) == 0
    assert batch.pending == ()

    batch.update(db.doc("items/item1"), {"count": 6})
    batch.commit()
    assert db.doc("items/item1").get().data()["count"] == 6


def test_empty_commit_is_a_no_op():
    db = _db()
    before = {k: dict(v) for k, v in db.get_internal_data()["items"].items()}

    assert db.batch().commit() == []
    assert db.get_internal_data()["items"] == before


def test_payload_is_copied_at_enqueue_time():
    db = _db()
    payload = {"name": "Queued"}

    batch = db.batch().set(db.doc("items/item3"), payload)
    payload["name"] = "Changed later"
    batch.commit()

    assert db.doc("items/item3").get().data() == {"name": "Queued"}


def test_batch_targets_subcollection_documents():
    db = FirestoreMock({"users/u1/posts": {"p1": {"title": "Old"}}})
    post = db.collection("users").doc("u1").collection("posts").doc("p1")

    db.batch().update(post, {"title": "New"}).commit()

    assert post.get().data() == {"title": "New"}
    assert "u1" not in db.get_internal_data().get("users", {})


def test_batch_is_shared_per_mock():
    db = _db()
    assert db.batch() is db.batch()
    assert FirestoreMock().batch() is not db.batch()
