"""
Unit tests for firestore_mock/document.py: DocumentReference and DocumentSnapshot.
"""

from firestore_mock import SERVER_TIMESTAMP, FirestoreMock, Timestamp


# ---------------------------------------------------------------------------
# get / set
# ---------------------------------------------------------------------------


def test_set_then_get_round_trips(firestore_mock):
    data = {"name": "Brand New Item", "nested": {"tags": ["x", "y"]}, "count": 3}
    ref = firestore_mock.collection("items").doc("item1")

    ref.set(data)
    snap = ref.get()

    assert snap.exists is True
    assert snap.id == "item1"
    assert snap.data() == data
    assert snap.ref is ref


def test_set_overwrites_existing_fields():
    db = FirestoreMock({"items": {"item1": {"name": "Old Name", "count": 1}}})
    ref = db.collection("items").doc("item1")

    ref.set({"name": "Completely New Item"})

    assert ref.get().data() == {"name": "Completely New Item"}


def test_set_with_merge_keeps_other_fields():
    db = FirestoreMock({"items": {"item1": {"name": "Old Name", "count": 1}}})
    ref = db.collection("items").doc("item1")

    ref.set({"name": "Merged Name", "extra": True}, merge=True)

    assert ref.get().data() == {"name": "Merged Name", "count": 1, "extra": True}


def test_set_with_merge_creates_missing_document(firestore_mock):
    ref = firestore_mock.collection("new_items").doc("new_doc")
    ref.set({"name": "Hello World"}, merge=True)

    assert ref.get().data() == {"name": "Hello World"}


def test_set_into_new_collection(firestore_mock):
    ref = firestore_mock.collection("new_items").doc("new_doc")
    ref.set({"name": "Hello World"})

    assert "new_items" in firestore_mock.get_internal_data()
    assert ref.get().exists


def test_get_missing_document(firestore_mock):
    snap = firestore_mock.collection("items").doc("nope").get()

    assert snap.exists is False
    assert snap.data() is None
    assert snap.to_dict() is None
    assert snap.get("name") is None


# ---------------------------------------------------------------------------
# update / delete
# ---------------------------------------------------------------------------


def test_update_merges_into_existing_document():
    db = FirestoreMock({"items": {"item1": {"name": "Old Name", "count": 1}}})
    ref = db.collection("items").doc("item1")

    ref.update({"name": "Updated Name"})

    assert ref.get().data() == {"name": "Updated Name", "count": 1}


def test_update_on_missing_document_is_a_no_op(firestore_mock):
    ref = firestore_mock.collection("items").doc("ghost")

    ref.update({"name": "Ghost"})

    assert ref.get().exists is False
    assert "ghost" not in firestore_mock.get_internal_data().get("items", {})


def test_delete_then_get():
    db = FirestoreMock({"items": {"item1": {"name": "To Be Deleted"}}})
    ref = db.collection("items").doc("item1")

    ref.delete()
    snap = ref.get()

    assert snap.exists is False
    assert snap.data() is None


def test_delete_missing_document_is_a_no_op(firestore_mock):
    firestore_mock.collection("items").doc("ghost").delete()
    assert firestore_mock.get_internal_data() == {}


def test_server_timestamp_written_as_timestamp(firestore_mock):
    ref = firestore_mock.doc("wallets/device1")
    ref.set({"credits": 10, "last_active": SERVER_TIMESTAMP})

    assert isinstance(ref.get().get("last_active"), Timestamp)


# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------


def test_snapshot_is_decoupled_from_later_writes():
    db = FirestoreMock({"items": {"item1": {"name": "A", "tags": ["x"]}}})
    ref = db.collection("items").doc("item1")

    snap = ref.get()
    ref.update({"name": "B"})
    snap.data()["tags"].append("y")

    assert snap.data()["name"] == "A"
    assert ref.get().data() == {"name": "B", "tags": ["x"]}


def test_snapshot_field_lookup_follows_dotted_paths():
    db = FirestoreMock({"users": {"u1": {"profile": {"city": "Paris"}, "a.b": 1}}})
    snap = db.doc("users/u1").get()

    assert snap.get("profile.city") == "Paris"
    assert snap.get("a.b") == 1
    assert snap.get("profile.zip") is None
    assert snap.reference is snap.ref


# ---------------------------------------------------------------------------
# Subcollections
# ---------------------------------------------------------------------------


SUBCOLLECTIONS = {
    "users/user1/posts": {"post1": {"title": "User1 Post 1"}},
    "users/user2/posts": {"post2": {"title": "User2 Post 2"}},
}


def test_get_documents_from_subcollection():
    db = FirestoreMock(SUBCOLLECTIONS)
    posts = db.collection("users").doc("user1").collection("posts")

    snap = posts.get()

    assert snap.size == 1
    assert snap.docs[0].id == "post1"
    assert snap.docs[0].data()["title"] == "User1 Post 1"


def test_add_document_to_subcollection():
    db = FirestoreMock(SUBCOLLECTIONS)
    posts = db.collection("users").doc("user1").collection("posts")

    posts.add({"title": "A new post!"})

    titles = [doc.data()["title"] for doc in posts.get().docs]
    assert sorted(titles) == ["A new post!", "User1 Post 1"]
    assert db.collection("users/user2/posts").get().size == 1


def test_subcollection_document_resolves_by_full_path():
    db = FirestoreMock(SUBCOLLECTIONS)
    ref = db.doc("users/user1/posts/post1")

    assert ref is db.collection("users").doc("user1").collection("posts").doc("post1")
    assert ref.get().data() == {"title": "User1 Post 1"}


def test_parents():
    db = FirestoreMock(SUBCOLLECTIONS)
    posts = db.collection("users").doc("user1").collection("posts")
    post = posts.doc("post1")

    assert post.parent is posts
    assert posts.parent is db.doc("users/user1")
    assert posts.parent.parent is db.collection("users")
    assert db.collection("users").parent is None
    assert posts.id == "posts"
    assert posts.path == "users/user1/posts"
