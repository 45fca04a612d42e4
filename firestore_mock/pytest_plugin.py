"""
pytest fixtures: a fresh FirestoreMock per test.

Override `firestore_seed` in a test module or conftest to seed the mock:

    @pytest.fixture
    def firestore_seed():
        return {"users": {"u1": {"name": "Alice"}}}
"""

import pytest

from firestore_mock.aio import AsyncFirestoreMock
from firestore_mock.client import FirestoreMock


@pytest.fixture
def firestore_seed() -> dict:
    """Initial store contents. Empty unless overridden."""
    return {}


@pytest.fixture
def firestore_mock(firestore_seed) -> FirestoreMock:
    """In-memory FirestoreMock seeded from `firestore_seed`, discarded after the test."""
    return FirestoreMock(firestore_seed)


@pytest.fixture
def async_firestore_mock(firestore_mock) -> AsyncFirestoreMock:
    """Async facade sharing the store of `firestore_mock`."""
    return AsyncFirestoreMock(client=firestore_mock)
