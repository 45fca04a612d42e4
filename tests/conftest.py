"""
Shared pytest fixtures for all test modules.

The per-test mock fixtures come from the package's own pytest plugin; they
are imported here so the suite also runs from a plain checkout.
"""

from datetime import datetime, timedelta, timezone

import pytest

from firestore_mock import FirestoreMock, Timestamp
from firestore_mock.pytest_plugin import (  # noqa: F401
    async_firestore_mock,
    firestore_mock,
    firestore_seed,
)


# ---------------------------------------------------------------------------
# Shared seeds
# ---------------------------------------------------------------------------

USERS = {
    "users": {
        "user1": {"name": "Alice", "role": "admin", "age": 30, "tags": ["a", "b"]},
        "user2": {"name": "Bob", "role": "user", "age": 25, "tags": ["b", "c"]},
        "user3": {"name": "Charlie", "role": "admin", "age": 35, "tags": ["c", "d"]},
    }
}

ITEMS = {
    "items": {
        "item1": {"name": "A", "order": 3},
        "item2": {"name": "B", "order": 1},
        "item3": {"name": "C", "order": 2},
    }
}


@pytest.fixture
def users_db() -> FirestoreMock:
    return FirestoreMock(USERS)


@pytest.fixture
def items_db() -> FirestoreMock:
    return FirestoreMock(ITEMS)


@pytest.fixture
def today() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture
def events_db(today) -> FirestoreMock:
    """Three events a day apart, dated with Timestamps."""
    return FirestoreMock({
        "events": {
            "event-yesterday": {"eventDate": Timestamp.from_date(today - timedelta(days=1))},
            "event-today": {"eventDate": Timestamp.from_date(today)},
            "event-tomorrow": {"eventDate": Timestamp.from_date(today + timedelta(days=1))},
        }
    })
