"""Errors raised by the mock. Everything else is a silent no-op by contract."""


class FirestoreMockError(Exception):
    """Base class for all mock errors."""


class InvalidPathError(FirestoreMockError, ValueError):
    """A document or collection path has the wrong shape."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path provided to mock: {path!r} ({reason})")
