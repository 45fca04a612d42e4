"""
Timestamp: the mock's point-in-time scalar.

Stored as whole seconds since the Unix epoch plus a nanosecond remainder,
like the real Firestore type. Two timestamps compare by their millisecond
count, which is also what the query engine uses when it lines a timestamp
up against a `datetime`.
"""

import time
from datetime import date, datetime, timedelta, timezone
from functools import total_ordering

from pydantic import BaseModel, ConfigDict, Field

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_NANOS_PER_SECOND = 1_000_000_000
_NANOS_PER_MILLI = 1_000_000


@total_ordering
class Timestamp(BaseModel):
    model_config = ConfigDict(frozen=True)

    seconds: int
    nanoseconds: int = Field(0, ge=0, lt=_NANOS_PER_SECOND)

    # ------------------------------------------------------------------ #
    # Construction                                                        #
    # ------------------------------------------------------------------ #
    @classmethod
    def now(cls) -> "Timestamp":
        seconds, nanos = divmod(time.time_ns(), _NANOS_PER_SECOND)
        return cls(seconds=seconds, nanoseconds=nanos)

    @classmethod
    def from_date(cls, value: date) -> "Timestamp":
        """
        Build from a `datetime` or a plain `date`.
        Naive datetimes are read as local time, the same way `datetime.timestamp()` does;
        plain dates are taken as midnight UTC.
        """
        if not isinstance(value, datetime):
            value = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
        elif value.tzinfo is None:
            value = value.astimezone()
        micros = (value - _EPOCH) // timedelta(microseconds=1)
        seconds, micros = divmod(micros, 1_000_000)
        return cls(seconds=seconds, nanoseconds=micros * 1000)

    @classmethod
    def from_millis(cls, millis: int) -> "Timestamp":
        seconds, rem = divmod(int(millis), 1000)
        return cls(seconds=seconds, nanoseconds=rem * _NANOS_PER_MILLI)

    # ------------------------------------------------------------------ #
    # Conversion                                                          #
    # ------------------------------------------------------------------ #
    def to_date(self) -> datetime:
        """Aware UTC datetime (microsecond precision)."""
        return _EPOCH + timedelta(seconds=self.seconds, microseconds=self.nanoseconds // 1000)

    def to_millis(self) -> int:
        return self.seconds * 1000 + self.nanoseconds // _NANOS_PER_MILLI

    # ------------------------------------------------------------------ #
    # Comparison: by millisecond count                                    #
    # ------------------------------------------------------------------ #
    def __eq__(self, other):
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.to_millis() == other.to_millis()

    def __lt__(self, other):
        if not isinstance(other, Timestamp):
            return NotImplemented
        return self.to_millis() < other.to_millis()

    def __hash__(self):
        return hash(self.to_millis())
