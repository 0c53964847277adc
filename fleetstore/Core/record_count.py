# fleetstore/Core/record_count.py

"""
Record Count Result

A count of rows that is either exact or unknown.

Some storage engines cannot produce an exact row count for a predicate
without scanning the table, and some DBAPI drivers report rowcount -1 after
a bulk DELETE. Both cases are "the operation likely succeeded, but the
number is not trustworthy". Instead of a magic -1 that could collide with a
negative number produced by a bug, the outcome is a distinct variant.

Usage:
    count = RecordCount.exact(12)
    unknown = RecordCount.unsupported()

    total = count + unknown          # unknown wins
    if total.is_known:
        print(total.value)
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RecordCount:
    """Exact non-negative count, or the unsupported marker (value is None)."""

    value: Optional[int] = None

    def __post_init__(self):
        if self.value is not None and self.value < 0:
            raise ValueError(f"Exact record count cannot be negative: {self.value}")

    @classmethod
    def exact(cls, value: int) -> "RecordCount":
        return cls(int(value))

    @classmethod
    def unsupported(cls) -> "RecordCount":
        return cls(None)

    @classmethod
    def from_rowcount(cls, rowcount: Optional[int]) -> "RecordCount":
        """Map a DBAPI cursor rowcount (-1 or None when unknown)."""
        if rowcount is None or rowcount < 0:
            return cls.unsupported()
        return cls.exact(rowcount)

    @property
    def is_known(self) -> bool:
        return self.value is not None

    @property
    def is_unsupported(self) -> bool:
        return self.value is None

    def __add__(self, other: "RecordCount") -> "RecordCount":
        if not isinstance(other, RecordCount):
            return NotImplemented
        if self.value is None or other.value is None:
            return RecordCount.unsupported()
        return RecordCount(self.value + other.value)

    def __str__(self) -> str:
        return "?" if self.value is None else str(self.value)
