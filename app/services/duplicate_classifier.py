"""
app/services/duplicate_classifier.py

Routes analysed rows into one of the four import buckets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from app.domain.incident_import import RowBucket


@dataclass(frozen=True)
class NaturalKeySnapshot:
    """
    Point-in-time set of natural keys already committed to the store.

    Captured once at the start of an analysis run and never refreshed, so
    it may be stale by the time the operator confirms.
    """

    keys: frozenset[str]

    @classmethod
    def of(cls, keys: Iterable[str]) -> NaturalKeySnapshot:
        return cls(keys=frozenset(keys))

    def __contains__(self, incident_id: object) -> bool:
        return incident_id in self.keys

    def __len__(self) -> int:
        return len(self.keys)


def classify(
    incident_id: str | None,
    snapshot: NaturalKeySnapshot,
    *,
    is_valid: bool,
) -> RowBucket:
    """
    Pure function of (row outcome, snapshot).

    A key found in the snapshot is on the duplicate track; anything else,
    including a row with no usable key, is on the new track.
    """

    is_duplicate = incident_id is not None and incident_id in snapshot
    if is_duplicate:
        return RowBucket.UPDATE_CANDIDATE if is_valid else RowBucket.INVALID_DUPLICATE
    return RowBucket.NEW_VALID if is_valid else RowBucket.INVALID_NEW
