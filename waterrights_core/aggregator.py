# waterrights_core/aggregator.py
"""
Pure views over a loaded set of records: counts, available volume,
per-location totals and search. No I/O.

Volumes are decoded with the codec's fallback rule; a record whose volume
cannot be decoded is left out of the sum and the pass continues.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from .codec import EncryptionCodec
from .models import RightStatus, WaterRight

STATUS_FILTERS = ("all", RightStatus.AVAILABLE.value, RightStatus.TRADED.value)


@dataclass(frozen=True)
class StatusCounts:
    total: int
    available: int
    traded: int


@dataclass(frozen=True)
class LocationTotal:
    location: str
    total: float


@dataclass
class MarketSummary:
    counts: StatusCounts
    total_available_volume: float
    by_location: List[LocationTotal] = field(default_factory=list)


def counts(rights: Iterable[WaterRight]) -> StatusCounts:
    rights = list(rights)
    available = sum(1 for r in rights if r.status is RightStatus.AVAILABLE)
    traded = sum(1 for r in rights if r.status is RightStatus.TRADED)
    return StatusCounts(total=len(rights), available=available, traded=traded)


def total_available_volume(rights: Iterable[WaterRight]) -> float:
    total = 0.0
    for r in rights:
        if r.status is not RightStatus.AVAILABLE:
            continue
        volume = EncryptionCodec.try_decode(r.encoded_volume)
        if volume is not None:
            total += volume
    return total


def by_location(rights: Iterable[WaterRight]) -> List[LocationTotal]:
    """Decoded volume per location, locations in first-seen order."""
    totals: Dict[str, float] = {}
    for r in rights:
        totals.setdefault(r.location, 0.0)
        volume = EncryptionCodec.try_decode(r.encoded_volume)
        if volume is not None:
            totals[r.location] += volume
    return [LocationTotal(loc, total) for loc, total in totals.items()]


def search(rights: Iterable[WaterRight], term: str = "", status_filter: str = "all") -> List[WaterRight]:
    if status_filter not in STATUS_FILTERS:
        raise ValueError(f"Unknown status filter: {status_filter}")
    needle = (term or "").lower()
    out = []
    for r in rights:
        matches_term = needle in r.location.lower() or needle in r.id.lower()
        matches_status = status_filter == "all" or r.status.value == status_filter
        if matches_term and matches_status:
            out.append(r)
    return out


class MarketplaceAggregator:
    """The same views bound to one loaded snapshot."""

    def __init__(self, rights: Sequence[WaterRight]):
        self.rights = list(rights)

    def counts(self) -> StatusCounts:
        return counts(self.rights)

    def total_available_volume(self) -> float:
        return total_available_volume(self.rights)

    def by_location(self) -> List[LocationTotal]:
        return by_location(self.rights)

    def search(self, term: str = "", status_filter: str = "all") -> List[WaterRight]:
        return search(self.rights, term, status_filter)

    def summary(self) -> MarketSummary:
        return MarketSummary(
            counts=self.counts(),
            total_available_volume=self.total_available_volume(),
            by_location=self.by_location(),
        )
