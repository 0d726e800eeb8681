"""
Cluster aggregation reducer.

Clusters carry a member count, a centroid and a per-vibe breakdown of their
members. All three are combined by :func:`merge`, a pure function returning a
new :class:`VibeAggregate`; the index folds it over a cluster's members in a
fixed order so rebuilding the same input always yields the same aggregates.

The vibe counts are exactly associative and commutative. The centroid is a
count-weighted mean, which stays within the members' bounding region no matter
how the merges are grouped.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Dict, Iterable, Mapping, Optional, Tuple

from ..vibes import CANONICAL_VIBE_ORDER, DEFAULT_VIBE, VIBE_RANK, VibeCategory, parse_vibe

MIN_MARKER_SIZE = 30
MAX_MARKER_SIZE = 60


@dataclass(frozen=True)
class VibeAggregate:
    """
    Aggregate statistics for a group of points.

    Attributes:
        count: Number of original points in the group
        lng: Count-weighted mean longitude
        lat: Count-weighted mean latitude
        vibes: Member counts per vibe, in canonical vibe order
    """
    count: int
    lng: float
    lat: float
    vibes: Tuple[int, ...]

    @classmethod
    def of_point(cls, point) -> "VibeAggregate":
        """Aggregate for a single point: count 1 in its own vibe."""
        rank = VIBE_RANK[parse_vibe(point.category)]
        vibes = tuple(1 if i == rank else 0 for i in range(len(CANONICAL_VIBE_ORDER)))
        return cls(count=1, lng=float(point.lng), lat=float(point.lat), vibes=vibes)

    def vibe_counts(self) -> Dict[VibeCategory, int]:
        """Per-vibe counts keyed by :class:`VibeCategory`, zeros included."""
        return dict(zip(CANONICAL_VIBE_ORDER, self.vibes))


def merge(a: VibeAggregate, b: VibeAggregate) -> VibeAggregate:
    """Combine two aggregates into a new one; neither operand is modified."""
    count = a.count + b.count
    return VibeAggregate(
        count=count,
        lng=(a.lng * a.count + b.lng * b.count) / count,
        lat=(a.lat * a.count + b.lat * b.count) / count,
        vibes=tuple(x + y for x, y in zip(a.vibes, b.vibes)),
    )


def merge_all(aggregates: Iterable[VibeAggregate]) -> VibeAggregate:
    """
    Left fold of :func:`merge` over ``aggregates`` in iteration order.

    Raises:
        ValueError: If ``aggregates`` is empty
    """
    items = list(aggregates)
    if not items:
        raise ValueError("Cannot merge an empty group of aggregates")
    return reduce(merge, items)


def dominant_vibe(counts: Optional[Mapping[VibeCategory, int]]) -> VibeCategory:
    """
    Return the vibe with the most members.

    Ties go to the vibe listed first in the canonical order, never to mapping
    iteration order. An empty or all-zero mapping yields the default vibe.
    """
    if not counts:
        return DEFAULT_VIBE
    normalized = {parse_vibe(vibe): n for vibe, n in counts.items()}
    best = max(CANONICAL_VIBE_ORDER, key=lambda vibe: (normalized.get(vibe, 0), -VIBE_RANK[vibe]))
    if normalized.get(best, 0) <= 0:
        return DEFAULT_VIBE
    return best


def cluster_marker_size(count: int) -> int:
    """
    Marker diameter in pixels for a cluster of ``count`` points.

    Grows linearly (3px per member over a 24px base) and is clamped to
    [MIN_MARKER_SIZE, MAX_MARKER_SIZE].
    """
    return min(max(count * 3 + 24, MIN_MARKER_SIZE), MAX_MARKER_SIZE)


__all__ = [
    "VibeAggregate",
    "merge",
    "merge_all",
    "dominant_vibe",
    "cluster_marker_size",
    "MIN_MARKER_SIZE",
    "MAX_MARKER_SIZE",
]
