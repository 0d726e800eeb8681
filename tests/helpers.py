"""Assertion helpers shared across test modules."""

from collections import Counter
from typing import List

from vibemap.spatial import Cluster, SpatialIndex

WORLD_BBOX = (-180.0, -90.0, 180.0, 90.0)


def collect_leaf_ids(index: SpatialIndex, results) -> List[str]:
    """Ids of every original point represented by ``results``."""
    ids = []
    for result in results:
        if isinstance(result, Cluster):
            ids.extend(p.id for p in index.get_leaves(result.handle))
        else:
            ids.append(result.id)
    return ids


def vibe_counter(results) -> Counter:
    """Total per-vibe counts over a list of results."""
    total = Counter()
    for result in results:
        if isinstance(result, Cluster):
            total.update(result.vibes)
        else:
            total[result.point.category] += 1
    return total
