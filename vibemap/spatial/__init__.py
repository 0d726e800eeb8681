"""
vibemap.spatial: multi-zoom point clustering with per-vibe aggregates.

Usage:
    from vibemap.spatial import ClusterEngine, Viewport, points_from_destinations

    engine = ClusterEngine()
    engine.load(points_from_destinations(destinations))
    for result in engine.query(Viewport(-10, 35, 30, 60, zoom=4)):
        ...
"""

from .aggregation import (
    VibeAggregate,
    merge,
    merge_all,
    dominant_vibe,
    cluster_marker_size,
    MIN_MARKER_SIZE,
    MAX_MARKER_SIZE,
)
from .models import (
    GeoPoint,
    Viewport,
    ClusterOptions,
    ClusterHandle,
    Cluster,
    Leaf,
    ClusterResult,
)
from .index import SpatialIndex, IndexDiagnostics, build_index
from .engine import ClusterEngine
from .points import destination_to_point, points_from_destinations

__all__ = [
    # Aggregation
    "VibeAggregate",
    "merge",
    "merge_all",
    "dominant_vibe",
    "cluster_marker_size",
    "MIN_MARKER_SIZE",
    "MAX_MARKER_SIZE",

    # Data models
    "GeoPoint",
    "Viewport",
    "ClusterOptions",
    "ClusterHandle",
    "Cluster",
    "Leaf",
    "ClusterResult",

    # Index
    "SpatialIndex",
    "IndexDiagnostics",
    "build_index",
    "ClusterEngine",

    # Input
    "destination_to_point",
    "points_from_destinations",
]
