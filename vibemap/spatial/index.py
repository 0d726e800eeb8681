"""
Hierarchical point clustering for map rendering.

The index is built once per point set. Starting one level below the finest
clustered zoom (every point on its own) it walks up to ``min_zoom``: at each
zoom a greedy pass over the previous level's nodes merges every group of nodes
lying within the cluster radius (measured in pixels at that zoom) into a new
cluster. Each level is kept, so a viewport query at any zoom is a range scan
over that level's projected positions.

Key properties:
- Every indexed point belongs to exactly one node at every zoom
- Cluster aggregates are folded with the pure reducer in
  :mod:`vibemap.spatial.aggregation`, always in index order
- Nothing is mutated after :meth:`SpatialIndex.build` returns, so queries are
  safe to run concurrently
- Handles are tagged with the build generation and rejected by any other build
"""

from __future__ import annotations

import itertools
import logging
import math
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from sklearn.neighbors import KDTree

from ..exceptions import InvalidHandle
from .aggregation import VibeAggregate, merge_all
from .models import Cluster, ClusterHandle, ClusterOptions, ClusterResult, GeoPoint, Leaf, Viewport
from .projection import lat_y, lng_x, project_arrays, zoom_radius

logger = logging.getLogger(__name__)

# Process-wide build counter; every index build draws a fresh generation
_generations = itertools.count(1)


@dataclass(frozen=True)
class _Level:
    """Nodes visible at one zoom level with their projected positions."""

    zoom: int
    node_ids: np.ndarray
    xy: np.ndarray


@dataclass(frozen=True)
class IndexDiagnostics:
    """Summary of an index build for debugging and tuning."""

    generation: int
    num_points: int
    """Points indexed."""

    num_skipped: int = 0
    """Points dropped because a coordinate was missing."""

    min_zoom: int = 0
    max_zoom: int = 16

    nodes_per_zoom: Mapping[int, int] = field(default_factory=dict)
    """Visible nodes (clusters plus leaves) per zoom."""

    clusters_per_zoom: Mapping[int, int] = field(default_factory=dict)
    """Visible clusters per zoom."""

    largest_cluster: int = 0
    """Member count of the largest cluster at ``min_zoom``."""

    build_time_ms: float = 0.0

    def to_dataframe(self) -> pd.DataFrame:
        """One row per zoom: visible nodes, clusters and single leaves."""
        zooms = sorted(self.nodes_per_zoom)
        nodes = [self.nodes_per_zoom[z] for z in zooms]
        clusters = [self.clusters_per_zoom.get(z, 0) for z in zooms]
        return pd.DataFrame(
            {
                "zoom": zooms,
                "nodes": nodes,
                "clusters": clusters,
                "leaves": [n - c for n, c in zip(nodes, clusters)],
            }
        )


class SpatialIndex:
    """
    Multi-zoom cluster index over a fixed set of :class:`GeoPoint`.

    Use :meth:`build` (or :func:`build_index`) to construct one. Node ids
    ``0 .. n-1`` are the input points in order; cluster ids follow.
    """

    def __init__(
        self,
        points: Tuple[GeoPoint, ...],
        options: ClusterOptions,
        generation: int,
        num_skipped: int = 0,
        started: Optional[float] = None,
    ):
        started = time.perf_counter() if started is None else started
        self.options = options
        self.generation = generation
        self._points = points
        n = len(points)

        self._aggregates: List[VibeAggregate] = [VibeAggregate.of_point(p) for p in points]
        self._children: List[Tuple[int, ...]] = [() for _ in range(n)]
        self._origin_zoom: List[int] = [options.max_zoom + 1] * n
        self._levels: Dict[int, _Level] = {}
        nodes_per_zoom: Dict[int, int] = {}
        clusters_per_zoom: Dict[int, int] = {}

        if n:
            xy = project_arrays([p.lng for p in points], [p.lat for p in points])
            self._xy: List[Tuple[float, float]] = [tuple(row) for row in xy]
            level = _Level(options.max_zoom + 1, np.arange(n), xy)
        else:
            self._xy = []
            level = _Level(options.max_zoom + 1, np.arange(0), np.empty((0, 2)))

        for zoom in range(options.max_zoom, options.min_zoom - 1, -1):
            level = self._cluster(level, zoom)
            self._levels[zoom] = level
            nodes_per_zoom[zoom] = len(level.node_ids)
            clusters_per_zoom[zoom] = int(np.count_nonzero(level.node_ids >= n))

        self._results: List[ClusterResult] = [Leaf(p) for p in points]
        self._results.extend(self._make_cluster(i) for i in range(n, len(self._aggregates)))

        top = self._levels[options.min_zoom].node_ids
        self.diagnostics = IndexDiagnostics(
            generation=generation,
            num_points=n,
            num_skipped=num_skipped,
            min_zoom=options.min_zoom,
            max_zoom=options.max_zoom,
            nodes_per_zoom=MappingProxyType(nodes_per_zoom),
            clusters_per_zoom=MappingProxyType(clusters_per_zoom),
            largest_cluster=max((self._aggregates[i].count for i in top if i >= n), default=0),
            build_time_ms=(time.perf_counter() - started) * 1000.0,
        )

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def build(
        cls,
        points: Iterable[GeoPoint],
        options: Optional[ClusterOptions] = None,
    ) -> "SpatialIndex":
        """
        Build an index over ``points`` (in the given order).

        Points missing a coordinate should be filtered out by the caller;
        any that slip through are skipped with a warning.

        Args:
            points: Points to index
            options: Clustering parameters (defaults if None)

        Returns:
            A new, immutable :class:`SpatialIndex` with a fresh generation
        """
        options = options or ClusterOptions()
        started = time.perf_counter()

        accepted: List[GeoPoint] = []
        skipped = 0
        seen_ids = set()
        for point in points:
            if not point.has_coordinates:
                skipped += 1
                continue
            if point.id in seen_ids:
                logger.warning(f"Duplicate point id '{point.id}' in cluster input")
            seen_ids.add(point.id)
            accepted.append(point)

        if skipped:
            logger.warning(f"Skipped {skipped} point(s) without coordinates while building cluster index")

        index = cls(tuple(accepted), options, next(_generations), num_skipped=skipped, started=started)

        logger.debug(
            f"Built cluster index generation {index.generation}: "
            f"{len(accepted)} points, zooms {options.min_zoom}-{options.max_zoom}, "
            f"{index.diagnostics.nodes_per_zoom.get(options.min_zoom, 0)} nodes at zoom {options.min_zoom}, "
            f"{index.diagnostics.build_time_ms:.1f} ms"
        )
        return index

    def _cluster(self, previous: _Level, zoom: int) -> _Level:
        """Merge ``previous`` level nodes lying within the radius at ``zoom``."""
        count = len(previous.node_ids)
        if count == 0:
            return _Level(zoom, previous.node_ids, previous.xy)

        radius = zoom_radius(self.options.radius, self.options.extent, zoom)
        neighborhoods = KDTree(previous.xy).query_radius(previous.xy, r=radius)

        visited = np.zeros(count, dtype=bool)
        node_ids: List[int] = []
        xy: List[Tuple[float, float]] = []

        for i in range(count):
            if visited[i]:
                continue
            visited[i] = True

            members = [i]
            members.extend(int(j) for j in np.sort(neighborhoods[i]) if not visited[j])
            member_ids = [int(previous.node_ids[j]) for j in members]
            total = sum(self._aggregates[node].count for node in member_ids)

            if len(members) > 1 and total >= self.options.min_points:
                visited[members] = True
                node_ids.append(self._add_cluster(member_ids, zoom))
            else:
                node_ids.append(member_ids[0])
            xy.append(self._xy[node_ids[-1]])

        return _Level(zoom, np.asarray(node_ids, dtype=int), np.asarray(xy, dtype=float))

    def _add_cluster(self, member_ids: List[int], zoom: int) -> int:
        aggregate = merge_all(self._aggregates[node] for node in member_ids)
        node_id = len(self._aggregates)
        self._aggregates.append(aggregate)
        self._children.append(tuple(member_ids))
        self._origin_zoom.append(zoom)
        self._xy.append((lng_x(aggregate.lng), lat_y(aggregate.lat)))
        return node_id

    def _make_cluster(self, node_id: int) -> Cluster:
        aggregate = self._aggregates[node_id]
        vibes = {vibe: n for vibe, n in aggregate.vibe_counts().items() if n}
        return Cluster(
            id=node_id,
            lng=aggregate.lng,
            lat=aggregate.lat,
            count=aggregate.count,
            vibes=MappingProxyType(vibes),
            handle=ClusterHandle(self.generation, node_id),
            zoom=self._origin_zoom[node_id],
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def points(self) -> Tuple[GeoPoint, ...]:
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def clamp_zoom(self, zoom: float) -> int:
        """Floor ``zoom`` and clamp it into ``[min_zoom, max_zoom]``."""
        if zoom is None or math.isnan(float(zoom)):
            return self.options.min_zoom
        if math.isinf(float(zoom)):
            clamped = self.options.max_zoom if zoom > 0 else self.options.min_zoom
            logger.debug(f"Zoom {zoom} clamped to {clamped}")
            return clamped
        clamped = min(max(int(math.floor(zoom)), self.options.min_zoom), self.options.max_zoom)
        if clamped != zoom:
            logger.debug(f"Zoom {zoom} clamped to {clamped}")
        return clamped

    def query(self, viewport: Viewport) -> List[ClusterResult]:
        """Clusters and leaves visible in ``viewport``."""
        return self.get_clusters(viewport.bbox, viewport.zoom)

    def get_clusters(
        self,
        bbox: Sequence[float],
        zoom: float,
    ) -> List[ClusterResult]:
        """
        Clusters and leaves at ``zoom`` whose position falls in ``bbox``.

        Args:
            bbox: ``(west, south, east, north)`` in degrees
            zoom: Map zoom, floored and clamped into the indexed range

        Returns:
            Results in index order; points on the bbox edge are included
        """
        level = self._levels.get(self.clamp_zoom(zoom))
        if level is None or len(level.node_ids) == 0:
            return []

        mask = np.zeros(len(level.node_ids), dtype=bool)
        for min_x, min_y, max_x, max_y in self._ranges(bbox):
            mask |= (
                (level.xy[:, 0] >= min_x)
                & (level.xy[:, 0] <= max_x)
                & (level.xy[:, 1] >= min_y)
                & (level.xy[:, 1] <= max_y)
            )
        return [self._results[int(node)] for node in level.node_ids[mask]]

    def _ranges(self, bbox: Sequence[float]) -> List[Tuple[float, float, float, float]]:
        """Projected ``(min_x, min_y, max_x, max_y)`` ranges covering the padded bbox."""
        west, south, east, north = (float(v) for v in bbox)
        lng_span = east - west if east >= west else east + 360.0 - west
        lng_pad = lng_span * self.options.padding
        lat_pad = abs(north - south) * self.options.padding

        west -= lng_pad
        east += lng_pad
        min_lat = max(-90.0, min(south, north) - lat_pad)
        max_lat = min(90.0, max(south, north) + lat_pad)
        top, bottom = lat_y(max_lat), lat_y(min_lat)

        if lng_span + 2 * lng_pad >= 360.0:
            return [(0.0, top, 1.0, bottom)]

        min_lng = (west + 180.0) % 360.0 - 180.0
        max_lng = 180.0 if east == 180.0 else (east + 180.0) % 360.0 - 180.0

        if min_lng > max_lng:
            return [
                (lng_x(min_lng), top, 1.0, bottom),
                (0.0, top, lng_x(max_lng), bottom),
            ]
        return [(lng_x(min_lng), top, lng_x(max_lng), bottom)]

    # ------------------------------------------------------------------
    # Cluster expansion
    # ------------------------------------------------------------------

    def _cluster_node(self, handle: ClusterHandle) -> int:
        if not isinstance(handle, ClusterHandle) or handle.generation != self.generation:
            raise InvalidHandle(handle)
        node = handle.node_id
        if node < len(self._points) or node >= len(self._aggregates):
            raise InvalidHandle(handle, "no cluster with this id in the index")
        return node

    def get_children(self, handle: ClusterHandle) -> List[ClusterResult]:
        """
        Immediate children of a cluster, one zoom level finer.

        Raises:
            InvalidHandle: If the handle is stale or unknown
        """
        node = self._cluster_node(handle)
        return [self._results[child] for child in self._children[node]]

    def get_leaves(
        self,
        handle: ClusterHandle,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[GeoPoint]:
        """
        Every original point below a cluster, in index order.

        Args:
            handle: Handle from a query against this index
            limit: Maximum number of points to return (None for all)
            offset: Number of leading points to skip

        Raises:
            InvalidHandle: If the handle is stale or unknown
        """
        node = self._cluster_node(handle)
        n = len(self._points)
        leaf_ids: List[int] = []
        stack = [node]
        while stack:
            current = stack.pop()
            if current < n:
                leaf_ids.append(current)
            else:
                stack.extend(self._children[current])

        leaf_ids.sort()
        end = None if limit is None else offset + limit
        return [self._points[i] for i in leaf_ids[offset:end]]

    def get_cluster_expansion_zoom(self, handle: ClusterHandle) -> int:
        """
        Zoom at which a cluster breaks apart, capped at ``max_zoom``.

        Raises:
            InvalidHandle: If the handle is stale or unknown
        """
        node = self._cluster_node(handle)
        return min(self._origin_zoom[node] + 1, self.options.max_zoom)


def build_index(
    points: Iterable[GeoPoint],
    options: Optional[ClusterOptions] = None,
) -> SpatialIndex:
    """Convenience wrapper around :meth:`SpatialIndex.build`."""
    return SpatialIndex.build(points, options)


__all__ = [
    "SpatialIndex",
    "IndexDiagnostics",
    "build_index",
]
