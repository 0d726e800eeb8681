"""
Current-build holder for map clustering.

A map layer feeds :class:`ClusterEngine` the destinations on screen every time
they change and queries it on every viewport change. The engine rebuilds its
:class:`~vibemap.spatial.index.SpatialIndex` only when the point set actually
changes, and rejects handles that were issued by an earlier build.
"""

from __future__ import annotations

import logging
from typing import Any, Hashable, Iterable, List, Mapping, Optional, Sequence, Tuple

from ..exceptions import InvalidHandle
from .index import SpatialIndex
from .models import ClusterHandle, ClusterOptions, ClusterResult, GeoPoint, Viewport

logger = logging.getLogger(__name__)


def _fingerprint(points: Sequence[GeoPoint]) -> Tuple[Hashable, ...]:
    return tuple((p.id, p.lng, p.lat, p.category) for p in points)


class ClusterEngine:
    """
    Keeps the index for the most recently loaded point set.

    Example:
        >>> engine = ClusterEngine()
        >>> engine.load(points)
        >>> results = engine.query(Viewport(-10, 35, 30, 60, zoom=4))
    """

    def __init__(self, options: Optional[ClusterOptions] = None):
        self.options = options or ClusterOptions()
        self._index: Optional[SpatialIndex] = None
        self._source: Optional[Any] = None
        self._fingerprint: Optional[Tuple[Hashable, ...]] = None

    @classmethod
    def from_profile(cls, profile: Mapping[str, Any]) -> "ClusterEngine":
        """Create an engine from a loaded YAML profile."""
        return cls(ClusterOptions.from_profile(profile))

    @property
    def index(self) -> Optional[SpatialIndex]:
        return self._index

    @property
    def generation(self) -> Optional[int]:
        return self._index.generation if self._index is not None else None

    def load(self, points: Iterable[GeoPoint]) -> SpatialIndex:
        """
        Make ``points`` the current point set, rebuilding if it changed.

        Passing the same sequence object again with unchanged contents keeps
        the current index and its handles. A different object, or the same
        one mutated in place, triggers a rebuild.
        """
        materialized = list(points)
        fingerprint = _fingerprint(materialized)
        if self._index is not None and points is self._source and fingerprint == self._fingerprint:
            return self._index

        previous = self.generation
        index = SpatialIndex.build(materialized, self.options)
        self._index = index
        self._source = points
        self._fingerprint = fingerprint
        if previous is not None:
            logger.debug(f"Point set changed; index rebuilt (generation {previous} -> {index.generation})")
        return index

    def query(self, viewport: Viewport) -> List[ClusterResult]:
        """Clusters and leaves in ``viewport``; empty before the first load."""
        if self._index is None:
            return []
        return self._index.query(viewport)

    def _current(self, handle: ClusterHandle) -> SpatialIndex:
        if self._index is None:
            raise InvalidHandle(handle, "no index has been built yet")
        return self._index

    def get_leaves(
        self,
        handle: ClusterHandle,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[GeoPoint]:
        return self._current(handle).get_leaves(handle, limit=limit, offset=offset)

    def get_children(self, handle: ClusterHandle) -> List[ClusterResult]:
        return self._current(handle).get_children(handle)

    def expansion_zoom(self, handle: ClusterHandle) -> int:
        return self._current(handle).get_cluster_expansion_zoom(handle)
