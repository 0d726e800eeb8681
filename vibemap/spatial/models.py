"""Value types shared by the clustering index and its callers."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Union

from ..schemas import ClusterProperties, LeafProperties, MapFeature, PointGeometry
from ..vibes import VibeCategory, parse_vibe
from .aggregation import cluster_marker_size, dominant_vibe


@dataclass(frozen=True)
class GeoPoint:
    """A geolocated destination tagged with its vibe."""

    id: str
    lng: float
    lat: float
    category: VibeCategory
    payload: Any = field(default=None, compare=False, hash=False, repr=False)

    def __post_init__(self):
        object.__setattr__(self, "category", parse_vibe(self.category))

    @property
    def has_coordinates(self) -> bool:
        """True when both coordinates are finite numbers."""
        try:
            return math.isfinite(float(self.lng)) and math.isfinite(float(self.lat))
        except (TypeError, ValueError):
            return False


@dataclass(frozen=True)
class Viewport:
    """Bounding box in degrees plus a map zoom level."""

    west: float
    south: float
    east: float
    north: float
    zoom: float = 0

    @classmethod
    def world(cls, zoom: float = 0) -> "Viewport":
        return cls(-180.0, -90.0, 180.0, 90.0, zoom)

    @property
    def bbox(self):
        return (self.west, self.south, self.east, self.north)


@dataclass(frozen=True)
class ClusterOptions:
    """
    Clustering parameters.

    Attributes:
        radius: Merge radius in pixels of an ``extent``-pixel tile
        max_zoom: Finest zoom level that is clustered
        min_zoom: Coarsest zoom level that is clustered
        extent: Tile size in pixels, the unit ``radius`` is measured in
        padding: Fraction of the viewport span added on every side of a query
        min_points: Smallest group that forms a cluster
    """
    radius: float = 75.0
    max_zoom: int = 16
    min_zoom: int = 0
    extent: int = 256
    padding: float = 0.05
    min_points: int = 2

    def __post_init__(self):
        if self.radius <= 0:
            raise ValueError(f"radius must be positive, got {self.radius}")
        if self.extent <= 0:
            raise ValueError(f"extent must be positive, got {self.extent}")
        if self.min_zoom < 0 or self.min_zoom > self.max_zoom:
            raise ValueError(
                f"zoom range must satisfy 0 <= min_zoom <= max_zoom, "
                f"got min_zoom={self.min_zoom}, max_zoom={self.max_zoom}"
            )
        if self.padding < 0:
            raise ValueError(f"padding must be non-negative, got {self.padding}")
        if self.min_points < 2:
            raise ValueError(f"min_points must be at least 2, got {self.min_points}")

    @classmethod
    def from_profile(cls, profile: Mapping[str, Any]) -> "ClusterOptions":
        """
        Build options from a loaded YAML profile.

        Reads the ``clustering`` section when present, otherwise the mapping
        itself. Unknown keys are ignored.
        """
        section = profile.get("clustering", profile) or {}
        known = {name: section[name] for name in cls.__dataclass_fields__ if name in section}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass(frozen=True)
class ClusterHandle:
    """Opaque reference to a cluster, valid for one index build only."""

    generation: int
    node_id: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _abbreviate(count: int) -> str:
    if count >= 10000:
        return f"{_round_half_up(count / 1000)}k"
    if count >= 1000:
        whole, tenths = divmod(_round_half_up(count / 100), 10)
        return f"{whole}.{tenths}k" if tenths else f"{whole}k"
    return str(count)


@dataclass(frozen=True)
class Cluster:
    """Several nearby points collapsed into one marker at a zoom level."""

    id: int
    lng: float
    lat: float
    count: int
    vibes: Mapping[VibeCategory, int] = field(hash=False)
    handle: ClusterHandle
    zoom: int

    @property
    def dominant_vibe(self) -> VibeCategory:
        return dominant_vibe(self.vibes)

    @property
    def marker_size(self) -> int:
        return cluster_marker_size(self.count)

    def to_feature(self) -> MapFeature:
        """GeoJSON feature, as consumed by the map marker layer."""
        return MapFeature(
            id=self.id,
            properties=ClusterProperties(
                cluster_id=self.id,
                point_count=self.count,
                point_count_abbreviated=_abbreviate(self.count),
                vibes={vibe.value: n for vibe, n in self.vibes.items()},
                dominant_vibe=self.dominant_vibe.value,
                marker_size=self.marker_size,
            ),
            geometry=PointGeometry(coordinates=[self.lng, self.lat]),
        )


@dataclass(frozen=True)
class Leaf:
    """A single point rendered on its own."""

    point: GeoPoint

    @property
    def id(self) -> str:
        return self.point.id

    @property
    def lng(self) -> float:
        return self.point.lng

    @property
    def lat(self) -> float:
        return self.point.lat

    @property
    def count(self) -> int:
        return 1

    def to_feature(self) -> MapFeature:
        return MapFeature(
            id=self.point.id,
            properties=LeafProperties(city_id=self.point.id, vibe=self.point.category.value),
            geometry=PointGeometry(coordinates=[float(self.point.lng), float(self.point.lat)]),
        )


ClusterResult = Union[Cluster, Leaf]
