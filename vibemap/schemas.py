"""Pydantic models for destination input records and map output features."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from .vibes import VibeCategory, parse_vibe


class GeoLoc(BaseModel):
    """Search-index style geolocation block."""

    lat: Optional[float] = Field(default=None, description="Latitude in decimal degrees")
    lng: Optional[float] = Field(default=None, description="Longitude in decimal degrees")


class Destination(BaseModel):
    """A destination record as delivered by the search layer."""

    object_id: str = Field(..., alias="objectID")
    city: Optional[str] = None
    country: Optional[str] = None
    geoloc: Optional[GeoLoc] = Field(default=None, alias="_geoloc")
    lat: Optional[float] = None
    lng: Optional[float] = None
    primary_vibe: Optional[VibeCategory] = None
    vibe_tags: List[str] = Field(default_factory=list)
    adventure_score: Optional[float] = None
    culture_score: Optional[float] = None
    nature_score: Optional[float] = None
    beach_score: Optional[float] = None
    nightlife_score: Optional[float] = None

    model_config = {"populate_by_name": True, "extra": "allow"}

    @field_validator("primary_vibe", mode="before")
    @classmethod
    def _coerce_vibe(cls, value):
        if value is None or value == "":
            return None
        return parse_vibe(value)

    @property
    def latitude(self) -> Optional[float]:
        if self.geoloc is not None and self.geoloc.lat is not None:
            return self.geoloc.lat
        return self.lat

    @property
    def longitude(self) -> Optional[float]:
        if self.geoloc is not None and self.geoloc.lng is not None:
            return self.geoloc.lng
        return self.lng


class PointGeometry(BaseModel):
    type: Literal["Point"] = "Point"
    coordinates: List[float]


class ClusterProperties(BaseModel):
    cluster: Literal[True] = True
    cluster_id: int
    point_count: int
    point_count_abbreviated: str
    vibes: Dict[str, int]
    dominant_vibe: str
    marker_size: int


class LeafProperties(BaseModel):
    cluster: Literal[False] = False
    city_id: str = Field(..., alias="cityId")
    vibe: str

    model_config = {"populate_by_name": True}


class MapFeature(BaseModel):
    """GeoJSON Feature for one marker (cluster badge or single destination)."""

    type: Literal["Feature"] = "Feature"
    id: Union[int, str]
    properties: Union[ClusterProperties, LeafProperties]
    geometry: PointGeometry


class FeatureCollection(BaseModel):
    type: Literal["FeatureCollection"] = "FeatureCollection"
    features: List[MapFeature] = Field(default_factory=list)


__all__ = [
    "GeoLoc",
    "Destination",
    "PointGeometry",
    "ClusterProperties",
    "LeafProperties",
    "MapFeature",
    "FeatureCollection",
]
