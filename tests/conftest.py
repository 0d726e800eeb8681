"""
Pytest configuration and shared fixtures for vibemap tests.

This file provides:
- The four-point reference scenario (two spatial pairs, beach + nature)
- A larger deterministic scatter of points across the map
- Destination records shaped like the search layer's output
"""

from typing import Any, Dict, List

import numpy as np
import pandas as pd
import pytest

from vibemap.spatial import ClusterOptions, GeoPoint, SpatialIndex, build_index
from vibemap.vibes import CANONICAL_VIBE_ORDER, VibeCategory


# ==============================================================================
# Points
# ==============================================================================

@pytest.fixture
def scenario_points() -> List[GeoPoint]:
    """Two tight pairs far apart; each pair holds one beach and one nature point."""
    return [
        GeoPoint("p1", 0.0, 0.0, VibeCategory.BEACH),
        GeoPoint("p2", 0.001, 0.001, VibeCategory.NATURE),
        GeoPoint("p3", 50.0, 50.0, VibeCategory.BEACH),
        GeoPoint("p4", 50.001, 50.001, VibeCategory.NATURE),
    ]


@pytest.fixture
def scenario_index(scenario_points) -> SpatialIndex:
    return build_index(scenario_points, ClusterOptions(radius=75, max_zoom=16))


@pytest.fixture
def scattered_points() -> List[GeoPoint]:
    """300 points: dense blobs around a few cities plus uniform noise."""
    rng = np.random.default_rng(42)
    centers = [(2.35, 48.85), (139.69, 35.68), (-74.0, 40.71), (151.2, -33.87)]
    points = []
    for i in range(300):
        if i % 3 == 0:
            lng, lat = rng.uniform(-179, 179), rng.uniform(-80, 80)
        else:
            cx, cy = centers[i % len(centers)]
            lng, lat = cx + rng.normal(0, 0.5), cy + rng.normal(0, 0.5)
        vibe = CANONICAL_VIBE_ORDER[int(rng.integers(len(CANONICAL_VIBE_ORDER)))]
        points.append(GeoPoint(f"pt_{i}", float(lng), float(lat), vibe, payload={"n": i}))
    return points


@pytest.fixture
def scattered_index(scattered_points) -> SpatialIndex:
    return build_index(scattered_points)


# ==============================================================================
# Destination records
# ==============================================================================

@pytest.fixture
def sample_destinations() -> List[Dict[str, Any]]:
    """Destination records as returned by the search layer."""
    return [
        {
            "objectID": "paris-france",
            "city": "Paris",
            "country": "France",
            "_geoloc": {"lat": 48.8566, "lng": 2.3522},
            "culture_score": 10,
            "adventure_score": 4,
            "nature_score": 5,
            "beach_score": 1,
            "nightlife_score": 8,
            "vibe_tags": ["romantic", "museums"],
        },
        {
            "objectID": "bali-indonesia",
            "city": "Bali",
            "country": "Indonesia",
            "_geoloc": {"lat": -8.3405, "lng": 115.092},
            "culture_score": 7,
            "adventure_score": 7,
            "nature_score": 8,
            "beach_score": 10,
            "nightlife_score": 6,
            "vibe_tags": ["tropical", "surfing"],
        },
        {
            "objectID": "queenstown-new-zealand",
            "city": "Queenstown",
            "country": "New Zealand",
            "_geoloc": {"lat": -45.0312, "lng": 168.6626},
            "culture_score": 4,
            "adventure_score": 10,
            "nature_score": 9,
            "beach_score": 2,
            "nightlife_score": 5,
            "vibe_tags": ["bungee", "hiking"],
            "primary_vibe": "adventure",
        },
        {
            "objectID": "atlantis",
            "city": "Atlantis",
            "country": "Unknown",
            "culture_score": 9,
            "adventure_score": 9,
            "nature_score": 9,
            "beach_score": 9,
            "nightlife_score": 9,
            "vibe_tags": [],
        },
    ]


@pytest.fixture
def sample_destinations_df(sample_destinations) -> pd.DataFrame:
    """Flat DataFrame variant with top-level lat/lng columns."""
    rows = []
    for record in sample_destinations:
        row = {k: v for k, v in record.items() if k != "_geoloc"}
        geoloc = record.get("_geoloc") or {}
        row["lat"] = geoloc.get("lat", np.nan)
        row["lng"] = geoloc.get("lng", np.nan)
        rows.append(row)
    return pd.DataFrame(rows)

