"""
Integration tests for the map clustering pipeline.

These tests validate the complete flow from destination records to map
features, the way a map layer drives it on viewport changes.
"""

from collections import Counter

import numpy as np
import pytest

from vibemap.spatial import (
    Cluster,
    ClusterEngine,
    Leaf,
    Viewport,
    points_from_destinations,
)
from vibemap.tools import ConfigLoader
from vibemap.vibes import VibeCategory


def _european_destinations(n: int = 120):
    rng = np.random.default_rng(7)
    vibes = ["cultural", "beach", "nightlife", "nature"]
    records = []
    for i in range(n):
        records.append(
            {
                "objectID": f"eu-{i}",
                "city": f"City {i}",
                "_geoloc": {"lat": float(rng.uniform(36, 60)), "lng": float(rng.uniform(-9, 30))},
                "primary_vibe": vibes[i % len(vibes)],
            }
        )
    # Missing coordinates are filtered before indexing
    records.append({"objectID": "nowhere", "city": "Nowhere", "primary_vibe": "nature"})
    return records


@pytest.mark.integration
class TestEndToEndPipeline:
    """Records → points → engine → viewport queries → features."""

    def test_zoom_in_breaks_clusters_apart(self):
        engine = ClusterEngine.from_profile(ConfigLoader.load_cluster_profile("default"))
        engine.load(points_from_destinations(_european_destinations()))
        europe = dict(west=-10, south=35, east=31, north=61)

        counts = []
        for zoom in (0, 3, 6, 9, 12):
            results = engine.query(Viewport(zoom=zoom, **europe))
            assert sum(r.count for r in results) == 120
            counts.append(len(results))

        assert counts == sorted(counts)
        assert counts[0] < counts[-1]

    def test_click_cluster_and_expand(self):
        """Expansion zoom of a clicked cluster reveals more markers."""
        engine = ClusterEngine()
        engine.load(points_from_destinations(_european_destinations()))

        results = engine.query(Viewport(-10, 35, 31, 61, zoom=2))
        cluster = max((r for r in results if isinstance(r, Cluster)), key=lambda c: c.count)
        zoom = engine.expansion_zoom(cluster.handle)
        assert zoom > 2

        leaves = engine.get_leaves(cluster.handle)
        assert len(leaves) == cluster.count
        assert Counter(p.category for p in leaves) == Counter(cluster.vibes)
        assert all(p.payload["objectID"] == p.id for p in leaves)

        west = min(p.lng for p in leaves)
        east = max(p.lng for p in leaves)
        south = min(p.lat for p in leaves)
        north = max(p.lat for p in leaves)
        expanded = engine.query(Viewport(west, south, east, north, zoom=zoom))
        covered = [r for r in expanded if isinstance(r, Leaf) or r.count < cluster.count]
        assert len(covered) >= 2

    def test_features_for_rendering(self, sample_destinations):
        engine = ClusterEngine()
        engine.load(points_from_destinations(sample_destinations))

        features = [r.to_feature().model_dump(by_alias=True) for r in engine.query(Viewport.world(zoom=1))]

        ids = {f["properties"].get("cityId") for f in features if not f["properties"]["cluster"]}
        assert ids == {"paris-france", "bali-indonesia", "queenstown-new-zealand"}

    def test_dominant_vibe_colors_cluster(self):
        engine = ClusterEngine()
        engine.load(
            points_from_destinations(
                [
                    {"objectID": "a", "lat": 0.0, "lng": 0.0, "primary_vibe": "nightlife"},
                    {"objectID": "b", "lat": 0.01, "lng": 0.01, "primary_vibe": "nightlife"},
                    {"objectID": "c", "lat": 0.02, "lng": 0.0, "primary_vibe": "nature"},
                ]
            )
        )

        (cluster,) = engine.query(Viewport.world(zoom=0))

        assert cluster.count == 3
        assert cluster.dominant_vibe == VibeCategory.NIGHTLIFE
