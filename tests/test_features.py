"""
Unit Tests for map output features (vibemap/schemas.py, Cluster/Leaf.to_feature)
"""

from vibemap.schemas import FeatureCollection
from vibemap.spatial import Cluster, Leaf

from tests.helpers import WORLD_BBOX


def test_cluster_feature(scenario_index):
    cluster = scenario_index.get_clusters(WORLD_BBOX, 0)[0]

    feature = cluster.to_feature().model_dump(by_alias=True)

    assert feature["type"] == "Feature"
    assert feature["geometry"]["coordinates"] == [cluster.lng, cluster.lat]
    props = feature["properties"]
    assert props["cluster"] is True
    assert props["point_count"] == 4
    assert props["point_count_abbreviated"] == "4"
    assert props["vibes"] == {"beach": 2, "nature": 2}
    assert props["dominant_vibe"] == "beach"
    assert props["marker_size"] == 36


def test_leaf_feature(scenario_points):
    feature = Leaf(scenario_points[2]).to_feature().model_dump(by_alias=True)

    assert feature["id"] == "p3"
    assert feature["properties"] == {"cluster": False, "cityId": "p3", "vibe": "beach"}
    assert feature["geometry"] == {"type": "Point", "coordinates": [50.0, 50.0]}


def test_feature_collection(scattered_index):
    results = scattered_index.get_clusters(WORLD_BBOX, 3)

    collection = FeatureCollection(features=[r.to_feature() for r in results])
    dumped = collection.model_dump(by_alias=True)

    assert len(dumped["features"]) == len(results)
    clusters = [f for f in dumped["features"] if f["properties"]["cluster"]]
    assert len(clusters) == sum(isinstance(r, Cluster) for r in results)


def test_large_count_abbreviated():
    from vibemap.spatial.models import _abbreviate

    assert _abbreviate(999) == "999"
    assert _abbreviate(1000) == "1k"
    assert _abbreviate(1234) == "1.2k"
    assert _abbreviate(1250) == "1.3k"
    assert _abbreviate(9999) == "10k"
    assert _abbreviate(10500) == "11k"
    assert _abbreviate(25000) == "25k"
