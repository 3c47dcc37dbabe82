import numpy as np
import pytest

from clustering.models import DEFAULT_THRESHOLD_M, InvalidInputError, Point
from clustering.session import ClusterSession

PAIRS = [(36.80, -76.10), (36.801, -76.101), (36.90, -76.20), (36.901, -76.201)]


def _points(coords=PAIRS):
    return [Point(id=100 + i, lat=lat, lng=lng) for i, (lat, lng) in enumerate(coords)]


def test_two_pairs_form_two_clusters():
    result = ClusterSession(threshold_m=1000.0).run(_points())
    assert result.assignment.tolist() == [1, 1, 2, 2]
    assert result.n_clusters == 2
    first, second = result.centroids
    assert first.lat == pytest.approx(36.8005)
    assert first.lng == pytest.approx(-76.1005)
    assert second.lat == pytest.approx(36.9005)
    assert second.lng == pytest.approx(-76.2005)


def test_default_threshold_merges_nearby_pairs():
    # The pairs are ~14 km apart, beyond the 8 mile default.
    session = ClusterSession()
    assert session.threshold_m == DEFAULT_THRESHOLD_M
    assert session.run(_points()).n_clusters == 2
    assert ClusterSession(threshold_m=20000.0).run(_points()).n_clusters == 1


def test_runs_are_deterministic():
    rng = np.random.default_rng(8)
    coords = list(zip(rng.uniform(36.7, 37.0, 50), rng.uniform(-76.4, -76.0, 50)))
    session = ClusterSession(threshold_m=3000.0)
    first = session.run(_points(coords))
    second = session.run(_points(coords))
    assert first.assignment.tolist() == second.assignment.tolist()
    assert first.centroids == second.centroids


def test_single_point():
    result = ClusterSession(threshold_m=100.0).run([Point(id=1, lat=10.0, lng=20.0)])
    assert result.assignment.tolist() == [1]
    assert (result.centroids[0].lat, result.centroids[0].lng) == (10.0, 20.0)
    assert result.max_height == 0.0


def test_labels_are_attached():
    result = ClusterSession(threshold_m=1000.0).run(_points(), labels={"year": 2019, "quarter": 2})
    assert result.labels == {"year": 2019, "quarter": 2}
    assert result.distance_matrix.shape == (4, 4)


def test_run_partitions():
    session = ClusterSession(threshold_m=1000.0)
    results = session.run_partitions(
        [
            ({"year": 2019, "quarter": 1}, _points()),
            ({"year": 2019, "quarter": 2}, _points(PAIRS[:2])),
        ]
    )
    assert list(results) == [(2019, 1), (2019, 2)]
    assert results[(2019, 1)].n_clusters == 2
    assert results[(2019, 2)].n_clusters == 1


def test_duplicate_partition_labels_raise():
    session = ClusterSession(threshold_m=1000.0)
    with pytest.raises(InvalidInputError):
        session.run_partitions([({"year": 2019}, _points()), ({"year": 2019}, _points())])


@pytest.mark.parametrize("threshold", [0.0, -5.0, float("nan"), float("inf"), "far"])
def test_invalid_threshold_raises(threshold):
    with pytest.raises(InvalidInputError):
        ClusterSession(threshold_m=threshold)


def test_empty_points_raise():
    with pytest.raises(InvalidInputError):
        ClusterSession(threshold_m=1000.0).run([])


def test_out_of_range_points_raise():
    with pytest.raises(InvalidInputError):
        ClusterSession(threshold_m=1000.0).run([Point(id=0, lat=0.0, lng=200.0)])


def test_duplicate_ids_raise():
    with pytest.raises(InvalidInputError):
        ClusterSession(threshold_m=1000.0).run([Point(id=0, lat=0.0, lng=0.0), Point(id=0, lat=1.0, lng=1.0)])


def test_result_carries_linkage_export():
    result = ClusterSession(threshold_m=1000.0).run(_points())
    assert result.linkage.shape == (3, 4)
    assert result.linkage[-1, 2] == result.max_height
    assert result.linkage[-1, 3] == 4
