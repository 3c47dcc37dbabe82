import numpy as np
import pytest

from clustering.centroids import compute_centroids
from clustering.models import InternalInvariantViolation, InvalidInputError, Point


def test_centroid_is_arithmetic_mean():
    points = [Point(id=0, lat=36.80, lng=-76.10), Point(id=1, lat=36.82, lng=-76.12)]
    (centroid,) = compute_centroids(points, np.array([1, 1]))
    assert centroid.cluster_id == 1
    assert centroid.lat == pytest.approx(36.81)
    assert centroid.lng == pytest.approx(-76.11)
    assert centroid.size == 2


def test_centroids_ordered_by_cluster_id():
    points = [
        Point(id=0, lat=10.0, lng=10.0),
        Point(id=1, lat=20.0, lng=20.0),
        Point(id=2, lat=12.0, lng=14.0),
    ]
    centroids = compute_centroids(points, [2, 1, 2])
    assert [c.cluster_id for c in centroids] == [1, 2]
    assert (centroids[0].lat, centroids[0].lng) == (20.0, 20.0)
    assert centroids[1].lat == pytest.approx(11.0)
    assert centroids[1].lng == pytest.approx(12.0)


def test_gap_in_cluster_ids_is_invariant_violation():
    points = [Point(id=0, lat=0.0, lng=0.0), Point(id=1, lat=1.0, lng=1.0)]
    with pytest.raises(InternalInvariantViolation) as excinfo:
        compute_centroids(points, [1, 3])
    assert excinfo.value.indices == [2]


def test_zero_cluster_id_is_invariant_violation():
    points = [Point(id=0, lat=0.0, lng=0.0)]
    with pytest.raises(InternalInvariantViolation):
        compute_centroids(points, [0])


def test_length_mismatch_raises():
    with pytest.raises(InvalidInputError):
        compute_centroids([Point(id=0, lat=0.0, lng=0.0)], [1, 1])
