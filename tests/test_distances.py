import numpy as np
import pytest

from clustering.distances import condensed_distances, pairwise_distance_matrix
from clustering.models import InvalidInputError, Point
from distance_metrics import haversine_distance


def _points():
    coords = [(36.80, -76.10), (36.801, -76.101), (36.90, -76.20), (36.901, -76.201)]
    return [Point(id=i, lat=lat, lng=lng) for i, (lat, lng) in enumerate(coords)]


def test_distance_matrix_symmetry():
    D = pairwise_distance_matrix(_points())
    assert D.shape == (4, 4)
    assert np.allclose(D, D.T)
    assert np.all(np.diag(D) == 0.0)
    assert (D >= 0).all()


def test_distance_matrix_matches_pairwise_haversine():
    points = _points()
    D = pairwise_distance_matrix(points)
    for i, a in enumerate(points):
        for j, b in enumerate(points):
            assert D[i, j] == pytest.approx(haversine_distance(a, b), abs=1e-6)


def test_distance_matrix_is_read_only():
    D = pairwise_distance_matrix(_points())
    with pytest.raises(ValueError):
        D[0, 1] = 1.0


def test_single_point_matrix():
    D = pairwise_distance_matrix([Point(id=0, lat=1.0, lng=2.0)])
    assert D.shape == (1, 1)
    assert D[0, 0] == 0.0


def test_empty_points_raise():
    with pytest.raises(InvalidInputError):
        pairwise_distance_matrix([])


def test_out_of_range_point_raises():
    with pytest.raises(InvalidInputError):
        pairwise_distance_matrix([Point(id=0, lat=91.0, lng=0.0), Point(id=1, lat=0.0, lng=0.0)])


def test_condensed_form_length():
    D = pairwise_distance_matrix(_points())
    condensed = condensed_distances(D)
    assert condensed.shape == (6,)
    assert condensed[0] == pytest.approx(D[0, 1])
