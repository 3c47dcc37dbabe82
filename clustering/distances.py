"""Pairwise geodesic distance matrix for a point set."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np
from scipy.spatial.distance import squareform

from clustering.models import InvalidInputError, Point, validate_point
from distance_metrics import EARTH_RADIUS_M, haversine_to_many


def pairwise_distance_matrix(points: Sequence[Point], radius_m: float = EARTH_RADIUS_M) -> np.ndarray:
    """
    Compute the symmetric (n, n) haversine distance matrix in meters.

    Only the n*(n-1)/2 upper-triangle distances are computed; the lower
    triangle mirrors them and the diagonal is zero. The returned array is
    read-only.

    Cost is O(n^2) in both time and memory (8 * n^2 bytes). Callers are
    expected to partition large inputs (e.g. by year and quarter) before
    calling this; no partitioning happens here.
    """

    if points is None or len(points) == 0:
        raise InvalidInputError("No points provided for distance computation.")

    for point in points:
        validate_point(point)

    n = len(points)
    logging.debug("Building %dx%d distance matrix (~%.1f MiB)", n, n, n * n * 8 / 2**20)
    lats = np.array([p.lat for p in points], dtype=float)
    lngs = np.array([p.lng for p in points], dtype=float)

    mat = np.zeros((n, n), dtype=float)
    for i in range(n - 1):
        row = haversine_to_many(lats[i], lngs[i], lats[i + 1 :], lngs[i + 1 :], radius_m=radius_m)
        mat[i, i + 1 :] = row
        mat[i + 1 :, i] = row

    mat.setflags(write=False)
    return mat


def condensed_distances(matrix: np.ndarray) -> np.ndarray:
    """Return the condensed (upper-triangle) form used by scipy.cluster.hierarchy."""

    return squareform(np.asarray(matrix, dtype=float), checks=False)
