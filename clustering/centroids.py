"""Representative coordinate per cluster."""

from __future__ import annotations

from typing import List, Sequence

import numpy as np

from clustering.models import Centroid, InternalInvariantViolation, InvalidInputError, Point


def compute_centroids(points: Sequence[Point], assignment) -> List[Centroid]:
    """
    Arithmetic mean of member latitudes and longitudes for each cluster id.

    This is a planar average of spherical coordinates, not a geodesic
    centroid. The error grows with a cluster's spatial extent and near the
    antimeridian; at city scale (clusters a few miles across) it is small.
    Centroids are returned in ascending cluster-id order.
    """

    labels = np.asarray(assignment, dtype=int)
    if labels.ndim != 1 or len(labels) != len(points):
        raise InvalidInputError(f"Assignment length {labels.size} does not match {len(points)} points.")
    if len(labels) == 0:
        return []
    if labels.min() < 1:
        raise InternalInvariantViolation(
            "compute_centroids", "cluster ids must start at 1", np.flatnonzero(labels < 1).tolist()
        )

    lats = np.array([p.lat for p in points], dtype=float)
    lngs = np.array([p.lng for p in points], dtype=float)
    counts = np.bincount(labels)
    lat_sums = np.bincount(labels, weights=lats)
    lng_sums = np.bincount(labels, weights=lngs)

    empty = [cid for cid in range(1, len(counts)) if counts[cid] == 0]
    if empty:
        raise InternalInvariantViolation("compute_centroids", "cluster ids without members", empty)

    return [
        Centroid(
            cluster_id=cid,
            lat=float(lat_sums[cid] / counts[cid]),
            lng=float(lng_sums[cid] / counts[cid]),
            size=int(counts[cid]),
        )
        for cid in range(1, len(counts))
    ]
