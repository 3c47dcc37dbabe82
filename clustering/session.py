"""One clustering run per time partition.

Composes the distance matrix, complete-linkage dendrogram, threshold cut and
centroid steps. A session holds only its threshold; every run keeps its state
local, so runs for different partitions are independent.
"""

from __future__ import annotations

import logging
from typing import Dict, Hashable, Iterable, Mapping, Sequence, Tuple

from clustering.centroids import compute_centroids
from clustering.cut import count_clusters, cut_tree
from clustering.distances import pairwise_distance_matrix
from clustering.hierarchy import complete_linkage, to_linkage_matrix
from clustering.models import (
    DEFAULT_THRESHOLD_M,
    ClusterResult,
    InternalInvariantViolation,
    InvalidInputError,
    Point,
    validate_point,
    validate_threshold,
)


def _validate_points(points: Sequence[Point]) -> None:
    if points is None or len(points) == 0:
        raise InvalidInputError("Cannot cluster an empty point set.")
    seen = set()
    for point in points:
        validate_point(point)
        if point.id in seen:
            raise InvalidInputError(f"Duplicate point id {point.id}.")
        seen.add(point.id)


class ClusterSession:
    """Cluster point sets at a fixed real-world distance threshold (meters)."""

    def __init__(self, threshold_m: float = DEFAULT_THRESHOLD_M) -> None:
        self.threshold_m = validate_threshold(threshold_m)

    def run(self, points: Sequence[Point], labels: Mapping[str, Hashable] | None = None) -> ClusterResult:
        """
        Cluster ``points`` and return assignments and centroids.

        ``labels`` (e.g. {"year": 2019, "quarter": 3}) are not used by the
        algorithm; they are attached to the result for downstream grouping.
        """

        _validate_points(points)
        matrix = pairwise_distance_matrix(points)
        root = complete_linkage(matrix)
        if root.size != len(points):
            raise InternalInvariantViolation(
                "ClusterSession.run", f"dendrogram has {root.size} leaves for {len(points)} points"
            )
        assignment = cut_tree(root, self.threshold_m, n_points=len(points))
        centroids = compute_centroids(points, assignment)
        if count_clusters(assignment) != len(centroids):
            raise InternalInvariantViolation(
                "ClusterSession.run", f"{count_clusters(assignment)} cluster ids but {len(centroids)} centroids"
            )
        logging.info(
            "Clustered %d points into %d clusters (threshold=%.0f m, labels=%s)",
            len(points),
            len(centroids),
            self.threshold_m,
            dict(labels or {}),
        )
        return ClusterResult(
            assignment=assignment,
            centroids=centroids,
            labels=dict(labels or {}),
            max_height=root.height,
            distance_matrix=matrix,
            linkage=to_linkage_matrix(root, len(points)),
        )

    def run_partitions(
        self,
        partitions: Iterable[Tuple[Mapping[str, Hashable], Sequence[Point]]],
    ) -> Dict[Tuple, ClusterResult]:
        """Run one session per (labels, points) pair, keyed by the label values."""

        results: Dict[Tuple, ClusterResult] = {}
        for labels, points in partitions:
            key = tuple(labels.values())
            if key in results:
                raise InvalidInputError(f"Duplicate partition labels {dict(labels)}.")
            results[key] = self.run(points, labels=labels)
        return results
