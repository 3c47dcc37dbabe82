"""Cluster quality metrics on the precomputed geodesic matrix."""

from __future__ import annotations

import numpy as np
from scipy.cluster.hierarchy import cophenet
from sklearn.metrics import silhouette_score

from clustering.distances import condensed_distances


def compute_internal_metrics(D, labels, linkage=None) -> dict:
    labels = np.asarray(labels)
    unique, counts = np.unique(labels, return_counts=True)
    metrics = {
        "n_points": int(len(labels)),
        "n_clusters": int(len(unique)),
        "singleton_frac": float(np.mean(counts == 1)) if len(counts) else 0.0,
        "largest_cluster": int(counts.max()) if len(counts) else 0,
    }

    # How faithfully the dendrogram heights preserve the pairwise distances.
    if linkage is not None and len(labels) >= 3:
        corr, _ = cophenet(np.asarray(linkage, dtype=float), condensed_distances(D))
        metrics["cophenetic_corr"] = float(corr)
    else:
        metrics["cophenetic_corr"] = float("nan")

    # silhouette_score needs 2 <= n_clusters <= n_samples - 1
    if len(unique) < 2 or len(unique) >= len(labels):
        metrics["silhouette"] = float("nan")
        metrics["reason"] = "<2 clusters" if len(unique) < 2 else "all singletons"
        return metrics

    metrics["silhouette"] = float(silhouette_score(np.asarray(D, dtype=float), labels, metric="precomputed"))
    return metrics
