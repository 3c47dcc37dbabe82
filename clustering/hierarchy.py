"""Complete-linkage agglomerative clustering over a precomputed distance matrix.

The merge loop keeps one upper-triangular working matrix of inter-cluster
distances. Each active cluster lives in the row/column of its smallest point
index; merging clusters a < b keeps the result in slot a and updates it with
the Lance-Williams rule for complete linkage,
d(k, a U b) = max(d(k, a), d(k, b)).
"""

from __future__ import annotations

import logging
from typing import List, Optional

import numpy as np

from clustering.models import InternalInvariantViolation, InvalidInputError, MergeNode


def _validate_matrix(matrix) -> np.ndarray:
    """Ensure matrix is a non-empty, square, symmetric, finite, non-negative array."""

    if matrix is None:
        raise InvalidInputError("Distance matrix is required.")
    D = np.asarray(matrix, dtype=float)
    if D.ndim != 2 or D.shape[0] != D.shape[1]:
        raise InvalidInputError(f"Distance matrix must be square, got shape {D.shape}.")
    if D.shape[0] == 0:
        raise InvalidInputError("Distance matrix is empty.")
    if not np.isfinite(D).all():
        raise InvalidInputError("Distance matrix contains non-finite values.")
    if (D < 0).any():
        raise InvalidInputError("Distance matrix contains negative distances.")
    if not np.allclose(D, D.T, rtol=1e-9, atol=1e-9):
        raise InvalidInputError("Distance matrix is not symmetric.")
    return D


def complete_linkage(matrix) -> MergeNode:
    """
    Build the complete-linkage dendrogram and return its root.

    At each step the pair of active clusters with the smallest complete-linkage
    distance is merged. Ties go to the lexicographically smallest pair of
    cluster keys (a, b), where a cluster's key is its smallest point index, so
    the result never depends on anything but the matrix. The merged node puts
    the lower-keyed cluster on the left. A single point returns its leaf.

    Runs in O(n^3) time and O(n^2) extra memory.
    """

    D = _validate_matrix(matrix)
    n = D.shape[0]
    clusters: List[Optional[MergeNode]] = [MergeNode.leaf(i) for i in range(n)]
    if n == 1:
        return clusters[0]

    upper = np.triu(D, k=1)
    upper[np.tril_indices(n)] = np.inf
    idx = np.arange(n)

    for step in range(n - 1):
        a, b = divmod(int(np.argmin(upper)), n)
        height = float(upper[a, b])
        if not np.isfinite(height) or clusters[a] is None or clusters[b] is None:
            raise InternalInvariantViolation("complete_linkage", f"no mergeable pair at step {step}", [a, b])

        # Column/row views give d(k, a) and d(k, b) for every k; inactive slots stay inf.
        dist_a = np.where(idx < a, upper[:, a], upper[a, :])
        dist_b = np.where(idx < b, upper[:, b], upper[b, :])
        merged = np.maximum(dist_a, dist_b)
        upper[:a, a] = merged[:a]
        upper[a, a + 1 :] = merged[a + 1 :]
        upper[b, :] = np.inf
        upper[:, b] = np.inf

        clusters[a] = MergeNode.merge(clusters[a], clusters[b], height)
        clusters[b] = None
        logging.debug("Merge %d: clusters %d and %d at %.3f m", step, a, b, height)

    root = clusters[0]
    if root is None or any(node is not None for node in clusters[1:]):
        raise InternalInvariantViolation("complete_linkage", "merge loop did not end with a single root")
    return root


def to_linkage_matrix(root: MergeNode, n_points: int) -> np.ndarray:
    """
    Export a dendrogram as a scipy-style (n-1, 4) linkage matrix.

    Rows are emitted in post-order so every child id is smaller than its
    parent's id (leaves are 0..n-1, internal nodes n, n+1, ...). Columns are
    [left id, right id, height, size].
    """

    Z = np.zeros((max(n_points - 1, 0), 4), dtype=float)
    ids = {}
    sizes = {}
    next_id = n_points
    row = 0
    stack = [(root, False)]
    while stack:
        node, expanded = stack.pop()
        if node.is_leaf:
            if not 0 <= node.index < n_points:
                raise InternalInvariantViolation("to_linkage_matrix", "leaf index out of range", [node.index])
            ids[id(node)] = node.index
            sizes[id(node)] = 1
            continue
        if not expanded:
            stack.append((node, True))
            stack.append((node.right, False))
            stack.append((node.left, False))
            continue
        if row >= len(Z):
            raise InternalInvariantViolation("to_linkage_matrix", f"more than {n_points - 1} internal nodes")
        left_id, right_id = ids[id(node.left)], ids[id(node.right)]
        size = sizes[id(node.left)] + sizes[id(node.right)]
        Z[row] = [left_id, right_id, node.height, size]
        ids[id(node)] = next_id
        sizes[id(node)] = size
        next_id += 1
        row += 1

    if row != len(Z):
        raise InternalInvariantViolation("to_linkage_matrix", f"expected {len(Z)} merges, found {row}")
    return Z
