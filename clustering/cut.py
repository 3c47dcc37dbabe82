"""Flat cluster assignment by cutting a dendrogram at a distance threshold."""

from __future__ import annotations

from typing import List

import numpy as np

from clustering.models import InternalInvariantViolation, MergeNode, validate_threshold


def _visit(node: MergeNode, seen: set) -> None:
    if id(node) in seen:
        raise InternalInvariantViolation("cut_tree", "dendrogram node reached twice (shared child or cycle)")
    seen.add(id(node))
    if not node.is_leaf and (node.left is None or node.right is None):
        raise InternalInvariantViolation("cut_tree", "internal node is missing a child")


def _leaves_below(node: MergeNode, seen: set) -> List[int]:
    if node.is_leaf:
        return [node.index]
    leaves: List[int] = []
    stack = [node.right, node.left]
    while stack:
        current = stack.pop()
        _visit(current, seen)
        if current.is_leaf:
            leaves.append(current.index)
        else:
            stack.append(current.right)
            stack.append(current.left)
    return sorted(leaves)


def _cut_members(root: MergeNode, threshold: float) -> List[List[int]]:
    """Leaf indices of each maximal subtree whose height is <= threshold."""

    members: List[List[int]] = []
    seen: set[int] = set()
    stack = [root]
    while stack:
        node = stack.pop()
        _visit(node, seen)
        if node.is_leaf or node.height <= threshold:
            members.append(_leaves_below(node, seen))
            continue
        stack.append(node.right)
        stack.append(node.left)
    return members


def cut_tree(root: MergeNode, threshold: float, n_points: int | None = None) -> np.ndarray:
    """
    Cut the dendrogram at ``threshold`` meters and return 1-based cluster ids.

    Every internal node higher than the threshold is split into its children;
    each remaining subtree (height <= threshold, or a leaf) is one cluster.
    Entry i of the result is the cluster id of point i. Ids run 1..k in
    ascending order of each cluster's smallest point index.

    ``n_points`` defaults to the number of leaves; when given, the leaves
    must be exactly 0..n_points-1.
    """

    threshold = validate_threshold(threshold, allow_zero=True)
    members = _cut_members(root, threshold)
    members.sort(key=lambda m: m[0])

    all_indices = [i for m in members for i in m]
    n = len(all_indices) if n_points is None else int(n_points)
    assignment = np.zeros(n, dtype=int)
    for cluster_id, indices in enumerate(members, start=1):
        for i in indices:
            if not 0 <= i < n:
                raise InternalInvariantViolation("cut_tree", "leaf index out of range", [i])
            if assignment[i]:
                raise InternalInvariantViolation("cut_tree", "leaf index appears in two clusters", [i])
            assignment[i] = cluster_id

    missing = np.flatnonzero(assignment == 0)
    if len(missing):
        raise InternalInvariantViolation("cut_tree", "points without a cluster", missing.tolist())
    return assignment


def count_clusters(assignment: np.ndarray) -> int:
    """Number of distinct cluster ids in an assignment."""

    return int(len(np.unique(assignment)))
