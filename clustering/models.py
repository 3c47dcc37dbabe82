"""Data model and error types shared by the clustering core.

Points enter the core already filtered to valid geographic bounds; the core
still rejects out-of-range or non-finite coordinates. Dendrogram nodes own
their children, so every run yields a plain tree.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, Hashable, Iterator, List, Optional

import numpy as np

DEFAULT_THRESHOLD_M = 12_875.0  # 8 miles


class InvalidInputError(ValueError):
    """Caller supplied empty points, bad coordinates, or a bad threshold."""


class InternalInvariantViolation(RuntimeError):
    """The clustering or cut logic produced an inconsistent result."""

    def __init__(self, step: str, message: str, indices=None) -> None:
        self.step = step
        self.indices = list(indices) if indices is not None else []
        detail = f"[{step}] {message}"
        if self.indices:
            detail += f" (indices={self.indices})"
        super().__init__(detail)


@dataclass(frozen=True)
class Point:
    id: int
    lat: float
    lng: float


@dataclass(frozen=True)
class Centroid:
    cluster_id: int
    lat: float
    lng: float
    size: int = 0


def validate_point(point: Point) -> Point:
    """Raise InvalidInputError unless lat/lng are finite and within range."""

    lat, lng = point.lat, point.lng
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise InvalidInputError(f"Point {point.id} has non-finite coordinates ({lat}, {lng}).")
    if not -90.0 <= lat <= 90.0:
        raise InvalidInputError(f"Point {point.id} latitude {lat} outside [-90, 90].")
    if not -180.0 <= lng <= 180.0:
        raise InvalidInputError(f"Point {point.id} longitude {lng} outside [-180, 180].")
    return point


def validate_threshold(threshold: float, allow_zero: bool = False) -> float:
    """Return threshold as float, rejecting non-finite and non-positive values."""

    try:
        value = float(threshold)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"Threshold must be a number, got {threshold!r}.") from exc
    if not math.isfinite(value):
        raise InvalidInputError(f"Threshold must be finite, got {value}.")
    if value < 0 or (value == 0 and not allow_zero):
        raise InvalidInputError(f"Threshold must be positive, got {value}.")
    return value


@dataclass(eq=False)
class MergeNode:
    """
    Dendrogram node.

    A leaf wraps one point index (``index`` set, ``height`` 0). An internal
    node joins ``left`` and ``right`` at ``height``, the complete-linkage
    distance between them in meters.
    """

    index: Optional[int] = None
    left: Optional["MergeNode"] = None
    right: Optional["MergeNode"] = None
    height: float = 0.0

    @classmethod
    def leaf(cls, index: int) -> "MergeNode":
        return cls(index=index)

    @classmethod
    def merge(cls, left: "MergeNode", right: "MergeNode", height: float) -> "MergeNode":
        return cls(left=left, right=right, height=float(height))

    @property
    def is_leaf(self) -> bool:
        return self.index is not None

    def leaves(self) -> Iterator[int]:
        """Yield leaf point indices left-to-right without recursion."""

        stack: List[MergeNode] = [self]
        while stack:
            node = stack.pop()
            if node.is_leaf:
                yield node.index
            else:
                stack.append(node.right)
                stack.append(node.left)

    @property
    def size(self) -> int:
        return sum(1 for _ in self.leaves())


@dataclass
class ClusterResult:
    """Output of one clustering session for one partition."""

    assignment: np.ndarray
    centroids: List[Centroid]
    labels: Dict[str, Hashable] = field(default_factory=dict)
    max_height: float = 0.0
    # Read-only; shared with evaluation and plotting without copying.
    distance_matrix: Optional[np.ndarray] = None
    # scipy-style (n-1, 4) export of the dendrogram.
    linkage: Optional[np.ndarray] = None

    @property
    def n_clusters(self) -> int:
        return len(self.centroids)
