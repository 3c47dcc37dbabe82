"""Great-circle distances between latitude/longitude points using NumPy.

Implements the haversine formula on a spherical Earth of radius 6,371,000 m,
both for a single pair of points and for one point against an array of points.
All distances are returned in meters.
"""

from __future__ import annotations

import numpy as np

from clustering.models import InvalidInputError, Point, validate_point

EARTH_RADIUS_M = 6_371_000.0


def _haversine(lat1, lng1, lat2, lng2, radius_m: float):
    """Haversine core working on scalars or broadcastable arrays (degrees)."""

    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = phi2 - phi1
    dlmb = np.radians(lng2) - np.radians(lng1)
    h = np.sin(dphi / 2.0) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlmb / 2.0) ** 2
    # Rounding can push h marginally outside [0, 1] for antipodal points.
    h = np.clip(h, 0.0, 1.0)
    return 2.0 * radius_m * np.arcsin(np.sqrt(h))


def haversine_distance(p1: Point, p2: Point, radius_m: float = EARTH_RADIUS_M) -> float:
    """
    Compute the great-circle distance between two points in meters.

    Distance is symmetric and zero for identical coordinates. Raises
    InvalidInputError for non-finite or out-of-range coordinates.
    """

    validate_point(p1)
    validate_point(p2)
    return float(_haversine(p1.lat, p1.lng, p2.lat, p2.lng, radius_m))


def haversine_to_many(
    lat: float,
    lng: float,
    lats: np.ndarray,
    lngs: np.ndarray,
    radius_m: float = EARTH_RADIUS_M,
) -> np.ndarray:
    """Distances in meters from (lat, lng) to every (lats[i], lngs[i])."""

    lats = np.asarray(lats, dtype=float)
    lngs = np.asarray(lngs, dtype=float)
    if lats.shape != lngs.shape:
        raise InvalidInputError(f"Shape mismatch: lats {lats.shape} vs lngs {lngs.shape}.")
    if not (np.isfinite(lat) and np.isfinite(lng)) or not (np.isfinite(lats).all() and np.isfinite(lngs).all()):
        raise InvalidInputError("Coordinates contain non-finite values.")
    return _haversine(lat, lng, lats, lngs, radius_m)


if __name__ == "__main__":
    a = Point(id=0, lat=36.80, lng=-76.10)
    b = Point(id=1, lat=36.801, lng=-76.101)
    c = Point(id=2, lat=36.90, lng=-76.20)

    print("a-b (m):", haversine_distance(a, b))
    print("a-c (m):", haversine_distance(a, c))
