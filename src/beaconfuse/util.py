"""
Core geometry utilities (no I/O).

Conventions:
  - Points are integer rows: arrays of shape (n, 3), dtype int64.
  - A rigid transform (R, t) maps a point p to R @ p + t; for row-stacked
    points this is points @ R.T + t.
"""

from __future__ import annotations

import numpy as np
from scipy.spatial.distance import pdist

Point = tuple[int, int, int]


def as_points(points) -> np.ndarray:
    """
    Coerce a sequence of integer triplets to an (n, 3) int64 array.

    Raises ValueError for wrong shapes or non-integral values.
    """
    arr = np.asarray(points)
    if arr.size == 0:
        return np.zeros((0, 3), dtype=np.int64)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"points must have shape (n, 3), got {arr.shape}.")
    if np.issubdtype(arr.dtype, np.integer):
        return arr.astype(np.int64, copy=False)
    if np.issubdtype(arr.dtype, np.floating):
        if not bool(np.all(np.isfinite(arr))) or not bool(np.all(arr == np.rint(arr))):
            raise ValueError("points must have integer coordinates.")
        return arr.astype(np.int64)
    raise ValueError(f"points must be numeric, got dtype {arr.dtype}.")


def as_point(p) -> Point:
    x, y, z = (int(v) for v in p)
    return (x, y, z)


def point_set(points: np.ndarray) -> set[Point]:
    return {as_point(p) for p in np.asarray(points, dtype=np.int64)}


def transform_points(points: np.ndarray, rotation: np.ndarray, translation) -> np.ndarray:
    """
    Apply p -> R @ p + t to every row.

    Args:
      points: (n, 3) int.
      rotation: (3, 3) int.
      translation: (3,) int.

    Returns:
      (n, 3) int64.
    """
    pts = np.asarray(points, dtype=np.int64).reshape(-1, 3)
    R = np.asarray(rotation, dtype=np.int64)
    t = np.asarray(translation, dtype=np.int64).reshape(3)
    return pts @ R.T + t[None, :]


def squared_distances(points: np.ndarray) -> np.ndarray:
    """
    Condensed pairwise squared Euclidean distances, (n*(n-1)/2,) int64.

    pdist works in float64, so results are exact only while every squared distance
    stays below 2**53, i.e. coordinate differences up to about 5e7 per axis.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if pts.shape[0] < 2:
        return np.zeros((0,), dtype=np.int64)
    return np.rint(pdist(pts, "sqeuclidean")).astype(np.int64)


def max_manhattan_distance(points: np.ndarray) -> int:
    """
    Largest pairwise L1 distance; 0 for fewer than two points.

    Computed in float64: exact while the distance stays below 2**53.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if pts.shape[0] < 2:
        return 0
    return int(np.rint(np.max(pdist(pts, "cityblock"))))
