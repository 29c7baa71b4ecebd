"""
Rigid pose search between a source cloud and destination points.

We look for a rotation index r and an integer translation t such that

  ROTATIONS[r] @ p + t  in  D    for at least `min_matches` source points p,

where D is the destination point set.

Search order (fixed, so results are reproducible):
  rotations r = 0..23 (outer), then candidate translations t = q - p with p over
  the rotated source points (outer) and q over the destination points (inner).
The first candidate whose exact match count reaches `min_matches` is returned.
Inputs admitting several valid poses therefore resolve to the first one in this
order.

Each (p, q) pair votes for the translation q - p. A translation can only reach
`min_matches` exact matches if it collects at least that many votes, so we
count votes with numpy and only verify candidates above the threshold. The
verification is a plain set-membership count.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .cloud import PointCloud
from .overlap import MIN_OVERLAP
from .rotation import N_ROTATIONS, ROTATIONS
from .util import Point, as_point, as_points, point_set, transform_points


@dataclass(frozen=True)
class Pose:
    """Maps source-frame points into the destination frame: p -> R @ p + t."""

    rotation_index: int
    translation: Point
    n_matches: int

    @property
    def rotation(self) -> np.ndarray:
        return ROTATIONS[self.rotation_index]

    def apply(self, points: np.ndarray) -> np.ndarray:
        return transform_points(points, self.rotation, self.translation)


def count_matches(points: np.ndarray, target: set[Point]) -> int:
    """Number of rows of `points` present in `target`."""
    return sum(1 for p in np.asarray(points, dtype=np.int64) if as_point(p) in target)


def _candidate_translations(rotated_src: np.ndarray, dst: np.ndarray, min_votes: int) -> np.ndarray:
    """
    Translations q - p with at least `min_votes` supporting (p, q) pairs.

    Returns:
      (k, 3) int64, unique, ordered by first appearance in the p-major/q-minor
      enumeration.
    """
    cand = (dst[None, :, :] - rotated_src[:, None, :]).reshape(-1, 3)
    _, first, inverse, counts = np.unique(
        cand, axis=0, return_index=True, return_inverse=True, return_counts=True
    )
    inverse = np.asarray(inverse).reshape(-1)
    keep = (counts[inverse] >= int(min_votes)) & (np.arange(cand.shape[0]) == first[inverse])
    return cand[np.nonzero(keep)[0]]


def solve_pose(
    destination,
    source: PointCloud,
    *,
    min_matches: int = MIN_OVERLAP,
) -> Pose | None:
    """
    Find a pose placing at least `min_matches` source points onto destination points.

    Args:
      destination: (n_d, 3) int points already expressed in the target frame.
      source: cloud whose points are to be moved into that frame.
      min_matches: required number of coinciding points.

    Returns:
      The first valid Pose in the fixed search order, or None.
    """
    dst = as_points(destination)
    if dst.shape[0] == 0 or source.n_points == 0:
        return None
    min_matches = int(min_matches)
    if min_matches < 1:
        raise ValueError("min_matches must be >= 1.")
    if min(dst.shape[0], source.n_points) < min_matches:
        return None

    target = point_set(dst)
    for r in range(N_ROTATIONS):
        rotated = source.rotated(r)
        for t in _candidate_translations(rotated, dst, min_matches):
            moved = rotated + t[None, :]
            n = count_matches(moved, target)
            if n >= min_matches:
                return Pose(rotation_index=r, translation=as_point(t), n_matches=n)
    return None
