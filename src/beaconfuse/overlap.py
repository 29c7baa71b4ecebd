"""
Cheap overlap test between two clouds using their distance fingerprints.

If k beacons are seen by both sensors, the C(k, 2) distances between them are
present in both fingerprints regardless of rotation and translation. So two
clouds that share `min_overlap` beacons must share at least
C(min_overlap, 2) fingerprint entries (66 for 12 beacons).

The test is necessary, not sufficient: a pass only means the pose solver is
worth running.
"""

from __future__ import annotations

from math import comb

import numpy as np

from .cloud import PointCloud

MIN_OVERLAP = 12


def required_shared_distances(min_overlap: int = MIN_OVERLAP) -> int:
    return comb(int(min_overlap), 2)


def shared_distance_count(a: PointCloud, b: PointCloud) -> int:
    """Size of the multiset intersection of the two fingerprints."""
    va, ca = a.distance_histogram()
    vb, cb = b.distance_histogram()
    if va.size == 0 or vb.size == 0:
        return 0
    _, ia, ib = np.intersect1d(va, vb, assume_unique=True, return_indices=True)
    return int(np.sum(np.minimum(ca[ia], cb[ib])))


def may_overlap(a: PointCloud, b: PointCloud, *, min_overlap: int = MIN_OVERLAP) -> bool:
    return shared_distance_count(a, b) >= required_shared_distances(min_overlap)
