"""
Tests for the fingerprint overlap filter.
"""
from __future__ import annotations

import numpy as np

from beaconfuse.cloud import PointCloud
from beaconfuse.overlap import may_overlap, required_shared_distances, shared_distance_count
from beaconfuse.rotation import ROTATIONS
from beaconfuse.util import transform_points


def test_required_shared_distances():
    assert required_shared_distances(12) == 66
    assert required_shared_distances(3) == 3


def test_shared_count_is_multiset_intersection():
    """Each shared distance counts min(count_a, count_b) times."""
    line = PointCloud(sensor_id=0, points=[(0, 0, 0), (1, 0, 0), (2, 0, 0)])  # {1, 1, 4}
    pair = PointCloud(sensor_id=1, points=[(0, 0, 0), (0, 1, 0)])  # {1}
    square = PointCloud(sensor_id=2, points=[(0, 0, 0), (1, 0, 0), (0, 1, 0), (1, 1, 0)])  # {1 x4, 2 x2}
    assert shared_distance_count(line, pair) == 1
    assert shared_distance_count(line, square) == 2
    assert shared_distance_count(square, line) == 2
    assert shared_distance_count(square, square) == 6


def test_single_point_cloud_shares_nothing():
    lone = PointCloud(sensor_id=0, points=[(5, 5, 5)])
    other = PointCloud(sensor_id=1, points=[(0, 0, 0), (1, 0, 0)])
    assert shared_distance_count(lone, other) == 0
    assert not may_overlap(lone, other)


def test_filter_passes_true_overlap():
    """Two clouds sharing 12 beacons under a rigid motion always pass."""
    rng = np.random.default_rng(11)
    shared = rng.integers(-1000, 1001, size=(12, 3))
    a_only = rng.integers(-1000, 1001, size=(13, 3))
    b_only = rng.integers(-1000, 1001, size=(9, 3))
    a = PointCloud(sensor_id=0, points=np.vstack([shared, a_only]))

    R = ROTATIONS[9]
    t = np.array([-618, 824, 621])
    # b reports the shared beacons in its own frame: a = R @ b + t.
    b_pts = np.vstack([(shared - t) @ R, b_only])
    b = PointCloud(sensor_id=1, points=b_pts[rng.permutation(b_pts.shape[0])])

    assert shared_distance_count(a, b) >= 66
    assert may_overlap(a, b)


def test_filter_rejects_unrelated_clouds():
    rng = np.random.default_rng(12)
    a = PointCloud(sensor_id=0, points=rng.integers(-1000, 1001, size=(25, 3)))
    b = PointCloud(sensor_id=1, points=rng.integers(-1000, 1001, size=(25, 3)))
    assert not may_overlap(a, b)


def test_lower_threshold():
    """A smaller min_overlap lowers the required shared count."""
    rng = np.random.default_rng(13)
    pts = rng.integers(-1000, 1001, size=(4, 3))
    a = PointCloud(sensor_id=0, points=pts)
    b = PointCloud(sensor_id=1, points=transform_points(pts, ROTATIONS[3], (1, 2, 3)))
    assert not may_overlap(a, b)
    assert may_overlap(a, b, min_overlap=4)
