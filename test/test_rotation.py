"""
Tests for the cube rotation table.
"""
from __future__ import annotations

import numpy as np
import pytest

from beaconfuse.rotation import (
    IDENTITY_INDEX,
    N_ROTATIONS,
    ROTATIONS,
    compose_table,
    generate_rotations,
    inverse_index,
    rotation_index,
)


def test_rotation_count_and_uniqueness():
    """Exactly 24 distinct integer matrices."""
    assert ROTATIONS.shape == (N_ROTATIONS, 3, 3)
    assert ROTATIONS.dtype == np.int64
    assert np.unique(ROTATIONS.reshape(N_ROTATIONS, 9), axis=0).shape[0] == 24


def test_rotations_are_proper_and_orthonormal():
    """Entries in {-1,0,1}, one nonzero per row/column, det +1, R R^T = I."""
    eye = np.eye(3, dtype=np.int64)
    for R in ROTATIONS:
        assert set(np.unique(R).tolist()) <= {-1, 0, 1}
        assert np.all(np.count_nonzero(R, axis=0) == 1)
        assert np.all(np.count_nonzero(R, axis=1) == 1)
        assert int(np.rint(np.linalg.det(R.astype(np.float64)))) == 1
        assert np.array_equal(R @ R.T, eye)


def test_identity_present():
    assert np.array_equal(ROTATIONS[IDENTITY_INDEX], np.eye(3, dtype=np.int64))


def test_closure_under_composition():
    """Every product R_a @ R_b is in the table; each row of the table is a permutation."""
    table = compose_table()
    assert table.shape == (24, 24)
    assert np.all(table >= 0)
    for a in range(24):
        assert sorted(table[a].tolist()) == list(range(24))
        for b in range(24):
            assert np.array_equal(ROTATIONS[a] @ ROTATIONS[b], ROTATIONS[table[a, b]])


def test_inverse_index():
    eye = np.eye(3, dtype=np.int64)
    for i in range(24):
        j = inverse_index(i)
        assert np.array_equal(ROTATIONS[i] @ ROTATIONS[j], eye)


def test_order_is_stable():
    """Regenerating the table gives the same order."""
    assert np.array_equal(generate_rotations(), ROTATIONS)


def test_table_is_read_only():
    with pytest.raises(ValueError):
        ROTATIONS[0, 0, 0] = 5


def test_rotation_index_rejects_reflection():
    mirror = np.diag([-1, 1, 1])
    with pytest.raises(KeyError):
        rotation_index(mirror)
    with pytest.raises(ValueError):
        rotation_index(np.eye(2))


def test_rotation_maps_integer_points_to_integer_points():
    p = np.array([404, -588, -901], dtype=np.int64)
    images = ROTATIONS @ p
    assert images.dtype == np.int64
    # Signed permutations of the coordinates: 24 distinct images for a generic point.
    assert np.unique(images, axis=0).shape[0] == 24
    assert np.all(np.sort(np.abs(images), axis=1) == np.sort(np.abs(p)))
