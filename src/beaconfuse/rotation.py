"""
The 24 proper rotations of a cube as integer 3x3 matrices.

Construction:
  Each rotation is a product of quarter-turn rotations about the coordinate axes,
    R = Rz(c) @ Ry(b) @ Rx(a),
  where (a, b) picks one of six "facings" (which local axis is mapped onto +z)
  and c spins about z in four quarter turns. Six facings times four spins gives
  the full group.

Conventions:
  - Rotations act on column vectors: p' = R @ p. For row-stacked points of shape
    (n, 3) this is points @ R.T.
  - `ROTATIONS` is indexed 0..23 and the order never changes within a process;
    other modules refer to rotations by index.
"""

from __future__ import annotations

import numpy as np

N_ROTATIONS = 24

# sin/cos of k quarter turns, k = 0..3.
_SIN = (0, 1, 0, -1)
_COS = (1, 0, -1, 0)

# (quarter turns about x, quarter turns about y) for each facing.
_FACINGS = (
    (0, 1),  # -x
    (0, 3),  # +x
    (3, 0),  # -y
    (1, 0),  # +y
    (0, 0),  # +z
    (0, 2),  # -z
)


def _rot_x(k: int) -> np.ndarray:
    s, c = _SIN[k % 4], _COS[k % 4]
    return np.array([[1, 0, 0], [0, c, -s], [0, s, c]], dtype=np.int64)


def _rot_y(k: int) -> np.ndarray:
    s, c = _SIN[k % 4], _COS[k % 4]
    return np.array([[c, 0, s], [0, 1, 0], [-s, 0, c]], dtype=np.int64)


def _rot_z(k: int) -> np.ndarray:
    s, c = _SIN[k % 4], _COS[k % 4]
    return np.array([[c, -s, 0], [s, c, 0], [0, 0, 1]], dtype=np.int64)


def generate_rotations() -> np.ndarray:
    """
    Build the rotation table.

    Returns:
      rotations: (24, 3, 3) int64, facing-major then spin (a fixed order).
    """
    mats = [
        _rot_z(spin) @ _rot_y(ky) @ _rot_x(kx)
        for kx, ky in _FACINGS
        for spin in range(4)
    ]
    out = np.stack(mats, axis=0).astype(np.int64, copy=False)

    n_unique = np.unique(out.reshape(len(mats), 9), axis=0).shape[0]
    if n_unique != N_ROTATIONS:
        raise RuntimeError(f"Expected {N_ROTATIONS} distinct rotations, got {n_unique}.")
    det = np.rint(np.linalg.det(out.astype(np.float64))).astype(np.int64)
    if not bool(np.all(det == 1)):
        raise RuntimeError("Rotation table contains an improper rotation.")
    return out


ROTATIONS: np.ndarray = generate_rotations()
ROTATIONS.flags.writeable = False

_INDEX: dict[tuple[int, ...], int] = {tuple(int(v) for v in m.ravel()): i for i, m in enumerate(ROTATIONS)}

IDENTITY_INDEX: int = _INDEX[tuple(int(v) for v in np.eye(3, dtype=np.int64).ravel())]


def rotation_index(matrix: np.ndarray) -> int:
    """Index of `matrix` in `ROTATIONS`; KeyError if it is not a cube rotation."""
    m = np.asarray(matrix)
    if m.shape != (3, 3):
        raise ValueError("matrix must have shape (3, 3).")
    key = tuple(int(v) for v in np.rint(m).astype(np.int64).ravel())
    return _INDEX[key]


def inverse_index(index: int) -> int:
    """Index of the inverse rotation (the transpose, since rotations are orthonormal)."""
    return rotation_index(ROTATIONS[int(index)].T)


def compose_table() -> np.ndarray:
    """
    Group multiplication table.

    Returns:
      table: (24, 24) int64 with table[a, b] = index(ROTATIONS[a] @ ROTATIONS[b]),
      i.e. apply b first, then a.
    """
    table = np.full((N_ROTATIONS, N_ROTATIONS), -1, dtype=np.int64)
    for a in range(N_ROTATIONS):
        for b in range(N_ROTATIONS):
            try:
                table[a, b] = rotation_index(ROTATIONS[a] @ ROTATIONS[b])
            except KeyError as e:
                raise RuntimeError(f"Rotation set is not closed: R[{a}] @ R[{b}].") from e
    return table
