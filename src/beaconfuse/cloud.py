"""
Per-sensor beacon point cloud.

A cloud is built once from a sensor's report and is read-only afterwards. On
construction it precomputes:
  - rotated: (24, n, 3) the points under every rotation in `ROTATIONS`,
  - fingerprint: sorted pairwise squared distances (a multiset), which is
    invariant under rotation and translation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .rotation import N_ROTATIONS, ROTATIONS
from .util import Point, as_points, point_set, squared_distances


@dataclass(frozen=True, eq=False)
class PointCloud:
    """
    Beacons reported by one sensor, in that sensor's own frame.

    Args:
      sensor_id: identifier of the reporting sensor.
      points: (n, 3) integer beacon positions, in report order.
    """

    sensor_id: int
    points: np.ndarray
    rotated_points: np.ndarray = field(init=False, repr=False, compare=False)
    fingerprint: np.ndarray = field(init=False, repr=False, compare=False)
    _distance_values: np.ndarray = field(init=False, repr=False, compare=False)
    _distance_counts: np.ndarray = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        pts = np.array(as_points(self.points), dtype=np.int64)
        pts.flags.writeable = False
        object.__setattr__(self, "sensor_id", int(self.sensor_id))
        object.__setattr__(self, "points", pts)

        rot = np.einsum("rij,nj->rni", ROTATIONS, pts).astype(np.int64, copy=False)
        rot.flags.writeable = False
        object.__setattr__(self, "rotated_points", rot)

        fp = np.sort(squared_distances(pts))
        fp.flags.writeable = False
        object.__setattr__(self, "fingerprint", fp)

        values, counts = np.unique(fp, return_counts=True)
        object.__setattr__(self, "_distance_values", values)
        object.__setattr__(self, "_distance_counts", counts)

    @property
    def n_points(self) -> int:
        return int(self.points.shape[0])

    def rotated(self, rotation_index: int) -> np.ndarray:
        """(n, 3) points premultiplied by ROTATIONS[rotation_index]."""
        r = int(rotation_index)
        if not 0 <= r < N_ROTATIONS:
            raise IndexError(f"rotation_index must be in [0, {N_ROTATIONS}), got {r}.")
        return self.rotated_points[r]

    def distance_histogram(self) -> tuple[np.ndarray, np.ndarray]:
        """Unique fingerprint values and their multiplicities."""
        return self._distance_values, self._distance_counts

    def point_set(self) -> set[Point]:
        return point_set(self.points)
