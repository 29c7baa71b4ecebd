"""
Synthetic sensor surveys with known ground truth.

Sensors are placed along a chain. Consecutive sensors sit roughly one
visibility range apart along a random axis, so their visibility cubes overlap,
and `n_shared` beacons are planted inside each such overlap. Every sensor also
gets `n_private` beacons anywhere in its own cube. A sensor sees every beacon
within Chebyshev distance `sensor_range` of it, and reports it in its own frame:

  local = R^T (world - position)   <=>   world = R @ local + position.

Sensor 0 sits at the origin with the identity rotation, so its frame is the
world frame.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .cloud import PointCloud
from .rotation import IDENTITY_INDEX, N_ROTATIONS, ROTATIONS
from .util import max_manhattan_distance

SENSOR_RANGE = 1000


@dataclass(frozen=True, eq=False)
class Survey:
    clouds: list[PointCloud]
    positions: np.ndarray  # (n_sensors, 3) world positions
    rotation_indices: np.ndarray  # (n_sensors,)
    beacons: np.ndarray  # (n_beacons, 3) world positions, sorted unique

    @property
    def n_beacons(self) -> int:
        return int(self.beacons.shape[0])

    @property
    def max_sensor_distance(self) -> int:
        return max_manhattan_distance(self.positions)


def _sample_box(rng: np.random.Generator, lo: np.ndarray, hi: np.ndarray, n: int, taken: set) -> list[tuple[int, int, int]]:
    out: list[tuple[int, int, int]] = []
    while len(out) < n:
        p = tuple(int(v) for v in rng.integers(lo, hi + 1))
        if p in taken:
            continue
        taken.add(p)
        out.append(p)
    return out


def simulate_survey(
    *,
    n_sensors: int = 5,
    n_shared: int = 12,
    n_private: int = 10,
    sensor_range: int = SENSOR_RANGE,
    seed: int = 0,
) -> Survey:
    """
    Build a survey whose sensors can all be chained back to sensor 0.

    Returns:
      Survey with per-sensor clouds (shuffled, local frames) and the ground truth.
    """
    if n_sensors < 1:
        raise ValueError("n_sensors must be >= 1.")
    rng = np.random.default_rng(int(seed))
    rr = int(sensor_range)

    positions = np.zeros((n_sensors, 3), dtype=np.int64)
    for k in range(1, n_sensors):
        step = rng.integers(-rr // 5, rr // 5 + 1, size=3)
        axis = int(rng.integers(3))
        sign = 1 if rng.random() < 0.5 else -1
        step[axis] = sign * int(rng.integers(rr, rr + rr * 3 // 10 + 1))
        positions[k] = positions[k - 1] + step

    rotation_indices = rng.integers(0, N_ROTATIONS, size=n_sensors).astype(np.int64)
    rotation_indices[0] = IDENTITY_INDEX

    world: set[tuple[int, int, int]] = set()
    for k in range(1, n_sensors):
        lo = np.maximum(positions[k - 1], positions[k]) - rr
        hi = np.minimum(positions[k - 1], positions[k]) + rr
        _sample_box(rng, lo, hi, int(n_shared), world)
    for k in range(n_sensors):
        _sample_box(rng, positions[k] - rr, positions[k] + rr, int(n_private), world)

    beacons = np.array(sorted(world), dtype=np.int64).reshape(-1, 3)
    clouds: list[PointCloud] = []
    for k in range(n_sensors):
        rel = beacons - positions[k][None, :]
        seen = rel[np.max(np.abs(rel), axis=1) <= rr]
        local = seen @ ROTATIONS[rotation_indices[k]]
        clouds.append(PointCloud(sensor_id=k, points=local[rng.permutation(local.shape[0])]))

    return Survey(clouds=clouds, positions=positions, rotation_indices=rotation_indices, beacons=beacons)


def format_report(clouds: list[PointCloud]) -> str:
    """Render clouds in the report text format read by `dataset_io.parse_report`."""
    blocks = []
    for cloud in clouds:
        lines = [f"--- scanner {cloud.sensor_id} ---"]
        lines.extend(f"{x},{y},{z}" for x, y, z in cloud.points.tolist())
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks) + "\n"
