"""
Fold sensor links into one frame (the reference sensor's).

Each link (source -> destination, R, t) is relative to the destination's own
frame. Folding a link moves everything accumulated so far in the source's entry
(its beacons, plus the origins of sensors already folded into it) through
p -> R @ p + t and merges it into the destination's entry.

Links are folded in reverse discovery order. A sensor is always resolved before
any sensor that links onto it, so by the time a link is folded its source entry
already holds every sensor that chains through it. After the last fold the
reference entry holds all beacons and all sensor origins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import numpy as np

from .cloud import PointCloud
from .graph import SensorLink
from .util import Point, as_point, max_manhattan_distance, point_set

ORIGIN: Point = (0, 0, 0)


@dataclass
class FrameEntry:
    """Beacons and sensor origins collected in one sensor's frame."""

    beacons: set[Point] = field(default_factory=set)
    sensors: dict[int, Point] = field(default_factory=dict)

    def beacon_array(self) -> np.ndarray:
        if not self.beacons:
            return np.zeros((0, 3), dtype=np.int64)
        return np.array(sorted(self.beacons), dtype=np.int64)


class GlobalFrame:
    """
    Mutable accumulator keyed by sensor id.

    Starts with only the reference sensor's own entry; an entry for any other
    sensor is created from its raw cloud the first time a link touches it.
    """

    def __init__(self, clouds: Sequence[PointCloud], root_id: int | None = None) -> None:
        self._clouds = {c.sensor_id: c for c in clouds}
        if not self._clouds:
            raise ValueError("Must provide at least one sensor.")
        self.root_id = int(clouds[0].sensor_id if root_id is None else root_id)
        self.entries: dict[int, FrameEntry] = {}
        self.entry(self.root_id)

    def entry(self, sensor_id: int) -> FrameEntry:
        sid = int(sensor_id)
        if sid not in self.entries:
            if sid not in self._clouds:
                raise KeyError(f"Unknown sensor id {sid}.")
            self.entries[sid] = FrameEntry(
                beacons=point_set(self._clouds[sid].points),
                sensors={sid: ORIGIN},
            )
        return self.entries[sid]

    @property
    def root(self) -> FrameEntry:
        return self.entries[self.root_id]

    def fold(self, link: SensorLink) -> None:
        """Merge the source's composited entry into the destination's entry."""
        src = self.entry(link.source)
        dst = self.entry(link.destination)

        moved = link.apply(src.beacon_array())
        dst.beacons.update(as_point(p) for p in moved)

        sensor_ids = list(src.sensors)
        origins = np.array([src.sensors[s] for s in sensor_ids], dtype=np.int64)
        for sid, p in zip(sensor_ids, link.apply(origins), strict=True):
            dst.sensors[sid] = as_point(p)

    def fold_all(self, links: Sequence[SensorLink]) -> None:
        for link in reversed(list(links)):
            self.fold(link)


@dataclass(frozen=True, eq=False)
class Reconstruction:
    """
    Everything expressed in the reference sensor's frame.

    Fields:
      beacons: (n_beacons, 3) int64, unique rows, lexicographically sorted.
      sensor_ids: (n_sensors,) ids, in input order.
      sensor_positions: (n_sensors, 3) int64 origins, aligned with sensor_ids.
      links: the links that were folded, in discovery order.
    """

    beacons: np.ndarray
    sensor_ids: tuple[int, ...]
    sensor_positions: np.ndarray
    links: tuple[SensorLink, ...] = ()

    @property
    def n_beacons(self) -> int:
        return int(self.beacons.shape[0])

    @property
    def max_sensor_distance(self) -> int:
        return max_manhattan_distance(self.sensor_positions)

    def sensor_position(self, sensor_id: int) -> Point:
        return as_point(self.sensor_positions[self.sensor_ids.index(int(sensor_id))])


def compose_frames(clouds: Sequence[PointCloud], links: Sequence[SensorLink]) -> Reconstruction:
    """
    Fold all links into clouds[0]'s frame.

    Raises RuntimeError if some sensor is not reached by the links.
    """
    frame = GlobalFrame(clouds)
    frame.fold_all(links)
    root = frame.root

    sensor_ids = tuple(c.sensor_id for c in clouds)
    missing = [s for s in sensor_ids if s not in root.sensors]
    if missing:
        raise RuntimeError(f"Sensors {missing} were not folded into sensor {frame.root_id}.")
    positions = np.array([root.sensors[s] for s in sensor_ids], dtype=np.int64).reshape(-1, 3)
    return Reconstruction(
        beacons=root.beacon_array(),
        sensor_ids=sensor_ids,
        sensor_positions=positions,
        links=tuple(links),
    )
