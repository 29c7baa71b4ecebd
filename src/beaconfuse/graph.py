"""
Link every sensor, directly or through a chain, back to the reference sensor.

Worklist algorithm:
  resolved = [clouds[0]]; queue = the remaining sensors in input order.
  Pop a sensor, try it against each resolved sensor (in resolution order); on
  the first success record a SensorLink (source = popped sensor, destination =
  the resolved one) and mark it resolved; otherwise push it back.

A pair that has been tried is never tried again, so at most N(N-1)/2 pair
attempts are made. If a whole pass over the queue makes no progress the input
cannot be fused and AlignmentError is raised.

With n_workers > 1 the resolved candidates for the popped sensor are evaluated
in a process pool; the first success in candidate order is kept, so the links
are identical to a sequential run.
"""

from __future__ import annotations

import multiprocessing as mp
from collections import deque
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from tqdm import tqdm

from .cloud import PointCloud
from .overlap import MIN_OVERLAP, may_overlap
from .pose import solve_pose
from .rotation import ROTATIONS
from .util import Point, transform_points


class AlignmentError(RuntimeError):
    """No alignment found: some sensors cannot be linked to the reference sensor."""

    def __init__(self, message: str, unresolved: Sequence[int] = ()) -> None:
        super().__init__(message)
        self.unresolved = tuple(int(s) for s in unresolved)


@dataclass(frozen=True)
class SensorLink:
    """
    Directed edge: `source` points map into the `destination` frame by
    p -> ROTATIONS[rotation_index] @ p + translation.
    """

    source: int
    destination: int
    rotation_index: int
    translation: Point
    n_matches: int

    @property
    def rotation(self) -> np.ndarray:
        return ROTATIONS[self.rotation_index]

    def apply(self, points: np.ndarray) -> np.ndarray:
        return transform_points(points, self.rotation, self.translation)


def try_link(
    destination: PointCloud,
    source: PointCloud,
    *,
    min_overlap: int = MIN_OVERLAP,
) -> SensorLink | None:
    """Overlap filter, then pose search of `source` onto `destination`'s own points."""
    if not may_overlap(destination, source, min_overlap=min_overlap):
        return None
    pose = solve_pose(destination.points, source, min_matches=min_overlap)
    if pose is None:
        return None
    return SensorLink(
        source=source.sensor_id,
        destination=destination.sensor_id,
        rotation_index=pose.rotation_index,
        translation=pose.translation,
        n_matches=pose.n_matches,
    )


def _first_link(
    source: PointCloud,
    candidates: list[PointCloud],
    *,
    min_overlap: int,
    pool=None,
) -> SensorLink | None:
    if pool is None:
        for dst in candidates:
            link = try_link(dst, source, min_overlap=min_overlap)
            if link is not None:
                return link
        return None
    results = pool.starmap(_try_link_worker, [(dst, source, min_overlap) for dst in candidates])
    return next((link for link in results if link is not None), None)


def _try_link_worker(destination: PointCloud, source: PointCloud, min_overlap: int) -> SensorLink | None:
    return try_link(destination, source, min_overlap=min_overlap)


def build_links(
    clouds: Sequence[PointCloud],
    *,
    min_overlap: int = MIN_OVERLAP,
    n_workers: int = 1,
    progress: bool = False,
    verbose: bool = False,
) -> list[SensorLink]:
    """
    Discover one link per non-reference sensor.

    Args:
      clouds: sensors; clouds[0] is the reference frame.
      min_overlap: beacons two sensors must share to be linked.
      n_workers: >1 evaluates candidate pairs in a process pool.
      progress: show a tqdm bar over resolved sensors.
      verbose: print one line per discovered link.

    Returns:
      links in discovery order; links[k].source was the (k+1)-th sensor resolved.
    """
    clouds = list(clouds)
    if not clouds:
        raise ValueError("Must provide at least one sensor.")
    ids = [c.sensor_id for c in clouds]
    if len(set(ids)) != len(ids):
        raise ValueError(f"Duplicate sensor ids: {ids}.")

    n = len(clouds)
    queue: deque[int] = deque(range(1, n))
    resolved: list[int] = [0]
    tried: set[tuple[int, int]] = set()
    links: list[SensorLink] = []
    stalled = 0

    pool = mp.Pool(int(n_workers)) if int(n_workers) > 1 and n > 2 else None
    bar = tqdm(total=n - 1, desc="link-sensors", leave=True, disable=not progress)
    try:
        while queue:
            i = queue.popleft()
            candidates = [j for j in resolved if (i, j) not in tried]
            link = _first_link(
                clouds[i],
                [clouds[j] for j in candidates],
                min_overlap=min_overlap,
                pool=pool,
            )
            tried.update((i, j) for j in candidates)

            if link is None:
                queue.append(i)
                stalled += 1
                if stalled >= len(queue):
                    unresolved = sorted(ids[k] for k in queue)
                    raise AlignmentError(
                        f"No alignment found for sensors {unresolved} "
                        f"(resolved {len(resolved)}/{n}, min_overlap={min_overlap}).",
                        unresolved=unresolved,
                    )
                continue

            stalled = 0
            links.append(link)
            resolved.append(i)
            bar.update(1)
            if verbose:
                print(
                    f"[link] sensor {link.source} -> {link.destination}  rot={link.rotation_index}  "
                    f"t={link.translation}  matches={link.n_matches}",
                    flush=True,
                )
    finally:
        bar.close()
        if pool is not None:
            pool.close()
            pool.join()
    return links
