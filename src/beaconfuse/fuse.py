"""
Fuse sensor reports into the reference frame: link discovery, then composition.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Sequence

from .cloud import PointCloud
from .compose import Reconstruction, compose_frames
from .dataset_io import parse_report
from .graph import build_links
from .overlap import MIN_OVERLAP


@dataclass(frozen=True)
class FusionConfig:
    min_overlap: int = MIN_OVERLAP
    n_workers: int = 1
    progress: bool = False
    verbose: bool = False


def fuse_sensors(clouds: Sequence[PointCloud], cfg: FusionConfig | None = None) -> Reconstruction:
    """
    Align every sensor to clouds[0] and merge beacons and sensor origins.

    Raises graph.AlignmentError if some sensor cannot be linked.
    """
    cfg = FusionConfig() if cfg is None else cfg
    clouds = list(clouds)
    t0 = time.perf_counter()
    links = build_links(
        clouds,
        min_overlap=int(cfg.min_overlap),
        n_workers=int(cfg.n_workers),
        progress=bool(cfg.progress),
        verbose=bool(cfg.verbose),
    )
    t_links = time.perf_counter() - t0
    recon = compose_frames(clouds, links)
    if cfg.verbose:
        print(
            f"[fuse] n_sensors={len(clouds)} n_links={len(links)} n_beacons={recon.n_beacons} "
            f"max_sensor_distance={recon.max_sensor_distance}  link_time={t_links:.3f}s",
            flush=True,
        )
    return recon


def solve_report(text: str, cfg: FusionConfig | None = None) -> tuple[int, int]:
    """Returns (unique beacon count, max Manhattan distance between sensors)."""
    recon = fuse_sensors(parse_report(text), cfg)
    return recon.n_beacons, recon.max_sensor_distance
