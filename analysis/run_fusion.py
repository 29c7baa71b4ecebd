#!/usr/bin/env python3
"""
Fuse one sensor report and write the reconstruction artifact.

Input: a report text file (`--- scanner N ---` blocks of `x,y,z` lines).
Output: OUT_DIR / <report stem>_fused.npz (or the given path), plus the two
answers printed to stdout:
  - number of unique beacons,
  - largest Manhattan distance between two sensors.

Usage:
  cd <repo_root>
  python analysis/run_fusion.py <report.txt> [out.npz] [n_workers]
"""

from __future__ import annotations

import pathlib
import sys
import time

BASE_DIR = pathlib.Path(__file__).resolve().parent
REPO_DIR = BASE_DIR.parent
OUT_DIR = BASE_DIR / "output"

if str(REPO_DIR / "src") not in sys.path:
    sys.path.insert(0, str(REPO_DIR / "src"))

from beaconfuse import FusionConfig, fuse_sensors, load_report, save_reconstruction
from beaconfuse.graph import AlignmentError

# Defaults (argv can override)
MIN_OVERLAP = 12
N_WORKERS = 1


def main() -> None:
    argv = sys.argv[1:]
    if len(argv) < 1:
        print("Usage: run_fusion.py <report.txt> [out.npz] [n_workers]", file=sys.stderr)
        sys.exit(1)
    report_path = pathlib.Path(argv[0])
    out_path = pathlib.Path(argv[1]) if len(argv) > 1 else OUT_DIR / f"{report_path.stem}_fused.npz"
    n_workers = int(argv[2]) if len(argv) > 2 else N_WORKERS

    if not report_path.exists():
        raise FileNotFoundError(f"Report not found: {report_path}")

    t0 = time.perf_counter()
    clouds = load_report(report_path)
    print(
        f"[parse] {report_path} n_sensors={len(clouds)} "
        f"n_points={sum(c.n_points for c in clouds)}  {time.perf_counter() - t0:.3f}s",
        flush=True,
    )

    cfg = FusionConfig(min_overlap=MIN_OVERLAP, n_workers=n_workers, progress=True, verbose=True)
    try:
        recon = fuse_sensors(clouds, cfg)
    except AlignmentError as e:
        print(f"[error] {e}", file=sys.stderr, flush=True)
        sys.exit(2)

    save_reconstruction(recon, out_path)
    print(f"[write] {out_path} n_beacons={recon.n_beacons}", flush=True)
    print(recon.n_beacons)
    print(recon.max_sensor_distance)


if __name__ == "__main__":
    main()
