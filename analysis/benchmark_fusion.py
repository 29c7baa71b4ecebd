#!/usr/bin/env python3
"""
Benchmark the fusion stages on simulated surveys.

Per survey size: report parse, cloud construction (rotations + fingerprint),
pairwise overlap filter, link discovery, composition. Timings are the best of
N_REP repeats.

Usage:
  cd <repo_root>; python analysis/benchmark_fusion.py [n_sensors ...]
"""
from __future__ import annotations

import resource
import sys
import time
from pathlib import Path

BASE = Path(__file__).resolve().parent
REPO_DIR = BASE.parent
if str(REPO_DIR / "src") not in sys.path:
    sys.path.insert(0, str(REPO_DIR / "src"))

from beaconfuse.compose import compose_frames
from beaconfuse.dataset_io import parse_report
from beaconfuse.graph import build_links
from beaconfuse.overlap import may_overlap
from beaconfuse.simulate import format_report, simulate_survey

N_SENSORS = (5, 10, 20)
N_SHARED = 12
N_PRIVATE = 14
N_REP = 3
SEED = 0


def _rss_mb() -> float:
    return resource.getrusage(resource.RUSAGE_SELF).ru_maxrss / 1024.0


def _best_of(fn, n_rep: int = N_REP):
    best = float("inf")
    out = None
    for _ in range(n_rep):
        t0 = time.perf_counter()
        out = fn()
        best = min(best, time.perf_counter() - t0)
    return best, out


def bench_one(n_sensors: int) -> None:
    survey = simulate_survey(n_sensors=n_sensors, n_shared=N_SHARED, n_private=N_PRIVATE, seed=SEED)
    text = format_report(survey.clouds)

    t_parse, clouds = _best_of(lambda: parse_report(text))
    t_filter, n_pass = _best_of(
        lambda: sum(
            may_overlap(a, b) for i, a in enumerate(clouds) for b in clouds[i + 1:]
        )
    )
    t_links, links = _best_of(lambda: build_links(clouds))
    t_compose, recon = _best_of(lambda: compose_frames(clouds, links))

    ok = recon.n_beacons == survey.n_beacons and recon.max_sensor_distance == survey.max_sensor_distance
    n_pairs = n_sensors * (n_sensors - 1) // 2
    print(
        f"[bench] n_sensors={n_sensors:3d} n_points={sum(c.n_points for c in clouds):5d}  "
        f"parse={t_parse:.4f}s  filter={t_filter:.4f}s ({n_pass}/{n_pairs} pass)  "
        f"links={t_links:.4f}s  compose={t_compose:.4f}s  "
        f"rss={_rss_mb():.1f}MB  {'ok' if ok else 'MISMATCH'}",
        flush=True,
    )


def main() -> None:
    argv = sys.argv[1:]
    sizes = tuple(int(a) for a in argv) if argv else N_SENSORS
    for n in sizes:
        bench_one(n)


if __name__ == "__main__":
    main()
