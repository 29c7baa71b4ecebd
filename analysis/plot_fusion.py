#!/usr/bin/env python3
"""
Plot a fused reconstruction: beacons and sensor origins in the reference frame.

Reads an NPZ written by run_fusion.py and writes a 3D scatter plus the three
axis-aligned projections to:
  analysis/output/<npz stem>.png   (or the given path)

Usage:
  python analysis/plot_fusion.py <recon.npz> [out.png]
"""

from __future__ import annotations

import pathlib
import sys

import numpy as np
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

THIS_DIR = pathlib.Path(__file__).resolve().parent
REPO_DIR = THIS_DIR.parent
if str(REPO_DIR / "src") not in sys.path:
    sys.path.insert(0, str(REPO_DIR / "src"))

from beaconfuse.dataset_io import load_reconstruction

OUT_DIR = THIS_DIR / "output"
BEACON_COLOR = "tab:blue"
SENSOR_COLOR = "tab:red"


def _draw_links(ax, rec: dict, *, dims: tuple[int, ...]) -> None:
    pos = {int(s): p for s, p in zip(rec["sensor_ids"], rec["sensor_positions"], strict=True)}
    for src, dst in zip(rec["link_source"], rec["link_destination"], strict=True):
        a, b = pos[int(src)], pos[int(dst)]
        ax.plot(*[[a[d], b[d]] for d in dims], color=SENSOR_COLOR, lw=0.8, alpha=0.6)


def plot_reconstruction(rec: dict, out_path: pathlib.Path) -> None:
    beacons = np.asarray(rec["beacons"], dtype=np.float64)
    sensors = np.asarray(rec["sensor_positions"], dtype=np.float64)

    fig = plt.figure(figsize=(12.0, 9.0), dpi=150)
    ax3 = fig.add_subplot(2, 2, 1, projection="3d")
    ax3.scatter(beacons[:, 0], beacons[:, 1], beacons[:, 2], s=4, c=BEACON_COLOR, label="beacons")
    ax3.scatter(sensors[:, 0], sensors[:, 1], sensors[:, 2], s=30, c=SENSOR_COLOR, marker="^", label="sensors")
    _draw_links(ax3, rec, dims=(0, 1, 2))
    ax3.set_title(f"n_beacons={rec['n_beacons']}  max_sensor_distance={rec['max_sensor_distance']}", fontsize=9)
    ax3.legend(fontsize=8)

    for k, (i, j) in enumerate([(0, 1), (0, 2), (1, 2)], start=2):
        ax = fig.add_subplot(2, 2, k)
        ax.scatter(beacons[:, i], beacons[:, j], s=3, c=BEACON_COLOR)
        ax.scatter(sensors[:, i], sensors[:, j], s=25, c=SENSOR_COLOR, marker="^")
        for sid, p in zip(rec["sensor_ids"], sensors, strict=True):
            ax.annotate(str(int(sid)), (p[i], p[j]), fontsize=7)
        _draw_links(ax, rec, dims=(i, j))
        ax.set_xlabel("xyz"[i])
        ax.set_ylabel("xyz"[j])
        ax.set_aspect("equal", adjustable="datalim")

    fig.tight_layout()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path)
    plt.close(fig)


def main() -> None:
    argv = sys.argv[1:]
    if len(argv) < 1:
        print("Usage: plot_fusion.py <recon.npz> [out.png]", file=sys.stderr)
        sys.exit(1)
    npz_path = pathlib.Path(argv[0])
    out_path = pathlib.Path(argv[1]) if len(argv) > 1 else OUT_DIR / f"{npz_path.stem}.png"
    rec = load_reconstruction(npz_path)
    plot_reconstruction(rec, out_path)
    print(f"[write] {out_path}", flush=True)


if __name__ == "__main__":
    main()
