"""
Sensor report parsing and reconstruction artifact I/O.

Report layout (one block per sensor, blocks separated by blank lines):

  --- scanner 0 ---
  404,-588,-901
  528,-643,409
  ...

  --- scanner 1 ---
  ...

The first block is the reference sensor. Artifacts are written as compressed
NPZ files.
"""

from __future__ import annotations

import re
from pathlib import Path

import numpy as np

from .cloud import PointCloud
from .compose import Reconstruction

_HEADER_RE = re.compile(r"^-{2,}\s*scanner\s+(-?\d+)\s*-{2,}$", re.IGNORECASE)
_INT_RE = re.compile(r"^[+-]?\d+$")
_INT64 = np.iinfo(np.int64)


def _parse_point(line: str, lineno: int) -> tuple[int, int, int]:
    tokens = [tok.strip() for tok in line.split(",")]
    if len(tokens) != 3:
        raise ValueError(f"line {lineno}: expected 'x,y,z', got {line!r}.")
    for tok in tokens:
        if not _INT_RE.match(tok):
            raise ValueError(f"line {lineno}: non-integer coordinate {tok!r} in {line!r}.")
    x, y, z = (int(tok) for tok in tokens)
    for tok, value in zip(tokens, (x, y, z)):
        if not _INT64.min <= value <= _INT64.max:
            raise ValueError(f"line {lineno}: coordinate {tok!r} out of range in {line!r}.")
    return (x, y, z)


def parse_report(text: str) -> list[PointCloud]:
    """
    Parse a multi-sensor report into clouds, in input order.

    Raises ValueError (with the 1-based line number) on a point line before any
    header, a malformed triplet, a header without points, a duplicate sensor id,
    or an input with no sensors.
    """
    blocks: list[tuple[int, int, list[tuple[int, int, int]]]] = []
    current: tuple[int, int, list[tuple[int, int, int]]] | None = None

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            current = None
            continue
        m = _HEADER_RE.match(line)
        if m is not None:
            current = (int(m.group(1)), lineno, [])
            blocks.append(current)
            continue
        if current is None:
            raise ValueError(f"line {lineno}: point {line!r} is not preceded by a scanner header.")
        current[2].append(_parse_point(line, lineno))

    if not blocks:
        raise ValueError("Report contains no scanner blocks.")

    seen: dict[int, int] = {}
    clouds: list[PointCloud] = []
    for sensor_id, lineno, points in blocks:
        if sensor_id in seen:
            raise ValueError(f"line {lineno}: duplicate scanner {sensor_id} (first at line {seen[sensor_id]}).")
        seen[sensor_id] = lineno
        if not points:
            raise ValueError(f"line {lineno}: scanner {sensor_id} reports no beacons.")
        clouds.append(PointCloud(sensor_id=sensor_id, points=np.array(points, dtype=np.int64)))
    return clouds


def load_report(path: Path) -> list[PointCloud]:
    path = Path(path)
    return parse_report(path.read_text(encoding="utf-8"))


def save_reconstruction(recon: Reconstruction, path: Path) -> Path:
    """Write a reconstruction to a compressed NPZ; returns the path written."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    links = recon.links
    np.savez_compressed(
        path,
        beacons=np.asarray(recon.beacons, dtype=np.int64),
        sensor_ids=np.asarray(recon.sensor_ids, dtype=np.int64),
        sensor_positions=np.asarray(recon.sensor_positions, dtype=np.int64).reshape(-1, 3),
        link_source=np.array([l.source for l in links], dtype=np.int64),
        link_destination=np.array([l.destination for l in links], dtype=np.int64),
        link_rotation_index=np.array([l.rotation_index for l in links], dtype=np.int64),
        link_translation=np.array([l.translation for l in links], dtype=np.int64).reshape(-1, 3),
        link_n_matches=np.array([l.n_matches for l in links], dtype=np.int64),
        n_beacons=np.int64(recon.n_beacons),
        max_sensor_distance=np.int64(recon.max_sensor_distance),
    )
    return path


def load_reconstruction(npz_path: Path) -> dict:
    """
    Load an NPZ written by `save_reconstruction`.

    Returns dict with: beacons (n, 3), sensor_ids (m,), sensor_positions (m, 3),
    link_* arrays, n_beacons, max_sensor_distance.
    """
    with np.load(Path(npz_path), allow_pickle=False) as z:
        return dict(
            beacons=np.asarray(z["beacons"], dtype=np.int64).reshape(-1, 3),
            sensor_ids=np.asarray(z["sensor_ids"], dtype=np.int64),
            sensor_positions=np.asarray(z["sensor_positions"], dtype=np.int64).reshape(-1, 3),
            link_source=np.asarray(z["link_source"], dtype=np.int64),
            link_destination=np.asarray(z["link_destination"], dtype=np.int64),
            link_rotation_index=np.asarray(z["link_rotation_index"], dtype=np.int64),
            link_translation=np.asarray(z["link_translation"], dtype=np.int64).reshape(-1, 3),
            link_n_matches=np.asarray(z["link_n_matches"], dtype=np.int64),
            n_beacons=int(z["n_beacons"]),
            max_sensor_distance=int(z["max_sensor_distance"]),
        )
