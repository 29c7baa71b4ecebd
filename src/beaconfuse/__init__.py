"""
beaconfuse: fuse beacon reports from arbitrarily oriented 3D sensors.

The main public entry points are:
  - `parse_report` / `load_report` (text -> PointClouds)
  - `fuse_sensors` (PointClouds -> Reconstruction)
  - `solve_report` (text -> (beacon count, max sensor distance))
"""

from .cloud import PointCloud
from .compose import GlobalFrame, Reconstruction, compose_frames
from .dataset_io import load_reconstruction, load_report, parse_report, save_reconstruction
from .fuse import FusionConfig, fuse_sensors, solve_report
from .graph import AlignmentError, SensorLink, build_links, try_link
from .overlap import may_overlap, shared_distance_count
from .pose import Pose, solve_pose
from .rotation import ROTATIONS

__all__ = [
    "PointCloud",
    "ROTATIONS",
    "may_overlap",
    "shared_distance_count",
    "Pose",
    "solve_pose",
    "AlignmentError",
    "SensorLink",
    "try_link",
    "build_links",
    "GlobalFrame",
    "Reconstruction",
    "compose_frames",
    "parse_report",
    "load_report",
    "save_reconstruction",
    "load_reconstruction",
    "FusionConfig",
    "fuse_sensors",
    "solve_report",
]
