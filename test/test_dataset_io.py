"""
Tests for report parsing and reconstruction artifacts.
"""
from __future__ import annotations

import tempfile
from pathlib import Path

import numpy as np
import pytest

from beaconfuse.compose import compose_frames
from beaconfuse.dataset_io import load_reconstruction, load_report, parse_report, save_reconstruction
from beaconfuse.graph import build_links
from beaconfuse.simulate import format_report, simulate_survey

REPORT = """\
--- scanner 0 ---
404,-588,-901
528,-643,409
-838,591,734

--- scanner 1 ---
686,422,578
 605, 423, 415
"""


# --- Parsing ---

def test_parse_blocks_in_order():
    clouds = parse_report(REPORT)
    assert [c.sensor_id for c in clouds] == [0, 1]
    assert clouds[0].points.tolist() == [[404, -588, -901], [528, -643, 409], [-838, 591, 734]]
    assert clouds[1].points.tolist() == [[686, 422, 578], [605, 423, 415]]


def test_parse_tolerates_crlf_and_trailing_blank_lines():
    clouds = parse_report(REPORT.replace("\n", "\r\n") + "\r\n\r\n")
    assert [c.n_points for c in clouds] == [3, 2]


def test_parse_keeps_report_order_not_id_order():
    text = "--- scanner 7 ---\n1,2,3\n\n--- scanner 2 ---\n4,5,6\n"
    assert [c.sensor_id for c in parse_report(text)] == [7, 2]


@pytest.mark.parametrize(
    "text, lineno",
    [
        ("1,2,3\n", 1),
        ("--- scanner 0 ---\n1,2\n", 2),
        ("--- scanner 0 ---\n1,2,3,4\n", 2),
        ("--- scanner 0 ---\n1,a,3\n", 2),
        ("--- scanner 0 ---\n1,2,3\n1.5,2,3\n", 3),
        ("--- scanner 0 ---\n1,2,3\n\n4,5,6\n", 4),
        ("--- scanner 0 ---\n\n--- scanner 1 ---\n1,2,3\n", 1),
        ("--- scanner 0 ---\n1,2,3\n\n--- scanner 0 ---\n4,5,6\n", 4),
        ("--- scanner 0 ---\n99999999999999999999,1,2\n", 2),
        ("--- scanner 0 ---\n1,-9223372036854775809,2\n", 2),
    ],
)
def test_parse_errors_report_line(text, lineno):
    with pytest.raises(ValueError, match=f"line {lineno}:"):
        parse_report(text)


def test_parse_empty_report():
    with pytest.raises(ValueError):
        parse_report("\n\n")


def test_load_report_from_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "report.txt"
        path.write_text(REPORT, encoding="utf-8")
        clouds = load_report(path)
    assert len(clouds) == 2


def test_formatted_survey_parses_back():
    survey = simulate_survey(n_sensors=3, seed=41)
    clouds = parse_report(format_report(survey.clouds))
    assert [c.sensor_id for c in clouds] == [0, 1, 2]
    for a, b in zip(clouds, survey.clouds, strict=True):
        assert np.array_equal(a.points, b.points)


# --- Artifacts ---

def test_reconstruction_artifact_keys_and_shapes():
    survey = simulate_survey(n_sensors=4, seed=42)
    recon = compose_frames(survey.clouds, build_links(survey.clouds))
    with tempfile.TemporaryDirectory() as tmpdir:
        out_path = save_reconstruction(recon, Path(tmpdir) / "nested" / "recon.npz")
        assert out_path.exists()
        rec = load_reconstruction(out_path)
    assert rec["beacons"].shape == (recon.n_beacons, 3)
    assert np.array_equal(rec["beacons"], recon.beacons)
    assert rec["sensor_ids"].tolist() == [0, 1, 2, 3]
    assert np.array_equal(rec["sensor_positions"], recon.sensor_positions)
    assert rec["link_source"].shape == (3,)
    assert rec["link_translation"].shape == (3, 3)
    assert rec["n_beacons"] == recon.n_beacons
    assert rec["max_sensor_distance"] == recon.max_sensor_distance
