"""Smoke tests for the example scripts and the dataset generator.

Runs each script in a subprocess with the Agg backend, in a temporary
working directory, and checks its outputs.
"""

import json
import os
import re
import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest

WORKSPACE_ROOT = Path(__file__).parent.parent.parent


def run_script(relative_path, *args, cwd):
    env = os.environ.copy()
    env.update({
        "MPLBACKEND": "Agg",
        "PYTHONPATH": str(WORKSPACE_ROOT),
    })
    result = subprocess.run(
        [sys.executable, str(WORKSPACE_ROOT / relative_path), *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        timeout=300,
        env=env,
    )
    assert result.returncode == 0, f"Script failed with stderr:\n{result.stderr}"
    return result.stdout


def parse_adjust_summary(stdout):
    match = re.search(r"\[ADJUST_SUMMARY\]\s*(\{.*\})", stdout)
    assert match, "Missing [ADJUST_SUMMARY] JSON line in output"
    return json.loads(match.group(1))


def read_csv(path):
    with open(path) as f:
        header = f.readline().strip().split(",")
    data = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    return [dict(zip(header, row)) for row in data]


class TestExampleScripts:
    def test_adjust_inline(self, tmp_path):
        stdout = run_script(
            "examples/example_adjust.py", "-o", "adjusted.json", "--plot", "history.png",
            cwd=tmp_path,
        )

        assert "BORESIGHT ADJUSTMENT" in stdout
        summary = parse_adjust_summary(stdout)
        assert summary["rmse"]["final"] < summary["rmse"]["initial"]
        assert (tmp_path / "history.png").exists()
        saved = json.loads((tmp_path / "adjusted.json").read_text())
        assert saved == summary["config"]

    def test_tpu_inline(self, tmp_path):
        run_script(
            "examples/example_tpu.py", "-d", "5", "--normal", "0", "0", "1", "--plot", "",
            cwd=tmp_path,
        )

        rows = read_csv(tmp_path / "tpu.csv")
        assert rows
        for row in rows:
            assert float(row["sigmaVertical"]) > 0.0
            assert float(row["sigmaMagnitude"]) >= float(row["sigmaHorizontal"])
            assert np.isfinite(row["IncidenceAngle"])

    def test_partials_inline(self, tmp_path):
        stdout = run_script("examples/example_partials.py", "-d", "10", cwd=tmp_path)

        rows = read_csv(tmp_path / "partials.csv")
        assert rows
        assert "dX/dBoresightRoll analytical" in rows[0]
        assert "dX/dBoresightRoll numerical" in rows[0]
        assert "dX/dRange numerical" not in rows[0]
        assert "Overall maximum" in stdout

    def test_tpu_without_normal(self, tmp_path):
        run_script("examples/example_tpu.py", "-d", "20", "--plot", "", cwd=tmp_path)

        rows = read_csv(tmp_path / "tpu.csv")
        assert rows
        assert all(np.isnan(row["IncidenceAngle"]) for row in rows)

    def test_backconvert_best_fit_plane(self, tmp_path):
        stdout = run_script("examples/example_backconvert.py", "--best-fit-plane", cwd=tmp_path)

        rows = read_csv(tmp_path / "backconvert.csv")
        assert rows
        assert "BodyFrameX" not in rows[0]
        for row in rows:
            assert abs(row["PlaneZ"]) < 1e-6
        assert "Distance from best-fit plane" in stdout

    def test_trajectory_inline(self, tmp_path):
        run_script("examples/example_trajectory.py", "-d", "10", cwd=tmp_path)

        rows = read_csv(tmp_path / "trajectory.csv")
        # 2 s at 200 Hz
        assert len(rows) == 40
        assert list(rows[0]) == [
            "Time", "Easting", "Northing", "Elevation", "Roll", "Pitch", "Yaw"
        ]
        assert (tmp_path / "trajectory.png").exists()

    def test_backconvert_inline(self, tmp_path):
        run_script("examples/example_backconvert.py", "--body-frame", cwd=tmp_path)

        rows = read_csv(tmp_path / "backconvert.csv")
        assert rows
        for row in rows:
            residual = [float(row[f"Residual{axis}"]) for axis in "XYZ"]
            assert max(abs(r) for r in residual) < 1e-6
            assert "BodyFrameZ" in row


class TestGeneratedDataset:
    @pytest.fixture
    def dataset(self, tmp_path):
        run_script(
            "scripts/generate_synthetic_flight_dataset.py",
            "--output", "flight", "--duration", "1.0", "--scan-angles", "9",
            cwd=tmp_path,
        )
        return tmp_path / "flight"

    def test_files_written(self, dataset):
        for name in ["sbet.out", "points.las", "config.json", "true_config.json", "dataset.json"]:
            assert (dataset / name).exists()
        info = json.loads((dataset / "dataset.json").read_text())
        assert info["dataset_info"]["num_points"] == 20 * 9

    def test_adjust_on_dataset(self, dataset, tmp_path):
        stdout = run_script(
            "examples/example_adjust.py", "--data", str(dataset), "--plot", "",
            cwd=tmp_path,
        )

        summary = parse_adjust_summary(stdout)
        assert summary["n_measurements"] == 20 * 9
        # LAS scan angles are quantized to 0.006 degrees
        assert summary["rmse"]["final"] < 0.1 * summary["rmse"]["initial"]

    def test_trajectory_on_dataset(self, dataset, tmp_path):
        run_script(
            "examples/example_trajectory.py", str(dataset / "sbet.out"), "--plot", "",
            cwd=tmp_path,
        )

        rows = read_csv(tmp_path / "trajectory.csv")
        assert len(rows) == 200
        start = rows[0]
        assert 1e5 < start["Easting"] < 1e6
        assert start["Elevation"] > 0.0
