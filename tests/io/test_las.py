"""Unit tests for LAS reading/writing and measurement loading."""

import numpy as np
import pytest

from leeward.exceptions import PoseNotFoundError
from leeward.io import load_measurements, read_las, write_las, write_sbet
from leeward.lidar import LidarPoint
from leeward.sim import (
    poses_to_sbet_records,
    simulate_flight_line,
    simulate_points,
    simulation_config,
)


class TestLas:
    def test_round_trip(self, tmp_path):
        points = [
            LidarPoint(320000.345, 4181319.351, 12.5, np.radians(12.0), 400825.1),
            LidarPoint(320010.0, 4181320.0, -3.25, np.radians(-30.0), 400825.2),
        ]
        path = tmp_path / "points.las"

        write_las(path, points)
        read = read_las(path)

        assert len(read) == 2
        for expected, actual in zip(points, read):
            assert actual.x == pytest.approx(expected.x, abs=1e-3)
            assert actual.y == pytest.approx(expected.y, abs=1e-3)
            assert actual.z == pytest.approx(expected.z, abs=1e-3)
            assert actual.scan_angle == pytest.approx(expected.scan_angle, abs=np.radians(0.006))
            assert actual.time == pytest.approx(expected.time)

    def test_ignore_scan_angle(self, tmp_path):
        path = tmp_path / "points.las"
        write_las(path, [LidarPoint(1.0, 2.0, 3.0, 0.1, 5.0)])

        (point,) = read_las(path, use_scan_angle=False)

        assert point.scan_angle is None
        assert point.time == 5.0

    def test_decimation(self, tmp_path):
        path = tmp_path / "points.las"
        write_las(path, [LidarPoint(float(i), 0.0, 0.0, 0.0, float(i)) for i in range(10)])

        points = read_las(path, decimation=3)

        assert [p.x for p in points] == pytest.approx([0.0, 3.0, 6.0, 9.0])
        with pytest.raises(ValueError, match="decimation"):
            read_las(path, decimation=0)


class TestLoadMeasurements:
    def test_simulated_files(self, tmp_path):
        config = simulation_config()
        poses = simulate_flight_line(duration=0.5)
        points = simulate_points(poses, config, pose_step=20)
        write_sbet(tmp_path / "sbet.out", poses_to_sbet_records(poses, config.utm_zone))
        write_las(tmp_path / "points.las", points)

        measurements = load_measurements(
            tmp_path / "sbet.out", tmp_path / "points.las", config
        )

        assert len(measurements) == len(points)
        # Millimeter LAS coordinates and 0.006° scan angles
        for measurement in measurements:
            assert np.linalg.norm(measurement.residuals()) < 0.5

        decimated = load_measurements(
            tmp_path / "sbet.out", tmp_path / "points.las", config, decimation=2
        )
        assert len(decimated) == (len(points) + 1) // 2

    def test_derived_scan_angles_fit_better(self, tmp_path):
        config = simulation_config()
        poses = simulate_flight_line(duration=0.25)
        points = simulate_points(poses, config, pose_step=25)
        write_sbet(tmp_path / "sbet.out", poses_to_sbet_records(poses, config.utm_zone))
        write_las(tmp_path / "points.las", points)

        measurements = load_measurements(
            tmp_path / "sbet.out", tmp_path / "points.las", config, use_scan_angle=False
        )

        for measurement in measurements:
            assert not measurement.has_lidar_scan_angle()
            assert np.linalg.norm(measurement.residuals()) < 1e-3

    def test_points_outside_trajectory(self, tmp_path):
        config = simulation_config()
        poses = simulate_flight_line(duration=0.25)
        write_sbet(tmp_path / "sbet.out", poses_to_sbet_records(poses, config.utm_zone))
        write_las(tmp_path / "points.las", [LidarPoint(1.0, 2.0, 3.0, 0.0, 1.0)])

        with pytest.raises(PoseNotFoundError):
            load_measurements(tmp_path / "sbet.out", tmp_path / "points.las", config)
        assert (
            load_measurements(
                tmp_path / "sbet.out", tmp_path / "points.las", config, skip_missing=True
            )
            == []
        )
