"""Unit tests for the quantized trajectory index."""

import unittest

import numpy as np
import pytest
from numpy.testing import assert_allclose

from leeward.config.config import Config
from leeward.coords.rotations import Rotation
from leeward.coords.vectors import Point
from leeward.exceptions import MissingTimeError, PoseNotFoundError
from leeward.io.sbet import write_sbet
from leeward.lidar import LidarPoint, Measurement
from leeward.sim import poses_to_sbet_records, simulate_flight_line
from leeward.trajectory import DEFAULT_QUANTIZATION, PlatformPose, Trajectory


def pose_at(time: float, x: float = 0.0) -> PlatformPose:
    return PlatformPose(Point(x, 0.0, 100.0), Rotation(), time)


class TestTrajectoryIndex(unittest.TestCase):
    def setUp(self) -> None:
        # 200 Hz samples
        self.poses = [pose_at(1000.0 + i * 0.005, float(i)) for i in range(400)]
        self.trajectory = Trajectory(self.poses)

    def test_len_and_span(self) -> None:
        self.assertEqual(len(self.trajectory), 400)
        self.assertEqual(self.trajectory.quantization, DEFAULT_QUANTIZATION)
        self.assertAlmostEqual(self.trajectory.start_time, 1000.0)
        self.assertAlmostEqual(self.trajectory.end_time, 1000.0 + 399 * 0.005)
        self.assertEqual(len(self.trajectory.times()), 400)

    def test_scaled_time(self) -> None:
        self.assertEqual(self.trajectory.scaled_time(1000.0), 100000)
        self.assertEqual(self.trajectory.scaled_time(1000.004), 100000)
        self.assertEqual(self.trajectory.scaled_time(1000.006), 100001)

    def test_get_exact_time(self) -> None:
        pose = self.trajectory.get(1000.5)
        self.assertIsNotNone(pose)
        self.assertAlmostEqual(pose.time, 1000.5, places=9)

    def test_get_nearest_in_bucket(self) -> None:
        """A query is answered by the sample nearest its bucket centre."""
        pose = self.trajectory.get(1000.503)
        self.assertAlmostEqual(pose.time, 1000.5, places=9)

    def test_outside_span(self) -> None:
        self.assertIsNone(self.trajectory.get(999.0))
        self.assertIsNone(self.trajectory.get(1003.0))

    def test_non_finite_time(self) -> None:
        self.assertIsNone(self.trajectory.get(float("nan")))
        self.assertIsNone(self.trajectory.get(float("inf")))
        self.assertIsNone(self.trajectory.get(float("-inf")))

    def test_empty_bucket(self) -> None:
        sparse = Trajectory([pose_at(10.0), pose_at(10.5)])
        self.assertIsNone(sparse.get(10.25))
        self.assertIsNotNone(sparse.get(10.5))

    def test_unsorted_input(self) -> None:
        trajectory = Trajectory(reversed(self.poses))
        self.assertEqual([p.time for p in trajectory], [p.time for p in self.poses])

    def test_invalid_quantization(self) -> None:
        with self.assertRaises(ValueError):
            Trajectory(self.poses, quantization=0)


class TestTrajectoryMeasurement:
    def test_measurement(self):
        trajectory = Trajectory([pose_at(5.0), pose_at(5.01)])
        config = Config(utm_zone=11)

        measurement = trajectory.measurement(LidarPoint(1.0, 2.0, 3.0, None, 5.01), config)

        assert isinstance(measurement, Measurement)
        assert measurement.pose == trajectory[1]
        assert measurement.config == config

    def test_missing_time(self):
        trajectory = Trajectory([pose_at(5.0)])
        with pytest.raises(MissingTimeError):
            trajectory.measurement(LidarPoint(1.0, 2.0, 3.0), Config(utm_zone=11))

    def test_pose_not_found(self):
        trajectory = Trajectory([pose_at(5.0)])
        with pytest.raises(PoseNotFoundError) as info:
            trajectory.measurement(LidarPoint(1.0, 2.0, 3.0, None, 7.0), Config(utm_zone=11))
        assert info.value.time == 7.0

    def test_measurements_skip_missing(self):
        trajectory = Trajectory([pose_at(5.0)])
        points = [
            LidarPoint(1.0, 2.0, 3.0, None, 5.0),
            LidarPoint(1.0, 2.0, 3.0, None, 9.0),
            LidarPoint(1.0, 2.0, 3.0),
        ]
        config = Config(utm_zone=11)

        assert len(trajectory.measurements(points, config, skip_missing=True)) == 1
        with pytest.raises(PoseNotFoundError):
            trajectory.measurements(points, config)


class TestTrajectoryFromSbet:
    def test_projected_positions_round_trip(self, tmp_path):
        poses = simulate_flight_line(duration=0.5)
        path = tmp_path / "sbet.out"
        write_sbet(path, poses_to_sbet_records(poses, utm_zone=11))

        trajectory = Trajectory.from_sbet(path, utm_zone=11)

        assert len(trajectory) == len(poses)
        for expected, actual in zip(poses, trajectory):
            assert actual.time == expected.time
            assert_allclose(
                actual.position.to_array(), expected.position.to_array(), atol=1e-6
            )
            assert actual.orientation == expected.orientation

    def test_lookup_after_projection(self, tmp_path):
        poses = simulate_flight_line(duration=0.5)
        path = tmp_path / "sbet.out"
        write_sbet(path, poses_to_sbet_records(poses))

        trajectory = Trajectory.from_sbet(path, utm_zone=11)
        pose = trajectory.get(poses[10].time + 0.001)

        assert pose.time == pytest.approx(poses[10].time)
        assert np.isclose(pose.position.x, poses[10].position.x, atol=1e-6)
