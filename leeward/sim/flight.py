"""
Synthetic airborne lidar flight lines.

Generates platform poses along a straight flight line and lidar returns
forward-modeled through the lidar equation onto flat ground, so that the
returns are exactly consistent with a known ("true") configuration.

Forward model per return:
    1. Laser direction in the projected frame: d = N · R_imu · B · (cos α, 0, sin α)
    2. Scanner origin: o = g - N · R_imu · l
    3. Range to the ground plane z = h: ρ = (h - o_z) / d_z
    4. Return: p = g + N · R_imu · (B · s(ρ, α) - l)

The default boresight, yaw 90°, turns the scanner's x-z plane across
track; scan angles around 90° then point near nadir.
"""

from typing import List, Optional, Sequence

import numpy as np

from leeward.config.config import Config
from leeward.coords.projection import utm_to_geodetic
from leeward.coords.rotations import Rotation
from leeward.coords.vectors import Point
from leeward.io.sbet import empty_sbet_records
from leeward.lidar.equation import LidarEquation
from leeward.lidar.measurement import Measurement
from leeward.lidar.types import LidarPoint
from leeward.trajectory.types import PlatformPose

DEFAULT_START = Point(320000.34, 4181319.35, 2687.59)
DEFAULT_START_TIME = 400825.0
DEFAULT_UTM_ZONE = 11
DEFAULT_BORESIGHT = Rotation.from_degrees(0.0, 0.0, 90.0)
DEFAULT_SCAN_ANGLES = np.radians(np.linspace(60.0, 120.0, 13))


def simulation_config(
    boresight: Rotation = DEFAULT_BORESIGHT,
    lever_arm: Point = Point(),
    utm_zone: int = DEFAULT_UTM_ZONE,
) -> Config:
    """Configuration matching the simulated scanner mount."""
    return Config(utm_zone=utm_zone, lever_arm=lever_arm, boresight=boresight)


def simulate_flight_line(
    start: Point = DEFAULT_START,
    heading: float = 0.0,
    speed: float = 60.0,
    duration: float = 2.0,
    rate: float = 200.0,
    start_time: float = DEFAULT_START_TIME,
    wobble: float = float(np.radians(2.0)),
    wobble_period: float = 1.5,
) -> List[PlatformPose]:
    """Generate platform poses along a straight, level flight line.

    Args:
        start: Projected position at ``start_time``.
        heading: Direction of flight, radians clockwise from north. Also
            the mean IMU yaw.
        speed: Ground speed (m/s).
        duration: Length of the line (s).
        rate: Pose rate (Hz).
        start_time: GPS time of the first pose (s).
        wobble: Amplitude of the roll/pitch/yaw oscillation (radians).
        wobble_period: Period of the oscillation (s).

    Returns:
        Poses, ``duration * rate`` of them, in time order.
    """
    t = np.arange(int(round(duration * rate))) / rate
    phase = 2.0 * np.pi * t / wobble_period
    east = start.x + speed * t * np.sin(heading)
    north = start.y + speed * t * np.cos(heading)
    roll = wobble * np.sin(phase)
    pitch = 0.5 * wobble * np.cos(phase)
    yaw = heading + 0.25 * wobble * np.sin(2.0 * phase)
    return [
        PlatformPose(
            position=Point(float(east[i]), float(north[i]), start.z),
            orientation=Rotation(float(roll[i]), float(pitch[i]), float(yaw[i])),
            time=float(start_time + t[i]),
        )
        for i in range(len(t))
    ]


def simulate_points(
    poses: Sequence[PlatformPose],
    config: Config,
    scan_angles: Sequence[float] = DEFAULT_SCAN_ANGLES,
    ground_height: float = 0.0,
    pose_step: int = 10,
    noise: float = 0.0,
    seed: Optional[int] = None,
) -> List[LidarPoint]:
    """Forward-model lidar returns from poses onto a flat ground plane.

    Args:
        poses: Platform poses.
        config: True configuration (boresight and lever arm) of the system.
        scan_angles: Scan angles fired at each selected pose (radians).
        ground_height: Height of the ground plane (m).
        pose_step: Fire from every ``pose_step``-th pose.
        noise: Standard deviation of Gaussian noise added to each
            coordinate (m).
        seed: Seed for the noise generator.

    Returns:
        Returns carrying their scan angle and the time of their pose.

    Raises:
        ValueError: If a beam does not point toward the ground plane.
    """
    rng = np.random.default_rng(seed)
    lever_arm = config.lever_arm.to_array()
    points = []
    for pose in poses[::pose_step]:
        gnss = pose.position.to_array()
        for scan_angle in scan_angles:
            unit = LidarEquation(pose.orientation, config.boresight, lever_arm, 1.0, scan_angle)
            direction = unit.laser_vector()
            origin = gnss + unit.offset() - direction
            if direction[2] >= 0.0:
                raise ValueError(
                    f"scan angle {np.degrees(scan_angle):.2f} deg does not reach the ground"
                )
            range_ = (ground_height - origin[2]) / direction[2]
            equation = LidarEquation(
                pose.orientation, config.boresight, lever_arm, range_, scan_angle
            )
            xyz = gnss + equation.offset()
            if noise > 0.0:
                xyz = xyz + rng.normal(0.0, noise, size=3)
            points.append(
                LidarPoint(
                    float(xyz[0]), float(xyz[1]), float(xyz[2]), float(scan_angle), pose.time
                )
            )
    return points


def simulate_measurements(
    true_config: Optional[Config] = None,
    config: Optional[Config] = None,
    poses: Optional[Sequence[PlatformPose]] = None,
    **kwargs,
) -> List[Measurement]:
    """Simulated measurements, generated under one config and evaluated under another.

    Args:
        true_config: Configuration the returns are generated with. Defaults
            to ``simulation_config()``.
        config: Configuration given to the measurements. Defaults to
            ``true_config``, in which case every residual is (numerically)
            zero.
        poses: Platform poses; defaults to ``simulate_flight_line()``.
        **kwargs: Passed to ``simulate_points``.

    Example:
        >>> truth = simulation_config()
        >>> guess = truth.with_value(Variable.BORESIGHT_ROLL, truth.boresight.roll + 0.01)
        >>> measurements = simulate_measurements(truth, guess)
    """
    if true_config is None:
        true_config = simulation_config()
    if config is None:
        config = true_config
    if poses is None:
        poses = simulate_flight_line()
    by_time = {pose.time: pose for pose in poses}
    return [
        Measurement(point, by_time[point.time], config)
        for point in simulate_points(poses, true_config, **kwargs)
    ]


def poses_to_sbet_records(
    poses: Sequence[PlatformPose],
    utm_zone: int = DEFAULT_UTM_ZONE,
) -> np.ndarray:
    """SBET records for poses, unprojecting positions from UTM.

    Velocities are finite differences of the positions; accelerations and
    angular rates are left at zero.
    """
    records = empty_sbet_records(len(poses))
    if not len(poses):
        return records
    easting = np.array([pose.position.x for pose in poses])
    northing = np.array([pose.position.y for pose in poses])
    latitude, longitude = utm_to_geodetic(easting, northing, utm_zone)
    time = np.array([pose.time for pose in poses])

    records["time"] = time
    records["latitude"] = latitude
    records["longitude"] = longitude
    records["altitude"] = [pose.position.z for pose in poses]
    records["roll"] = [pose.orientation.roll for pose in poses]
    records["pitch"] = [pose.orientation.pitch for pose in poses]
    records["heading"] = [pose.orientation.yaw for pose in poses]
    if len(poses) > 1:
        # NED velocities
        records["x_velocity"] = np.gradient(northing, time)
        records["y_velocity"] = np.gradient(easting, time)
    return records
