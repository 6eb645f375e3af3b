"""LAS point cloud reading and writing.

Lidar returns are read into ``LidarPoint`` values through laspy. Scan
angles are stored in degrees in LAS files and converted to radians here:

- point formats 0-5: ``scan_angle_rank``, whole degrees (int8)
- point formats 6-10: ``scan_angle``, 0.006 degree increments (int16)

Files written by ``write_las`` use point format 6 (LAS 1.4).
"""

from pathlib import Path
from typing import Iterable, List, Union

import laspy
import numpy as np

from leeward.lidar.types import LidarPoint

SCAN_ANGLE_INCREMENT_DEGREES = 0.006
DEFAULT_SCALE = 0.001


def _scan_angles_degrees(las: laspy.LasData) -> np.ndarray:
    dimensions = set(las.point_format.dimension_names)
    if "scan_angle" in dimensions:
        return np.asarray(las.scan_angle, dtype=np.float64) * SCAN_ANGLE_INCREMENT_DEGREES
    return np.asarray(las.scan_angle_rank, dtype=np.float64)


def read_las(
    path: Union[str, Path],
    use_scan_angle: bool = True,
    decimation: int = 1,
) -> List[LidarPoint]:
    """Read the returns of a LAS file.

    Args:
        path: Path to a LAS (or LAZ, if a backend is installed) file.
        use_scan_angle: If False, points carry no scan angle and
            measurements derive it from the geometry.
        decimation: Keep every ``decimation``-th point.

    Returns:
        List of ``LidarPoint`` with scan angles in radians and GPS time,
        when the point format has one.

    Raises:
        ValueError: If ``decimation`` is less than 1.
    """
    if decimation < 1:
        raise ValueError(f"decimation must be >= 1, got {decimation}")
    with laspy.open(Path(path)) as f:
        las = f.read()

    x = np.asarray(las.x, dtype=np.float64)[::decimation]
    y = np.asarray(las.y, dtype=np.float64)[::decimation]
    z = np.asarray(las.z, dtype=np.float64)[::decimation]
    n = len(x)

    if use_scan_angle:
        scan_angles = np.radians(_scan_angles_degrees(las))[::decimation]
    else:
        scan_angles = [None] * n
    if "gps_time" in set(las.point_format.dimension_names):
        times = np.asarray(las.gps_time, dtype=np.float64)[::decimation]
    else:
        times = [None] * n

    points = []
    for i in range(n):
        scan_angle = None if scan_angles[i] is None else float(scan_angles[i])
        time = None if times[i] is None else float(times[i])
        points.append(LidarPoint(float(x[i]), float(y[i]), float(z[i]), scan_angle, time))
    return points


def write_las(
    path: Union[str, Path],
    points: Iterable[LidarPoint],
    scale: float = DEFAULT_SCALE,
) -> None:
    """Write lidar points to a LAS 1.4 file with point format 6.

    Missing scan angles and times are written as zero.

    Args:
        path: Output path.
        points: Points to write.
        scale: Coordinate resolution in meters.
    """
    points = list(points)
    xyz = np.array([[p.x, p.y, p.z] for p in points], dtype=np.float64).reshape(-1, 3)
    scan_angles = np.array(
        [0.0 if p.scan_angle is None else p.scan_angle for p in points], dtype=np.float64
    )
    times = np.array([0.0 if p.time is None else p.time for p in points], dtype=np.float64)

    header = laspy.LasHeader(point_format=6, version="1.4")
    header.scales = np.array([scale, scale, scale])
    header.offsets = np.floor(xyz.min(axis=0)) if len(xyz) else np.zeros(3)

    las = laspy.LasData(header)
    las.x = xyz[:, 0]
    las.y = xyz[:, 1]
    las.z = xyz[:, 2]
    las.scan_angle = np.round(
        np.degrees(scan_angles) / SCAN_ANGLE_INCREMENT_DEGREES
    ).astype(np.int16)
    las.gps_time = times
    las.write(Path(path))
