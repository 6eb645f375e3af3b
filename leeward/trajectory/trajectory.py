"""Time-indexed platform trajectory.

Trajectory samples are indexed by quantized time: a sample at time t goes
into bucket ``floor(t * quantization + 0.5)``. A lookup returns the sample
in the bucket of the query time, so with the default quantization of 100
(10 ms buckets) a 200 Hz SBET is looked up to the nearest sample without a
search. When several samples share a bucket the one closest to the bucket
centre is kept.
"""

from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Union

import numpy as np

from leeward.config.config import Config
from leeward.coords.projection import geodetic_to_utm
from leeward.coords.rotations import Rotation
from leeward.coords.vectors import Point
from leeward.exceptions import MissingTimeError, PoseNotFoundError
from leeward.lidar.types import Lidar
from leeward.trajectory.types import PlatformPose

DEFAULT_QUANTIZATION = 100


class Trajectory:
    """Platform poses with quantized time lookup.

    Args:
        poses: Platform poses, in any order.
        quantization: Buckets per second.

    Example:
        >>> trajectory = Trajectory.from_sbet("data/sbet.out", utm_zone=11)
        >>> pose = trajectory.get(400825.80649)
        >>> measurement = trajectory.measurement(point, config)
    """

    def __init__(
        self,
        poses: Iterable[PlatformPose],
        quantization: int = DEFAULT_QUANTIZATION,
    ):
        if quantization <= 0:
            raise ValueError(f"quantization must be positive, got {quantization}")
        self.quantization = quantization
        self._poses: List[PlatformPose] = sorted(poses, key=lambda pose: pose.time)
        self._index: Dict[int, PlatformPose] = {}
        for pose in self._poses:
            key = self.scaled_time(pose.time)
            existing = self._index.get(key)
            if existing is None or self._distance(pose.time, key) < self._distance(
                existing.time, key
            ):
                self._index[key] = pose

    @classmethod
    def from_records(
        cls,
        records: np.ndarray,
        utm_zone: int,
        quantization: int = DEFAULT_QUANTIZATION,
    ) -> "Trajectory":
        """Build a trajectory from SBET records, projecting positions to UTM.

        Platform heading is used as the IMU yaw.
        """
        easting, northing = geodetic_to_utm(
            records["latitude"], records["longitude"], utm_zone
        )
        easting = np.atleast_1d(easting)
        northing = np.atleast_1d(northing)
        poses = [
            PlatformPose(
                position=Point(float(easting[i]), float(northing[i]), float(record["altitude"])),
                orientation=Rotation(
                    float(record["roll"]), float(record["pitch"]), float(record["heading"])
                ),
                time=float(record["time"]),
            )
            for i, record in enumerate(records)
        ]
        return cls(poses, quantization)

    @classmethod
    def from_sbet(
        cls,
        path: Union[str, Path],
        utm_zone: int,
        quantization: int = DEFAULT_QUANTIZATION,
    ) -> "Trajectory":
        """Read an SBET file into a trajectory projected into ``utm_zone``."""
        from leeward.io.sbet import read_sbet

        return cls.from_records(read_sbet(path), utm_zone, quantization)

    def __len__(self) -> int:
        return len(self._poses)

    def __iter__(self) -> Iterator[PlatformPose]:
        return iter(self._poses)

    def __getitem__(self, i: int) -> PlatformPose:
        return self._poses[i]

    @property
    def start_time(self) -> Optional[float]:
        return self._poses[0].time if self._poses else None

    @property
    def end_time(self) -> Optional[float]:
        return self._poses[-1].time if self._poses else None

    def times(self) -> np.ndarray:
        return np.array([pose.time for pose in self._poses], dtype=np.float64)

    def scaled_time(self, time: float) -> int:
        """Bucket key of a time."""
        return int(np.floor(time * self.quantization + 0.5))

    def _distance(self, time: float, key: int) -> float:
        return abs(time * self.quantization - key)

    def get(self, time: float) -> Optional[PlatformPose]:
        """Pose in the bucket of ``time``, or None if there is none."""
        if not np.isfinite(time):
            return None
        return self._index.get(self.scaled_time(time))

    def measurement(self, lidar: Lidar, config: Config):
        """Join a lidar return with the pose at its time.

        Raises:
            MissingTimeError: If the return has no time.
            PoseNotFoundError: If no pose covers the return's time.
        """
        from leeward.lidar.measurement import Measurement

        time = getattr(lidar, "time", None)
        if time is None:
            raise MissingTimeError("lidar point does not have a time")
        pose = self.get(time)
        if pose is None:
            raise PoseNotFoundError(time)
        return Measurement(lidar, pose, config)

    def measurements(
        self,
        points: Iterable[Lidar],
        config: Config,
        skip_missing: bool = False,
    ) -> list:
        """Measurements for many returns.

        Args:
            points: Lidar returns.
            config: Configuration shared by every measurement.
            skip_missing: Drop returns without time or pose instead of
                raising.
        """
        measurements = []
        for point in points:
            try:
                measurements.append(self.measurement(point, config))
            except (MissingTimeError, PoseNotFoundError):
                if not skip_missing:
                    raise
        return measurements
