"""Data structures for lidar returns.

A lidar return is anything exposing ``x``, ``y``, ``z``, an optional
``scan_angle`` (radians) and an optional ``time`` (GPS seconds). Readers
produce ``LidarPoint`` values; measurements copy whatever they are given
into one so that a measurement never aliases caller-owned state.
"""

from dataclasses import dataclass
from typing import Optional, Protocol

from leeward.coords.vectors import Point


class Lidar(Protocol):
    """Capabilities a lidar return must provide."""

    x: float
    y: float
    z: float
    scan_angle: Optional[float]
    time: Optional[float]


@dataclass(frozen=True)
class LidarPoint:
    """A single lidar return.

    Attributes:
        x: Easting in meters.
        y: Northing in meters.
        z: Height in meters.
        scan_angle: Scan angle in radians as recorded by the scanner, or
            None to derive it from the geometry.
        time: GPS time in seconds, or None if the source has no timestamps.
    """

    x: float
    y: float
    z: float
    scan_angle: Optional[float] = None
    time: Optional[float] = None

    @classmethod
    def from_lidar(cls, lidar: Lidar) -> "LidarPoint":
        """Copy any lidar-like object into a ``LidarPoint``."""
        if isinstance(lidar, cls):
            return lidar
        scan_angle = getattr(lidar, "scan_angle", None)
        time = getattr(lidar, "time", None)
        return cls(
            float(lidar.x),
            float(lidar.y),
            float(lidar.z),
            None if scan_angle is None else float(scan_angle),
            None if time is None else float(time),
        )

    @property
    def point(self) -> Point:
        return Point(self.x, self.y, self.z)
