"""Platform pose data structure."""

from dataclasses import dataclass

from leeward.coords.rotations import Rotation
from leeward.coords.vectors import Point


@dataclass(frozen=True)
class PlatformPose:
    """Position and attitude of the platform at one instant.

    Attributes:
        position: Projected (UTM) position of the GNSS/IMU reference point,
            easting/northing/height in meters.
        orientation: IMU roll, pitch and yaw (radians) of the body frame
            relative to the local NED frame.
        time: GPS time in seconds.
    """

    position: Point
    orientation: Rotation
    time: float
