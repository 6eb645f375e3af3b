"""Coordinate frame conventions for the lidar equation.

Frames involved in geolocating a lidar return:
- Projected (UTM): easting, northing, height. Trajectory positions and
  lidar points live here.
- Navigation (NED): North-East-Down, the frame in which the IMU reports
  roll, pitch and yaw.
- Body: platform frame (x=forward, y=right, z=down) rotated from NED by
  the IMU attitude. Boresight and lever arm are defined against it.
- Scanner: the sensor's own frame; returns lie in its x-z plane.

The projected frame is treated as a local East-North-Up frame, so a fixed
axis swap converts between it and NED.
"""

import numpy as np
from numpy.typing import NDArray

# Swaps north/east and flips down to up. It is its own inverse.
NED_TO_ENU: NDArray[np.float64] = np.array(
    [
        [0.0, 1.0, 0.0],
        [1.0, 0.0, 0.0],
        [0.0, 0.0, -1.0],
    ],
    dtype=np.float64,
)
NED_TO_ENU.setflags(write=False)


def ned_to_enu(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert a vector (or N x 3 array of vectors) from NED to ENU."""
    return np.asarray(v, dtype=np.float64) @ NED_TO_ENU.T


def enu_to_ned(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert a vector (or N x 3 array of vectors) from ENU to NED."""
    return np.asarray(v, dtype=np.float64) @ NED_TO_ENU
