"""Lidar geolocation, boresight calibration, and uncertainty propagation.

This package contains the building blocks of the lidar equation:
- coords: Rotations, points, frame conventions and UTM projection
- config: System calibration (lever arm, boresight) and error magnitudes
- lidar: Measurements, analytic partial derivatives and TPU
- trajectory: Time-indexed platform poses
- estimators: Gauss-Newton boresight and lever arm adjustment
- io: SBET and LAS readers/writers
- sim: Synthetic flight lines for testing and examples
"""

__version__ = "0.1.0"
