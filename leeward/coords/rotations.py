"""Roll/pitch/yaw rotations of the platform and the scanner.

This module provides the roll/pitch/yaw rotation used for both the
platform attitude (IMU) and the sensor boresight:
- Elementary rotations about the x, y and z axes, and their derivatives
- Rotation matrices built from roll-pitch-yaw (ZYX convention)
- The immutable ``Rotation`` value type

Conventions:
- Angles are radians: roll about x, pitch about y, yaw about z
- R = Rz(yaw) @ Ry(pitch) @ Rx(roll), i.e. an intrinsic Z -> Y' -> X''
  rotation. Every analytic partial derivative in ``leeward.lidar`` is
  written against this exact composition order.
- Angles are never normalized; any float is a valid angle.
"""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


def rot_x(angle: float) -> NDArray[np.float64]:
    """Elementary rotation about the x-axis."""
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array(
        [
            [1.0, 0.0, 0.0],
            [0.0, c, -s],
            [0.0, s, c],
        ],
        dtype=np.float64,
    )


def rot_y(angle: float) -> NDArray[np.float64]:
    """Elementary rotation about the y-axis."""
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array(
        [
            [c, 0.0, s],
            [0.0, 1.0, 0.0],
            [-s, 0.0, c],
        ],
        dtype=np.float64,
    )


def rot_z(angle: float) -> NDArray[np.float64]:
    """Elementary rotation about the z-axis."""
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array(
        [
            [c, -s, 0.0],
            [s, c, 0.0],
            [0.0, 0.0, 1.0],
        ],
        dtype=np.float64,
    )


def drot_x(angle: float) -> NDArray[np.float64]:
    """Derivative of ``rot_x`` with respect to its angle."""
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [0.0, -s, -c],
            [0.0, c, -s],
        ],
        dtype=np.float64,
    )


def drot_y(angle: float) -> NDArray[np.float64]:
    """Derivative of ``rot_y`` with respect to its angle."""
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array(
        [
            [-s, 0.0, c],
            [0.0, 0.0, 0.0],
            [-c, 0.0, -s],
        ],
        dtype=np.float64,
    )


def drot_z(angle: float) -> NDArray[np.float64]:
    """Derivative of ``rot_z`` with respect to its angle."""
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array(
        [
            [-s, -c, 0.0],
            [c, -s, 0.0],
            [0.0, 0.0, 0.0],
        ],
        dtype=np.float64,
    )


def rotation_matrix(
    roll: float,
    pitch: float,
    yaw: float,
) -> NDArray[np.float64]:
    """Matrix of a roll/pitch/yaw rotation, Rz(yaw) @ Ry(pitch) @ Rx(roll).

    Maps vectors from the rotated frame (scanner or body) into the frame
    it is rotated from (body or NED). Written out in closed form; equal to
    ``rot_z(yaw) @ rot_y(pitch) @ rot_x(roll)``.

    Example:
        >>> imu = rotation_matrix(0.01, -0.02, np.pi / 2)
        >>> nose = imu @ np.array([1.0, 0.0, 0.0])  # points east
    """
    cr = np.cos(roll)
    sr = np.sin(roll)
    cp = np.cos(pitch)
    sp = np.sin(pitch)
    cy = np.cos(yaw)
    sy = np.sin(yaw)

    R = np.array(
        [
            [cy * cp, cy * sp * sr - sy * cr, cy * sp * cr + sy * sr],
            [sy * cp, sy * sp * sr + cy * cr, sy * sp * cr - cy * sr],
            [-sp, cp * sr, cp * cr],
        ],
        dtype=np.float64,
    )

    return R


def rotation_matrix_to_euler(R: NDArray[np.float64]) -> NDArray[np.float64]:
    """Roll, pitch and yaw (radians) of a rotation matrix.

    Inverse of ``rotation_matrix`` for pitch strictly inside ±90°. At
    ±90° pitch only yaw - roll is determined; roll is reported as zero.

    Raises:
        ValueError: If ``R`` is not 3x3.
    """
    R = np.asarray(R, dtype=np.float64)
    if R.shape != (3, 3):
        raise ValueError(f"rotation matrix must be 3x3, got shape {R.shape}")

    sin_pitch = -R[2, 0]

    if abs(sin_pitch) >= 1.0:
        # Gimbal lock: only yaw - roll is observable, roll is set to zero
        pitch = np.copysign(np.pi / 2.0, sin_pitch)
        yaw = np.arctan2(-R[0, 1], R[1, 1])
        roll = 0.0
    else:
        pitch = np.arcsin(sin_pitch)
        roll = np.arctan2(R[2, 1], R[2, 2])
        yaw = np.arctan2(R[1, 0], R[0, 0])

    return np.array([roll, pitch, yaw], dtype=np.float64)


@dataclass(frozen=True)
class Rotation:
    """Rotation as defined by a roll, pitch, and yaw.

    Used for the platform attitude reported by the IMU and for the
    boresight misalignment between the scanner and the platform body.

    Attributes:
        roll: Rotation about the x-axis in radians.
        pitch: Rotation about the y-axis in radians.
        yaw: Rotation about the z-axis in radians.

    Example:
        >>> before = Rotation(0.0, 0.0, 0.0)
        >>> after = before.with_roll(0.1)
        >>> after.roll
        0.1
    """

    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0

    @classmethod
    def from_degrees(cls, roll: float, pitch: float, yaw: float) -> "Rotation":
        """Create a rotation from angles given in degrees."""
        return cls(
            float(np.radians(roll)),
            float(np.radians(pitch)),
            float(np.radians(yaw)),
        )

    @classmethod
    def from_matrix(cls, R: NDArray[np.float64]) -> "Rotation":
        """Create a rotation from a 3x3 rotation matrix."""
        roll, pitch, yaw = rotation_matrix_to_euler(R)
        return cls(float(roll), float(pitch), float(yaw))

    def to_matrix(self) -> NDArray[np.float64]:
        """Return this rotation as Rz(yaw) @ Ry(pitch) @ Rx(roll)."""
        return rotation_matrix(self.roll, self.pitch, self.yaw)

    def to_degrees(self) -> tuple[float, float, float]:
        return (
            float(np.degrees(self.roll)),
            float(np.degrees(self.pitch)),
            float(np.degrees(self.yaw)),
        )

    def with_roll(self, roll: float) -> "Rotation":
        """Return this rotation with a new roll value."""
        return Rotation(float(roll), self.pitch, self.yaw)

    def with_pitch(self, pitch: float) -> "Rotation":
        """Return this rotation with a new pitch value."""
        return Rotation(self.roll, float(pitch), self.yaw)

    def with_yaw(self, yaw: float) -> "Rotation":
        """Return this rotation with a new yaw value."""
        return Rotation(self.roll, self.pitch, float(yaw))
