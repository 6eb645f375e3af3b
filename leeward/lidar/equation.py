"""The lidar equation and its analytic partial derivatives.

Geolocation of a lidar return (the "lidar equation"):

    p = g + N · R_imu · (B · s - l)

where:
    g: Projected position of the platform reference point (GNSS)
    N: NED -> ENU axis swap (``NED_TO_ENU``)
    R_imu: Platform attitude, Rz(yaw) · Ry(pitch) · Rx(roll)
    B: Boresight rotation (scanner -> body), same composition
    s: Scanner vector (ρ cos α, 0, ρ sin α) for range ρ and scan angle α
    l: Lever arm from the platform reference point to the scanner origin

Partial derivatives are closed-form differentiations of this product: each
angle's derivative replaces one elementary rotation by its derivative, the
lever arm derivatives are the negated columns of N · R_imu, and range and
scan angle differentiate the scanner vector. There are 14 variables and 3
dimensions, 42 entries in all.

Evaluation is done relative to the platform position; ``offset`` returns
p - g, which keeps full precision when g is a large UTM coordinate.
"""

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from leeward.coords.frames import NED_TO_ENU
from leeward.coords.rotations import (
    Rotation,
    drot_x,
    drot_y,
    drot_z,
    rot_x,
    rot_y,
    rot_z,
)
from leeward.exceptions import UnsupportedVariableError
from leeward.variables import Variable

_IDENTITY = np.eye(3)


def scanner_vector(range_: float, scan_angle: float) -> NDArray[np.float64]:
    """Target position in the scanner frame; returns lie in the x-z plane."""
    return np.array(
        [range_ * np.cos(scan_angle), 0.0, range_ * np.sin(scan_angle)],
        dtype=np.float64,
    )


class LidarEquation:
    """The lidar equation evaluated at one state, with cached rotations.

    All trigonometric terms are computed once at construction; every
    call to ``column`` or ``offset`` afterwards is a handful of 3x3
    products. Instances are never mutated.

    Args:
        imu: Platform attitude.
        boresight: Boresight rotation.
        lever_arm: Lever arm (3,), meters, body frame.
        range_: Range from the scanner origin to the target, meters.
        scan_angle: Scan angle in radians.
    """

    def __init__(
        self,
        imu: Rotation,
        boresight: Rotation,
        lever_arm: NDArray[np.float64],
        range_: float,
        scan_angle: float,
    ):
        self.imu = imu
        self.boresight = boresight
        self.lever_arm = np.asarray(lever_arm, dtype=np.float64)
        self.range = float(range_)
        self.scan_angle = float(scan_angle)

        self._rx = rot_x(imu.roll)
        self._ry = rot_y(imu.pitch)
        self._rz = rot_z(imu.yaw)
        self._bx = rot_x(boresight.roll)
        self._by = rot_y(boresight.pitch)
        self._bz = rot_z(boresight.yaw)

        self.imu_matrix = self._rz @ self._ry @ self._rx
        self.boresight_matrix = self._bz @ self._by @ self._bx
        # Body frame -> projected frame
        self.platform_matrix = NED_TO_ENU @ self.imu_matrix

        self.scanner = scanner_vector(self.range, self.scan_angle)
        # Vector from the platform reference point to the target, body frame
        self.body = self.boresight_matrix @ self.scanner - self.lever_arm

    @classmethod
    def from_state(cls, state: Sequence[float]) -> "LidarEquation":
        """Build from a 14-vector ordered like ``Variable``.

        The GNSS entries are ignored; add them to ``offset()`` to get the
        geolocated point.
        """
        state = np.asarray(state, dtype=np.float64)
        if state.shape != (len(Variable),):
            raise ValueError(
                f"state must have shape ({len(Variable)},), got {state.shape}"
            )
        return cls(
            imu=Rotation(
                state[Variable.IMU_ROLL.index],
                state[Variable.IMU_PITCH.index],
                state[Variable.IMU_YAW.index],
            ),
            boresight=Rotation(
                state[Variable.BORESIGHT_ROLL.index],
                state[Variable.BORESIGHT_PITCH.index],
                state[Variable.BORESIGHT_YAW.index],
            ),
            lever_arm=state[
                [
                    Variable.LEVER_ARM_X.index,
                    Variable.LEVER_ARM_Y.index,
                    Variable.LEVER_ARM_Z.index,
                ]
            ],
            range_=state[Variable.RANGE.index],
            scan_angle=state[Variable.SCAN_ANGLE.index],
        )

    def offset(self) -> NDArray[np.float64]:
        """Geolocated point minus the platform position, projected frame."""
        return self.platform_matrix @ self.body

    def laser_vector(self) -> NDArray[np.float64]:
        """Vector from the scanner origin to the target, projected frame."""
        return self.platform_matrix @ (self.boresight_matrix @ self.scanner)

    def column(self, variable: Variable) -> NDArray[np.float64]:
        """Partial derivatives of (x, y, z) with respect to one variable.

        Raises:
            UnsupportedVariableError: If ``variable`` is not a ``Variable``.
        """
        if variable == Variable.GNSS_X:
            return _IDENTITY[:, 0].copy()
        elif variable == Variable.GNSS_Y:
            return _IDENTITY[:, 1].copy()
        elif variable == Variable.GNSS_Z:
            return _IDENTITY[:, 2].copy()
        elif variable == Variable.IMU_ROLL:
            return NED_TO_ENU @ self._rz @ self._ry @ drot_x(self.imu.roll) @ self.body
        elif variable == Variable.IMU_PITCH:
            return NED_TO_ENU @ self._rz @ drot_y(self.imu.pitch) @ self._rx @ self.body
        elif variable == Variable.IMU_YAW:
            return NED_TO_ENU @ drot_z(self.imu.yaw) @ self._ry @ self._rx @ self.body
        elif variable == Variable.BORESIGHT_ROLL:
            return self.platform_matrix @ (
                self._bz @ self._by @ drot_x(self.boresight.roll) @ self.scanner
            )
        elif variable == Variable.BORESIGHT_PITCH:
            return self.platform_matrix @ (
                self._bz @ drot_y(self.boresight.pitch) @ self._bx @ self.scanner
            )
        elif variable == Variable.BORESIGHT_YAW:
            return self.platform_matrix @ (
                drot_z(self.boresight.yaw) @ self._by @ self._bx @ self.scanner
            )
        elif variable == Variable.LEVER_ARM_X:
            return -self.platform_matrix[:, 0]
        elif variable == Variable.LEVER_ARM_Y:
            return -self.platform_matrix[:, 1]
        elif variable == Variable.LEVER_ARM_Z:
            return -self.platform_matrix[:, 2]
        elif variable == Variable.RANGE:
            direction = np.array([np.cos(self.scan_angle), 0.0, np.sin(self.scan_angle)])
            return self.platform_matrix @ (self.boresight_matrix @ direction)
        elif variable == Variable.SCAN_ANGLE:
            tangent = np.array(
                [-self.range * np.sin(self.scan_angle), 0.0, self.range * np.cos(self.scan_angle)]
            )
            return self.platform_matrix @ (self.boresight_matrix @ tangent)
        raise UnsupportedVariableError(variable)

    def jacobian(self, variables: Sequence[Variable]) -> NDArray[np.float64]:
        """Partial derivatives for several variables, shape (3, len(variables))."""
        J = np.zeros((3, len(variables)), dtype=np.float64)
        for k, variable in enumerate(variables):
            J[:, k] = self.column(variable)
        return J
