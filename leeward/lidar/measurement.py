"""Measurement: one lidar return joined with its platform pose and config.

A ``Measurement`` is the unit every computation in leeward works on. From
the measured point, the platform pose at the point's time and the system
configuration it derives:

- the body-frame coordinates of the return,
- the range and scan angle (the scan angle recorded by the scanner wins
  over the geometric one),
- the forward-modeled ("calculated") point and its residual,
- analytic partial derivatives of the calculated point with respect to
  every variable of the lidar equation, plus central finite differences
  for checking them.

Measurements are immutable. ``with_config`` returns a new measurement that
shares the lidar point and pose, which is how the adjustment re-evaluates a
batch after each step.
"""

from functools import cached_property
from typing import Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from leeward.config.config import Config
from leeward.coords.frames import NED_TO_ENU
from leeward.coords.rotations import Rotation
from leeward.coords.vectors import Point
from leeward.lidar.equation import LidarEquation, scanner_vector
from leeward.lidar.types import Lidar, LidarPoint
from leeward.trajectory.types import PlatformPose
from leeward.variables import Dimension, Variable

# Finite-difference step, sqrt(machine epsilon) * 100
FINITE_DIFFERENCE_STEP = float(np.sqrt(np.finfo(np.float64).eps) * 100.0)


class Measurement:
    """A lidar return, the platform pose at its time, and a configuration.

    Args:
        lidar: The measured return. Anything with ``x``, ``y``, ``z`` and
            optional ``scan_angle``/``time`` attributes; it is copied.
        pose: Platform pose at the time of the return.
        config: System configuration.

    Example:
        >>> m = Measurement(point, pose, config)
        >>> residuals = m.residuals()  # calculated - measured, meters
        >>> dz = m.partial(Dimension.Z, Variable.BORESIGHT_ROLL)
    """

    def __init__(self, lidar: Lidar, pose: PlatformPose, config: Config):
        self._lidar = LidarPoint.from_lidar(lidar)
        self._pose = pose
        self._config = config

    def __repr__(self) -> str:
        return (
            f"Measurement(lidar={self._lidar!r}, pose={self._pose!r}, "
            f"config={self._config!r})"
        )

    @property
    def lidar(self) -> LidarPoint:
        return self._lidar

    @property
    def pose(self) -> PlatformPose:
        return self._pose

    @property
    def config(self) -> Config:
        return self._config

    @property
    def time(self) -> float:
        return self._pose.time

    @property
    def gnss(self) -> Point:
        """Projected position of the platform reference point."""
        return self._pose.position

    @property
    def imu(self) -> Rotation:
        """Platform attitude."""
        return self._pose.orientation

    @property
    def boresight(self) -> Rotation:
        return self._config.boresight

    @property
    def lever_arm(self) -> Point:
        return self._config.lever_arm

    @property
    def measured_point(self) -> Point:
        return self._lidar.point

    def with_config(self, config: Config) -> "Measurement":
        """Return a measurement of the same return under another configuration."""
        return Measurement(self._lidar, self._pose, config)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def body_frame(self, point: Optional[Point] = None) -> NDArray[np.float64]:
        """Coordinates of a projected point in the platform body frame.

        Defaults to the measured point. Computes R_imu^T · N^-1 · (p - g);
        N is its own inverse.
        """
        if point is None:
            point = self.measured_point
        delta = (point - self.gnss).to_array()
        return self._imu_matrix.T @ (NED_TO_ENU @ delta)

    def range(self) -> float:
        """Distance from the scanner origin to the measured point."""
        return self._range

    def scan_angle(self) -> float:
        """Scan angle in radians.

        The angle recorded with the lidar return if there is one, otherwise
        asin of the scanner-frame z component over the range, taken into
        the quadrant of the scanner-frame x component so that angles beyond
        ±90° are recovered.
        """
        return self._scan_angle

    def has_lidar_scan_angle(self) -> bool:
        return self._lidar.scan_angle is not None

    def scanner_point(self) -> NDArray[np.float64]:
        """The return in the scanner frame, (ρ cos α, 0, ρ sin α)."""
        return scanner_vector(self._range, self._scan_angle)

    def calculated_point(self) -> Point:
        """The forward-modeled point, g + N · R_imu · (B · s - l)."""
        return Point.from_array(self.gnss.to_array() + self._equation.offset())

    def calculated_point_in_body_frame(self) -> NDArray[np.float64]:
        """The forward-modeled point in the body frame, B · s - l."""
        return self._equation.body.copy()

    def laser_vector(self) -> NDArray[np.float64]:
        """Vector from the scanner origin to the calculated point, projected frame."""
        return self._equation.laser_vector()

    # ------------------------------------------------------------------
    # Residuals
    # ------------------------------------------------------------------

    def residuals(self) -> NDArray[np.float64]:
        """Calculated minus measured point, shape (3,).

        Both points are taken relative to the platform position before
        differencing, so UTM-sized coordinates do not cost precision.
        """
        measured = (self.measured_point - self.gnss).to_array()
        return self._equation.offset() - measured

    def misalignment(self) -> Point:
        """Residual as a ``Point``."""
        return Point.from_array(self.residuals())

    def misalignment_in_body_frame(self) -> NDArray[np.float64]:
        """Calculated minus measured point, expressed in the body frame."""
        return self._imu_matrix.T @ (NED_TO_ENU @ self.residuals())

    # ------------------------------------------------------------------
    # Variables and partial derivatives
    # ------------------------------------------------------------------

    def value(self, variable: Variable) -> float:
        """Value of any of the 14 variables of the lidar equation."""
        if variable == Variable.GNSS_X:
            return self.gnss.x
        elif variable == Variable.GNSS_Y:
            return self.gnss.y
        elif variable == Variable.GNSS_Z:
            return self.gnss.z
        elif variable == Variable.IMU_ROLL:
            return self.imu.roll
        elif variable == Variable.IMU_PITCH:
            return self.imu.pitch
        elif variable == Variable.IMU_YAW:
            return self.imu.yaw
        elif variable == Variable.RANGE:
            return self._range
        elif variable == Variable.SCAN_ANGLE:
            return self._scan_angle
        return self._config.value(variable)

    def state(self) -> NDArray[np.float64]:
        """All 14 variable values, ordered like ``Variable``."""
        return np.array([self.value(variable) for variable in Variable], dtype=np.float64)

    def partial(self, dimension: Dimension, variable: Variable) -> float:
        """Analytic derivative of one dimension of the calculated point."""
        return float(self._equation.column(variable)[dimension.index])

    def partials(self, variables: Sequence[Variable]) -> NDArray[np.float64]:
        """Analytic derivatives for several variables, shape (3, len(variables))."""
        return self._equation.jacobian(variables)

    def finite_difference(
        self,
        dimension: Dimension,
        variable: Variable,
        step: Optional[float] = None,
    ) -> Optional[float]:
        """Central finite-difference estimate of ``partial(dimension, variable)``.

        Range and scan angle are derived from the other variables, so they
        cannot be perturbed independently; None is returned for them.

        Args:
            dimension: Dimension of the calculated point.
            variable: Variable to perturb.
            step: Perturbation; defaults to sqrt(machine epsilon) * 100.

        Returns:
            (f(v + h) - f(v - h)) / 2h, or None for derived variables.
        """
        if variable.is_derived:
            return None
        h = FINITE_DIFFERENCE_STEP if step is None else float(step)

        # GNSS entries are evaluated as offsets from the platform position.
        state = self.state()
        state[[Variable.GNSS_X.index, Variable.GNSS_Y.index, Variable.GNSS_Z.index]] = 0.0

        forward = state.copy()
        forward[variable.index] += h
        backward = state.copy()
        backward[variable.index] -= h
        difference = _offset_at(forward) - _offset_at(backward)
        return float(difference[dimension.index] / (2.0 * h))

    # ------------------------------------------------------------------
    # Cached state
    # ------------------------------------------------------------------

    @cached_property
    def _imu_matrix(self) -> NDArray[np.float64]:
        return self.imu.to_matrix()

    @cached_property
    def _range(self) -> float:
        body = self.body_frame() + self.lever_arm.to_array()
        return float(np.linalg.norm(body))

    @cached_property
    def _scan_angle(self) -> float:
        if self._lidar.scan_angle is not None:
            return float(self._lidar.scan_angle)
        body = self.body_frame() + self.lever_arm.to_array()
        scanner = self.boresight.to_matrix().T @ body
        # Equal to asin(z / range) for returns in front of the scanner
        return float(np.arctan2(scanner[2], scanner[0]))

    @cached_property
    def _equation(self) -> LidarEquation:
        return LidarEquation(
            imu=self.imu,
            boresight=self.boresight,
            lever_arm=self.lever_arm.to_array(),
            range_=self._range,
            scan_angle=self._scan_angle,
        )


def _offset_at(state: NDArray[np.float64]) -> NDArray[np.float64]:
    gnss = state[[Variable.GNSS_X.index, Variable.GNSS_Y.index, Variable.GNSS_Z.index]]
    return gnss + LidarEquation.from_state(state).offset()
