"""Variables and dimensions of the lidar equation.

A ``Partial`` names one entry of the Jacobian: the derivative of one
``Dimension`` of the geolocated point with respect to one ``Variable``.
Both enumerations are closed; iterate them (never spell out string keys)
so that no (dimension, variable) pair is silently skipped.
"""

from enum import Enum
from typing import List, NamedTuple


class Dimension(Enum):
    """A dimension of a geolocated point."""

    X = "X"
    Y = "Y"
    Z = "Z"

    @property
    def index(self) -> int:
        """Position of this dimension in a 3-vector."""
        return _DIMENSION_INDEX[self]

    @classmethod
    def all(cls) -> List["Dimension"]:
        return list(cls)

    def __str__(self) -> str:
        return self.value


class Variable(Enum):
    """A variable of the lidar equation.

    Platform state (GNSS position, IMU attitude), system calibration
    (boresight, lever arm) and the scanner's own observations (range, scan
    angle). Iteration order is the column order of the full 14-variable
    sensitivity matrix.
    """

    GNSS_X = "GnssX"
    GNSS_Y = "GnssY"
    GNSS_Z = "GnssZ"
    IMU_ROLL = "ImuRoll"
    IMU_PITCH = "ImuPitch"
    IMU_YAW = "ImuYaw"
    BORESIGHT_ROLL = "BoresightRoll"
    BORESIGHT_PITCH = "BoresightPitch"
    BORESIGHT_YAW = "BoresightYaw"
    LEVER_ARM_X = "LeverArmX"
    LEVER_ARM_Y = "LeverArmY"
    LEVER_ARM_Z = "LeverArmZ"
    RANGE = "Range"
    SCAN_ANGLE = "ScanAngle"

    @property
    def index(self) -> int:
        """Column of this variable in the full sensitivity matrix."""
        return _VARIABLE_INDEX[self]

    @property
    def is_angle(self) -> bool:
        return self in _ANGLES

    @property
    def is_derived(self) -> bool:
        """True for range and scan angle, which are computed, not free."""
        return self in (Variable.RANGE, Variable.SCAN_ANGLE)

    @classmethod
    def all(cls) -> List["Variable"]:
        return list(cls)

    @classmethod
    def from_name(cls, name: str) -> "Variable":
        """Look up a variable by its display name, e.g. ``"BoresightRoll"``."""
        for variable in cls:
            if variable.value.lower() == name.lower() or variable.name.lower() == name.lower():
                return variable
        raise ValueError(f"unknown variable: {name}")

    def __str__(self) -> str:
        return self.value


class Partial(NamedTuple):
    """A combination of a dimension and a variable."""

    dimension: Dimension
    variable: Variable

    @classmethod
    def all(cls) -> List["Partial"]:
        """All 42 partials, grouped by variable."""
        return [cls(dimension, variable) for variable in Variable for dimension in Dimension]

    @property
    def is_derived(self) -> bool:
        return self.variable.is_derived

    def __str__(self) -> str:
        return f"d{self.dimension}/d{self.variable}"


_DIMENSION_INDEX = {dimension: i for i, dimension in enumerate(Dimension)}
_VARIABLE_INDEX = {variable: i for i, variable in enumerate(Variable)}
_ANGLES = frozenset(
    [
        Variable.IMU_ROLL,
        Variable.IMU_PITCH,
        Variable.IMU_YAW,
        Variable.BORESIGHT_ROLL,
        Variable.BORESIGHT_PITCH,
        Variable.BORESIGHT_YAW,
        Variable.SCAN_ANGLE,
    ]
)

BORESIGHT_VARIABLES = (
    Variable.BORESIGHT_ROLL,
    Variable.BORESIGHT_PITCH,
    Variable.BORESIGHT_YAW,
)
LEVER_ARM_VARIABLES = (
    Variable.LEVER_ARM_X,
    Variable.LEVER_ARM_Y,
    Variable.LEVER_ARM_Z,
)
