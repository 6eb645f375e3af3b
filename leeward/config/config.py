"""System calibration configuration.

A ``Config`` holds everything about the lidar system that is constant over
a flight: the UTM zone the data is projected into, the lever arm between
the platform reference point and the scanner origin, the boresight
rotation between the scanner and the platform body, and the standard
deviation of every variable of the lidar equation.

Configurations are immutable values. Calibration produces new ``Config``
instances; measurements in one adjustment batch must carry equal ones.
"""

from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Sequence

import numpy as np

from leeward.coords.projection import MAX_UTM_ZONE, MIN_UTM_ZONE
from leeward.coords.rotations import Rotation
from leeward.coords.vectors import Point
from leeward.exceptions import ConfigError, UnsupportedVariableError
from leeward.variables import Variable

# Error magnitudes of a typical airborne system, used when a config file
# has no [error] block.
DEFAULT_BEAM_DIVERGENCE = 0.25e-3


@dataclass(frozen=True)
class Uncertainties:
    """Standard deviation of each variable of the lidar equation.

    Linear quantities are in meters, angles in radians. ``beam_divergence``
    (radians, full angle) scales the incidence-angle-dependent part of the
    range error.
    """

    gnss_x: float = 0.02
    gnss_y: float = 0.02
    gnss_z: float = 0.04
    imu_roll: float = float(np.radians(0.0025))
    imu_pitch: float = float(np.radians(0.0025))
    imu_yaw: float = float(np.radians(0.005))
    boresight_roll: float = float(np.radians(0.001))
    boresight_pitch: float = float(np.radians(0.001))
    boresight_yaw: float = float(np.radians(0.004))
    lever_arm_x: float = 0.02
    lever_arm_y: float = 0.02
    lever_arm_z: float = 0.02
    range: float = 0.02
    scan_angle: float = float(np.radians(0.001))
    beam_divergence: float = DEFAULT_BEAM_DIVERGENCE

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if not np.isfinite(value) or value < 0:
                raise ConfigError(f"error.{f.name} must be a finite, non-negative number, got {value}")

    @classmethod
    def zeros(cls) -> "Uncertainties":
        """Uncertainties with every term set to zero."""
        return cls(**{f.name: 0.0 for f in fields(cls)})

    def std(self, variable: Variable) -> float:
        """Standard deviation of one variable."""
        return getattr(self, _UNCERTAINTY_FIELDS[variable])

    def with_std(self, variable: Variable, value: float) -> "Uncertainties":
        return replace(self, **{_UNCERTAINTY_FIELDS[variable]: float(value)})


_UNCERTAINTY_FIELDS = {variable: variable.name.lower() for variable in Variable}


@dataclass(frozen=True)
class Config:
    """System and platform configuration.

    Attributes:
        utm_zone: UTM zone (1-60) of the projected trajectory and points.
        lever_arm: Offset of the scanner origin from the platform reference
            point, in the body frame (meters).
        boresight: Rotation from the scanner frame into the body frame.
        uncertainties: Per-variable standard deviations used for TPU.

    Example:
        >>> config = Config(utm_zone=11, boresight=Rotation.from_degrees(-90, 0, -90))
        >>> config.values([Variable.BORESIGHT_ROLL])
        array([-1.57079633])
    """

    utm_zone: int
    lever_arm: Point = field(default_factory=Point)
    boresight: Rotation = field(default_factory=Rotation)
    uncertainties: Uncertainties = field(default_factory=Uncertainties)

    def __post_init__(self) -> None:
        if isinstance(self.utm_zone, bool) or not isinstance(self.utm_zone, (int, np.integer)):
            raise ConfigError(f"utm_zone must be an integer, got {self.utm_zone!r}")
        if not MIN_UTM_ZONE <= self.utm_zone <= MAX_UTM_ZONE:
            raise ConfigError(
                f"utm_zone must be in [{MIN_UTM_ZONE}, {MAX_UTM_ZONE}], got {self.utm_zone}"
            )

    @classmethod
    def from_path(cls, path) -> "Config":
        """Read a configuration from a TOML or JSON file."""
        from leeward.config.loader import load_config

        return load_config(path)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Build a configuration from a nested mapping.

        Expected keys: ``utm_zone``, ``lever_arm.{x,y,z}``,
        ``boresight.{roll,pitch,yaw}`` (radians) and an optional ``error``
        table keyed by the ``Uncertainties`` field names.

        Raises:
            ConfigError: If a required key is missing or has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"configuration must be a table, got {type(data).__name__}")
        utm_zone = _require(data, "utm_zone")
        if isinstance(utm_zone, float) and utm_zone.is_integer():
            utm_zone = int(utm_zone)
        lever_arm = _require_table(data, "lever_arm")
        boresight = _require_table(data, "boresight")
        error = data.get("error", {})
        if not isinstance(error, Mapping):
            raise ConfigError("error must be a table")
        known = {f.name for f in fields(Uncertainties)}
        unknown = sorted(set(error) - known)
        if unknown:
            raise ConfigError(f"unknown error terms: {', '.join(unknown)}")
        return cls(
            utm_zone=utm_zone,
            lever_arm=Point(
                _number(lever_arm, "x", "lever_arm"),
                _number(lever_arm, "y", "lever_arm"),
                _number(lever_arm, "z", "lever_arm"),
            ),
            boresight=Rotation(
                _number(boresight, "roll", "boresight"),
                _number(boresight, "pitch", "boresight"),
                _number(boresight, "yaw", "boresight"),
            ),
            uncertainties=Uncertainties(
                **{name: _number(error, name, "error") for name in error}
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain nested-dict representation, the inverse of ``from_dict``."""
        return {
            "utm_zone": int(self.utm_zone),
            "lever_arm": asdict(self.lever_arm),
            "boresight": asdict(self.boresight),
            "error": asdict(self.uncertainties),
        }

    def value(self, variable: Variable) -> float:
        """Current value of one calibration variable.

        Raises:
            UnsupportedVariableError: For anything but boresight and lever
                arm variables.
        """
        if variable == Variable.BORESIGHT_ROLL:
            return self.boresight.roll
        elif variable == Variable.BORESIGHT_PITCH:
            return self.boresight.pitch
        elif variable == Variable.BORESIGHT_YAW:
            return self.boresight.yaw
        elif variable == Variable.LEVER_ARM_X:
            return self.lever_arm.x
        elif variable == Variable.LEVER_ARM_Y:
            return self.lever_arm.y
        elif variable == Variable.LEVER_ARM_Z:
            return self.lever_arm.z
        raise UnsupportedVariableError(variable, "not a configuration variable")

    def values(self, variables: Sequence[Variable]) -> np.ndarray:
        """Current values of several calibration variables, in order."""
        return np.array([self.value(variable) for variable in variables], dtype=np.float64)

    def with_value(self, variable: Variable, value: float) -> "Config":
        """Return a copy of this configuration with one variable replaced."""
        value = float(value)
        if variable == Variable.BORESIGHT_ROLL:
            return replace(self, boresight=self.boresight.with_roll(value))
        elif variable == Variable.BORESIGHT_PITCH:
            return replace(self, boresight=self.boresight.with_pitch(value))
        elif variable == Variable.BORESIGHT_YAW:
            return replace(self, boresight=self.boresight.with_yaw(value))
        elif variable == Variable.LEVER_ARM_X:
            return replace(self, lever_arm=self.lever_arm.with_x(value))
        elif variable == Variable.LEVER_ARM_Y:
            return replace(self, lever_arm=self.lever_arm.with_y(value))
        elif variable == Variable.LEVER_ARM_Z:
            return replace(self, lever_arm=self.lever_arm.with_z(value))
        raise UnsupportedVariableError(variable, "not a configuration variable")

    def with_values(self, variables: Sequence[Variable], values: Sequence[float]) -> "Config":
        """Return a copy of this configuration with several variables replaced."""
        values = np.asarray(values, dtype=np.float64).ravel()
        if len(variables) != len(values):
            raise ValueError(
                f"got {len(values)} values for {len(variables)} variables"
            )
        config = self
        for variable, value in zip(variables, values):
            config = config.with_value(variable, value)
        return config


def _require(data: Mapping[str, Any], key: str, table: str = "") -> Any:
    if key not in data:
        name = f"{table}.{key}" if table else key
        raise ConfigError(f"missing required key: {name}")
    return data[key]


def _require_table(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = _require(data, key)
    if not isinstance(value, Mapping):
        raise ConfigError(f"{key} must be a table")
    return value


def _number(data: Mapping[str, Any], key: str, table: str) -> float:
    value = _require(data, key, table)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{table}.{key} must be a number, got {value!r}")
    return float(value)
