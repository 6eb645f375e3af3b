"""Total propagated uncertainty (TPU) of geolocated lidar points.

First-order propagation of the standard deviation of every variable of the
lidar equation through its Jacobian.

Mathematical Formulation:
    A: 14 x 3 sensitivity matrix, A[i, j] = ∂p_j / ∂v_i
    E: 14 x 14 diagonal matrix of variances σ_i²
    Σ = Aᵀ · E · A    (3 x 3 covariance of the geolocated point)

    The range variance grows with the incidence angle ι of the beam on the
    surface, for beam divergence γ:
        σ_ρ² = σ_range² + (ρ · γ/4 · tan ι)²
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence

import numpy as np
from numpy.typing import NDArray

from leeward.lidar.measurement import Measurement
from leeward.variables import Variable


@dataclass(frozen=True)
class Uncertainty:
    """Propagated uncertainty of one measurement.

    Attributes:
        covariance: 3x3 covariance of the calculated point (m²).
        x: Standard deviation of the easting (m).
        y: Standard deviation of the northing (m).
        horizontal: sqrt(σx² + σy²) (m).
        vertical: Standard deviation of the height (m).
        total: sqrt(trace(covariance)) (m).
        incidence_angle: Angle between the laser beam and the surface
            normal (radians), or None when no normal was given.
    """

    covariance: NDArray[np.float64] = field(compare=False)
    x: float
    y: float
    horizontal: float
    vertical: float
    total: float
    incidence_angle: Optional[float] = None

    @classmethod
    def from_covariance(
        cls,
        covariance: NDArray[np.float64],
        incidence_angle: Optional[float] = None,
    ) -> "Uncertainty":
        covariance = np.asarray(covariance, dtype=np.float64)
        return cls(
            covariance=covariance,
            x=float(np.sqrt(covariance[0, 0])),
            y=float(np.sqrt(covariance[1, 1])),
            horizontal=float(np.sqrt(covariance[0, 0] + covariance[1, 1])),
            vertical=float(np.sqrt(covariance[2, 2])),
            total=float(np.sqrt(np.trace(covariance))),
            incidence_angle=incidence_angle,
        )

    def to_dict(self) -> Dict[str, Optional[float]]:
        """Summary values, without the covariance matrix."""
        return {
            "x": self.x,
            "y": self.y,
            "horizontal": self.horizontal,
            "vertical": self.vertical,
            "total": self.total,
            "incidence_angle": self.incidence_angle,
        }


def sensitivity_matrix(measurement: Measurement) -> NDArray[np.float64]:
    """Partial derivatives of the calculated point, shape (14, 3).

    Row i holds ∂(x, y, z)/∂v_i for the i-th ``Variable``.
    """
    return measurement.partials(Variable.all()).T


def incidence_angle(
    laser_vector: NDArray[np.float64],
    normal: Sequence[float],
) -> float:
    """Angle between a laser beam and a surface normal, in [0, π/2].

    The orientation of the normal is irrelevant; a beam hitting the
    surface head-on has an incidence angle of zero.

    Raises:
        ValueError: If either vector has zero length.
    """
    laser_vector = np.asarray(laser_vector, dtype=np.float64)
    normal = np.asarray(normal, dtype=np.float64)
    laser_norm = np.linalg.norm(laser_vector)
    normal_norm = np.linalg.norm(normal)
    if laser_norm == 0.0 or normal_norm == 0.0:
        raise ValueError("incidence angle is undefined for zero-length vectors")
    cosine = abs(float(laser_vector @ normal)) / (laser_norm * normal_norm)
    return float(np.arccos(min(cosine, 1.0)))


def range_std(
    measurement: Measurement,
    angle: Optional[float] = None,
) -> float:
    """Range standard deviation, including the incidence-angle term if known."""
    uncertainties = measurement.config.uncertainties
    if angle is None:
        return uncertainties.range
    footprint = measurement.range() * uncertainties.beam_divergence / 4.0 * np.tan(angle)
    return float(np.sqrt(uncertainties.range ** 2 + footprint ** 2))


def error_matrix(
    measurement: Measurement,
    angle: Optional[float] = None,
) -> NDArray[np.float64]:
    """Diagonal 14 x 14 matrix of variable variances."""
    uncertainties = measurement.config.uncertainties
    stds = np.array(
        [uncertainties.std(variable) for variable in Variable], dtype=np.float64
    )
    stds[Variable.RANGE.index] = range_std(measurement, angle)
    return np.diag(stds ** 2)


def uncertainty(
    measurement: Measurement,
    normal: Optional[Sequence[float]] = None,
) -> Uncertainty:
    """Propagate the configured variable uncertainties to one measurement.

    Args:
        measurement: The measurement; its configuration supplies the
            standard deviation of every variable.
        normal: Surface normal at the return (projected frame). When given,
            the range error includes the incidence-angle term.

    Returns:
        The propagated ``Uncertainty``.

    Example:
        >>> tpu = uncertainty(measurement, normal=[0.0, 0.0, 1.0])
        >>> print(f"horizontal {tpu.horizontal:.3f} m, vertical {tpu.vertical:.3f} m")
    """
    angle = None
    if normal is not None:
        angle = incidence_angle(measurement.laser_vector(), normal)
    A = sensitivity_matrix(measurement)
    E = error_matrix(measurement, angle)
    covariance = A.T @ E @ A
    return Uncertainty.from_covariance(covariance, angle)
