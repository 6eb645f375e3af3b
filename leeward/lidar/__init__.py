"""Lidar returns, the lidar equation and propagated uncertainty.

This module provides:
- LidarPoint: a measured return with optional scan angle and time
- LidarEquation: forward model and analytic partial derivatives
- Measurement: a return joined with its platform pose and configuration
- Uncertainty / uncertainty: total propagated uncertainty (TPU)
- fit_to_plane_in_body_frame: best-fit plane of body-frame returns
- Variable, Dimension, Partial: the closed sets indexing the Jacobian
"""

from leeward.lidar.equation import LidarEquation, scanner_vector
from leeward.lidar.measurement import FINITE_DIFFERENCE_STEP, Measurement
from leeward.lidar.plane import fit_to_plane_in_body_frame
from leeward.lidar.types import Lidar, LidarPoint
from leeward.lidar.uncertainty import (
    Uncertainty,
    error_matrix,
    incidence_angle,
    range_std,
    sensitivity_matrix,
    uncertainty,
)
from leeward.variables import (
    BORESIGHT_VARIABLES,
    LEVER_ARM_VARIABLES,
    Dimension,
    Partial,
    Variable,
)

__all__ = [
    # Points
    "Lidar",
    "LidarPoint",
    # Lidar equation
    "LidarEquation",
    "scanner_vector",
    "Measurement",
    "FINITE_DIFFERENCE_STEP",
    # Variables
    "Variable",
    "Dimension",
    "Partial",
    "BORESIGHT_VARIABLES",
    "LEVER_ARM_VARIABLES",
    # TPU
    "Uncertainty",
    "uncertainty",
    "sensitivity_matrix",
    "incidence_angle",
    "range_std",
    "error_matrix",
    # Body-frame plane
    "fit_to_plane_in_body_frame",
]
