"""Best-fit plane of measurements in the platform body frame.

Returns of one scanner, expressed in the body frame, lie on the scan
plane when the lever arm and boresight are right. Fitting a plane to them
and looking at the out-of-plane coordinate shows calibration errors
directly.

Mathematical Formulation:
    P: N x 3 body-frame points, c: their centroid
    P - c = U S Vᵀ (singular value decomposition)
    Q = (P - c) V

    The rows of Vᵀ are the principal directions, ordered by decreasing
    spread; the last one is the plane normal, so Q[:, 2] is the signed
    distance of each point from the plane.
"""

from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from leeward.lidar.measurement import Measurement


def fit_to_plane_in_body_frame(measurements: Sequence[Measurement]) -> NDArray[np.float64]:
    """Project body-frame points onto their best-fit plane.

    Args:
        measurements: Measurements to fit.

    Returns:
        N x 3 array of plane coordinates: x along the direction of largest
        spread, y across it, z the distance from the plane.

    Raises:
        ValueError: If there are no measurements.

    Example:
        >>> points = fit_to_plane_in_body_frame(measurements)
        >>> print(f"out-of-plane rms: {np.sqrt(np.mean(points[:, 2] ** 2)):.3f} m")
    """
    if len(measurements) == 0:
        raise ValueError("cannot fit a plane to no measurements")
    points = np.array([m.body_frame() for m in measurements], dtype=np.float64)
    centered = points - points.mean(axis=0)
    _, _, Vt = np.linalg.svd(centered, full_matrices=True)
    # keep the plane frame right-handed
    if np.linalg.det(Vt) < 0:
        Vt[-1, :] *= -1
    return centered @ Vt.T
