"""Alternating boresight and lever arm calibration.

Solving boresight and lever arm together is usually under-determined for
a single flight line, so the two are adjusted in turn: boresight, then
lever arm, then boresight again, until an outer round no longer improves
the rmse. The result always comes from a final boresight pass.
"""

from typing import Callable, Optional, Sequence

from leeward.estimators.adjust import DEFAULT_MAX_ITERATIONS, DEFAULT_TOLERANCE, Adjust
from leeward.lidar.measurement import Measurement

DEFAULT_MAX_ROUNDS = 20


def align(
    measurements: Sequence[Measurement],
    lever_arm: bool = False,
    tolerance: float = DEFAULT_TOLERANCE,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
    callback: Optional[Callable[[int, Adjust], None]] = None,
) -> Adjust:
    """Calibrate the boresight, optionally alternating with the lever arm.

    Args:
        measurements: Measurements sharing one configuration.
        lever_arm: Also adjust the lever arm, alternating with the boresight.
        tolerance: Minimum rmse improvement, both within an adjustment and
            between outer rounds.
        max_rounds: Maximum number of outer rounds.
        max_iterations: Maximum number of steps of each adjustment.
        callback: Called as ``callback(round, adjust)`` after each round.

    Returns:
        The final adjustment; ``.config`` is the calibrated configuration.

    Raises:
        EmptyBatchError, ConfigMismatchError: For an invalid batch.
        SingularMatrixError: If an adjustment step cannot be computed.

    Example:
        >>> adjust = align(measurements, lever_arm=True,
        ...                callback=lambda i, a: print(f"Iter #{i}: rmse={a.rmse}"))
        >>> save_config(adjust.config, "calibrated.json")
    """
    adjust = Adjust(
        measurements, tolerance=tolerance, max_iterations=max_iterations
    )
    last_rmse = adjust.rmse
    adjust_lever_arm = False
    for i in range(max_rounds):
        adjust = adjust.adjust_lever_arm(adjust_lever_arm).adjust()
        if callback is not None:
            callback(i, adjust)
        if not lever_arm or last_rmse - adjust.rmse < tolerance:
            break
        last_rmse = adjust.rmse
        adjust_lever_arm = not adjust_lever_arm
    return adjust.adjust_lever_arm(False).adjust()
