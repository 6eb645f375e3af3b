"""
Gauss-Newton adjustment of boresight and lever arm.

Refines a subset of the calibration variables of a batch of measurements
so that the calculated points best match the measured points.

Mathematical Formulation:
    For N measurements and k variables v, stack the residuals
    r = calculated - measured (3N,) and the Jacobian J = ∂calculated/∂v
    (3N x k). Each iteration replaces the variables by the least squares
    solution of the linearized problem:

        v ← (JᵀJ)⁻¹ Jᵀ (J v - r)  =  v - (JᵀJ)⁻¹ Jᵀ r

    The batch error ("rmse") is ‖r‖, the plain Euclidean norm of the
    stacked residuals, not divided by the number of measurements.

    Iteration stops as soon as a step improves the rmse by less than the
    tolerance; the state before that step is the result.

There is no damping: on poorly conditioned batches the solver can
overshoot. Solving for all six variables at once is usually
under-determined for one flight line; alternate boresight-only and lever
arm-only adjustments instead (see ``leeward.estimators.boresight.align``).
"""

import copy
import warnings
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from leeward.config.config import Config
from leeward.exceptions import ConfigMismatchError, EmptyBatchError, SingularMatrixError
from leeward.lidar.measurement import Measurement
from leeward.variables import BORESIGHT_VARIABLES, LEVER_ARM_VARIABLES, Variable

DEFAULT_TOLERANCE = 1e-6
DEFAULT_MAX_ITERATIONS = 100


@dataclass(frozen=True)
class Record:
    """One entry of an adjustment's history.

    Attributes:
        iteration: Position in the history; 0 is the initial state.
        rmse: Norm of the stacked residuals under ``config``.
        variables: Variables being adjusted.
        values: Values of those variables in ``config``.
        config: Configuration of the batch at this iteration.
    """

    iteration: int
    rmse: float
    variables: Tuple[Variable, ...]
    values: Tuple[float, ...]
    config: Config


class Adjust:
    """A batch of measurements sharing one configuration, ready to adjust.

    Construction evaluates the residuals of the batch and appends a
    ``Record`` to the history. ``next`` performs one Gauss-Newton step and
    ``adjust`` iterates to convergence; both return new ``Adjust`` objects
    and leave this one untouched.

    Args:
        measurements: Measurements, all with an identical configuration.
        variables: Variables to adjust. Defaults to the boresight angles.
        tolerance: Minimum rmse improvement for a step to be taken.
        max_iterations: Maximum number of steps taken by ``adjust``.

    Raises:
        EmptyBatchError: If there are no measurements.
        ConfigMismatchError: If the measurements' configurations differ.
        UnsupportedVariableError: If a variable is not a configuration
            variable.

    Example:
        >>> adjust = Adjust(measurements)
        >>> adjust = adjust.adjust()
        >>> print(f"rmse {adjust.history[0].rmse:.3f} -> {adjust.rmse:.3f}")
        >>> config = adjust.config
    """

    def __init__(
        self,
        measurements: Sequence[Measurement],
        variables: Sequence[Variable] = BORESIGHT_VARIABLES,
        tolerance: float = DEFAULT_TOLERANCE,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        history: Optional[Sequence[Record]] = None,
    ):
        measurements = list(measurements)
        if not measurements:
            raise EmptyBatchError()
        variables = tuple(variables)
        if not variables:
            raise ValueError("at least one variable is required")

        config = measurements[0].config
        residuals = np.zeros(3 * len(measurements), dtype=np.float64)
        for i, measurement in enumerate(measurements):
            if measurement.config != config:
                raise ConfigMismatchError(i)
            residuals[3 * i : 3 * i + 3] = measurement.residuals()

        self._measurements = measurements
        self._config = config
        self._variables = variables
        self._residuals = residuals
        self._rmse = float(np.linalg.norm(residuals))
        self.tolerance = tolerance
        self.max_iterations = max_iterations

        history = list(history) if history is not None else []
        values = config.values(variables)
        history.append(
            Record(
                iteration=len(history),
                rmse=self._rmse,
                variables=variables,
                values=tuple(float(v) for v in values),
                config=config,
            )
        )
        self._history = history

    @property
    def measurements(self) -> List[Measurement]:
        return list(self._measurements)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return self._variables

    @property
    def residuals(self) -> np.ndarray:
        """Stacked residuals, (x, y, z) of each measurement in turn."""
        return self._residuals.copy()

    @property
    def rmse(self) -> float:
        """Norm of the stacked residuals."""
        return self._rmse

    @property
    def history(self) -> List[Record]:
        """One record per iteration, starting with the initial state."""
        return list(self._history)

    def __len__(self) -> int:
        return len(self._measurements)

    def with_variables(self, variables: Sequence[Variable]) -> "Adjust":
        """Same batch and history, adjusting a different set of variables."""
        variables = tuple(variables)
        if not variables:
            raise ValueError("at least one variable is required")
        self._config.values(variables)
        other = copy.copy(self)
        other._variables = variables
        return other

    def adjust_lever_arm(self, adjust_lever_arm: bool = True) -> "Adjust":
        """Switch between lever arm and boresight adjustment."""
        if adjust_lever_arm:
            return self.with_variables(LEVER_ARM_VARIABLES)
        return self.with_variables(BORESIGHT_VARIABLES)

    def jacobian(self) -> np.ndarray:
        """Partial derivatives of the stacked calculated points, (3N, k)."""
        J = np.zeros((3 * len(self._measurements), len(self._variables)), dtype=np.float64)
        for i, measurement in enumerate(self._measurements):
            J[3 * i : 3 * i + 3, :] = measurement.partials(self._variables)
        return J

    def next(self) -> "Adjust":
        """Take one Gauss-Newton step.

        Returns:
            The adjustment of the batch under the updated configuration,
            with this step appended to the history.

        Raises:
            SingularMatrixError: If JᵀJ is rank deficient or the Jacobian
                or residuals are not finite; ``.adjust`` on the error is
                this adjustment.
        """
        J = self.jacobian()
        if not (np.all(np.isfinite(J)) and np.all(np.isfinite(self._residuals))):
            raise SingularMatrixError("non-finite jacobian or residuals", adjust=self)
        JTJ = J.T @ J
        try:
            if np.linalg.matrix_rank(JTJ) < len(self._variables):
                raise SingularMatrixError(adjust=self)
            step = np.linalg.solve(JTJ, J.T @ self._residuals)
        except np.linalg.LinAlgError as e:
            raise SingularMatrixError(adjust=self) from e

        values = self._config.values(self._variables) - step
        config = self._config.with_values(self._variables, values)
        return Adjust(
            [measurement.with_config(config) for measurement in self._measurements],
            variables=self._variables,
            tolerance=self.tolerance,
            max_iterations=self.max_iterations,
            history=self._history,
        )

    def adjust(self) -> "Adjust":
        """Iterate Gauss-Newton steps until the rmse stops improving.

        Returns:
            The last adjustment whose following step improved the rmse by
            less than ``tolerance``. Its history holds every accepted step.

        Raises:
            SingularMatrixError: If a step cannot be computed; ``.adjust``
                on the error holds the progress made so far.
        """
        current = self
        for _ in range(self.max_iterations):
            following = current.next()
            improvement = current.rmse - following.rmse
            if improvement < current.tolerance:
                if -improvement > current.tolerance:
                    warnings.warn(
                        f"Adjustment step increased rmse from {current.rmse:.6g} to "
                        f"{following.rmse:.6g}; keeping the previous configuration",
                        RuntimeWarning,
                    )
                return current
            current = following
        warnings.warn(
            f"Adjustment did not converge within {self.max_iterations} iterations "
            f"(rmse={current.rmse:.6g})",
            RuntimeWarning,
        )
        return current
