"""
Unit tests for the Gauss-Newton boresight / lever arm adjustment.

Tests cover:
    - Batch validation (empty batch, mismatched configurations)
    - Zero-iteration convergence on exact data
    - Monotonic convergence to the true boresight and lever arm
    - Singular normal equations and partial progress
    - History records
"""

import unittest

import numpy as np
import pytest
from numpy.testing import assert_allclose

from leeward.estimators import DEFAULT_TOLERANCE, Adjust, Record
from leeward.exceptions import (
    ConfigMismatchError,
    EmptyBatchError,
    SingularMatrixError,
    UnsupportedVariableError,
)
from leeward.sim import simulate_flight_line, simulate_measurements, simulation_config
from leeward.variables import BORESIGHT_VARIABLES, LEVER_ARM_VARIABLES, Variable

TRUE_CONFIG = simulation_config()
POSES = simulate_flight_line(duration=1.0)


def perturbed_boresight():
    return TRUE_CONFIG.with_values(
        BORESIGHT_VARIABLES,
        TRUE_CONFIG.values(BORESIGHT_VARIABLES) + np.array([0.01, -0.005, 0.02]),
    )


def perturbed_lever_arm():
    return TRUE_CONFIG.with_values(
        LEVER_ARM_VARIABLES,
        TRUE_CONFIG.values(LEVER_ARM_VARIABLES) + np.array([0.1, -0.2, 0.0]),
    )


class TestAdjustConstruction(unittest.TestCase):
    """Batch validation at construction."""

    def test_empty_batch(self) -> None:
        with self.assertRaises(EmptyBatchError):
            Adjust([])

    def test_mismatched_config(self) -> None:
        measurements = simulate_measurements(TRUE_CONFIG, poses=POSES)
        config = measurements[3].config
        measurements[3] = measurements[3].with_config(
            config.with_value(Variable.LEVER_ARM_X, config.lever_arm.x + 1.0)
        )

        with self.assertRaises(ConfigMismatchError) as context:
            Adjust(measurements)
        self.assertEqual(context.exception.index, 3)

    def test_batch_errors_are_value_errors(self) -> None:
        with self.assertRaises(ValueError):
            Adjust([])

    def test_unsupported_variable(self) -> None:
        measurements = simulate_measurements(TRUE_CONFIG, poses=POSES)

        with self.assertRaises(UnsupportedVariableError) as context:
            Adjust(measurements, variables=[Variable.BORESIGHT_ROLL, Variable.GNSS_X])
        self.assertEqual(context.exception.variable, Variable.GNSS_X)

    def test_no_variables(self) -> None:
        measurements = simulate_measurements(TRUE_CONFIG, poses=POSES)

        with self.assertRaises(ValueError):
            Adjust(measurements, variables=[])

    def test_initial_record(self) -> None:
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)
        adjust = Adjust(measurements)

        self.assertEqual(len(adjust.history), 1)
        record = adjust.history[0]
        self.assertIsInstance(record, Record)
        self.assertEqual(record.iteration, 0)
        self.assertEqual(record.variables, BORESIGHT_VARIABLES)
        self.assertEqual(record.config, perturbed_boresight())
        assert_allclose(record.values, perturbed_boresight().values(BORESIGHT_VARIABLES))
        self.assertAlmostEqual(record.rmse, np.linalg.norm(adjust.residuals))

    def test_rmse_is_plain_norm(self) -> None:
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)
        adjust = Adjust(measurements)
        stacked = np.concatenate([m.residuals() for m in measurements])

        assert_allclose(adjust.residuals, stacked)
        self.assertAlmostEqual(adjust.rmse, float(np.sqrt(np.sum(stacked ** 2))))


class TestAdjustConvergence:
    def test_exact_data_converges_immediately(self):
        measurements = simulate_measurements(TRUE_CONFIG, poses=POSES)
        adjust = Adjust(measurements)

        assert adjust.rmse < DEFAULT_TOLERANCE
        result = adjust.adjust()

        assert len(result.history) == 1
        assert result.config == TRUE_CONFIG

    def test_boresight_recovered(self):
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)

        result = Adjust(measurements).adjust()

        assert_allclose(
            result.config.values(BORESIGHT_VARIABLES),
            TRUE_CONFIG.values(BORESIGHT_VARIABLES),
            atol=1e-6,
        )
        assert result.rmse < 1e-3
        assert result.config.lever_arm == TRUE_CONFIG.lever_arm

    def test_rmse_non_increasing(self):
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)

        result = Adjust(measurements).adjust()
        rmses = [record.rmse for record in result.history]

        assert len(rmses) > 1
        assert len(rmses) <= result.max_iterations + 1
        assert all(later <= earlier for earlier, later in zip(rmses, rmses[1:]))
        assert [record.iteration for record in result.history] == list(range(len(rmses)))

    def test_lever_arm_recovered(self):
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_lever_arm(), poses=POSES)

        result = Adjust(measurements).adjust_lever_arm(True).adjust()

        assert result.variables == LEVER_ARM_VARIABLES
        assert_allclose(
            result.config.lever_arm.to_array(), TRUE_CONFIG.lever_arm.to_array(), atol=1e-5
        )
        assert result.config.boresight == perturbed_lever_arm().boresight

    def test_noisy_data(self):
        measurements = simulate_measurements(
            TRUE_CONFIG, perturbed_boresight(), poses=POSES, noise=0.05, seed=7
        )

        result = Adjust(measurements).adjust()

        assert result.rmse < result.history[0].rmse
        assert_allclose(
            result.config.values(BORESIGHT_VARIABLES),
            TRUE_CONFIG.values(BORESIGHT_VARIABLES),
            atol=1e-4,
        )

    def test_iteration_cap_warns(self):
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)

        with pytest.warns(RuntimeWarning, match="did not converge"):
            result = Adjust(measurements, max_iterations=1).adjust()
        assert len(result.history) == 2


class TestAdjustSteps:
    def test_next_leaves_original_untouched(self):
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)
        adjust = Adjust(measurements)
        rmse = adjust.rmse

        following = adjust.next()

        assert adjust.rmse == rmse
        assert len(adjust.history) == 1
        assert len(following.history) == 2
        assert following.rmse < adjust.rmse
        assert all(m.config == following.config for m in following.measurements)

    def test_jacobian(self):
        measurements = simulate_measurements(TRUE_CONFIG, poses=POSES, pose_step=50)
        adjust = Adjust(measurements)

        J = adjust.jacobian()

        assert J.shape == (3 * len(measurements), 3)
        assert_allclose(J[3:6], measurements[1].partials(BORESIGHT_VARIABLES))

    def test_with_variables_keeps_batch_and_history(self):
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)
        adjust = Adjust(measurements).next()

        lever_arm = adjust.adjust_lever_arm(True)

        assert lever_arm.variables == LEVER_ARM_VARIABLES
        assert adjust.variables == BORESIGHT_VARIABLES
        assert lever_arm.history == adjust.history
        assert lever_arm.rmse == adjust.rmse
        assert lever_arm.adjust_lever_arm(False).variables == BORESIGHT_VARIABLES
        with pytest.raises(UnsupportedVariableError):
            adjust.with_variables([Variable.RANGE])


class TestSingular:
    def test_underdetermined_batch(self):
        """One measurement cannot determine six variables."""
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)[:1]
        adjust = Adjust(measurements, variables=BORESIGHT_VARIABLES + LEVER_ARM_VARIABLES)

        with pytest.raises(SingularMatrixError, match="no inverse found") as info:
            adjust.next()
        assert info.value.adjust is adjust

    def test_partial_progress_is_kept(self):
        measurements = simulate_measurements(TRUE_CONFIG, perturbed_boresight(), poses=POSES)
        adjust = Adjust(measurements, variables=[Variable.BORESIGHT_ROLL, Variable.BORESIGHT_ROLL])

        with pytest.raises(SingularMatrixError) as info:
            adjust.adjust()
        assert info.value.adjust.history == adjust.history
        assert info.value.adjust.config == perturbed_boresight()

    def test_non_finite_configuration(self):
        config = TRUE_CONFIG.with_value(Variable.BORESIGHT_ROLL, float("nan"))
        measurements = [
            m.with_config(config) for m in simulate_measurements(TRUE_CONFIG, poses=POSES)
        ]
        adjust = Adjust(measurements)

        with pytest.raises(SingularMatrixError, match="non-finite") as info:
            adjust.adjust()
        assert info.value.adjust is adjust
        assert len(info.value.adjust.history) == 1
