"""Tests for alternating boresight / lever arm calibration."""

import numpy as np
from numpy.testing import assert_allclose

from leeward.estimators import Adjust, align
from leeward.sim import simulate_flight_line, simulate_measurements, simulation_config
from leeward.variables import BORESIGHT_VARIABLES, LEVER_ARM_VARIABLES

TRUE_CONFIG = simulation_config()
POSES = simulate_flight_line(duration=1.0)


def misaligned_config(lever_arm=(0.0, 0.0, 0.0)):
    config = TRUE_CONFIG.with_values(
        BORESIGHT_VARIABLES,
        TRUE_CONFIG.values(BORESIGHT_VARIABLES) + np.array([0.004, 0.003, -0.01]),
    )
    return config.with_values(
        LEVER_ARM_VARIABLES, config.values(LEVER_ARM_VARIABLES) + np.array(lever_arm)
    )


class TestAlign:
    def test_boresight_only(self):
        measurements = simulate_measurements(TRUE_CONFIG, misaligned_config(), poses=POSES)
        rounds = []

        result = align(measurements, callback=lambda i, adjust: rounds.append(i))

        assert rounds == [0]
        assert result.variables == BORESIGHT_VARIABLES
        assert_allclose(
            result.config.values(BORESIGHT_VARIABLES),
            TRUE_CONFIG.values(BORESIGHT_VARIABLES),
            atol=1e-6,
        )

    def test_matches_single_adjustment(self):
        measurements = simulate_measurements(TRUE_CONFIG, misaligned_config(), poses=POSES)

        aligned = align(measurements)
        adjusted = Adjust(measurements).adjust()

        assert_allclose(
            aligned.config.values(BORESIGHT_VARIABLES),
            adjusted.config.values(BORESIGHT_VARIABLES),
            atol=1e-9,
        )

    def test_alternating_rounds_do_not_increase_rmse(self):
        config = misaligned_config(lever_arm=(0.05, -0.05, 0.0))
        measurements = simulate_measurements(TRUE_CONFIG, config, poses=POSES)
        initial = Adjust(measurements).rmse
        rmses = []
        variables = []

        def record(i, adjust):
            rmses.append(adjust.rmse)
            variables.append(adjust.variables)

        result = align(measurements, lever_arm=True, callback=record)

        assert variables[0] == BORESIGHT_VARIABLES
        if len(variables) > 1:
            assert variables[1] == LEVER_ARM_VARIABLES
        assert all(later <= earlier for earlier, later in zip(rmses, rmses[1:]))
        assert result.variables == BORESIGHT_VARIABLES
        assert result.rmse <= rmses[-1]
        assert result.rmse < 0.01 * initial

    def test_history_spans_all_rounds(self):
        measurements = simulate_measurements(TRUE_CONFIG, misaligned_config(), poses=POSES)

        result = align(measurements, lever_arm=True)

        assert result.history[0].rmse == Adjust(measurements).rmse
        assert [r.iteration for r in result.history] == list(range(len(result.history)))

    def test_converged_input(self):
        measurements = simulate_measurements(TRUE_CONFIG, poses=POSES)

        result = align(measurements, lever_arm=True)

        assert result.config == TRUE_CONFIG
        assert len(result.history) == 1
