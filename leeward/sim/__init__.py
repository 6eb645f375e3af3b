"""
Synthetic flight lines for tests and examples.

Poses follow a straight, level line with a slow attitude oscillation and
returns are forward-modeled onto flat ground, so the data is exactly
consistent with a known configuration.
"""

from leeward.sim.flight import (
    DEFAULT_BORESIGHT,
    DEFAULT_SCAN_ANGLES,
    DEFAULT_START,
    DEFAULT_START_TIME,
    DEFAULT_UTM_ZONE,
    poses_to_sbet_records,
    simulate_flight_line,
    simulate_measurements,
    simulate_points,
    simulation_config,
)

__all__ = [
    "DEFAULT_BORESIGHT",
    "DEFAULT_SCAN_ANGLES",
    "DEFAULT_START",
    "DEFAULT_START_TIME",
    "DEFAULT_UTM_ZONE",
    "simulation_config",
    "simulate_flight_line",
    "simulate_points",
    "simulate_measurements",
    "poses_to_sbet_records",
]
