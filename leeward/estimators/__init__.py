"""
Calibration estimators.

Available estimators:
    - Adjust: Gauss-Newton adjustment of boresight or lever arm over a
      batch of measurements, with per-iteration history (Record)
    - align: alternating boresight / lever arm calibration driver
"""

from leeward.estimators.adjust import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_TOLERANCE,
    Adjust,
    Record,
)
from leeward.estimators.boresight import DEFAULT_MAX_ROUNDS, align

__all__ = [
    "Adjust",
    "Record",
    "align",
    "DEFAULT_TOLERANCE",
    "DEFAULT_MAX_ITERATIONS",
    "DEFAULT_MAX_ROUNDS",
]
