"""Smoothed Best Estimate of Trajectory (SBET) files.

An SBET file is a flat sequence of little-endian records of 17 float64
values each, with no header:

    time, latitude, longitude, altitude,
    x_velocity, y_velocity, z_velocity,
    roll, pitch, heading, wander_angle,
    x_acceleration, y_acceleration, z_acceleration,
    x_angular_rate, y_angular_rate, z_angular_rate

Time is GPS seconds, angles are radians, altitude is meters above the
ellipsoid. Records are read into a numpy structured array.
"""

from pathlib import Path
from typing import Union

import numpy as np

SBET_FIELDS = (
    "time",
    "latitude",
    "longitude",
    "altitude",
    "x_velocity",
    "y_velocity",
    "z_velocity",
    "roll",
    "pitch",
    "heading",
    "wander_angle",
    "x_acceleration",
    "y_acceleration",
    "z_acceleration",
    "x_angular_rate",
    "y_angular_rate",
    "z_angular_rate",
)
SBET_DTYPE = np.dtype([(name, "<f8") for name in SBET_FIELDS])


def empty_sbet_records(n: int) -> np.ndarray:
    """Zero-filled structured array of ``n`` SBET records."""
    return np.zeros(n, dtype=SBET_DTYPE)


def read_sbet(path: Union[str, Path]) -> np.ndarray:
    """Read every record of an SBET file.

    Args:
        path: Path to the SBET file.

    Returns:
        Structured array with dtype ``SBET_DTYPE``.

    Raises:
        ValueError: If the file size is not a whole number of records.

    Example:
        >>> records = read_sbet("data/sbet.out")
        >>> print(f"{len(records)} samples from {records['time'][0]:.2f} s")
    """
    path = Path(path)
    size = path.stat().st_size
    if size % SBET_DTYPE.itemsize != 0:
        raise ValueError(
            f"{path}: size {size} is not a multiple of the {SBET_DTYPE.itemsize}-byte "
            f"SBET record"
        )
    return np.fromfile(path, dtype=SBET_DTYPE)


def write_sbet(path: Union[str, Path], records: np.ndarray) -> None:
    """Write records (any array with the SBET field names) to an SBET file."""
    records = np.asarray(records)
    missing = [name for name in SBET_FIELDS if name not in (records.dtype.names or ())]
    if missing:
        raise ValueError(f"records are missing SBET fields: {', '.join(missing)}")
    out = empty_sbet_records(len(records))
    for name in SBET_FIELDS:
        out[name] = records[name]
    out.tofile(Path(path))
