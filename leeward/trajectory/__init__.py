"""Platform trajectory.

- PlatformPose: position, attitude and time of one trajectory sample
- Trajectory: poses indexed by quantized time, built from SBET data
"""

from leeward.trajectory.trajectory import DEFAULT_QUANTIZATION, Trajectory
from leeward.trajectory.types import PlatformPose

__all__ = [
    "PlatformPose",
    "Trajectory",
    "DEFAULT_QUANTIZATION",
]
