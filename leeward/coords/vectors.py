"""Three-dimensional point/vector value type.

``Point`` is used for projected positions, lever arms, body-frame
coordinates and residuals. It is immutable and compares by value, so
two configurations holding equal lever arms compare equal.
"""

from dataclasses import dataclass
from typing import Iterator, Sequence

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Point:
    """A point (or vector) in three dimensions.

    Attributes:
        x: First coordinate (easting in projected frames).
        y: Second coordinate (northing in projected frames).
        z: Third coordinate (height in projected frames).
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_array(cls, values: Sequence[float]) -> "Point":
        """Create a point from any length-3 sequence."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (3,):
            raise ValueError(f"Expected 3 values, got shape {values.shape}")
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def to_array(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def __add__(self, other: "Point") -> "Point":
        return Point(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Point") -> "Point":
        return Point(self.x - other.x, self.y - other.y, self.z - other.z)

    def __neg__(self) -> "Point":
        return Point(-self.x, -self.y, -self.z)

    def __mul__(self, scalar: float) -> "Point":
        return Point(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def dot(self, other: "Point") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def norm(self) -> float:
        """Euclidean length of this vector."""
        return float(np.sqrt(self.dot(self)))

    def with_x(self, x: float) -> "Point":
        return Point(float(x), self.y, self.z)

    def with_y(self, y: float) -> "Point":
        return Point(self.x, float(y), self.z)

    def with_z(self, z: float) -> "Point":
        return Point(self.x, self.y, float(z))
