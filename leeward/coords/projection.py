"""UTM projection of geodetic coordinates.

Trajectory samples arrive as WGS84 latitude/longitude (radians) while lidar
points are delivered in UTM. This module wraps pyproj so that trajectory
positions can be projected into the same frame as the points.

Only the northern hemisphere zones (EPSG:326xx) are supported.
"""

from functools import lru_cache
from typing import Tuple

import numpy as np
from pyproj import Transformer

MIN_UTM_ZONE = 1
MAX_UTM_ZONE = 60


def utm_epsg(utm_zone: int) -> int:
    """Return the EPSG code of a northern hemisphere WGS84 UTM zone.

    Raises:
        ValueError: If the zone is outside 1..60.
    """
    if not MIN_UTM_ZONE <= int(utm_zone) <= MAX_UTM_ZONE:
        raise ValueError(
            f"utm_zone must be in [{MIN_UTM_ZONE}, {MAX_UTM_ZONE}], got {utm_zone}"
        )
    return 32600 + int(utm_zone)


@lru_cache(maxsize=None)
def _transformer(utm_zone: int, inverse: bool) -> Transformer:
    geodetic = "EPSG:4326"
    projected = f"EPSG:{utm_epsg(utm_zone)}"
    if inverse:
        return Transformer.from_crs(projected, geodetic, always_xy=True)
    return Transformer.from_crs(geodetic, projected, always_xy=True)


def geodetic_to_utm(
    latitude: np.ndarray,
    longitude: np.ndarray,
    utm_zone: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Project latitude/longitude (radians) into UTM easting/northing.

    Args:
        latitude: Latitude(s) in radians.
        longitude: Longitude(s) in radians.
        utm_zone: UTM zone number (1-60).

    Returns:
        Tuple of (easting, northing) in meters, same shape as the inputs.

    Example:
        >>> easting, northing = geodetic_to_utm(
        ...     np.radians(37.7615), np.radians(-119.0435), 11)
    """
    transformer = _transformer(int(utm_zone), False)
    easting, northing = transformer.transform(
        np.degrees(longitude), np.degrees(latitude)
    )
    return np.asarray(easting, dtype=np.float64), np.asarray(northing, dtype=np.float64)


def utm_to_geodetic(
    easting: np.ndarray,
    northing: np.ndarray,
    utm_zone: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Inverse of :func:`geodetic_to_utm`.

    Returns:
        Tuple of (latitude, longitude) in radians.
    """
    transformer = _transformer(int(utm_zone), True)
    longitude, latitude = transformer.transform(easting, northing)
    return (
        np.radians(np.asarray(latitude, dtype=np.float64)),
        np.radians(np.asarray(longitude, dtype=np.float64)),
    )
