"""Coordinate systems and transformations for the lidar equation.

This module provides functions and classes for working with the frames
a lidar return passes through:
- Rotation representations (roll/pitch/yaw, rotation matrices)
- Points/vectors in three dimensions
- NED <-> ENU axis conventions
- UTM projection of geodetic trajectory positions
"""

from leeward.coords.frames import NED_TO_ENU, enu_to_ned, ned_to_enu
from leeward.coords.projection import geodetic_to_utm, utm_epsg, utm_to_geodetic
from leeward.coords.rotations import (
    Rotation,
    drot_x,
    drot_y,
    drot_z,
    rot_x,
    rot_y,
    rot_z,
    rotation_matrix,
    rotation_matrix_to_euler,
)
from leeward.coords.vectors import Point

__all__ = [
    # Frames
    "NED_TO_ENU",
    "ned_to_enu",
    "enu_to_ned",
    # Projection
    "geodetic_to_utm",
    "utm_to_geodetic",
    "utm_epsg",
    # Rotations
    "Rotation",
    "rotation_matrix",
    "rotation_matrix_to_euler",
    "rot_x",
    "rot_y",
    "rot_z",
    "drot_x",
    "drot_y",
    "drot_z",
    # Vectors
    "Point",
]
