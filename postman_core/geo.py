"""
Geographic utilities for the route planner.

Provides great-circle distance, forward bearing and nearest-vertex lookup
for street network routing.
"""

import math
from math import asin, cos, radians, sin, sqrt
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from .types import Coordinate, NodeID

EARTH_RADIUS_M = 6371000.0


def haversine(coord1: Coordinate, coord2: Coordinate) -> float:
    """
    Calculate great-circle distance between two points using Haversine formula.

    Args:
        coord1: First coordinate as (latitude, longitude) in decimal degrees
        coord2: Second coordinate as (latitude, longitude) in decimal degrees

    Returns:
        Distance in meters (float)

    Example:
        >>> haversine((0.0, 0.0), (0.0, 90.0))
        10007543.398010286

    Note:
        - Earth radius is approximated as 6,371 km
        - Coordinates must be in (lat, lon) format, not (lon, lat)
    """
    lat1, lon1 = coord1
    lat2, lon2 = coord2

    lat1, lon1, lat2, lon2 = map(radians, (lat1, lon1, lat2, lon2))

    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    # Clamp against floating point drift above 1.0 for antipodal points
    c = 2 * asin(sqrt(min(1.0, a)))

    return EARTH_RADIUS_M * c


def calculate_bearing(coord1: Coordinate, coord2: Coordinate) -> float:
    """
    Calculate initial bearing (forward azimuth) between two points.

    Args:
        coord1: Start coordinate as (latitude, longitude)
        coord2: End coordinate as (latitude, longitude)

    Returns:
        Bearing in degrees [0, 360), where 0 is North, 90 is East, etc.

    Example:
        >>> round(calculate_bearing((0.0, 0.0), (0.0, 1.0)), 1)
        90.0
    """
    lat1, lon1 = map(radians, coord1)
    lat2, lon2 = map(radians, coord2)

    dlon = lon2 - lon1

    x = sin(dlon) * cos(lat2)
    y = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)

    bearing_deg = (math.degrees(math.atan2(x, y)) + 360) % 360

    # (-tiny + 360) % 360 can round to exactly 360.0
    return 0.0 if bearing_deg >= 360.0 else bearing_deg


def reverse_bearing(bearing: float) -> float:
    """Bearing of the opposite travel direction."""
    return (bearing + 180.0) % 360.0


def centroid(coordinates: Iterable[Coordinate]) -> Coordinate:
    """
    Arithmetic mean of a set of coordinates.

    Adequate for city-scale networks; no antimeridian handling.

    Raises:
        ValueError: If no coordinates are given
    """
    points = np.asarray(list(coordinates), dtype=float)
    if points.size == 0:
        raise ValueError("Cannot compute centroid of an empty coordinate set")
    lat, lon = points.mean(axis=0)
    return (float(lat), float(lon))


def nearest_node(
    target: Coordinate,
    node_ids: Sequence[NodeID],
    coordinates: Sequence[Coordinate],
) -> Optional[NodeID]:
    """
    Find the node whose coordinate is closest to ``target``.

    Distances are computed with a vectorised haversine over all candidates.
    Ties resolve to the earliest node in ``node_ids``.

    Args:
        target: Query coordinate (lat, lon)
        node_ids: Candidate node IDs
        coordinates: Coordinates parallel to ``node_ids``

    Returns:
        Closest node ID, or None if there are no candidates
    """
    if len(node_ids) == 0:
        return None

    distances = haversine_many(target, coordinates)
    return node_ids[int(np.argmin(distances))]


def haversine_many(origin: Coordinate, coordinates: Sequence[Coordinate]) -> np.ndarray:
    """Vectorised haversine from ``origin`` to every coordinate, in meters."""
    points = np.radians(np.asarray(coordinates, dtype=float).reshape(-1, 2))
    lat1, lon1 = radians(origin[0]), radians(origin[1])
    lat2 = points[:, 0]
    lon2 = points[:, 1]

    a = np.sin((lat2 - lat1) / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2) ** 2
    return 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def bounding_box(coordinates: Iterable[Coordinate]) -> Optional[Tuple[float, float, float, float]]:
    """Return (min_lat, max_lat, min_lon, max_lon) or None for no coordinates."""
    points = np.asarray(list(coordinates), dtype=float)
    if points.size == 0:
        return None
    mins = points.min(axis=0)
    maxs = points.max(axis=0)
    return (float(mins[0]), float(maxs[0]), float(mins[1]), float(maxs[1]))
