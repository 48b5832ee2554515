"""
Type definitions for the collection route planner.

This module provides type aliases and dataclasses shared by every stage of the
pipeline. All coordinate operations should use these types for consistency.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .exceptions import ConfigurationError, ValidationError

# Type Aliases for clarity
Coordinate = Tuple[float, float]  # (latitude, longitude) in decimal degrees
NodeID = int  # Source network node identifier
Distance = float  # Distance in meters
Bearing = float  # Degrees clockwise from north, [0, 360)


@dataclass(frozen=True)
class Vertex:
    """A street network node.

    Attributes:
        node_id: Identifier carried over from the source network
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
    """

    node_id: NodeID
    lat: float
    lon: float

    def __post_init__(self):
        """Validate coordinate ranges."""
        if not -90.0 <= self.lat <= 90.0:
            raise ValidationError(f"Vertex {self.node_id}: latitude {self.lat} out of range [-90, 90]")
        if not -180.0 <= self.lon <= 180.0:
            raise ValidationError(f"Vertex {self.node_id}: longitude {self.lon} out of range [-180, 180]")

    @property
    def coordinate(self) -> Coordinate:
        return (self.lat, self.lon)


@dataclass(frozen=True)
class Arc:
    """A directed edge in the road multigraph.

    Attributes:
        key: Unique key within the owning graph
        from_node: Origin vertex
        to_node: Destination vertex
        length: Great-circle length in meters
        bearing: Forward bearing at the origin, [0, 360)
        segment_id: Identifier of the segment this arc was cut from
        highway: Highway class tag of the segment
        name: Street name of the segment
    """

    key: int
    from_node: NodeID
    to_node: NodeID
    length: Distance
    bearing: Bearing
    segment_id: Optional[str] = None
    highway: str = "unknown"
    name: str = "unnamed"


@dataclass
class RoadSegment:
    """An already-filtered street segment.

    Attributes:
        segment_id: Unique segment identifier (way id)
        node_ids: Ordered vertex ids along the segment
        highway: Highway class
        oneway: True when travel is only allowed along node order
        name: Street name
        service: Optional service tag
        access: Optional access tag
    """

    segment_id: str
    node_ids: list = field(default_factory=list)
    highway: str = "unknown"
    oneway: bool = False
    name: str = "unnamed"
    service: Optional[str] = None
    access: Optional[str] = None


@dataclass(frozen=True)
class TurnPenalties:
    """Extra cost added to each turn category during circuit construction.

    Attributes:
        straight: Penalty for continuing within +/-20 degrees
        right_turn: Penalty for right turns
        left_turn: Penalty for left turns
        u_turn: Penalty for turns sharper than 150 degrees
    """

    straight: float = 0.0
    right_turn: float = 10.0
    left_turn: float = 50.0
    u_turn: float = 500.0

    def __post_init__(self):
        for name in ("straight", "right_turn", "left_turn", "u_turn"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value) or value < 0:
                raise ConfigurationError(f"Turn penalty '{name}' must be a non-negative number, got {value!r}")


DEFAULT_PENALTIES = TurnPenalties()


class TurnType(Enum):
    """Categories of a bearing transition."""

    STRAIGHT = "straight"
    RIGHT = "right"
    LEFT = "left"
    U_TURN = "u_turn"


class Severity(Enum):
    """Severity of a progress log entry."""

    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class ProgressLog:
    """A single progress message reported to the caller."""

    timestamp: datetime
    message: str
    severity: Severity = Severity.INFO

    def __str__(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] {self.severity.value.upper()}: {self.message}"


@dataclass
class RouteStats:
    """Summary statistics for a planned route.

    Attributes:
        total_distance_km: Length of the circuit
        total_traversals: Number of arcs walked
        drive_time_min: Estimated drive time at the assumed average speed
        node_count: Vertices in the routed component
        edge_count: Arcs in the routed component before balancing
        connected_components: Strongly connected components in the full network
        included_ways: Segments handed to the planner
        excluded_ways: Segments rejected upstream
        u_turn_count: Counted U-turns
        right_turn_count: Counted right turns
        left_turn_count: Counted left turns
        balanced_edge_count: Arcs after degree balancing
        duplicated_edge_count: Arcs added by degree balancing
    """

    total_distance_km: float
    total_traversals: int
    drive_time_min: float
    node_count: int
    edge_count: int
    connected_components: int
    included_ways: int
    excluded_ways: int
    u_turn_count: int
    right_turn_count: int
    left_turn_count: int
    balanced_edge_count: int = 0
    duplicated_edge_count: int = 0


@dataclass(frozen=True)
class RouteBounds:
    """Bounding box of the route coordinates."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float
