"""
Postman Core - Turn-aware Chinese Postman route planning for collection vehicles

This package computes a closed route that drives every street of a filtered
road network at least once:
- Directed multigraph construction with length, bearing and provenance
- Reduction to the largest strongly connected component
- Odd-degree balancing via greedy shortest-path matching
- Eulerian circuit construction biased toward right turns
- Route statistics, turn reports and GPX 1.1 export

Version: 1.0.0
"""

from .circuit import (
    EulerianCircuit,
    build_turn_aware_circuit,
    classify_turn,
    normalize_turn_angle,
    turn_score,
)
from .connectivity import ConnectedComponent, ConnectivityAnalyzer, reduce_to_largest_component
from .eulerian_solver import (
    BalanceResult,
    DegreeBalancer,
    GreedyOddVertexMatcher,
    MatchingPair,
    MatchingResult,
    NodeBalance,
    OddVertexMatcher,
    balance_graph,
)
from .exceptions import (
    ConfigurationError,
    EmptyNetworkError,
    ExportError,
    GraphBuildError,
    GraphError,
    NoPathError,
    NoRoutableNetworkError,
    ParseError,
    RoutePlannerError,
    RoutingError,
    TrackParseError,
    ValidationError,
)
from .geo import calculate_bearing, centroid, haversine, nearest_node
from .gpx_export import generate_gpx, parse_gpx_coordinates, read_gpx_file, write_gpx
from .route_planner import RoutePlanner, RouteResult, plan_collection_route
from .route_stats import (
    DEFAULT_AVERAGE_SPEED_KMH,
    TurnEvent,
    compute_route_stats,
    detect_turn_events,
    export_turns_to_csv,
    export_turns_to_json,
)
from .shortest_path import dijkstra, shortest_arc_path
from .topology import RoadGraph, build_road_graph
from .types import (
    DEFAULT_PENALTIES,
    Arc,
    Coordinate,
    NodeID,
    ProgressLog,
    RoadSegment,
    RouteBounds,
    RouteStats,
    Severity,
    TurnPenalties,
    TurnType,
    Vertex,
)

__all__ = [
    # Types
    "Coordinate",
    "NodeID",
    "Vertex",
    "Arc",
    "RoadSegment",
    "TurnPenalties",
    "DEFAULT_PENALTIES",
    "TurnType",
    "Severity",
    "ProgressLog",
    "RouteStats",
    "RouteBounds",
    # Geographic Utilities
    "haversine",
    "calculate_bearing",
    "centroid",
    "nearest_node",
    # Graph
    "RoadGraph",
    "build_road_graph",
    "ConnectivityAnalyzer",
    "ConnectedComponent",
    "reduce_to_largest_component",
    "dijkstra",
    "shortest_arc_path",
    # Balancing
    "NodeBalance",
    "MatchingPair",
    "MatchingResult",
    "OddVertexMatcher",
    "GreedyOddVertexMatcher",
    "DegreeBalancer",
    "BalanceResult",
    "balance_graph",
    # Circuit
    "EulerianCircuit",
    "build_turn_aware_circuit",
    "normalize_turn_angle",
    "classify_turn",
    "turn_score",
    # Statistics & Export
    "DEFAULT_AVERAGE_SPEED_KMH",
    "TurnEvent",
    "compute_route_stats",
    "detect_turn_events",
    "export_turns_to_csv",
    "export_turns_to_json",
    "generate_gpx",
    "parse_gpx_coordinates",
    "read_gpx_file",
    "write_gpx",
    # Pipeline
    "RoutePlanner",
    "RouteResult",
    "plan_collection_route",
    # Exceptions
    "RoutePlannerError",
    "ParseError",
    "TrackParseError",
    "ValidationError",
    "GraphError",
    "GraphBuildError",
    "EmptyNetworkError",
    "NoRoutableNetworkError",
    "RoutingError",
    "NoPathError",
    "ExportError",
    "ConfigurationError",
]

__version__ = "1.0.0"
