"""
Collection route planner pipeline.

This module orchestrates the complete route inspection pipeline:
1. Build the road multigraph from filtered segments
2. Reduce to the largest strongly connected component
3. Pick the start vertex (network centroid or caller coordinate)
4. Balance vertex degrees by duplicating shortest paths
5. Construct a turn-aware Eulerian circuit
6. Derive statistics and generate the GPX track

Every stage reports to an optional progress callback, synchronously, before
the next stage begins.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Mapping, Optional, Sequence, Union

from .circuit import EulerianCircuit, build_turn_aware_circuit
from .connectivity import reduce_to_largest_component
from .eulerian_solver import DegreeBalancer, OddVertexMatcher, directed_imbalance
from .exceptions import EmptyNetworkError, RoutePlannerError
from .geo import bounding_box, centroid, nearest_node
from .gpx_export import circuit_coordinates, generate_gpx
from .logging_config import LogTimer, get_logger
from .route_stats import DEFAULT_AVERAGE_SPEED_KMH, TurnEvent, compute_route_stats, detect_turn_events
from .topology import RoadGraph, build_road_graph
from .types import (
    DEFAULT_PENALTIES,
    Coordinate,
    NodeID,
    ProgressLog,
    RoadSegment,
    RouteBounds,
    RouteStats,
    Severity,
    TurnPenalties,
    Vertex,
)

logger = get_logger(__name__)

ProgressCallback = Callable[[ProgressLog], None]

_SEVERITY_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.SUCCESS: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


@dataclass
class RouteResult:
    """Complete planned route with metadata."""
    gpx_content: str
    stats: RouteStats
    logs: List[ProgressLog]
    coordinates: List[Coordinate]
    bounds: Optional[RouteBounds]
    circuit: EulerianCircuit
    graph: RoadGraph  # Balanced graph the circuit was built on
    start_node: NodeID
    turn_events: List[TurnEvent] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.circuit.is_valid


class RoutePlanner:
    """
    Plans a closed collection route covering every street of a network.

    Uses the route inspection approach:
    1. Build topology (one arc per direction of travel)
    2. Keep the largest strongly connected component
    3. Balance odd-degree vertices (greedy matching)
    4. Construct the circuit (turn-penalised Hierholzer)
    """

    def __init__(
        self,
        penalties: Optional[TurnPenalties] = None,
        ignore_oneway: bool = False,
        start_coordinate: Optional[Coordinate] = None,
        average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH,
        on_log: Optional[ProgressCallback] = None,
        matcher: Optional[OddVertexMatcher] = None,
    ):
        """
        Initialize the planner.

        Args:
            penalties: Turn penalty configuration (defaults 0/10/50/500)
            ignore_oneway: Treat one-way segments as two-way
            start_coordinate: Optional (lat, lon) to start from; the network
                centroid is used when omitted
            average_speed_kmh: Speed used for the drive time estimate
            on_log: Optional callback receiving every ProgressLog entry
            matcher: Optional odd-vertex matching strategy
        """
        self.penalties = penalties or DEFAULT_PENALTIES
        self.ignore_oneway = ignore_oneway
        self.start_coordinate = start_coordinate
        self.average_speed_kmh = average_speed_kmh
        self.on_log = on_log
        self.balancer = DegreeBalancer(matcher)
        self.logs: List[ProgressLog] = []

    def _log(self, message: str, severity: Severity = Severity.INFO) -> None:
        entry = ProgressLog(timestamp=datetime.now(), message=message, severity=severity)
        self.logs.append(entry)
        logger.log(_SEVERITY_LEVELS[severity], message)
        if self.on_log is not None:
            self.on_log(entry)

    def plan(
        self,
        vertices: Mapping[NodeID, Union[Vertex, Coordinate]],
        segments: Sequence[RoadSegment],
        excluded_count: int = 0,
        track_name: str = "route",
    ) -> RouteResult:
        """
        Plan a route over the filtered network.

        Args:
            vertices: Vertex table, id -> Vertex or (lat, lon)
            segments: Already-filtered segments to cover
            excluded_count: Number of segments rejected upstream (for stats)
            track_name: Name written into the GPX metadata

        Returns:
            RouteResult

        Raises:
            EmptyNetworkError: If ``segments`` is empty
            NoRoutableNetworkError: If no vertex survives connectivity reduction
        """
        self.logs = []
        try:
            return self._plan(vertices, segments, excluded_count, track_name)
        except RoutePlannerError as e:
            self._log(str(e), Severity.ERROR)
            raise

    def _plan(self, vertices, segments, excluded_count, track_name) -> RouteResult:
        self._log("Starting route generation...")
        self._log(f"Included {len(segments)} ways, excluded {excluded_count} ways")

        if not segments:
            raise EmptyNetworkError()

        # Step 1: Build graph
        self._log("Building road network graph...")
        with LogTimer(logger, "Graph construction", logging.DEBUG):
            graph = build_road_graph(vertices, segments, self.ignore_oneway)
        self._log(f"Graph built with {graph.node_count} nodes and {graph.arc_count} edges", Severity.SUCCESS)

        # Step 2: Largest strongly connected component
        self._log("Analyzing network connectivity...")
        with LogTimer(logger, "Connectivity reduction", logging.DEBUG):
            reduced, component_count = reduce_to_largest_component(graph)
        self._log(f"Found {component_count} connected components")
        self._log(
            f"Largest component: {reduced.node_count} nodes, {reduced.arc_count} edges",
            Severity.SUCCESS,
        )

        # Step 3: Start vertex
        start_node = self._choose_start_node(reduced)

        # Step 4: Degree balancing
        self._log("Balancing odd-degree intersections...")
        with LogTimer(logger, "Degree balancing", logging.DEBUG):
            balance = self.balancer.balance(reduced)
        logger.debug(self.balancer.get_balance_summary())
        self._log(
            f"Matched {len(balance.pairs)} odd-vertex pairs, duplicated {balance.duplicated_arcs} edges "
            f"({balance.added_length / 1000.0:.2f} km)",
            Severity.SUCCESS,
        )
        if balance.unmatched or balance.skipped_pairs:
            self._log(
                f"{len(balance.unmatched)} odd-degree vertices without a reachable partner, "
                f"{len(balance.skipped_pairs)} pairs skipped; route may be incomplete",
                Severity.WARNING,
            )
        imbalance = directed_imbalance(balance.graph)
        if imbalance:
            self._log(
                f"{len(imbalance)} vertices have unequal in/out degree (one-way streets); "
                f"a closed route may not cover every edge",
                Severity.WARNING,
            )

        # Step 5: Circuit
        self._log("Computing optimal route using Hierholzer algorithm...")
        self._log(
            f"Turn penalties - Straight: {self.penalties.straight}, Right: {self.penalties.right_turn}, "
            f"Left: {self.penalties.left_turn}, U-turn: {self.penalties.u_turn}"
        )
        with LogTimer(logger, "Circuit construction", logging.DEBUG):
            circuit = build_turn_aware_circuit(balance.graph, start_node, self.penalties)
        self._log(f"Route computed: {len(circuit.nodes)} waypoints", Severity.SUCCESS)
        if not circuit.is_valid:
            self._log(circuit.message, Severity.WARNING)

        # Step 6: GPX and statistics
        self._log("Generating GPX file...")
        coordinates = circuit_coordinates(circuit.nodes, balance.graph)
        gpx_content = generate_gpx(coordinates, name=track_name)
        self._log("GPX file generated successfully", Severity.SUCCESS)

        turn_events, _, _ = detect_turn_events(circuit.nodes, balance.graph)
        stats = compute_route_stats(
            circuit.nodes,
            balance.graph,
            included_ways=len(segments),
            excluded_ways=excluded_count,
            connected_components=component_count,
            node_count=reduced.node_count,
            edge_count=reduced.arc_count,
            average_speed_kmh=self.average_speed_kmh,
        )
        self._log_summary(stats)

        box = bounding_box(coordinates)
        bounds = RouteBounds(*box) if box is not None else None

        return RouteResult(
            gpx_content=gpx_content,
            stats=stats,
            logs=list(self.logs),
            coordinates=coordinates,
            bounds=bounds,
            circuit=circuit,
            graph=balance.graph,
            start_node=start_node,
            turn_events=turn_events,
        )

    def _choose_start_node(self, graph: RoadGraph) -> NodeID:
        node_ids = list(graph.vertices)
        coordinates = [graph.coordinate(node_id) for node_id in node_ids]

        if self.start_coordinate is not None:
            lat, lon = self.start_coordinate
            self._log(f"Using custom start point: ({lat:.6f}, {lon:.6f})")
            start_node = nearest_node(self.start_coordinate, node_ids, coordinates)
            start_lat, start_lon = graph.coordinate(start_node)
            self._log(f"Nearest graph node: ({start_lat:.6f}, {start_lon:.6f})", Severity.SUCCESS)
        else:
            self._log("Calculating route start point (graph centroid)...")
            start_node = nearest_node(centroid(coordinates), node_ids, coordinates)
            start_lat, start_lon = graph.coordinate(start_node)
            self._log(f"Start point: ({start_lat:.6f}, {start_lon:.6f})", Severity.SUCCESS)

        return start_node

    def _log_summary(self, stats: RouteStats) -> None:
        self._log(f"Total distance: {stats.total_distance_km:.2f} km")
        self._log(
            f"Estimated drive time: {stats.drive_time_min:.1f} minutes "
            f"(at {self.average_speed_kmh:g} km/h)"
        )
        self._log(
            f"Turn statistics: {stats.right_turn_count} right, {stats.left_turn_count} left, "
            f"{stats.u_turn_count} U-turns"
        )
        if stats.u_turn_count > 0:
            self._log(
                f"Note: {stats.u_turn_count} U-turns were unavoidable due to network topology",
                Severity.WARNING,
            )
        else:
            self._log("No U-turns in the route!", Severity.SUCCESS)
        self._log("Route generation complete!", Severity.SUCCESS)


def plan_collection_route(
    vertices: Mapping[NodeID, Union[Vertex, Coordinate]],
    segments: Sequence[RoadSegment],
    ignore_oneway: bool = False,
    start_coordinate: Optional[Coordinate] = None,
    penalties: Optional[TurnPenalties] = None,
    on_log: Optional[ProgressCallback] = None,
    excluded_count: int = 0,
    track_name: str = "route",
) -> RouteResult:
    """
    Convenience function to plan a collection route.

    Args:
        vertices: Vertex table, id -> Vertex or (lat, lon)
        segments: Already-filtered segments
        ignore_oneway: Treat one-way segments as two-way
        start_coordinate: Optional starting coordinate (lat, lon)
        penalties: Turn penalty configuration
        on_log: Optional progress callback
        excluded_count: Segments rejected upstream
        track_name: GPX metadata name

    Returns:
        RouteResult with complete route
    """
    planner = RoutePlanner(
        penalties=penalties,
        ignore_oneway=ignore_oneway,
        start_coordinate=start_coordinate,
        on_log=on_log,
    )
    return planner.plan(vertices, segments, excluded_count=excluded_count, track_name=track_name)
