"""
Route statistics and turn reporting.

Walks a finished circuit hop by hop to derive distance, drive time and turn
counts, and produces a per-turn report that can be exported for review.
"""

import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from .circuit import classify_turn, normalize_turn_angle
from .logging_config import get_logger
from .topology import RoadGraph
from .types import NodeID, RouteStats, TurnType

logger = get_logger(__name__)

DEFAULT_AVERAGE_SPEED_KMH = 15.0


@dataclass
class TurnEvent:
    """A counted bearing change along the route."""
    step_number: int
    node_id: NodeID
    lat: float
    lon: float
    turn_type: TurnType
    turn_angle: float
    from_street: str
    to_street: str


def detect_turn_events(circuit: Sequence[NodeID], graph: RoadGraph) -> Tuple[List[TurnEvent], float, int]:
    """
    Classify the bearing transitions along a circuit.

    For each hop the first arc between the two vertices is looked up; parallel
    arcs share length and bearing, so which one is found does not matter. A
    transition is examined only when the hop's bearing differs from the
    previous hop's, so a run of identical bearings never produces an event.

    Returns:
        Tuple of (turn events including straight ones, total length in meters,
        number of arcs traversed)
    """
    events: List[TurnEvent] = []
    total_length = 0.0
    traversals = 0
    previous_bearing: Optional[float] = None
    previous_street = ""

    for step, (u, v) in enumerate(zip(circuit[:-1], circuit[1:]), start=1):
        arc = graph.find_arc(u, v)
        if arc is None:
            logger.debug(f"No arc {u}->{v} in graph; hop {step} ignored")
            continue

        total_length += arc.length
        traversals += 1

        if previous_bearing is not None and arc.bearing != previous_bearing:
            angle = normalize_turn_angle(previous_bearing, arc.bearing)
            vertex = graph.vertices[u]
            events.append(TurnEvent(
                step_number=step,
                node_id=u,
                lat=vertex.lat,
                lon=vertex.lon,
                turn_type=classify_turn(angle),
                turn_angle=angle,
                from_street=previous_street,
                to_street=arc.name,
            ))

        previous_bearing = arc.bearing
        previous_street = arc.name

    return events, total_length, traversals


def compute_route_stats(
    circuit: Sequence[NodeID],
    graph: RoadGraph,
    included_ways: int,
    excluded_ways: int,
    connected_components: int,
    node_count: Optional[int] = None,
    edge_count: Optional[int] = None,
    average_speed_kmh: float = DEFAULT_AVERAGE_SPEED_KMH,
) -> RouteStats:
    """
    Derive summary statistics for a circuit over ``graph``.

    Args:
        circuit: Vertex sequence of the route
        graph: Balanced graph the circuit was built on
        included_ways: Segments handed to the planner
        excluded_ways: Segments rejected upstream
        connected_components: Component count from connectivity reduction
        node_count: Vertices of the routed component (defaults to graph's)
        edge_count: Arcs before balancing (defaults to graph's)
        average_speed_kmh: Assumed average speed for the drive time estimate

    Returns:
        RouteStats
    """
    events, total_length, traversals = detect_turn_events(circuit, graph)

    total_distance_km = total_length / 1000.0
    drive_time_min = (total_distance_km / average_speed_kmh) * 60.0 if average_speed_kmh > 0 else 0.0
    base_edges = graph.arc_count if edge_count is None else edge_count

    return RouteStats(
        total_distance_km=total_distance_km,
        total_traversals=traversals,
        drive_time_min=drive_time_min,
        node_count=graph.node_count if node_count is None else node_count,
        edge_count=base_edges,
        connected_components=connected_components,
        included_ways=included_ways,
        excluded_ways=excluded_ways,
        u_turn_count=sum(1 for e in events if e.turn_type is TurnType.U_TURN),
        right_turn_count=sum(1 for e in events if e.turn_type is TurnType.RIGHT),
        left_turn_count=sum(1 for e in events if e.turn_type is TurnType.LEFT),
        balanced_edge_count=graph.arc_count,
        duplicated_edge_count=max(0, graph.arc_count - base_edges),
    )


def counted_turns(events: Sequence[TurnEvent]) -> List[TurnEvent]:
    """Turn events excluding straight-ahead transitions."""
    return [e for e in events if e.turn_type is not TurnType.STRAIGHT]


def export_turns_to_csv(events: Sequence[TurnEvent], output_path: Union[str, Path]) -> None:
    """
    Export counted turns to a CSV file.

    Args:
        events: Turn events from :func:`detect_turn_events`
        output_path: Path to output CSV file
    """
    with open(output_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.writer(f)

        writer.writerow(['Step', 'Turn Type', 'Angle (deg)', 'Node', 'Latitude', 'Longitude', 'From', 'To'])

        for event in counted_turns(events):
            writer.writerow([
                event.step_number,
                event.turn_type.value,
                f"{event.turn_angle:.1f}",
                event.node_id,
                f"{event.lat:.6f}",
                f"{event.lon:.6f}",
                event.from_street,
                event.to_street,
            ])


def export_turns_to_json(
    events: Sequence[TurnEvent],
    stats: RouteStats,
    output_path: Union[str, Path],
) -> None:
    """
    Export counted turns and a stats summary to a JSON file.

    Args:
        events: Turn events from :func:`detect_turn_events`
        stats: Route statistics for the summary block
        output_path: Path to output JSON file
    """
    turns_data = []
    for event in counted_turns(events):
        turns_data.append({
            'step': event.step_number,
            'turn_type': event.turn_type.value,
            'angle_deg': round(event.turn_angle, 1),
            'node_id': event.node_id,
            'lat': event.lat,
            'lon': event.lon,
            'from_street': event.from_street,
            'to_street': event.to_street,
        })

    summary = {
        'total_distance_km': round(stats.total_distance_km, 3),
        'drive_time_min': round(stats.drive_time_min, 1),
        'right_turns': stats.right_turn_count,
        'left_turns': stats.left_turn_count,
        'u_turns': stats.u_turn_count,
    }

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump({'summary': summary, 'turns': turns_data}, f, indent=2)
