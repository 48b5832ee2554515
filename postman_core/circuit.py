"""
Turn-aware Eulerian circuit construction (Hierholzer's algorithm).

At every branch point where the incoming travel direction is known, the next
arc is the one with the lowest turn score, so the walk prefers going
straight, then right, then left, and avoids U-turns. Hierholzer's algorithm
consumes every arc exactly once whichever unconsumed arc is picked, so the
bias only changes the order of the walk, never its coverage.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .logging_config import get_logger
from .topology import RoadGraph
from .types import DEFAULT_PENALTIES, Arc, NodeID, TurnPenalties, TurnType

logger = get_logger(__name__)

STRAIGHT_THRESHOLD_DEG = 20.0
U_TURN_THRESHOLD_DEG = 150.0
U_TURN_BASE_SCORE = 500.0
RIGHT_TURN_BASE_SCORE = 20.0
# Offsets every left turn above the worst right turn
LEFT_TURN_BASE_SCORE = 160.0


def normalize_turn_angle(incoming_bearing: float, outgoing_bearing: float) -> float:
    """
    Signed turn angle in (-180, 180]; positive is a right turn.

    Example:
        >>> normalize_turn_angle(350.0, 10.0)
        20.0
    """
    angle = (outgoing_bearing - incoming_bearing) % 360.0
    if angle > 180.0:
        angle -= 360.0
    return angle


def classify_turn(turn_angle: float) -> TurnType:
    """Categorise a normalised turn angle."""
    magnitude = abs(turn_angle)
    if magnitude > U_TURN_THRESHOLD_DEG:
        return TurnType.U_TURN
    if magnitude <= STRAIGHT_THRESHOLD_DEG:
        return TurnType.STRAIGHT
    if turn_angle > 0:
        return TurnType.RIGHT
    return TurnType.LEFT


def turn_score(
    incoming_bearing: float,
    outgoing_bearing: float,
    penalties: TurnPenalties = DEFAULT_PENALTIES,
) -> float:
    """
    Heuristic cost of leaving on ``outgoing_bearing``; lower is preferred.

    - U-turn (|angle| > 150): 500 + (|angle| - 150) + u_turn
    - Straight (|angle| <= 20): |angle| + straight
    - Right: 20 + angle + right_turn
    - Left: 160 + |angle| + left_turn
    """
    turn_angle = normalize_turn_angle(incoming_bearing, outgoing_bearing)
    magnitude = abs(turn_angle)
    turn_type = classify_turn(turn_angle)

    if turn_type is TurnType.U_TURN:
        return U_TURN_BASE_SCORE + (magnitude - U_TURN_THRESHOLD_DEG) + penalties.u_turn
    if turn_type is TurnType.STRAIGHT:
        return magnitude + penalties.straight
    if turn_type is TurnType.RIGHT:
        return RIGHT_TURN_BASE_SCORE + magnitude + penalties.right_turn
    return LEFT_TURN_BASE_SCORE + magnitude + penalties.left_turn


@dataclass
class EulerianCircuit:
    """Result of circuit construction."""
    nodes: List[NodeID]
    start_node: NodeID
    arc_count: int
    unused_arcs: int
    is_valid: bool
    message: str
    arcs: List[Arc] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)


class _ArcArena:
    """
    Disposable working copy of the outgoing arc lists.

    Consumed arcs are removed by index, so the remaining arcs keep their
    enumeration order. The source graph is never touched.
    """

    def __init__(self, graph: RoadGraph):
        self._remaining: Dict[NodeID, List[Arc]] = {
            node_id: list(arcs) for node_id, arcs in graph.adjacency.items() if arcs
        }
        self.remaining_count = graph.arc_count

    def remaining(self, node_id: NodeID) -> List[Arc]:
        return self._remaining.get(node_id, [])

    def consume(self, node_id: NodeID, index: int) -> Arc:
        arcs = self._remaining[node_id]
        arc = arcs.pop(index)
        self.remaining_count -= 1
        return arc


def _select_arc(
    candidates: List[Arc],
    incoming_bearing: Optional[float],
    penalties: TurnPenalties,
) -> int:
    """Index of the preferred next arc; first minimal score wins."""
    if incoming_bearing is None or len(candidates) == 1:
        return 0

    best_index = 0
    best_score = turn_score(incoming_bearing, candidates[0].bearing, penalties)
    for index in range(1, len(candidates)):
        score = turn_score(incoming_bearing, candidates[index].bearing, penalties)
        if score < best_score:
            best_score = score
            best_index = index
    return best_index


def build_turn_aware_circuit(
    graph: RoadGraph,
    start_node: NodeID,
    penalties: TurnPenalties = DEFAULT_PENALTIES,
) -> EulerianCircuit:
    """
    Construct a closed walk using every arc once, biased by turn penalties.

    Stack-based Hierholzer: a vertex is emitted only once it has no remaining
    outgoing arcs, and the emitted sequence is reversed at the end.

    Args:
        graph: Balanced multigraph (not modified)
        start_node: Vertex the walk starts and ends at
        penalties: Turn penalty configuration

    Returns:
        EulerianCircuit; ``is_valid`` is False when the graph was not
        Eulerian and some arcs could not be consumed from ``start_node``
    """
    if start_node not in graph.vertices:
        raise KeyError(f"Start vertex {start_node} is not in the graph")

    arena = _ArcArena(graph)

    circuit: List[NodeID] = []
    circuit_arcs: List[Arc] = []
    # (vertex, bearing of the arc used to reach it, that arc)
    stack: List[Tuple[NodeID, Optional[float], Optional[Arc]]] = [(start_node, None, None)]

    while stack:
        node, incoming_bearing, _ = stack[-1]
        candidates = arena.remaining(node)

        if candidates:
            index = _select_arc(candidates, incoming_bearing, penalties)
            arc = arena.consume(node, index)
            stack.append((arc.to_node, arc.bearing, arc))
        else:
            node, _, arc = stack.pop()
            circuit.append(node)
            if arc is not None:
                circuit_arcs.append(arc)

    circuit.reverse()
    circuit_arcs.reverse()

    unused = arena.remaining_count
    closed = bool(circuit) and circuit[0] == start_node and circuit[-1] == start_node
    length_ok = len(circuit) == graph.arc_count + 1
    # Without in/out balance the popped sequence can splice unrelated walks
    contiguous = all(
        arc.from_node == circuit[i] and arc.to_node == circuit[i + 1]
        for i, arc in enumerate(circuit_arcs)
    )
    is_valid = unused == 0 and closed and length_ok and contiguous

    if is_valid:
        message = f"Valid Eulerian circuit: {graph.arc_count} arcs from vertex {start_node}"
    else:
        message = (
            f"Incomplete circuit: {unused} of {graph.arc_count} arcs unused, "
            f"{len(circuit)} waypoints, contiguous={contiguous}"
        )
        logger.warning(message)

    return EulerianCircuit(
        nodes=circuit,
        start_node=start_node,
        arc_count=graph.arc_count,
        unused_arcs=unused,
        is_valid=is_valid,
        message=message,
        arcs=circuit_arcs,
    )
