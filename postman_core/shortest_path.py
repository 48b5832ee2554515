"""
Shortest path computation over the road multigraph.

Dijkstra's algorithm records the arc used to reach each vertex, so that the
exact arcs of a path (not just its vertices) can be recovered when the graph
holds parallel arcs.
"""

import heapq
from typing import Dict, List, Optional, Set, Tuple

from .exceptions import NoPathError
from .logging_config import get_logger
from .topology import RoadGraph
from .types import Arc, Distance, NodeID

logger = get_logger(__name__)


def dijkstra(
    graph: RoadGraph,
    source: NodeID,
    target: Optional[NodeID] = None,
) -> Tuple[Dict[NodeID, Distance], Dict[NodeID, Arc]]:
    """
    Single-source shortest paths by cumulative arc length.

    Args:
        graph: Road network
        source: Starting vertex
        target: Optional vertex at which the search may stop early

    Returns:
        Tuple of (distances, predecessor arcs) for every settled or reached
        vertex. The source has distance 0 and no predecessor arc.
    """
    distances: Dict[NodeID, Distance] = {source: 0.0}
    predecessors: Dict[NodeID, Arc] = {}
    visited: Set[NodeID] = set()
    # The counter keeps heap ordering stable for equal distances
    counter = 0
    pq = [(0.0, counter, source)]

    while pq:
        current_dist, _, current = heapq.heappop(pq)

        if current in visited:
            continue
        visited.add(current)

        if current == target:
            break

        for arc in graph.outgoing(current):
            neighbor = arc.to_node
            new_dist = current_dist + arc.length

            if neighbor not in distances or new_dist < distances[neighbor]:
                distances[neighbor] = new_dist
                predecessors[neighbor] = arc
                counter += 1
                heapq.heappush(pq, (new_dist, counter, neighbor))

    return distances, predecessors


def reconstruct_arc_path(
    predecessors: Dict[NodeID, Arc],
    source: NodeID,
    target: NodeID,
) -> List[Arc]:
    """Reconstruct the arcs from ``source`` to ``target``.

    Args:
        predecessors: Predecessor arcs from :func:`dijkstra`
        source: Starting vertex
        target: Destination vertex

    Returns:
        Arcs in travel order; empty when source equals target.

    Raises:
        NoPathError: If target was not reached, or the predecessor chain is
            broken or cyclic
    """
    if source == target:
        return []

    path: List[Arc] = []
    current = target
    seen: Set[NodeID] = set()

    while current != source:
        if current in seen:
            logger.warning(f"Cycle detected during path reconstruction from {source} to {target} at node {current}")
            raise NoPathError(source, target)
        seen.add(current)

        arc = predecessors.get(current)
        if arc is None:
            raise NoPathError(source, target)

        path.append(arc)
        current = arc.from_node

    path.reverse()
    return path


def shortest_arc_path(graph: RoadGraph, source: NodeID, target: NodeID) -> Tuple[List[Arc], Distance]:
    """
    Shortest path between two vertices as a list of arcs.

    Raises:
        NoPathError: If target is unreachable from source
    """
    distances, predecessors = dijkstra(graph, source, target)
    if target not in distances:
        raise NoPathError(source, target)
    return reconstruct_arc_path(predecessors, source, target), distances[target]
