"""
Graph connectivity analysis for closed-route feasibility.

This module implements:
- Kosaraju's two-pass algorithm for strongly connected components (SCC)
- Reduction of the network to its largest SCC
- Component reporting

A closed walk can only cover arcs that lie in one strongly connected region,
so everything outside the largest component is dropped before routing.
"""

from dataclasses import dataclass
from typing import List, Set, Tuple

from .exceptions import NoRoutableNetworkError
from .logging_config import get_logger
from .topology import RoadGraph, build_reverse_adjacency
from .types import NodeID

logger = get_logger(__name__)


@dataclass
class ConnectedComponent:
    """A strongly connected component in the graph."""
    component_id: int
    nodes: Set[NodeID]
    arc_count: int

    @property
    def size(self) -> int:
        return len(self.nodes)


class ConnectivityAnalyzer:
    """
    Analyzes graph connectivity using Kosaraju's algorithm.

    Both depth-first passes use explicit stacks so that large street networks
    do not hit the interpreter recursion limit. Vertices are visited in
    ascending id order, which pins the component order (and the tie-break for
    the largest component) independently of input order.
    """

    def __init__(self, graph: RoadGraph):
        """
        Initialize connectivity analyzer.

        Args:
            graph: Road network to analyze
        """
        self.graph = graph
        self.components: List[ConnectedComponent] = []

    def find_strongly_connected_components(self) -> List[ConnectedComponent]:
        """
        Find all strongly connected components.

        Returns:
            Components in discovery order of the second pass
        """
        finish_order = self._finish_order()
        reverse_adjacency = build_reverse_adjacency(self.graph)

        visited: Set[NodeID] = set()
        self.components = []

        for root in reversed(finish_order):
            if root in visited:
                continue

            component_nodes: Set[NodeID] = set()
            stack = [root]
            visited.add(root)

            while stack:
                node = stack.pop()
                component_nodes.add(node)
                for predecessor in reverse_adjacency.get(node, []):
                    if predecessor not in visited:
                        visited.add(predecessor)
                        stack.append(predecessor)

            self.components.append(self._create_component(len(self.components), component_nodes))

        return self.components

    def _finish_order(self) -> List[NodeID]:
        """
        First pass: iterative DFS recording vertices in order of completion.

        Call stack entries are (node, index of next outgoing arc to examine).
        """
        visited: Set[NodeID] = set()
        finished: List[NodeID] = []

        for start in sorted(self.graph.vertices):
            if start in visited:
                continue

            visited.add(start)
            call_stack = [(start, 0)]

            while call_stack:
                node, arc_index = call_stack[-1]
                arcs = self.graph.outgoing(node)

                # Advance to the next unvisited successor
                while arc_index < len(arcs) and arcs[arc_index].to_node in visited:
                    arc_index += 1

                if arc_index < len(arcs):
                    successor = arcs[arc_index].to_node
                    call_stack[-1] = (node, arc_index + 1)
                    visited.add(successor)
                    call_stack.append((successor, 0))
                else:
                    call_stack.pop()
                    finished.append(node)

        return finished

    def _create_component(self, component_id: int, nodes: Set[NodeID]) -> ConnectedComponent:
        """Create a ConnectedComponent from a set of nodes."""
        arc_count = 0
        for node_id in nodes:
            arc_count += sum(1 for arc in self.graph.outgoing(node_id) if arc.to_node in nodes)

        return ConnectedComponent(component_id=component_id, nodes=nodes, arc_count=arc_count)

    def largest_component(self) -> ConnectedComponent:
        """
        Component with the most vertices.

        Ties resolve to the component discovered first.
        """
        components = self.components or self.find_strongly_connected_components()

        largest = ConnectedComponent(component_id=-1, nodes=set(), arc_count=0)
        for component in components:
            if component.size > largest.size:
                largest = component
        return largest

    def get_component_summary(self, limit: int = 10) -> str:
        """
        Generate a human-readable summary of the largest components.

        Returns:
            Formatted string with component statistics
        """
        components = self.components or self.find_strongly_connected_components()
        ranked = sorted(components, key=lambda c: (-c.size, c.component_id))

        lines = [f"Found {len(components)} strongly connected component(s):"]
        for comp in ranked[:limit]:
            lines.append(f"  Component {comp.component_id}: {comp.size} nodes, {comp.arc_count} arcs")
        if len(ranked) > limit:
            lines.append(f"  ... {len(ranked) - limit} smaller component(s) omitted")

        return "\n".join(lines)


def reduce_to_largest_component(graph: RoadGraph) -> Tuple[RoadGraph, int]:
    """
    Restrict the network to its largest strongly connected component.

    Args:
        graph: Full road network

    Returns:
        Tuple of (reduced graph, total number of components)

    Raises:
        NoRoutableNetworkError: If the reduced graph has no vertices
    """
    analyzer = ConnectivityAnalyzer(graph)
    components = analyzer.find_strongly_connected_components()
    largest = analyzer.largest_component()

    logger.debug(analyzer.get_component_summary())

    if not largest.nodes:
        raise NoRoutableNetworkError(len(components))

    reduced = graph.subgraph(largest.nodes)
    logger.debug(
        f"Largest component {largest.component_id}: {reduced.node_count} nodes, "
        f"{reduced.arc_count} arcs (of {graph.node_count} nodes, {graph.arc_count} arcs)"
    )
    return reduced, len(components)
