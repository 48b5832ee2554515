"""
Degree balancing (Eulerization) for the route inspection problem.

An Eulerian circuit requires every vertex to have even degree. This module:
1. Counts each vertex's outgoing arcs as its degree (two-way streets are
   mirrored, so out-degree mirrors the undirected degree)
2. Pairs odd-degree vertices with a greedy nearest-partner heuristic
3. Duplicates the shortest path between each pair, mirror arcs included

The greedy matching is an O(k^2) approximation of minimum-weight perfect
matching: k Dijkstra runs for k odd vertices. It sits behind the
``OddVertexMatcher`` interface so a stricter strategy can be swapped in.

References:
- Edmonds & Johnson (1973): Matching, Euler tours and the Chinese postman
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from .exceptions import NoPathError
from .logging_config import get_logger
from .shortest_path import dijkstra, shortest_arc_path
from .topology import RoadGraph, get_node_degrees
from .types import Distance, NodeID

logger = get_logger(__name__)


@dataclass
class NodeBalance:
    """Node degree balance information."""
    node_id: NodeID
    in_degree: int
    out_degree: int

    @property
    def is_odd(self) -> bool:
        """Odd out-degree: needs a matching partner."""
        return self.out_degree % 2 == 1

    @property
    def is_directed_balanced(self) -> bool:
        """In-degree equals out-degree."""
        return self.in_degree == self.out_degree


@dataclass(frozen=True)
class MatchingPair:
    """Two odd-degree vertices joined by a duplicated shortest path."""
    first: NodeID
    second: NodeID
    distance: Distance


@dataclass
class MatchingResult:
    """Output of an odd-vertex matcher."""
    pairs: List[MatchingPair] = field(default_factory=list)
    unmatched: List[NodeID] = field(default_factory=list)


@dataclass
class BalanceResult:
    """Result of degree balancing."""
    graph: RoadGraph
    odd_nodes: List[NodeID]
    pairs: List[MatchingPair]
    unmatched: List[NodeID]
    duplicated_arcs: int
    added_length: Distance
    skipped_pairs: List[MatchingPair] = field(default_factory=list)

    @property
    def is_balanced(self) -> bool:
        """Every vertex ended with even out-degree."""
        return all(self.graph.out_degree(node_id) % 2 == 0 for node_id in self.graph.vertices)


class OddVertexMatcher:
    """Strategy that pairs odd-degree vertices."""

    def match(self, graph: RoadGraph, odd_nodes: List[NodeID]) -> MatchingResult:
        raise NotImplementedError


class GreedyOddVertexMatcher(OddVertexMatcher):
    """
    Greedy nearest-partner matching.

    Odd vertices are processed in the given order. Each unmatched vertex runs
    one Dijkstra and takes the nearest still-unmatched odd vertex; ties go to
    the vertex that comes first in the order.
    """

    def match(self, graph: RoadGraph, odd_nodes: List[NodeID]) -> MatchingResult:
        result = MatchingResult()
        matched: Set[NodeID] = set()

        for node in odd_nodes:
            if node in matched:
                continue

            distances, _ = dijkstra(graph, node)

            best_partner: Optional[NodeID] = None
            best_distance = float("inf")
            for candidate in odd_nodes:
                if candidate == node or candidate in matched:
                    continue
                distance = distances.get(candidate)
                if distance is not None and distance < best_distance:
                    best_distance = distance
                    best_partner = candidate

            if best_partner is None:
                result.unmatched.append(node)
                continue

            matched.add(node)
            matched.add(best_partner)
            result.pairs.append(MatchingPair(node, best_partner, best_distance))

        # A vertex skipped early can still be claimed as someone's partner later
        result.unmatched = [node for node in result.unmatched if node not in matched]
        return result


class DegreeBalancer:
    """
    Makes every vertex degree even by duplicating shortest paths.

    The input graph is never modified; duplicates go into a copy.
    """

    def __init__(self, matcher: Optional[OddVertexMatcher] = None):
        """
        Initialize balancer.

        Args:
            matcher: Odd-vertex pairing strategy (greedy nearest partner by default)
        """
        self.matcher = matcher or GreedyOddVertexMatcher()
        self.node_balances: List[NodeBalance] = []

    def compute_node_balances(self, graph: RoadGraph) -> List[NodeBalance]:
        """
        Compute in-degree and out-degree for all vertices, in graph order.
        """
        degrees = get_node_degrees(graph)
        self.node_balances = [
            NodeBalance(node_id=node_id, in_degree=in_deg, out_degree=out_deg)
            for node_id, (in_deg, out_deg) in degrees.items()
        ]
        return self.node_balances

    def balance(self, graph: RoadGraph) -> BalanceResult:
        """
        Balance ``graph``.

        Returns:
            BalanceResult whose graph holds the original arcs plus duplicates
        """
        balances = self.compute_node_balances(graph)
        odd_nodes = [nb.node_id for nb in balances if nb.is_odd]
        logger.debug(f"{len(odd_nodes)} odd-degree vertices of {len(balances)}")

        balanced = graph.copy()
        if not odd_nodes:
            return BalanceResult(balanced, [], [], [], 0, 0.0)

        matching = self.matcher.match(graph, odd_nodes)
        for node in matching.unmatched:
            logger.warning(f"Odd-degree vertex {node} has no reachable matching partner")

        duplicated = 0
        added_length = 0.0
        skipped: List[MatchingPair] = []

        for pair in matching.pairs:
            try:
                path, _ = shortest_arc_path(graph, pair.first, pair.second)
            except NoPathError as e:
                logger.warning(f"Skipping pair ({pair.first}, {pair.second}): {e}")
                skipped.append(pair)
                continue

            for arc in path:
                balanced.add_duplicate_arc(arc)
                duplicated += 1
                added_length += arc.length

                mirror = graph.find_mirror(arc)
                if mirror is not None:
                    balanced.add_duplicate_arc(mirror)
                    duplicated += 1
                    added_length += mirror.length
                else:
                    logger.debug(f"Arc {arc.key} ({arc.from_node}->{arc.to_node}) has no mirror to duplicate")

        return BalanceResult(
            graph=balanced,
            odd_nodes=odd_nodes,
            pairs=[p for p in matching.pairs if p not in skipped],
            unmatched=matching.unmatched,
            duplicated_arcs=duplicated,
            added_length=added_length,
            skipped_pairs=skipped,
        )

    def get_balance_summary(self) -> str:
        """
        Get human-readable summary of node balances.

        Returns:
            Formatted string with balance statistics
        """
        if not self.node_balances:
            return "No balance analysis performed yet."

        odd = sum(1 for nb in self.node_balances if nb.is_odd)
        directed_imbalanced = sum(1 for nb in self.node_balances if not nb.is_directed_balanced)

        lines = []
        lines.append("Node Balance Analysis:")
        lines.append(f"  - Vertices: {len(self.node_balances)}")
        lines.append(f"  - Odd-degree vertices: {odd} (~{odd // 2} pairs to join)")
        lines.append(f"  - Vertices with in-degree != out-degree: {directed_imbalanced}")

        return "\n".join(lines)


def directed_imbalance(graph: RoadGraph) -> Dict[NodeID, int]:
    """Vertices whose out-degree differs from their in-degree, with the difference."""
    return {
        node_id: out_deg - in_deg
        for node_id, (in_deg, out_deg) in get_node_degrees(graph).items()
        if in_deg != out_deg
    }


def balance_graph(graph: RoadGraph, matcher: Optional[OddVertexMatcher] = None) -> BalanceResult:
    """
    Convenience function to balance a road graph.

    Args:
        graph: Strongly connected road network
        matcher: Optional odd-vertex pairing strategy

    Returns:
        BalanceResult with the balanced multigraph
    """
    return DegreeBalancer(matcher).balance(graph)
