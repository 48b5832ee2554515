"""
Unit tests for turn scoring and turn-aware circuit construction.
"""

import unittest
import sys
from collections import Counter
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from postman_core.circuit import (
    build_turn_aware_circuit,
    classify_turn,
    normalize_turn_angle,
    turn_score,
)
from postman_core.eulerian_solver import balance_graph
from postman_core.route_stats import compute_route_stats
from postman_core.topology import RoadGraph, build_road_graph
from postman_core.types import RoadSegment, TurnPenalties, TurnType, Vertex


# Corners of a small diamond around (0, 0)
N, E, S, W = 1, 2, 3, 4
SQUARE = {
    N: (0.001, 0.0),
    E: (0.0, 0.001),
    S: (-0.001, 0.0),
    W: (0.0, -0.001),
}


def square_graph(oneway=False):
    return build_road_graph(
        SQUARE,
        [
            RoadSegment("n-e", [N, E], oneway=oneway),
            RoadSegment("e-s", [E, S], oneway=oneway),
            RoadSegment("s-w", [S, W], oneway=oneway),
            RoadSegment("w-n", [W, N], oneway=oneway),
        ],
    )


def star_graph():
    vertices = {0: (0.0, 0.0), 1: (0.001, 0.0), 2: (0.0, 0.002), 3: (-0.003, 0.0)}
    return build_road_graph(
        vertices,
        [RoadSegment("north", [0, 1]), RoadSegment("east", [0, 2]), RoadSegment("south", [0, 3])],
    )


class TestTurnAngles(unittest.TestCase):
    """Angle normalisation and classification."""

    def test_normalize_wraps(self):
        self.assertAlmostEqual(normalize_turn_angle(350.0, 10.0), 20.0)
        self.assertAlmostEqual(normalize_turn_angle(10.0, 350.0), -20.0)

    def test_normalize_half_turn_is_positive(self):
        self.assertEqual(normalize_turn_angle(0.0, 180.0), 180.0)
        self.assertEqual(normalize_turn_angle(180.0, 0.0), 180.0)

    def test_classify_boundaries(self):
        self.assertIs(classify_turn(0.0), TurnType.STRAIGHT)
        self.assertIs(classify_turn(20.0), TurnType.STRAIGHT)
        self.assertIs(classify_turn(-20.0), TurnType.STRAIGHT)
        self.assertIs(classify_turn(20.5), TurnType.RIGHT)
        self.assertIs(classify_turn(-20.5), TurnType.LEFT)
        self.assertIs(classify_turn(150.0), TurnType.RIGHT)
        self.assertIs(classify_turn(-150.0), TurnType.LEFT)
        self.assertIs(classify_turn(150.5), TurnType.U_TURN)
        self.assertIs(classify_turn(-150.5), TurnType.U_TURN)


class TestTurnScore(unittest.TestCase):
    """Heuristic turn cost."""

    def test_default_scores(self):
        self.assertEqual(turn_score(0.0, 0.0), 0.0)
        self.assertEqual(turn_score(0.0, 90.0), 120.0)
        self.assertEqual(turn_score(0.0, 270.0), 300.0)
        self.assertEqual(turn_score(0.0, 180.0), 1030.0)

    def test_right_and_left_symmetry(self):
        penalties = TurnPenalties()
        right = turn_score(0.0, 30.0, penalties)
        left = turn_score(0.0, 330.0, penalties)

        self.assertAlmostEqual(right - 20.0 - penalties.right_turn, 30.0)
        self.assertAlmostEqual(left - 160.0 - penalties.left_turn, 30.0)

    def test_ordering(self):
        straight = turn_score(0.0, 10.0)
        right = turn_score(0.0, 150.0)
        left = turn_score(0.0, 330.0)
        u_turn = turn_score(0.0, 180.0)
        self.assertLess(straight, right)
        self.assertLess(right, left)
        self.assertLess(left, u_turn)

    def test_custom_penalties(self):
        penalties = TurnPenalties(straight=5.0, right_turn=0.0, left_turn=0.0, u_turn=0.0)
        self.assertEqual(turn_score(0.0, 0.0, penalties), 5.0)
        self.assertEqual(turn_score(0.0, 180.0, penalties), 530.0)


class TestCircuitConstruction(unittest.TestCase):
    """Hierholzer walk with turn preference."""

    def test_directed_square(self):
        graph = square_graph(oneway=True)
        circuit = build_turn_aware_circuit(graph, N)

        self.assertTrue(circuit.is_valid)
        self.assertEqual(circuit.nodes, [N, E, S, W, N])

        edge_length = graph.find_arc(N, E).length
        stats = compute_route_stats(circuit.nodes, graph, 4, 0, 1)
        self.assertAlmostEqual(stats.total_distance_km * 1000.0, 4 * edge_length, places=6)
        self.assertEqual(stats.u_turn_count, 0)
        self.assertEqual(stats.right_turn_count, 3)

    def test_two_way_square_prefers_right_turns(self):
        graph = square_graph()
        circuit = build_turn_aware_circuit(graph, N)

        self.assertTrue(circuit.is_valid)
        self.assertEqual(circuit.nodes, [N, E, S, W, N, W, S, E, N])

    def test_every_arc_used_once(self):
        balanced = balance_graph(star_graph()).graph
        circuit = build_turn_aware_circuit(balanced, 0)

        self.assertTrue(circuit.is_valid)
        self.assertEqual(len(circuit.nodes), balanced.arc_count + 1)
        self.assertEqual(circuit.nodes[0], circuit.nodes[-1])
        self.assertEqual(
            sorted(arc.key for arc in circuit.arcs),
            sorted(arc.key for arc in balanced.arcs()),
        )

    def test_arcs_follow_nodes(self):
        balanced = balance_graph(star_graph()).graph
        circuit = build_turn_aware_circuit(balanced, 2)

        for i, arc in enumerate(circuit.arcs):
            self.assertEqual(arc.from_node, circuit.nodes[i])
            self.assertEqual(arc.to_node, circuit.nodes[i + 1])

    def test_multiset_of_hops_matches_arcs(self):
        graph = square_graph()
        circuit = build_turn_aware_circuit(graph, E)

        hops = Counter(zip(circuit.nodes[:-1], circuit.nodes[1:]))
        arcs = Counter((a.from_node, a.to_node) for a in graph.arcs())
        self.assertEqual(hops, arcs)

    def test_first_candidate_wins_ties(self):
        graph = RoadGraph()
        for node_id, lon in (("A", 0.0), ("B", 0.001), ("C", 0.002)):
            graph.add_vertex(Vertex(node_id, 0.0, lon))
        graph.add_arc("A", "B", 100.0, 90.0)
        graph.add_arc("B", "C", 100.0, 90.0, name="first")
        graph.add_arc("B", "C", 100.0, 90.0, name="second")
        graph.add_arc("C", "B", 100.0, 270.0)
        graph.add_arc("B", "A", 100.0, 270.0)
        graph.add_arc("C", "B", 100.0, 270.0)

        circuit = build_turn_aware_circuit(graph, "A")

        self.assertTrue(circuit.is_valid)
        self.assertEqual(circuit.arcs[1].name, "first")
        self.assertEqual(circuit.nodes, ["A", "B", "C", "B", "C", "B", "A"])

    def test_higher_uturn_penalty_never_adds_uturns(self):
        balanced = balance_graph(star_graph()).graph
        counts = []
        for penalty in (0.0, 100.0, 1000.0):
            circuit = build_turn_aware_circuit(balanced, 0, TurnPenalties(u_turn=penalty))
            stats = compute_route_stats(circuit.nodes, balanced, 3, 0, 1)
            counts.append(stats.u_turn_count)

        self.assertEqual(counts, sorted(counts, reverse=True))

    def test_graph_not_mutated(self):
        graph = square_graph()
        keys_before = {node: [a.key for a in arcs] for node, arcs in graph.adjacency.items()}
        build_turn_aware_circuit(graph, N)

        self.assertEqual(graph.arc_count, 8)
        self.assertEqual({node: [a.key for a in arcs] for node, arcs in graph.adjacency.items()}, keys_before)

    def test_isolated_start(self):
        graph = RoadGraph()
        graph.add_vertex(Vertex(5, 0.0, 0.0))
        circuit = build_turn_aware_circuit(graph, 5)

        self.assertTrue(circuit.is_valid)
        self.assertEqual(circuit.nodes, [5])

    def test_unbalanced_graph_is_invalid(self):
        vertices = {1: (0.0, 0.0), 2: (0.0, 0.001), 3: (0.0, 0.002)}
        graph = build_road_graph(vertices, [RoadSegment("w1", [1, 2, 3], oneway=True)])

        circuit = build_turn_aware_circuit(graph, 1)
        self.assertFalse(circuit.is_valid)
        self.assertIn("Incomplete circuit", circuit.message)

    def test_unknown_start_raises(self):
        with self.assertRaises(KeyError):
            build_turn_aware_circuit(square_graph(), 99)


if __name__ == '__main__':
    unittest.main()
