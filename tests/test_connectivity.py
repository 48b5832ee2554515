"""
Unit tests for strongly connected component analysis.
"""

import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from postman_core.connectivity import ConnectivityAnalyzer, reduce_to_largest_component
from postman_core.exceptions import NoRoutableNetworkError
from postman_core.topology import RoadGraph, build_road_graph
from postman_core.types import RoadSegment


SQUARE_AND_PAIR = {
    1: (0.001, 0.0),
    2: (0.0, 0.001),
    3: (-0.001, 0.0),
    4: (0.0, -0.001),
    10: (0.01, 0.01),
    11: (0.01, 0.011),
}


def square_and_pair_segments():
    return [
        RoadSegment("n-e", [1, 2]),
        RoadSegment("e-s", [2, 3]),
        RoadSegment("s-w", [3, 4]),
        RoadSegment("w-n", [4, 1]),
        RoadSegment("island", [10, 11]),
    ]


class TestStronglyConnectedComponents(unittest.TestCase):
    """Kosaraju component discovery."""

    def test_two_components(self):
        graph = build_road_graph(SQUARE_AND_PAIR, square_and_pair_segments())
        components = ConnectivityAnalyzer(graph).find_strongly_connected_components()

        self.assertEqual(len(components), 2)
        sizes = sorted(c.size for c in components)
        self.assertEqual(sizes, [2, 4])

    def test_component_arc_counts(self):
        graph = build_road_graph(SQUARE_AND_PAIR, square_and_pair_segments())
        analyzer = ConnectivityAnalyzer(graph)
        largest = analyzer.largest_component()

        self.assertEqual(largest.nodes, {1, 2, 3, 4})
        self.assertEqual(largest.arc_count, 8)

    def test_oneway_chain_is_singletons(self):
        vertices = {1: (0.0, 0.0), 2: (0.0, 0.001), 3: (0.0, 0.002)}
        graph = build_road_graph(vertices, [RoadSegment("w1", [1, 2, 3], oneway=True)])
        components = ConnectivityAnalyzer(graph).find_strongly_connected_components()

        self.assertEqual(len(components), 3)
        self.assertTrue(all(c.size == 1 for c in components))

    def test_tie_goes_to_first_discovered(self):
        vertices = {1: (0.0, 0.0), 2: (0.0, 0.001), 3: (0.0, 0.002)}
        graph = build_road_graph(vertices, [RoadSegment("w1", [1, 2, 3], oneway=True)])
        analyzer = ConnectivityAnalyzer(graph)
        components = analyzer.find_strongly_connected_components()

        self.assertIs(analyzer.largest_component(), components[0])

    def test_long_chain_does_not_recurse(self):
        """A path far deeper than the recursion limit is one component."""
        count = 5000
        vertices = {i: (0.0, i * 0.0001) for i in range(count)}
        graph = build_road_graph(vertices, [RoadSegment("long", list(range(count)))])

        components = ConnectivityAnalyzer(graph).find_strongly_connected_components()
        self.assertEqual(len(components), 1)
        self.assertEqual(components[0].size, count)

    def test_summary_mentions_components(self):
        graph = build_road_graph(SQUARE_AND_PAIR, square_and_pair_segments())
        summary = ConnectivityAnalyzer(graph).get_component_summary()
        self.assertIn("2 strongly connected component", summary)


class TestReduceToLargestComponent(unittest.TestCase):
    """Reduction of the network before routing."""

    def test_reduces_to_square(self):
        graph = build_road_graph(SQUARE_AND_PAIR, square_and_pair_segments())
        reduced, count = reduce_to_largest_component(graph)

        self.assertEqual(count, 2)
        self.assertEqual(set(reduced.vertices), {1, 2, 3, 4})
        self.assertEqual(reduced.arc_count, 8)
        self.assertEqual(graph.arc_count, 10)

    def test_independent_of_segment_order(self):
        forward = build_road_graph(SQUARE_AND_PAIR, square_and_pair_segments())
        backward = build_road_graph(SQUARE_AND_PAIR, list(reversed(square_and_pair_segments())))

        reduced_forward, _ = reduce_to_largest_component(forward)
        reduced_backward, _ = reduce_to_largest_component(backward)
        self.assertEqual(list(reduced_forward.vertices), list(reduced_backward.vertices))

    def test_singleton_tie_picks_first_discovered(self):
        vertices = {1: (0.0, 0.0), 2: (0.0, 0.001), 3: (0.0, 0.002)}
        graph = build_road_graph(vertices, [RoadSegment("w1", [3, 2, 1], oneway=True)])
        reduced, count = reduce_to_largest_component(graph)

        # Finish order is 1, 2, 3 so the second pass starts from 3
        self.assertEqual(count, 3)
        self.assertEqual(list(reduced.vertices), [3])
        self.assertEqual(reduced.arc_count, 0)

    def test_empty_graph_raises(self):
        with self.assertRaises(NoRoutableNetworkError):
            reduce_to_largest_component(RoadGraph())


if __name__ == '__main__':
    unittest.main()
