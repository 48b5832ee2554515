"""
Tests for the command line runner.
"""

import json
import logging
import tempfile
import unittest
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from postman_core.exceptions import ValidationError
from postman_core.logging_config import ROOT_LOGGER_NAME
from run_route_planner import load_network, main


NETWORK = {
    "vertices": [
        {"id": 1, "lat": 0.001, "lon": 0.0},
        {"id": 2, "lat": 0.0, "lon": 0.001},
        {"id": 3, "lat": -0.001, "lon": 0.0},
        {"id": 4, "lat": 0.0, "lon": -0.001},
    ],
    "segments": [
        {"id": "n-e", "nodes": [1, 2], "highway": "residential", "name": "First Ave"},
        {"id": "e-s", "nodes": [2, 3], "highway": "residential"},
        {"id": "s-w", "nodes": [3, 4], "oneway": False},
        {"id": "w-n", "nodes": [4, 1]},
    ],
    "excluded_count": 3,
}


class TestRunRoutePlanner(unittest.TestCase):
    """CLI entry point."""

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.input_path = self.root / "square.json"
        self.input_path.write_text(json.dumps(NETWORK), encoding="utf-8")

    def tearDown(self):
        self.temp_dir.cleanup()
        # main() installs handlers bound to the captured stdout
        package_logger = logging.getLogger(ROOT_LOGGER_NAME)
        package_logger.handlers.clear()
        package_logger.propagate = True
        package_logger.setLevel(logging.NOTSET)

    def test_load_network(self):
        vertices, segments, excluded = load_network(self.input_path)

        self.assertEqual(vertices[2], (0.0, 0.001))
        self.assertEqual(len(segments), 4)
        self.assertEqual(segments[0].name, "First Ave")
        self.assertEqual(segments[3].name, "unnamed")
        self.assertEqual(excluded, 3)

    def test_load_malformed_network(self):
        bad = self.root / "bad.json"
        bad.write_text(json.dumps({"vertices": [{"id": 1}], "segments": []}), encoding="utf-8")

        with self.assertRaises(ValidationError):
            load_network(bad)

    def test_load_non_json_file(self):
        garbled = self.root / "garbled.json"
        garbled.write_text("{not json", encoding="utf-8")

        with self.assertRaises(ValidationError):
            load_network(garbled)

    def test_main_non_json_file(self):
        garbled = self.root / "garbled.json"
        garbled.write_text("{not json", encoding="utf-8")

        self.assertEqual(main([str(garbled), "--output-dir", str(self.root / "out")]), 1)

    def test_main_unwritable_gpx(self):
        output_dir = self.root / "out"
        # A directory where the GPX file should go makes the write fail
        (output_dir / "square.gpx").mkdir(parents=True)

        self.assertEqual(main([str(self.input_path), "--output-dir", str(output_dir)]), 1)

    def test_main_writes_outputs(self):
        output_dir = self.root / "out"
        exit_code = main([str(self.input_path), "--output-dir", str(output_dir)])

        self.assertEqual(exit_code, 0)
        self.assertTrue((output_dir / "square.gpx").exists())
        self.assertTrue((output_dir / "square_turns.csv").exists())

        stats = json.loads((output_dir / "square_stats.json").read_text(encoding="utf-8"))
        self.assertEqual(stats["excluded_ways"], 3)
        self.assertEqual(stats["total_traversals"], 8)

    def test_main_missing_input(self):
        self.assertEqual(main([str(self.root / "nope.json"), "--output-dir", str(self.root)]), 1)

    def test_main_start_requires_both_coordinates(self):
        self.assertEqual(main([str(self.input_path), "--start-lat", "0.0", "--output-dir", str(self.root)]), 1)

    def test_main_rejects_negative_penalty(self):
        exit_code = main([str(self.input_path), "--uturn-penalty", "-5", "--output-dir", str(self.root)])
        self.assertEqual(exit_code, 1)

    def test_main_empty_network(self):
        empty = self.root / "empty.json"
        empty.write_text(json.dumps({"vertices": [], "segments": []}), encoding="utf-8")
        self.assertEqual(main([str(empty), "--output-dir", str(self.root)]), 1)


if __name__ == '__main__':
    unittest.main()
