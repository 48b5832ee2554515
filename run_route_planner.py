#!/usr/bin/env python3
"""
Run the collection route planner on a JSON road network.

The input holds already-filtered segments:

    {
      "vertices": [{"id": 1, "lat": 45.0, "lon": -73.0}, ...],
      "segments": [{"id": "w1", "nodes": [1, 2, 3], "highway": "residential",
                    "oneway": false, "name": "Main St"}, ...],
      "excluded_count": 4
    }

Usage:
    python run_route_planner.py network.json [--output-dir OUTPUT_DIR] [--start-lat LAT] [--start-lon LON]
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

from postman_core import (
    ExportError,
    RoadSegment,
    RoutePlanner,
    RoutePlannerError,
    TurnPenalties,
    ValidationError,
    export_turns_to_csv,
    write_gpx,
)
from postman_core.logging_config import log_exception, setup_logging


def load_network(path: Path) -> Tuple[Dict[int, Tuple[float, float]], List[RoadSegment], int]:
    """
    Load vertices, segments and the upstream exclusion count from JSON.

    Raises:
        ValidationError: If the file is not JSON or is missing required fields
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Network file '{path}' is not valid JSON: {e}") from e

    try:
        vertices = {int(v["id"]): (float(v["lat"]), float(v["lon"])) for v in data["vertices"]}
        segments = [
            RoadSegment(
                segment_id=str(s["id"]),
                node_ids=[int(n) for n in s["nodes"]],
                highway=s.get("highway", "unknown"),
                oneway=bool(s.get("oneway", False)),
                name=s.get("name", "unnamed"),
                service=s.get("service"),
                access=s.get("access"),
            )
            for s in data["segments"]
        ]
        excluded = int(data.get("excluded_count", 0))
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Malformed network file '{path}': {e}") from e

    return vertices, segments, excluded


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Collection Route Planner (turn-aware Chinese Postman)'
    )
    parser.add_argument('input_json', help='Input JSON file with vertices and filtered segments')
    parser.add_argument('--output-dir', default='output',
                        help='Output directory for results (default: output)')
    parser.add_argument('--start-lat', type=float,
                        help='Starting latitude (optional)')
    parser.add_argument('--start-lon', type=float,
                        help='Starting longitude (optional)')
    parser.add_argument('--ignore-oneway', action='store_true',
                        help='Treat one-way streets as two-way')
    parser.add_argument('--straight-penalty', type=float, default=0.0,
                        help='Penalty for going straight (default: 0)')
    parser.add_argument('--right-penalty', type=float, default=10.0,
                        help='Penalty for right turns (default: 10)')
    parser.add_argument('--left-penalty', type=float, default=50.0,
                        help='Penalty for left turns (default: 50)')
    parser.add_argument('--uturn-penalty', type=float, default=500.0,
                        help='Penalty for U-turns (default: 500)')
    parser.add_argument('--speed', type=float, default=15.0,
                        help='Average speed in km/h for drive time (default: 15)')
    parser.add_argument('--log-file', type=Path,
                        help='Optional rotating log file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logger = setup_logging(
        level=logging.DEBUG if args.verbose else logging.INFO,
        log_file=args.log_file,
    )

    input_path = Path(args.input_json)
    if not input_path.exists():
        logger.error(f"Input file not found: {input_path}")
        return 1

    if (args.start_lat is None) != (args.start_lon is None):
        logger.error("--start-lat and --start-lon must be given together")
        return 1

    output_dir = Path(args.output_dir)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Cannot create output directory {output_dir}: {e}")
        return 1

    start_coordinate = None
    if args.start_lat is not None:
        start_coordinate = (args.start_lat, args.start_lon)

    try:
        vertices, segments, excluded = load_network(input_path)
        penalties = TurnPenalties(
            straight=args.straight_penalty,
            right_turn=args.right_penalty,
            left_turn=args.left_penalty,
            u_turn=args.uturn_penalty,
        )
        planner = RoutePlanner(
            penalties=penalties,
            ignore_oneway=args.ignore_oneway,
            start_coordinate=start_coordinate,
            average_speed_kmh=args.speed,
        )
        result = planner.plan(vertices, segments, excluded_count=excluded, track_name=input_path.stem)

        gpx_path = write_gpx(output_dir / f"{input_path.stem}.gpx", result.gpx_content)
        stats_path = output_dir / f"{input_path.stem}_stats.json"
        turns_path = output_dir / f"{input_path.stem}_turns.csv"
        try:
            with open(stats_path, 'w', encoding='utf-8') as f:
                json.dump(asdict(result.stats), f, indent=2)
            export_turns_to_csv(result.turn_events, turns_path)
        except OSError as e:
            raise ExportError("report", str(e)) from e
    except RoutePlannerError as e:
        log_exception(logger, "Route planning failed", e)
        return 1

    logger.info(f"Exported GPX: {gpx_path}")
    logger.info(f"Exported stats: {stats_path}")
    logger.info(f"Exported turns: {turns_path}")

    return 0 if result.is_valid else 2


if __name__ == '__main__':
    sys.exit(main())
