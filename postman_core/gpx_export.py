"""
GPX 1.1 export of planned routes.

The track file holds a metadata block (name, description, time) and a single
track with one segment whose points follow the circuit order. Points carry
no elevation or timestamps.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

import gpxpy
import gpxpy.gpx

from .exceptions import ExportError, handle_parse_error
from .logging_config import get_logger
from .topology import RoadGraph
from .types import Coordinate, NodeID

logger = get_logger(__name__)

GPX_CREATOR = "Collection Route Planner"
DEFAULT_TRACK_NAME = "Collection Route"
ROUTE_DESCRIPTION = "Collection route generated using Chinese Postman Problem algorithm"


def circuit_coordinates(circuit: Sequence[NodeID], graph: RoadGraph) -> List[Coordinate]:
    """Coordinates of the circuit vertices in route order; unknown ids are dropped."""
    return [graph.vertices[node_id].coordinate for node_id in circuit if node_id in graph.vertices]


def generate_gpx(
    coordinates: Sequence[Coordinate],
    name: str = DEFAULT_TRACK_NAME,
    description: str = ROUTE_DESCRIPTION,
    time: Optional[datetime] = None,
) -> str:
    """
    Build a GPX 1.1 document for a route.

    Args:
        coordinates: (lat, lon) points in travel order
        name: Metadata name (usually the input file name)
        description: Metadata description
        time: Metadata timestamp, defaults to now (UTC)

    Returns:
        GPX XML text
    """
    gpx = gpxpy.gpx.GPX()
    gpx.creator = GPX_CREATOR
    gpx.name = name
    gpx.description = description
    gpx.time = time or datetime.now(timezone.utc)

    track = gpxpy.gpx.GPXTrack(
        name=DEFAULT_TRACK_NAME,
        description=f"Generated on {gpx.time:%Y-%m-%d %H:%M:%S}",
    )
    gpx.tracks.append(track)

    segment = gpxpy.gpx.GPXTrackSegment()
    track.segments.append(segment)

    for lat, lon in coordinates:
        segment.points.append(gpxpy.gpx.GPXTrackPoint(latitude=lat, longitude=lon))

    return gpx.to_xml(version="1.1")


def parse_gpx_coordinates(gpx_content: str, source: str = "<string>") -> List[Coordinate]:
    """
    Read back the track points of a GPX document in file order.

    Raises:
        TrackParseError: If the document cannot be parsed
    """
    try:
        gpx = gpxpy.parse(gpx_content)
    except Exception as e:
        handle_parse_error(source, e)

    coordinates: List[Coordinate] = []
    for track in gpx.tracks:
        for segment in track.segments:
            coordinates.extend((point.latitude, point.longitude) for point in segment.points)
    return coordinates


def read_gpx_file(path: Union[str, Path]) -> List[Coordinate]:
    """Load track coordinates from a GPX file."""
    try:
        with open(path, encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        handle_parse_error(str(path), e)
    return parse_gpx_coordinates(content, source=str(path))


def write_gpx(path: Union[str, Path], gpx_content: str) -> Path:
    """
    Write GPX text to ``path``, creating parent directories.

    Raises:
        ExportError: If the file cannot be written
    """
    output = Path(path)
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(gpx_content, encoding="utf-8")
    except OSError as e:
        raise ExportError("GPX", str(e)) from e

    logger.info(f"GPX written to {output}")
    return output
