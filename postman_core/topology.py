"""
Road network graph construction.

This module converts already-filtered street segments into a directed
multigraph:
- One arc per consecutive vertex pair, with great-circle length and bearing
- Mirrored reverse arc unless the segment is one-way
- Provenance (segment id, highway class, name) preserved on every arc
"""

from collections import defaultdict
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .geo import calculate_bearing, haversine, reverse_bearing
from .logging_config import get_logger
from .types import Arc, Coordinate, NodeID, RoadSegment, Vertex

logger = get_logger(__name__)


class RoadGraph:
    """
    Directed multigraph of the street network.

    Vertices keep their insertion order, and so do the outgoing arcs of each
    vertex. Several arcs may share the same (from, to) pair.
    """

    def __init__(self):
        self.vertices: Dict[NodeID, Vertex] = {}
        self.adjacency: Dict[NodeID, List[Arc]] = {}
        self._next_key = 0
        self._arc_count = 0

    def __repr__(self) -> str:
        return f"RoadGraph(vertices={len(self.vertices)}, arcs={self._arc_count})"

    def __contains__(self, node_id: NodeID) -> bool:
        return node_id in self.vertices

    @property
    def arc_count(self) -> int:
        """Total number of arcs, parallel arcs included."""
        return self._arc_count

    @property
    def node_count(self) -> int:
        return len(self.vertices)

    def add_vertex(self, vertex: Vertex) -> None:
        """Register a vertex (no-op if already present)."""
        if vertex.node_id not in self.vertices:
            self.vertices[vertex.node_id] = vertex

    def add_arc(
        self,
        from_node: NodeID,
        to_node: NodeID,
        length: float,
        bearing: float,
        segment_id: Optional[str] = None,
        highway: str = "unknown",
        name: str = "unnamed",
    ) -> Arc:
        """
        Append a new arc with a fresh key.

        Raises:
            KeyError: If either endpoint is not a registered vertex
        """
        if from_node not in self.vertices:
            raise KeyError(f"Unknown origin vertex {from_node}")
        if to_node not in self.vertices:
            raise KeyError(f"Unknown destination vertex {to_node}")

        arc = Arc(
            key=self._next_key,
            from_node=from_node,
            to_node=to_node,
            length=length,
            bearing=bearing,
            segment_id=segment_id,
            highway=highway,
            name=name,
        )
        self._insert(arc)
        return arc

    def add_duplicate_arc(self, arc: Arc) -> Arc:
        """Insert a copy of ``arc`` (same endpoints and attributes) under a new key."""
        return self.add_arc(
            arc.from_node,
            arc.to_node,
            arc.length,
            arc.bearing,
            segment_id=arc.segment_id,
            highway=arc.highway,
            name=arc.name,
        )

    def _insert(self, arc: Arc) -> None:
        self.adjacency.setdefault(arc.from_node, []).append(arc)
        self._next_key = max(self._next_key, arc.key + 1)
        self._arc_count += 1

    def outgoing(self, node_id: NodeID) -> List[Arc]:
        """Outgoing arcs of a vertex in enumeration order."""
        return self.adjacency.get(node_id, [])

    def arcs(self) -> Iterator[Arc]:
        """Iterate every arc, grouped by origin in vertex order."""
        for node_id in self.vertices:
            yield from self.adjacency.get(node_id, [])

    def find_arc(self, from_node: NodeID, to_node: NodeID) -> Optional[Arc]:
        """First arc from ``from_node`` to ``to_node``, or None."""
        for arc in self.adjacency.get(from_node, []):
            if arc.to_node == to_node:
                return arc
        return None

    def find_mirror(self, arc: Arc) -> Optional[Arc]:
        """First reverse arc of ``arc`` cut from the same segment, or None."""
        for candidate in self.adjacency.get(arc.to_node, []):
            if candidate.to_node == arc.from_node and candidate.segment_id == arc.segment_id:
                return candidate
        return None

    def out_degree(self, node_id: NodeID) -> int:
        return len(self.adjacency.get(node_id, []))

    def in_degrees(self) -> Dict[NodeID, int]:
        """In-degree of every vertex."""
        degrees = {node_id: 0 for node_id in self.vertices}
        for arc in self.arcs():
            degrees[arc.to_node] += 1
        return degrees

    def coordinate(self, node_id: NodeID) -> Coordinate:
        return self.vertices[node_id].coordinate

    def copy(self) -> "RoadGraph":
        """Independent copy sharing the immutable vertices and arcs."""
        clone = RoadGraph()
        clone.vertices = dict(self.vertices)
        clone.adjacency = {node_id: list(arcs) for node_id, arcs in self.adjacency.items()}
        clone._next_key = self._next_key
        clone._arc_count = self._arc_count
        return clone

    def subgraph(self, nodes: Iterable[NodeID]) -> "RoadGraph":
        """
        New graph restricted to ``nodes``.

        Vertices are inserted in ascending id order; only arcs with both
        endpoints inside the set are kept. Arc keys are preserved.
        """
        keep: Set[NodeID] = set(nodes)
        sub = RoadGraph()
        for node_id in sorted(keep):
            if node_id in self.vertices:
                sub.add_vertex(self.vertices[node_id])

        for node_id in sub.vertices:
            for arc in self.adjacency.get(node_id, []):
                if arc.to_node in keep:
                    sub._insert(arc)

        sub._next_key = max(sub._next_key, self._next_key)
        return sub


def _as_vertex(node_id: NodeID, value: Union[Vertex, Coordinate]) -> Vertex:
    if isinstance(value, Vertex):
        return value
    lat, lon = value
    return Vertex(node_id=node_id, lat=float(lat), lon=float(lon))


def build_road_graph(
    vertices: Mapping[NodeID, Union[Vertex, Coordinate]],
    segments: Sequence[RoadSegment],
    ignore_oneway: bool = False,
) -> RoadGraph:
    """
    Build the directed road multigraph from filtered segments.

    Args:
        vertices: Vertex table, id -> Vertex or (lat, lon)
        segments: Ordered, already-filtered segments
        ignore_oneway: Mirror one-way segments as if they were two-way

    Returns:
        RoadGraph with one forward arc per consecutive vertex pair and a
        mirrored reverse arc where travel in both directions is allowed.
        Pairs referencing unknown vertices are skipped.
    """
    graph = RoadGraph()
    vertex_cache: Dict[NodeID, Vertex] = {}
    skipped_pairs = 0

    for segment in segments:
        mirror = ignore_oneway or not segment.oneway
        node_ids = segment.node_ids

        for u, v in zip(node_ids[:-1], node_ids[1:]):
            if u not in vertices or v not in vertices:
                skipped_pairs += 1
                continue

            vertex_u = vertex_cache.get(u)
            if vertex_u is None:
                vertex_u = vertex_cache[u] = _as_vertex(u, vertices[u])
            vertex_v = vertex_cache.get(v)
            if vertex_v is None:
                vertex_v = vertex_cache[v] = _as_vertex(v, vertices[v])

            graph.add_vertex(vertex_u)
            graph.add_vertex(vertex_v)

            length = haversine(vertex_u.coordinate, vertex_v.coordinate)
            bearing = calculate_bearing(vertex_u.coordinate, vertex_v.coordinate)

            graph.add_arc(u, v, length, bearing, segment.segment_id, segment.highway, segment.name)

            if mirror:
                graph.add_arc(
                    v, u, length, reverse_bearing(bearing),
                    segment.segment_id, segment.highway, segment.name,
                )

    if skipped_pairs:
        logger.debug(f"Skipped {skipped_pairs} segment pairs with unregistered vertices")

    return graph


def build_reverse_adjacency(graph: RoadGraph) -> Dict[NodeID, List[NodeID]]:
    """
    Build reverse adjacency (predecessor lists) for the graph.

    Returns:
        Dict mapping to_node -> list of origin vertices, one entry per arc,
        ordered by origin vertex order then arc order
    """
    reverse: Dict[NodeID, List[NodeID]] = defaultdict(list)
    for arc in graph.arcs():
        reverse[arc.to_node].append(arc.from_node)
    return reverse


def get_node_degrees(graph: RoadGraph) -> Dict[NodeID, Tuple[int, int]]:
    """
    Calculate in-degree and out-degree for all vertices.

    Returns:
        Dict of node ID -> (in_degree, out_degree)
    """
    in_degrees = graph.in_degrees()
    return {node_id: (in_degrees[node_id], graph.out_degree(node_id)) for node_id in graph.vertices}
