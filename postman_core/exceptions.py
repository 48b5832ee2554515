"""
Custom exceptions for the collection route planner.

Provides a clear exception hierarchy for better error handling and debugging.
All exceptions inherit from RoutePlannerError for easy catching of all library errors.
"""


class RoutePlannerError(Exception):
    """Base exception for all route planner errors."""

    pass


# ==============================================================================
# Input/Parsing Errors
# ==============================================================================


class ParseError(RoutePlannerError):
    """Raised when parsing input or track data fails."""

    pass


class TrackParseError(ParseError):
    """Raised specifically for GPX track parsing failures."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Failed to parse GPX track '{source}': {reason}")


class ValidationError(RoutePlannerError):
    """Raised when input validation fails."""

    pass


# ==============================================================================
# Graph Construction Errors
# ==============================================================================


class GraphError(RoutePlannerError):
    """Base class for graph-related errors."""

    pass


class GraphBuildError(GraphError):
    """Raised when graph construction fails."""

    def __init__(self, reason: str, num_nodes: int = 0, num_edges: int = 0):
        self.reason = reason
        self.num_nodes = num_nodes
        self.num_edges = num_edges
        msg = f"Graph construction failed: {reason}"
        if num_nodes or num_edges:
            msg += f" (nodes: {num_nodes}, edges: {num_edges})"
        super().__init__(msg)


class EmptyNetworkError(GraphBuildError):
    """Raised when no road segments survive upstream filtering."""

    def __init__(self):
        super().__init__("No valid road segments found in the input network")


class NoRoutableNetworkError(GraphError):
    """Raised when connectivity reduction leaves nothing to route."""

    def __init__(self, num_components: int = 0):
        self.num_components = num_components
        super().__init__(
            f"No connected road network found ({num_components} components, "
            f"largest has no vertices)"
        )


# ==============================================================================
# Routing Errors
# ==============================================================================


class RoutingError(RoutePlannerError):
    """Base class for routing-related errors."""

    pass


class NoPathError(RoutingError):
    """Raised when no path exists between two vertices."""

    def __init__(self, from_node, to_node):
        self.from_node = from_node
        self.to_node = to_node
        super().__init__(f"No path exists from {from_node} to {to_node}")


# ==============================================================================
# Export Errors
# ==============================================================================


class ExportError(RoutePlannerError):
    """Raised when writing a route artefact fails."""

    def __init__(self, format_type: str, reason: str):
        self.format_type = format_type
        self.reason = reason
        super().__init__(f"Failed to export {format_type}: {reason}")


# ==============================================================================
# Configuration Errors
# ==============================================================================


class ConfigurationError(RoutePlannerError):
    """Raised when configuration is invalid."""

    pass


# ==============================================================================
# Convenience Functions
# ==============================================================================


def handle_parse_error(source: str, original_error: Exception) -> None:
    """
    Convert generic parsing errors to specific TrackParseError.

    Args:
        source: Path or label of the track being parsed
        original_error: The original exception that was raised

    Raises:
        TrackParseError: Always raises with context from original error
    """
    import gpxpy.gpx

    if isinstance(original_error, gpxpy.gpx.GPXXMLSyntaxException):
        raise TrackParseError(source, f"XML syntax error: {original_error}") from original_error
    elif isinstance(original_error, gpxpy.gpx.GPXException):
        raise TrackParseError(source, f"Invalid GPX: {original_error}") from original_error
    elif isinstance(original_error, (FileNotFoundError, PermissionError)):
        raise TrackParseError(source, str(original_error)) from original_error
    else:
        raise TrackParseError(source, f"Unexpected error: {type(original_error).__name__}: {original_error}") from original_error
