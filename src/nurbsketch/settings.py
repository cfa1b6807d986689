"""Package-wide constants driving degree selection, sampling and sketch hints."""

from typing import Final

MAX_DEGREE: Final[int] = 3
"""Highest polynomial degree used for a sketched curve (cubic)."""

MIN_POINTS: Final[int] = 2
"""Minimum number of control points for a curve to be defined."""

MIN_SEGMENTS: Final[int] = 200
"""Lower bound of the default sampling resolution."""

SEGMENTS_PER_POINT: Final[int] = 50
"""Default number of polyline segments contributed by each control point."""

CLOSE_THRESHOLD: Final[float] = 20.0
"""Distance to the first control point under which the cursor is "near start"."""

MIN_POINTS_TO_CLOSE: Final[int] = 3
"""Minimum number of control points before a sketch may be closed."""

POINT_RADIUS: Final[float] = 4.0
PREVIEW_POINT_RADIUS: Final[float] = 6.0


def get_default_num_segments(num_points: int) -> int:
    """Get the default polyline resolution for a curve with ``num_points`` points.

    The resolution grows with the number of control points so that the
    visual smoothness does not depend on the complexity of the curve.

    Args:
        num_points (int): Number of control points of the curve.

    Returns:
        int: Number of segments, ``max(MIN_SEGMENTS, num_points * SEGMENTS_PER_POINT)``.

    Example:
        >>> get_default_num_segments(3)
        200
        >>> get_default_num_segments(10)
        500
    """
    return max(MIN_SEGMENTS, int(num_points) * SEGMENTS_PER_POINT)


__all__ = [
    "CLOSE_THRESHOLD",
    "MAX_DEGREE",
    "MIN_POINTS",
    "MIN_POINTS_TO_CLOSE",
    "MIN_SEGMENTS",
    "POINT_RADIUS",
    "PREVIEW_POINT_RADIUS",
    "SEGMENTS_PER_POINT",
    "get_default_num_segments",
]
