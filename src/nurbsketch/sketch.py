"""Render-ready output for the sketching surface.

Bridges the control points maintained by an interactive input surface and the
drawing surface: it decides whether a curve exists yet, falls back to a
straight segment for two open points, samples the NURBS curve otherwise, and
computes the "near start" hint used to offer closing the sketch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

import numpy as np
import numpy.typing as npt

from .curve import NurbsCurve
from .errors import InsufficientPointsError
from .settings import CLOSE_THRESHOLD, MIN_POINTS_TO_CLOSE, get_default_num_segments
from .topology import (
    ControlPoint,
    ControlPointsLike,
    Topology,
    as_topology,
    is_linear_fallback,
    normalize_control_points,
)

logger = logging.getLogger(__name__)


class SketchFrame(NamedTuple):
    """Everything the drawing surface needs to render one frame of a sketch.

    Attributes:
        polyline (npt.NDArray[np.float64]): Curve polyline of shape `(N, 2)`.
            Empty (`N = 0`) while the curve is not defined yet.
        control_points (tuple[ControlPoint, ...]): Control points to draw as dots,
            including the preview point if any.
        near_start (bool): Whether the cursor hovers the first control point of
            an open sketch.
        closed (bool): Whether the sketch is closed.
    """

    polyline: npt.NDArray[np.float64]
    control_points: tuple[ControlPoint, ...]
    near_start: bool
    closed: bool


def _split_preview_points(
    control_points: ControlPointsLike,
) -> tuple[npt.NDArray[np.float32 | np.float64], tuple[ControlPoint, ...]]:
    """Separate the points of the curve from the points to display.

    `ControlPoint` instances flagged `is_preview` are displayed with their flag
    but left out of the curve. Every point, preview or not, is validated.

    Returns:
        tuple: Tuple of (curve_points, displayed) where curve_points is the
            `(n, 3)` array of non-preview points and displayed holds every
            point, in input order.
    """
    if not isinstance(control_points, np.ndarray):
        control_points = list(control_points)  # type: ignore[arg-type]
        is_preview = np.array(
            [isinstance(pt, ControlPoint) and pt.is_preview for pt in control_points],
            dtype=np.bool_,
        )
    else:
        is_preview = np.zeros(np.shape(control_points)[:1], dtype=np.bool_)

    points = normalize_control_points(control_points)
    displayed = tuple(
        ControlPoint(float(x), float(y), float(w), is_preview=bool(flag))
        for (x, y, w), flag in zip(points, is_preview, strict=True)
    )
    return points[~is_preview], displayed


def compute_polyline(
    control_points: ControlPointsLike,
    closed: Topology | bool = False,
    num_segments: int | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Compute the polyline to draw for a sketch.

    - Fewer than two points: no curve yet, an empty `(0, 2)` array.
    - Exactly two points on an open sketch: the straight segment between
      them, whatever the requested resolution.
    - Otherwise: the sampled NURBS curve.

    `ControlPoint` instances flagged `is_preview` are not part of the curve.

    Args:
        control_points (ControlPointsLike): Control points of the sketch.
        closed (Topology | bool): Whether the sketch is closed. Defaults to False.
        num_segments (int | None): Sampling resolution. Defaults to
            `max(200, 50 * num_points)`.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Polyline of shape `(N, 2)`.

    Raises:
        InvalidWeightError: If any weight is not strictly positive and finite.
        ValueError: If the control points are malformed or `num_segments` < 1.

    Example:
        >>> compute_polyline([(0, 0), (100, 0)], num_segments=500)
        array([[  0.,   0.],
               [100.,   0.]])
    """
    topology = as_topology(closed)
    points, _ = _split_preview_points(control_points)
    num_points = points.shape[0]

    if is_linear_fallback(num_points, topology):
        logger.debug("Two open control points: drawing a straight segment")
        return np.ascontiguousarray(points[:, :2])

    try:
        curve = NurbsCurve(points, topology)
    except InsufficientPointsError:
        logger.debug("%d control point(s): no curve to draw yet", num_points)
        return np.empty((0, 2), dtype=points.dtype)

    return curve.sample(num_segments)


def is_near_start(
    cursor: Sequence[float] | npt.ArrayLike,
    control_points: ControlPointsLike,
    closed: Topology | bool = False,
    threshold: float = CLOSE_THRESHOLD,
) -> bool:
    """Check whether the cursor hovers the first control point of an open sketch.

    Args:
        cursor (Sequence[float] | npt.ArrayLike): Cursor position `(x, y)`.
        control_points (ControlPointsLike): Control points of the sketch.
        closed (Topology | bool): Whether the sketch is closed. Defaults to False.
        threshold (float): Distance under which the cursor is near the start.
            Defaults to `CLOSE_THRESHOLD`.

    Returns:
        bool: True if the sketch is open, has at least one non-preview point,
            and the cursor is strictly closer than `threshold` to the first one.
    """
    if as_topology(closed) is Topology.CLOSED:
        return False

    points, _ = _split_preview_points(control_points)
    if points.shape[0] == 0:
        return False

    cursor_arr = np.asarray(cursor, dtype=np.float64).reshape(-1)
    distance = float(np.hypot(*(cursor_arr[:2] - points[0, :2])))
    return distance < threshold


def can_close(
    cursor: Sequence[float] | npt.ArrayLike,
    control_points: ControlPointsLike,
    closed: Topology | bool = False,
    threshold: float = CLOSE_THRESHOLD,
) -> bool:
    """Check whether clicking at the cursor position should close the sketch.

    Args:
        cursor (Sequence[float] | npt.ArrayLike): Cursor position `(x, y)`.
        control_points (ControlPointsLike): Control points of the sketch.
        closed (Topology | bool): Whether the sketch is already closed.
        threshold (float): See `is_near_start`.

    Returns:
        bool: True for open sketches with at least `MIN_POINTS_TO_CLOSE`
            non-preview points and the cursor near the first one.
    """
    points, _ = _split_preview_points(control_points)
    return points.shape[0] >= MIN_POINTS_TO_CLOSE and is_near_start(
        cursor, points, closed, threshold
    )


def build_frame(
    control_points: ControlPointsLike,
    closed: Topology | bool = False,
    cursor: Sequence[float] | npt.ArrayLike | None = None,
    preview_point: Sequence[float] | npt.ArrayLike | None = None,
    num_segments: int | None = None,
) -> SketchFrame:
    """Build the frame to render for the current state of a sketch.

    A preview point (the point still being placed under the cursor) is only
    shown for open sketches. It is appended to the displayed control points
    with `is_preview=True` and counts towards the default resolution, but it
    is not part of the evaluated curve. `ControlPoint` instances already
    flagged `is_preview` in `control_points` are handled the same way, in
    place.

    Args:
        control_points (ControlPointsLike): Control points of the sketch.
        closed (Topology | bool): Whether the sketch is closed. Defaults to False.
        cursor (Sequence[float] | npt.ArrayLike | None): Cursor position used for
            the near-start hint. Defaults to None (no hint).
        preview_point (Sequence[float] | npt.ArrayLike | None): Position of the
            point being placed. Defaults to None.
        num_segments (int | None): Sampling resolution. Defaults to
            `max(200, 50 * num_displayed_points)`.

    Returns:
        SketchFrame: Polyline, displayed control points and hints.
    """
    topology = as_topology(closed)
    points, displayed = _split_preview_points(control_points)

    if topology is Topology.CLOSED:
        displayed = tuple(point for point in displayed if not point.is_preview)
    elif preview_point is not None:
        x, y = np.asarray(preview_point, dtype=np.float64).reshape(-1)[:2]
        displayed = (*displayed, ControlPoint(float(x), float(y), is_preview=True))

    if num_segments is None:
        num_segments = get_default_num_segments(len(displayed))

    polyline = compute_polyline(points, topology, num_segments)
    near_start = cursor is not None and is_near_start(cursor, points, topology)

    return SketchFrame(
        polyline=polyline,
        control_points=displayed,
        near_start=near_start,
        closed=topology is Topology.CLOSED,
    )


__all__ = [
    "SketchFrame",
    "build_frame",
    "can_close",
    "compute_polyline",
    "is_near_start",
]
