"""Control points, curve topology and preparation of evaluation-ready points.

Turns the raw input of the sketching surface (an ordered list of control
points and a closed flag) into the extended point array and degree consumed
by the knot vector builder and the curve evaluator.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from enum import Enum
from typing import NamedTuple, Union

import numpy as np
from numpy import typing as npt

from .errors import InsufficientPointsError, InvalidWeightError
from .settings import MAX_DEGREE, MIN_POINTS
from .tolerance import ensure_float_dtype

logger = logging.getLogger(__name__)

_POINT_COLUMNS = 2
_WEIGHTED_POINT_COLUMNS = 3


class Topology(Enum):
    """Enumeration for curve topologies.

    Attributes:
        OPEN (Topology): Open curve on a clamped knot vector. It starts at the
            first control point and ends at the last one.
        CLOSED (Topology): Closed curve on a uniform knot vector, with the first
            `degree` control points wrapped onto the tail.
    """

    OPEN = "open"
    CLOSED = "closed"


class ControlPoint(NamedTuple):
    """A weighted 2D control point.

    Attributes:
        x (float): Horizontal coordinate.
        y (float): Vertical coordinate.
        weight (float): Rational weight, strictly positive. Defaults to 1.0.
        is_preview (bool): Whether the point is still being placed. This is a
            rendering hint only and never alters the curve.
    """

    x: float
    y: float
    weight: float = 1.0
    is_preview: bool = False


ControlPointsLike = Union[  # noqa: UP007
    Sequence[ControlPoint],
    Iterable[Sequence[float]],
    npt.ArrayLike,
]


def as_topology(topology: Topology | bool) -> Topology:
    """Convert a closed flag or a `Topology` into a `Topology`.

    Args:
        topology (Topology | bool): Topology, or True for a closed curve.

    Returns:
        Topology: The corresponding topology.

    Raises:
        TypeError: If `topology` is neither a `Topology` nor a bool.
    """
    if isinstance(topology, Topology):
        return topology
    if isinstance(topology, (bool, np.bool_)):
        return Topology.CLOSED if topology else Topology.OPEN
    raise TypeError(f"topology must be a Topology or a bool. Got {type(topology).__name__}")


def _as_weighted_row(point: ControlPoint | Sequence[float]) -> tuple[float, ...]:
    """Convert one control point into an `(x, y, weight)` row, weight 1 if missing."""
    if isinstance(point, ControlPoint):
        return (point.x, point.y, point.weight)
    row = tuple(point)
    if len(row) == _POINT_COLUMNS:
        return (*row, 1.0)
    return row


def normalize_control_points(
    control_points: ControlPointsLike,
    dtype: npt.DTypeLike | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Normalize control points to a `(n, 3)` array of `(x, y, weight)` rows.

    Accepts a sequence mixing `ControlPoint` instances, `(x, y)` and
    `(x, y, weight)` tuples, or an array of shape `(n, 2)` or `(n, 3)`.
    Points without weight get weight 1. The result is always a fresh copy, so
    later changes to the input do not affect it.

    Args:
        control_points (ControlPointsLike): Control points to normalize.
        dtype (npt.DTypeLike | None): Floating dtype of the result (float32 or
            float64). If None, float inputs keep their dtype and anything else
            becomes float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Array of shape `(n, 3)`.

    Raises:
        ValueError: If a point does not have 2 or 3 components, the input does
            not have a valid shape, or it contains non-finite coordinates.
        InvalidWeightError: If any weight is not strictly positive and finite.

    Example:
        >>> normalize_control_points([(0, 0), ControlPoint(1.0, 2.0, weight=0.5)])
        array([[0. , 0. , 1. ],
               [1. , 2. , 0.5]])
    """
    if isinstance(control_points, np.ndarray):
        points = control_points
    else:
        rows = [_as_weighted_row(pt) for pt in control_points]  # type: ignore[union-attr]
        if any(len(row) != _WEIGHTED_POINT_COLUMNS for row in rows):
            raise ValueError(
                "control points must have 2 or 3 components. "
                f"Got {sorted({len(row) for row in rows})}"
            )
        points = np.array(rows)

    if points.size == 0:
        points = points.reshape(0, _WEIGHTED_POINT_COLUMNS)

    if points.ndim != 2 or points.shape[1] not in (  # noqa: PLR2004
        _POINT_COLUMNS,
        _WEIGHTED_POINT_COLUMNS,
    ):
        raise ValueError(f"control points must have shape (n, 2) or (n, 3). Got {points.shape}")

    if dtype is not None:
        target_dtype = ensure_float_dtype(dtype)
    elif points.dtype in (np.float32, np.float64):
        target_dtype = points.dtype
    else:
        target_dtype = np.dtype(np.float64)

    normalized = np.ones((points.shape[0], _WEIGHTED_POINT_COLUMNS), dtype=target_dtype)
    normalized[:, : points.shape[1]] = points

    if not np.all(np.isfinite(normalized[:, :2])):
        raise ValueError("control point coordinates must be finite")

    weights = normalized[:, 2]
    invalid = ~(np.isfinite(weights) & (weights > 0))
    if np.any(invalid):
        raise InvalidWeightError(
            f"control point weights must be positive and finite. "
            f"Invalid weights at indices {np.flatnonzero(invalid).tolist()}"
        )

    return normalized


def get_curve_degree(num_points: int) -> int:
    """Get the degree used for a curve with `num_points` control points.

    The curve degrades to linear or quadratic when too few points exist and
    never exceeds `MAX_DEGREE` (cubic).

    Args:
        num_points (int): Number of control points.

    Returns:
        int: `min(MAX_DEGREE, num_points - 1)`.

    Raises:
        InsufficientPointsError: If `num_points` is smaller than 1.
    """
    if num_points < 1:
        raise InsufficientPointsError(f"a curve needs at least one control point. Got {num_points}")
    return min(MAX_DEGREE, int(num_points) - 1)


def is_linear_fallback(num_points: int, topology: Topology | bool) -> bool:
    """Check whether a curve is drawn as a straight segment.

    Exactly two points on an open curve bypass the NURBS evaluation.

    Args:
        num_points (int): Number of control points.
        topology (Topology | bool): Curve topology or closed flag.

    Returns:
        bool: True for the two-point open case.
    """
    return num_points == MIN_POINTS and as_topology(topology) is Topology.OPEN


def prepare_evaluation_points(
    control_points: ControlPointsLike,
    topology: Topology | bool,
    dtype: npt.DTypeLike | None = None,
) -> tuple[npt.NDArray[np.float32 | np.float64], int]:
    """Build the evaluation-ready point array and degree of a curve.

    For closed curves the first `degree` control points are appended to the
    tail, so that the uniform knot vector yields a continuous loop.

    Args:
        control_points (ControlPointsLike): Raw control points, in order.
        topology (Topology | bool): Curve topology, or True for a closed curve.
        dtype (npt.DTypeLike | None): Floating dtype of the result. See
            `normalize_control_points`.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], int]: Tuple of
            (evaluation_points, degree) where evaluation_points has shape
            `(n + degree, 3)` for closed curves and `(n, 3)` for open ones.

    Raises:
        InsufficientPointsError: If fewer than two control points are given.
        InvalidWeightError: If any weight is not strictly positive and finite.
        ValueError: If the control points are malformed.
    """
    points = normalize_control_points(control_points, dtype)
    num_points = points.shape[0]
    if num_points < MIN_POINTS:
        raise InsufficientPointsError(
            f"a curve needs at least {MIN_POINTS} control points. Got {num_points}"
        )

    degree = get_curve_degree(num_points)
    if as_topology(topology) is Topology.CLOSED:
        points = np.concatenate([points, points[:degree]])

    logger.debug(
        "Prepared %d evaluation points of degree %d from %d control points",
        points.shape[0],
        degree,
        num_points,
    )
    return points, degree


__all__ = [
    "ControlPoint",
    "ControlPointsLike",
    "Topology",
    "as_topology",
    "get_curve_degree",
    "is_linear_fallback",
    "normalize_control_points",
    "prepare_evaluation_points",
]
