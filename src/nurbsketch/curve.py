"""Rational curve evaluation and polyline sampling for sketched NURBS curves.

The functional API (`evaluate_curve_point`, `sample_curve`) works on an
explicit degree, knot vector and control point array. `NurbsCurve` bundles an
immutable snapshot of control points and topology and derives the degree and
knot vector from it.
"""

from __future__ import annotations

import functools
import logging
from typing import Any

import numpy as np
import numpy.typing as npt

from ._basis_utils import _clip_to_domain, _compute_final_output_shape_1D, _normalize_parameters
from ._nurbs_curve_impl import _evaluate_points_impl, _sample_curve_impl
from .errors import DegenerateEvaluationError
from .knots import _validate_span_input, create_knot_vector, get_parameter_domain
from .settings import get_default_num_segments
from .tolerance import get_default_tolerance
from .topology import (
    ControlPointsLike,
    Topology,
    as_topology,
    normalize_control_points,
    prepare_evaluation_points,
)

logger = logging.getLogger(__name__)


def _split_control_points(
    points: npt.NDArray[np.float32 | np.float64],
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.float32 | np.float64]]:
    """Split `(n, 3)` control points into contiguous coordinates and weights."""
    return np.ascontiguousarray(points[:, :2]), np.ascontiguousarray(points[:, 2])


def _prepare_curve_input(
    degree: int,
    knots: npt.ArrayLike,
    control_points: ControlPointsLike,
) -> tuple[
    npt.NDArray[np.float32 | np.float64],
    npt.NDArray[np.float32 | np.float64],
    npt.NDArray[np.float32 | np.float64],
]:
    """Validate and convert the input of the functional curve API.

    Returns:
        tuple: Tuple of (knots, coords, weights) arrays sharing the knot dtype.
    """
    knots_arr = np.ascontiguousarray(knots)
    if knots_arr.dtype not in (np.float32, np.float64):
        knots_arr = knots_arr.astype(np.float64)

    points = normalize_control_points(control_points, dtype=knots_arr.dtype)
    knots_arr = _validate_span_input(degree, knots_arr, points.shape[0])
    coords, weights = _split_control_points(points)
    return knots_arr, coords, weights


def _replace_degenerate_samples(
    polyline: npt.NDArray[np.float32 | np.float64],
    valid: npt.NDArray[np.bool_],
) -> None:
    """Overwrite degenerate samples in place with the closest previous valid one.

    Leading degenerate samples take the first valid sample instead.
    """
    indices = np.where(valid, np.arange(valid.size), -1)
    np.maximum.accumulate(indices, out=indices)
    indices[indices < 0] = int(np.argmax(valid))
    polyline[:] = polyline[indices]


def evaluate_curve_point(
    u: float,
    degree: int,
    knots: npt.ArrayLike,
    control_points: ControlPointsLike,
) -> npt.NDArray[np.float32 | np.float64]:
    """Evaluate the rational curve point at the parameter `u`.

    Only the `degree+1` control points attached to the knot span of `u`
    contribute: the point is `sum(N[k] w[k] P[k]) / sum(N[k] w[k])`.

    Args:
        u (float): Parameter value. Must be finite; values outside the domain
            are clamped to the first or last span.
        degree (int): Curve degree.
        knots (npt.ArrayLike): Knot vector of length `num_points + degree + 1`.
        control_points (ControlPointsLike): Control points, as accepted by
            `nurbsketch.topology.normalize_control_points`.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Curve point `(x, y)`.

    Raises:
        DegenerateEvaluationError: If the rational denominator vanishes.
        InvalidWeightError: If any weight is not strictly positive and finite.
        InvalidDegreeError: If the degree is negative or too high.
        ValueError: If `u` is not finite or the inputs are inconsistent.

    Example:
        >>> evaluate_curve_point(0.5, 1, [0, 0, 1, 1], [(0, 0), (10, 20)])
        array([ 5., 10.])
    """
    if not np.isfinite(u):
        raise ValueError(f"u must be finite. Got {u}")

    knots_arr, coords, weights = _prepare_curve_input(degree, knots, control_points)

    point = np.empty((1, 2), dtype=knots_arr.dtype)
    valid = np.empty(1, dtype=np.bool_)
    pts = np.array([u], dtype=knots_arr.dtype)
    _evaluate_points_impl(pts, degree, knots_arr, coords, weights, point, valid)

    if not valid[0]:
        raise DegenerateEvaluationError(f"rational denominator vanishes at u={u}")
    return point[0]


def sample_curve(
    degree: int,
    knots: npt.ArrayLike,
    control_points: ControlPointsLike,
    num_segments: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Sample the curve as a polyline of `num_segments + 1` points.

    The fractions `t = i / num_segments`, `i = 0..num_segments`, are mapped to
    the parameter domain `[u_min, u_max]` as `u = t * (u_max - u_min) + u_min`.

    Degenerate samples (vanishing denominator) never reach the output: they
    are replaced by the previous valid sample, or by the first valid one when
    they lead the polyline.

    Args:
        degree (int): Curve degree.
        knots (npt.ArrayLike): Knot vector of length `num_points + degree + 1`.
        control_points (ControlPointsLike): Control points.
        num_segments (int): Number of polyline segments. Must be at least 1.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Polyline of shape `(num_segments + 1, 2)`.

    Raises:
        ValueError: If `num_segments` < 1 or the inputs are inconsistent.
        DegenerateEvaluationError: If every sample is degenerate.
        InvalidWeightError: If any weight is not strictly positive and finite.
        InvalidDegreeError: If the degree is negative or too high.
    """
    if num_segments < 1:
        raise ValueError(f"num_segments must be at least 1. Got {num_segments}")
    num_segments = int(num_segments)

    knots_arr, coords, weights = _prepare_curve_input(degree, knots, control_points)

    polyline = np.empty((num_segments + 1, 2), dtype=knots_arr.dtype)
    valid = np.empty(num_segments + 1, dtype=np.bool_)
    _sample_curve_impl(degree, knots_arr, coords, weights, num_segments, polyline, valid)

    if not np.all(valid):
        if not np.any(valid):
            raise DegenerateEvaluationError("rational denominator vanishes at every sample")
        logger.warning(
            "Replaced %d degenerate curve samples out of %d",
            int(np.count_nonzero(~valid)),
            valid.size,
        )
        _replace_degenerate_samples(polyline, valid)

    return polyline


def get_polyline_length(polyline: npt.ArrayLike) -> float:
    """Get the total length of a polyline.

    Args:
        polyline (npt.ArrayLike): Points of shape `(n, 2)`.

    Returns:
        float: Sum of the segment lengths; 0 for fewer than two points.
    """
    pts = np.asarray(polyline, dtype=np.float64)
    if pts.shape[0] < 2:  # noqa: PLR2004
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))


class NurbsCurve:
    """A NURBS curve sketched through an ordered set of weighted control points.

    The curve is an immutable snapshot: the control points are copied on
    construction, and the degree (`min(3, n - 1)`), the evaluation points and
    the knot vector are derived from them and the topology. Closed curves wrap
    their first `degree` control points onto the tail and use a uniform knot
    vector; open curves use a clamped knot vector.

    Attributes:
        _control_points (npt.NDArray[np.float32 | np.float64]): Control points as
            `(x, y, weight)` rows.
        _topology (Topology): Curve topology.
        _evaluation_points (npt.NDArray[np.float32 | np.float64]): Control points
            used for evaluation (wrapped for closed curves).
        _degree (int): Curve degree.
        _knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
    """

    _control_points: npt.NDArray[np.float32 | np.float64]
    _topology: Topology
    _evaluation_points: npt.NDArray[np.float32 | np.float64]
    _degree: int
    _knots: npt.NDArray[np.float32 | np.float64]

    def __init__(
        self,
        control_points: ControlPointsLike,
        topology: Topology | bool = Topology.OPEN,
        dtype: npt.DTypeLike | None = None,
    ) -> None:
        """Initialize a curve from its control points.

        Args:
            control_points (ControlPointsLike): At least two control points, as
                `ControlPoint` instances, `(x, y[, weight])` tuples or an array
                of shape `(n, 2)` or `(n, 3)`.
            topology (Topology | bool): Curve topology, or True for a closed
                curve. Defaults to Topology.OPEN.
            dtype (npt.DTypeLike | None): float32 or float64. If None, inferred
                from the control points (float64 for non-float input).

        Raises:
            InsufficientPointsError: If fewer than two control points are given.
            InvalidWeightError: If any weight is not strictly positive and finite.
            ValueError: If the control points are malformed.
        """
        self._topology = as_topology(topology)
        self._control_points = normalize_control_points(control_points, dtype)
        self._evaluation_points, self._degree = prepare_evaluation_points(
            self._control_points, self._topology
        )
        self._knots = create_knot_vector(
            self._evaluation_points.shape[0],
            self._degree,
            self._topology,
            dtype=self._control_points.dtype,
        )
        self._coords, self._weights = _split_control_points(self._evaluation_points)

    @staticmethod
    def _readonly(array: npt.NDArray[Any]) -> npt.NDArray[Any]:
        view = array.view()
        view.flags.writeable = False
        return view

    @property
    def degree(self) -> int:
        """Get the polynomial degree of the curve.

        Returns:
            int: The degree, at most 3.
        """
        return self._degree

    @property
    def knots(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get the knot vector (read-only).

        Returns:
            npt.NDArray[np.float32 | np.float64]: The knot vector.
        """
        return self._readonly(self._knots)

    @property
    def topology(self) -> Topology:
        """Get the curve topology."""
        return self._topology

    @property
    def closed(self) -> bool:
        """Whether the curve is closed."""
        return self._topology is Topology.CLOSED

    @property
    def control_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get the control points as read-only `(x, y, weight)` rows."""
        return self._readonly(self._control_points)

    @property
    def evaluation_points(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get the (possibly wrapped) evaluation points as read-only `(x, y, weight)` rows."""
        return self._readonly(self._evaluation_points)

    @property
    def weights(self) -> npt.NDArray[np.float32 | np.float64]:
        """Get the weights of the control points (read-only)."""
        return self._readonly(self._control_points[:, 2])

    @property
    def num_points(self) -> int:
        """Get the number of control points (without wrapped ones)."""
        return int(self._control_points.shape[0])

    @property
    def dtype(self) -> np.dtype[Any]:
        """Get the data type used in computations."""
        return self._knots.dtype

    @functools.cached_property
    def domain(self) -> tuple[float, float]:
        """Get the parameter domain `(knots[degree], knots[-degree-1])`.

        Returns:
            tuple[float, float]: Lower and upper ends of the domain.
        """
        return get_parameter_domain(self._knots, self._degree)

    @functools.cached_property
    def tolerance(self) -> float:
        """Get the tolerance used to accept parameters marginally outside the domain."""
        return get_default_tolerance(self.dtype)

    def _evaluate_parameters(self, pts: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        input_shape = np.shape(pts)
        pts_arr = _normalize_parameters(pts)

        pts_arr = _clip_to_domain(pts_arr, self.domain, self.tolerance, self.dtype, "curve domain")

        points = np.empty((pts_arr.size, 2), dtype=self.dtype)
        valid = np.empty(pts_arr.size, dtype=np.bool_)
        _evaluate_points_impl(
            pts_arr, self._degree, self._knots, self._coords, self._weights, points, valid
        )
        if not np.all(valid):
            raise DegenerateEvaluationError(
                f"rational denominator vanishes at u={pts_arr[~valid].tolist()}"
            )

        return points.reshape(_compute_final_output_shape_1D(input_shape, 2))

    def evaluate_at(self, u: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at raw parameter values.

        Args:
            u (npt.ArrayLike): Parameter(s) inside `domain` (up to tolerance).

        Returns:
            npt.NDArray[np.float32 | np.float64]: Points of shape `(*u.shape, 2)`,
                or `(2,)` for a scalar parameter.

        Raises:
            ValueError: If any parameter lies outside the domain.
            DegenerateEvaluationError: If the denominator vanishes at any parameter.
        """
        return self._evaluate_parameters(u)

    def evaluate(self, t: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
        """Evaluate the curve at fractions of its parameter domain.

        Args:
            t (npt.ArrayLike): Fraction(s) in `[0, 1]`, mapped to the domain as
                `u = t * (u_max - u_min) + u_min`.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Points of shape `(*t.shape, 2)`,
                or `(2,)` for a scalar fraction.

        Raises:
            ValueError: If any fraction lies outside `[0, 1]`.
            DegenerateEvaluationError: If the denominator vanishes at any parameter.
        """
        u_min, u_max = self.domain
        t_arr = np.asarray(t, dtype=np.float64)
        return self._evaluate_parameters(t_arr * (u_max - u_min) + u_min)

    def sample(self, num_segments: int | None = None) -> npt.NDArray[np.float32 | np.float64]:
        """Sample the curve as a polyline.

        Args:
            num_segments (int | None): Number of polyline segments. Defaults to
                `max(200, 50 * num_points)`.

        Returns:
            npt.NDArray[np.float32 | np.float64]: Polyline of shape `(num_segments + 1, 2)`.

        Raises:
            ValueError: If `num_segments` < 1.
        """
        if num_segments is None:
            num_segments = get_default_num_segments(self.num_points)
        logger.debug("Sampling %r with %d segments", self, num_segments)
        return sample_curve(self._degree, self._knots, self._evaluation_points, num_segments)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(num_points={self.num_points}, degree={self._degree}, "
            f"topology={self._topology.value})"
        )


__all__ = [
    "NurbsCurve",
    "evaluate_curve_point",
    "get_polyline_length",
    "sample_curve",
]
