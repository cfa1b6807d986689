"""Knot vector generation and span search for sketched NURBS curves.

This module provides functions to build clamped (open curve) and uniform
(closed curve) knot vectors, to query the parameter domain they define and to
locate the knot span containing a parameter value.
"""

from __future__ import annotations

import logging
from typing import Any

import numpy as np
import numpy.typing as npt

from ._basis_utils import _normalize_parameters
from ._nurbs_knots import (
    _check_knot_vector,
    _fill_clamped_knots_impl,
    _fill_uniform_knots_impl,
    _find_span_impl,
    _find_spans_impl,
)
from .errors import InvalidDegreeError
from .tolerance import ensure_float_dtype
from .topology import Topology, as_topology

logger = logging.getLogger(__name__)


def _validate_knot_builder_input(
    num_points: int,
    degree: int,
    dtype: npt.DTypeLike,
) -> np.dtype[np.floating[Any]]:
    """Validate input parameters for knot vector generation.

    Args:
        num_points (int): Number of control points.
        degree (int): Curve degree.
        dtype (npt.DTypeLike): Data type for the knot vector.

    Returns:
        np.dtype[np.floating[Any]]: The validated dtype.

    Raises:
        ValueError: If `num_points` is smaller than 1 or dtype is not float32/float64.
        InvalidDegreeError: If `degree` is negative or not smaller than `num_points`.
    """
    if num_points < 1:
        raise ValueError("num_points must be at least 1")

    if degree < 0:
        raise InvalidDegreeError("degree must be non-negative")

    if degree >= num_points:
        raise InvalidDegreeError(
            f"degree must be smaller than the number of points. "
            f"Got degree {degree} for {num_points} points"
        )

    return ensure_float_dtype(dtype)


def create_clamped_knot_vector(
    num_points: int,
    degree: int,
    dtype: npt.DTypeLike = np.float64,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create a clamped knot vector for an open curve.

    The first and last knots are repeated (degree+1) times, so the curve
    interpolates the first and last control points. Interior knots are
    consecutive integers.

    Args:
        num_points (int): Number of control points. Must be at least 1.
        degree (int): Curve degree. Must be in `[0, num_points - 1]`.
        dtype (npt.DTypeLike): Data type for the knot vector, float32 or float64.
            Defaults to np.float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Knot vector of length
            `num_points + degree + 1`.

    Raises:
        ValueError: If `num_points` < 1 or dtype is invalid.
        InvalidDegreeError: If the degree is negative or too high.

    Example:
        >>> create_clamped_knot_vector(5, 3)
        array([0., 0., 0., 0., 1., 2., 2., 2., 2.])
    """
    dtype_obj = _validate_knot_builder_input(num_points, degree, dtype)
    knots = np.empty(num_points + degree + 1, dtype=dtype_obj)
    _fill_clamped_knots_impl(num_points, degree, knots)
    return knots


def create_uniform_knot_vector(
    num_points: int,
    degree: int,
    dtype: npt.DTypeLike = np.float64,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create a uniform knot vector for a closed curve.

    Every knot equals its own index. Combined with wrapping the first `degree`
    control points onto the tail, this gives a pseudo-periodic curve whose
    ends meet at the seam.

    Args:
        num_points (int): Number of (wrapped) control points. Must be at least 1.
        degree (int): Curve degree. Must be in `[0, num_points - 1]`.
        dtype (npt.DTypeLike): Data type for the knot vector, float32 or float64.
            Defaults to np.float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Knot vector
            `[0, 1, ..., num_points + degree]`.

    Raises:
        ValueError: If `num_points` < 1 or dtype is invalid.
        InvalidDegreeError: If the degree is negative or too high.

    Example:
        >>> create_uniform_knot_vector(4, 2)
        array([0., 1., 2., 3., 4., 5., 6.])
    """
    dtype_obj = _validate_knot_builder_input(num_points, degree, dtype)
    knots = np.empty(num_points + degree + 1, dtype=dtype_obj)
    _fill_uniform_knots_impl(num_points, degree, knots)
    return knots


def create_knot_vector(
    num_points: int,
    degree: int,
    topology: Topology | bool,
    dtype: npt.DTypeLike = np.float64,
) -> npt.NDArray[np.float32 | np.float64]:
    """Create the knot vector matching a curve topology.

    Args:
        num_points (int): Number of evaluation points (including wrapped ones
            for closed curves).
        degree (int): Curve degree.
        topology (Topology | bool): Curve topology, or True for a closed curve.
        dtype (npt.DTypeLike): Data type for the knot vector. Defaults to np.float64.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Clamped knot vector for open curves,
            uniform knot vector for closed ones.

    Raises:
        ValueError: If `num_points` < 1 or dtype is invalid.
        InvalidDegreeError: If the degree is negative or too high.
    """
    if as_topology(topology) is Topology.CLOSED:
        knots = create_uniform_knot_vector(num_points, degree, dtype)
    else:
        knots = create_clamped_knot_vector(num_points, degree, dtype)

    logger.debug("Built %s knot vector %s (degree %d)", as_topology(topology).value, knots, degree)
    return knots


def _validate_span_input(
    degree: int,
    knots: npt.ArrayLike,
    num_points: int,
) -> npt.NDArray[np.float32 | np.float64]:
    """Validate a knot vector against a degree and a number of control points.

    Args:
        degree (int): Curve degree.
        knots (npt.ArrayLike): Knot vector.
        num_points (int): Number of control points.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Knot vector as a contiguous float array.

    Raises:
        InvalidDegreeError: If `degree` is negative or not smaller than `num_points`.
        ValueError: If the knot vector is malformed or its length is not
            `num_points + degree + 1`.
    """
    if degree < 0:
        raise InvalidDegreeError("degree must be non-negative")
    if degree >= num_points:
        raise InvalidDegreeError(
            f"degree must be smaller than the number of points. "
            f"Got degree {degree} for {num_points} points"
        )

    knots_arr = np.ascontiguousarray(knots)
    if knots_arr.dtype not in (np.float32, np.float64):
        knots_arr = knots_arr.astype(np.float64)

    _check_knot_vector(knots_arr, degree)

    if knots_arr.size != num_points + degree + 1:
        raise ValueError(
            f"knots must have num_points+degree+1 = {num_points + degree + 1} elements. "
            f"Got {knots_arr.size}"
        )
    return knots_arr


def get_parameter_domain(knots: npt.ArrayLike, degree: int) -> tuple[float, float]:
    """Get the parameter domain `(knots[degree], knots[-degree-1])`.

    Args:
        knots (npt.ArrayLike): Knot vector.
        degree (int): Curve degree.

    Returns:
        tuple[float, float]: Lower and upper ends of the domain.

    Raises:
        ValueError: If the knot vector is malformed for the given degree.

    Example:
        >>> get_parameter_domain(create_uniform_knot_vector(6, 3), 3)
        (3.0, 6.0)
    """
    knots_arr = np.ascontiguousarray(knots, dtype=np.float64)
    if degree < 0:
        raise InvalidDegreeError("degree must be non-negative")
    _check_knot_vector(knots_arr, degree)
    return float(knots_arr[degree]), float(knots_arr[knots_arr.size - degree - 1])


def find_span(u: float, degree: int, knots: npt.ArrayLike, num_points: int) -> int:
    """Find the knot span containing the parameter `u`.

    Returns the index `i` such that `knots[i] <= u < knots[i+1]`, clamped to
    `[degree, num_points - 1]`, found by binary search. Parameters at or past
    the upper end of the domain belong to the last span.

    Args:
        u (float): Parameter value. Must be finite.
        degree (int): Curve degree.
        knots (npt.ArrayLike): Knot vector of length `num_points + degree + 1`.
        num_points (int): Number of control points.

    Returns:
        int: Span index.

    Raises:
        ValueError: If `u` is not finite or the knot vector is inconsistent with
            `degree` and `num_points`.
        InvalidDegreeError: If the degree is negative or too high.

    Example:
        >>> find_span(1.5, 3, create_clamped_knot_vector(6, 3), 6)
        4
    """
    if not np.isfinite(u):
        raise ValueError(f"u must be finite. Got {u}")
    knots_arr = _validate_span_input(degree, knots, num_points)
    return int(_find_span_impl(float(u), degree, knots_arr, num_points))


def find_spans(
    pts: npt.ArrayLike,
    degree: int,
    knots: npt.ArrayLike,
    num_points: int,
) -> npt.NDArray[np.int_]:
    """Vectorized `find_span` over many parameters.

    Args:
        pts (npt.ArrayLike): Parameter values (any shape). Must be finite.
        degree (int): Curve degree.
        knots (npt.ArrayLike): Knot vector of length `num_points + degree + 1`.
        num_points (int): Number of control points.

    Returns:
        npt.NDArray[np.int_]: Span indices, with the same shape as `pts`.

    Raises:
        ValueError: If any parameter is not finite or the knot vector is
            inconsistent with `degree` and `num_points`.
        InvalidDegreeError: If the degree is negative or too high.
    """
    input_shape = np.shape(pts)
    pts_arr = _normalize_parameters(pts)
    if not np.all(np.isfinite(pts_arr)):
        raise ValueError("pts must be finite")

    knots_arr = _validate_span_input(degree, knots, num_points)
    spans = np.empty(pts_arr.size, dtype=np.int_)
    _find_spans_impl(pts_arr, degree, knots_arr, num_points, spans)
    return spans.reshape(input_shape)


__all__ = [
    "create_clamped_knot_vector",
    "create_knot_vector",
    "create_uniform_knot_vector",
    "find_span",
    "find_spans",
    "get_parameter_domain",
]
