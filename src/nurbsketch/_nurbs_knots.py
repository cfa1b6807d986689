"""Numba kernels for NURBS knot vectors.

This module provides the low-level routines that fill clamped and uniform
knot vectors, validate knot vectors and locate the knot span containing a
parameter value. Inputs are assumed to be validated by the public wrappers in
:mod:`nurbsketch.knots` unless stated otherwise.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

F = TypeVar("F", bound=Callable[..., Any])

if TYPE_CHECKING:
    # During type-checking, make the decorator a no-op that preserves types.
    def nb_jit(*args: object, **kwargs: object) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            return func

        return decorator
else:
    # At runtime, use the real Numba decorator.
    nb_jit = nb.jit  # type: ignore[attr-defined]


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _check_knot_vector(knots: npt.NDArray[np.float32 | np.float64], degree: int) -> None:
    """Validate basic constraints on a knot vector and degree.

    Args:
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector to check.
        degree (int): Curve degree.

    Raises:
        TypeError: If `knots` is not 1-dimensional.
        ValueError: If `degree` is negative, if there are fewer than
            `2*degree+2` knots, or if the knot vector is not non-decreasing.
    """
    if knots.ndim != 1:
        raise TypeError("knots must be a 1D array")
    if degree < 0:
        raise ValueError("degree must be non-negative")
    if knots.size < (2 * degree + 2):
        raise ValueError("knots must have at least 2*degree+2 elements")
    if not np.all(np.diff(knots) >= knots.dtype.type(0.0)):
        raise ValueError("knots must be non-decreasing")


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _fill_clamped_knots_impl(
    num_points: int,
    degree: int,
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Fill a clamped knot vector for an open curve.

    The first `degree+1` knots are 0, interior knots increase by one and the
    last `degree+1` knots are `max(1, num_points-degree)`.

    Args:
        num_points (int): Number of control points.
        degree (int): Curve degree. Must be smaller than `num_points`.
        out (npt.NDArray[np.float32 | np.float64]): Output array of length
            `num_points + degree + 1`.
    """
    dtype = out.dtype
    end = dtype.type(max(1, num_points - degree))
    num_knots = num_points + degree + 1

    for i in range(num_knots):
        if i <= degree:
            out[i] = dtype.type(0.0)
        elif i >= num_knots - degree - 1:
            out[i] = end
        else:
            out[i] = dtype.type(i - degree)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _fill_uniform_knots_impl(
    num_points: int,
    degree: int,
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Fill a uniform knot vector `0, 1, ..., num_points+degree` for a closed curve.

    Args:
        num_points (int): Number of (wrapped) control points.
        degree (int): Curve degree.
        out (npt.NDArray[np.float32 | np.float64]): Output array of length
            `num_points + degree + 1`.
    """
    dtype = out.dtype
    for i in range(num_points + degree + 1):
        out[i] = dtype.type(i)


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _find_span_impl(
    u: float,
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    num_points: int,
) -> int:
    """Find the knot span index `i` such that `knots[i] <= u < knots[i+1]`.

    The result is clamped to `[degree, num_points-1]`: parameters at or beyond
    the upper end of the domain map to the last span, parameters at or below
    the lower end to the first one.

    Args:
        u (float): Parameter value.
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector of length
            `num_points + degree + 1`.
        num_points (int): Number of control points.

    Returns:
        int: Span index.
    """
    if u >= knots[num_points]:
        return num_points - 1
    if u <= knots[degree]:
        return degree

    low = degree
    high = num_points
    mid = (low + high) // 2
    while u < knots[mid] or u >= knots[mid + 1]:
        if u < knots[mid]:
            high = mid
        else:
            low = mid
        mid = (low + high) // 2

    return mid


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _find_spans_impl(
    pts: npt.NDArray[np.float32 | np.float64],
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    num_points: int,
    out: npt.NDArray[np.int_],
) -> None:
    """Vectorized version of `_find_span_impl`, writing into `out`."""
    for pt_id in range(pts.size):
        out[pt_id] = _find_span_impl(pts[pt_id], degree, knots, num_points)


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    num_points_dummy = 4
    degree_dummy = 2
    knots_dummy = np.empty(num_points_dummy + degree_dummy + 1, dtype=np.float64)
    pts_dummy = np.array([0.5], dtype=np.float64)
    spans_dummy = np.empty(1, dtype=np.int_)

    _fill_clamped_knots_impl(num_points_dummy, degree_dummy, knots_dummy)
    _check_knot_vector(knots_dummy, degree_dummy)
    _find_span_impl(0.5, degree_dummy, knots_dummy, num_points_dummy)
    _find_spans_impl(pts_dummy, degree_dummy, knots_dummy, num_points_dummy, spans_dummy)
    _fill_uniform_knots_impl(num_points_dummy, degree_dummy, knots_dummy)


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_check_knot_vector",
    "_fill_clamped_knots_impl",
    "_fill_uniform_knots_impl",
    "_find_span_impl",
    "_find_spans_impl",
]
