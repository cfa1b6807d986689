"""Numba kernels evaluating rational curve points and sampled polylines."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

from ._nurbs_basis_core import _compute_basis_functions_impl
from ._nurbs_knots import _find_span_impl

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
def _evaluate_point_impl(  # noqa: PLR0913
    u: float,
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    coords: npt.NDArray[np.float32 | np.float64],
    weights: npt.NDArray[np.float32 | np.float64],
    basis: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.float32 | np.float64],
) -> bool:
    """Evaluate the rational curve point at parameter `u`.

    Args:
        u (float): Parameter value inside the curve domain.
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        coords (npt.NDArray[np.float32 | np.float64]): Control point coordinates,
            shape (num_points, 2).
        weights (npt.NDArray[np.float32 | np.float64]): Control point weights,
            shape (num_points,).
        basis (npt.NDArray[np.float32 | np.float64]): Work array of length
            `degree + 1`, overwritten with the basis values at `u`.
        out (npt.NDArray[np.float32 | np.float64]): Output array of length 2.

    Returns:
        bool: False if the rational denominator is zero or not finite, in which
        case `out` is left untouched.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    num_points = weights.size
    span = _find_span_impl(u, degree, knots, num_points)
    _compute_basis_functions_impl(u, span, degree, knots, basis)

    x_num = 0.0
    y_num = 0.0
    den = 0.0
    first = span - degree
    for k in range(degree + 1):
        weighted = basis[k] * weights[first + k]
        x_num += weighted * coords[first + k, 0]
        y_num += weighted * coords[first + k, 1]
        den += weighted

    if den == 0.0 or not np.isfinite(den):
        return False

    x = x_num / den
    y = y_num / den
    if not (np.isfinite(x) and np.isfinite(y)):
        return False

    out[0] = x
    out[1] = y
    return True


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _evaluate_points_impl(  # noqa: PLR0913
    pts: npt.NDArray[np.float32 | np.float64],
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    coords: npt.NDArray[np.float32 | np.float64],
    weights: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.float32 | np.float64],
    out_valid: npt.NDArray[np.bool_],
) -> None:
    """Evaluate the rational curve at many parameters.

    Args:
        pts (npt.NDArray[np.float32 | np.float64]): Parameter values (1D array).
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        coords (npt.NDArray[np.float32 | np.float64]): Control point coordinates,
            shape (num_points, 2).
        weights (npt.NDArray[np.float32 | np.float64]): Control point weights.
        out (npt.NDArray[np.float32 | np.float64]): Output array of shape (n_pts, 2).
        out_valid (npt.NDArray[np.bool_]): Output array of shape (n_pts,) flagging
            the parameters whose denominator did not vanish.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    basis = np.empty(degree + 1, dtype=out.dtype)
    for pt_id in range(pts.size):
        out_valid[pt_id] = _evaluate_point_impl(
            pts[pt_id], degree, knots, coords, weights, basis, out[pt_id, :]
        )


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _sample_curve_impl(  # noqa: PLR0913
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    coords: npt.NDArray[np.float32 | np.float64],
    weights: npt.NDArray[np.float32 | np.float64],
    num_segments: int,
    out: npt.NDArray[np.float32 | np.float64],
    out_valid: npt.NDArray[np.bool_],
) -> None:
    """Evaluate `num_segments + 1` curve points at equally spaced fractions.

    The fraction `t = i / num_segments` is mapped to the domain as
    `u = t * (u_max - u_min) + u_min`.

    Args:
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        coords (npt.NDArray[np.float32 | np.float64]): Control point coordinates,
            shape (num_points, 2).
        weights (npt.NDArray[np.float32 | np.float64]): Control point weights.
        num_segments (int): Number of polyline segments (at least 1).
        out (npt.NDArray[np.float32 | np.float64]): Output array of shape
            (num_segments + 1, 2). Rows of degenerate samples are left untouched.
        out_valid (npt.NDArray[np.bool_]): Output array of shape (num_segments + 1,)
            flagging the samples whose denominator did not vanish.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    u_min = knots[degree]
    u_max = knots[knots.size - degree - 1]
    basis = np.empty(degree + 1, dtype=out.dtype)

    for i in range(num_segments + 1):
        t = i / num_segments
        u = t * (u_max - u_min) + u_min
        out_valid[i] = _evaluate_point_impl(u, degree, knots, coords, weights, basis, out[i, :])


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 1.0, 1.0, 1.0], dtype=np.float64)
    coords_dummy = np.array([[0.0, 0.0], [1.0, 1.0], [2.0, 0.0]], dtype=np.float64)
    weights_dummy = np.ones(3, dtype=np.float64)
    degree_dummy = 2
    num_segments_dummy = 2
    basis_dummy = np.empty(degree_dummy + 1, dtype=np.float64)
    out_dummy = np.empty((num_segments_dummy + 1, 2), dtype=np.float64)
    valid_dummy = np.empty(num_segments_dummy + 1, dtype=np.bool_)

    _evaluate_point_impl(
        0.5, degree_dummy, knots_dummy, coords_dummy, weights_dummy, basis_dummy, out_dummy[0, :]
    )
    _evaluate_points_impl(
        np.array([0.25, 0.75], dtype=np.float64),
        degree_dummy,
        knots_dummy,
        coords_dummy,
        weights_dummy,
        out_dummy[:2, :],
        valid_dummy[:2],
    )
    _sample_curve_impl(
        degree_dummy,
        knots_dummy,
        coords_dummy,
        weights_dummy,
        num_segments_dummy,
        out_dummy,
        valid_dummy,
    )


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_evaluate_point_impl",
    "_evaluate_points_impl",
    "_sample_curve_impl",
]
