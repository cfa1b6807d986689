"""Core NURBS basis function evaluation.

This module provides the numba-compiled triangular Cox-de Boor evaluation of
the `degree+1` non-zero basis functions active in a knot span (Algorithm A2.2
of "The NURBS Book" by Piegl and Tiller), plus a vectorized tabulation over
many parameters.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, TypeVar

import numba as nb
import numpy as np
import numpy.typing as npt

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
def _compute_basis_functions_impl(
    u: float,
    span: int,
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    out: npt.NDArray[np.float32 | np.float64],
) -> None:
    """Evaluate the non-zero basis functions at `u` using the triangular table.

    `out[k]` receives the value of the basis function attached to control
    point `span - degree + k`. A vanishing denominator (repeated knots)
    contributes zero instead of being divided by.

    Args:
        u (float): Parameter value.
        span (int): Knot span containing `u`, as returned by `_find_span_impl`.
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        out (npt.NDArray[np.float32 | np.float64]): Output array of length
            `degree + 1`.

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    dtype = out.dtype
    zero = dtype.type(0.0)

    left = np.zeros(degree + 1, dtype=dtype)
    right = np.zeros(degree + 1, dtype=dtype)

    out.fill(zero)
    out[0] = dtype.type(1.0)

    for j in range(1, degree + 1):
        left[j] = u - knots[span + 1 - j]
        right[j] = knots[span + j] - u
        saved = zero

        for r in range(j):
            denom = right[r + 1] + left[j - r]
            temp = zero if denom == zero else out[r] / denom
            out[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp

        out[j] = saved


@nb_jit(
    nopython=True,
    cache=True,
    parallel=False,
)
def _tabulate_basis_functions_impl(  # noqa: PLR0913
    pts: npt.NDArray[np.float32 | np.float64],
    degree: int,
    knots: npt.NDArray[np.float32 | np.float64],
    num_points: int,
    out_basis: npt.NDArray[np.float32 | np.float64],
    out_first_basis: npt.NDArray[np.int_],
) -> None:
    """Evaluate the non-zero basis functions at many parameters.

    Args:
        pts (npt.NDArray[np.float32 | np.float64]): Parameters (1D array).
        degree (int): Curve degree.
        knots (npt.NDArray[np.float32 | np.float64]): Knot vector.
        num_points (int): Number of control points.
        out_basis (npt.NDArray[np.float32 | np.float64]): Output array for basis
            values. Must have shape (n_pts, degree+1).
        out_first_basis (npt.NDArray[np.int_]): Output array for the index of the
            first non-zero basis function of every parameter. Must have shape (n_pts,).

    Note:
        Inputs are assumed to be correct (no validation performed).
    """
    for pt_id in range(pts.size):
        pt = pts[pt_id]
        span = _find_span_impl(pt, degree, knots, num_points)
        _compute_basis_functions_impl(pt, span, degree, knots, out_basis[pt_id, :])
        out_first_basis[pt_id] = span - degree


def _warmup_numba_functions() -> None:
    """Precompile numba functions with float64 signatures for faster first call."""
    knots_dummy = np.array([0.0, 0.0, 0.0, 1.0, 2.0, 2.0, 2.0], dtype=np.float64)
    pts_dummy = np.array([0.5], dtype=np.float64)
    degree_dummy = 2
    num_points_dummy = 4
    basis_dummy = np.empty((pts_dummy.size, degree_dummy + 1), dtype=np.float64)
    first_basis_dummy = np.empty(pts_dummy.size, dtype=np.int_)

    _compute_basis_functions_impl(0.5, 2, degree_dummy, knots_dummy, basis_dummy[0, :])
    _tabulate_basis_functions_impl(
        pts_dummy, degree_dummy, knots_dummy, num_points_dummy, basis_dummy, first_basis_dummy
    )


# Precompile numba functions on module import (skip during type checking)
if not TYPE_CHECKING:
    _warmup_numba_functions()


__all__ = [
    "_compute_basis_functions_impl",
    "_tabulate_basis_functions_impl",
]
