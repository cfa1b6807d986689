"""Evaluation of the NURBS basis functions active at curve parameters."""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from ._basis_utils import (
    _clip_to_domain,
    _compute_final_output_shape_1D,
    _normalize_parameters,
    _validate_out_array,
)
from ._nurbs_basis_core import _compute_basis_functions_impl, _tabulate_basis_functions_impl
from ._nurbs_knots import _check_knot_vector
from .knots import _validate_span_input, get_parameter_domain
from .tolerance import get_default_tolerance


def _as_knot_array(knots: npt.ArrayLike) -> npt.NDArray[np.float32 | np.float64]:
    knots_arr = np.ascontiguousarray(knots)
    if knots_arr.dtype not in (np.float32, np.float64):
        knots_arr = knots_arr.astype(np.float64)
    return knots_arr


def compute_basis_functions(
    u: float,
    span: int,
    degree: int,
    knots: npt.ArrayLike,
    out: npt.NDArray[np.float32 | np.float64] | None = None,
) -> npt.NDArray[np.float32 | np.float64]:
    """Compute the `degree+1` basis functions that do not vanish at `u`.

    Uses the triangular Cox-de Boor table: starting from `N[0] = 1`, each
    order is built from the previous one with left and right knot
    differences, carrying a saved remainder between terms. Terms whose
    denominator is exactly zero contribute nothing.

    Args:
        u (float): Parameter value. Must be finite.
        span (int): Knot span containing `u` (see `nurbsketch.knots.find_span`).
            Must be in `[degree, len(knots) - degree - 2]`.
        degree (int): Curve degree. Must be non-negative.
        knots (npt.ArrayLike): Non-decreasing knot vector.
        out (npt.NDArray[np.float32 | np.float64] | None): Optional output array of
            shape `(degree+1,)` and the dtype of the knots. If None, a new array
            is allocated. Defaults to None.

    Returns:
        npt.NDArray[np.float32 | np.float64]: Basis values `N[0..degree]`, where
            `N[k]` belongs to control point `span - degree + k`. They sum to one.
            If `out` was provided, returns the same array.

    Raises:
        ValueError: If `u` is not finite, `span` is out of range, the knot vector
            is malformed or `out` has incorrect shape or dtype.

    Example:
        >>> compute_basis_functions(0.5, 3, 3, [0, 0, 0, 0, 1, 1, 1, 1])
        array([0.125, 0.375, 0.375, 0.125])
    """
    if not np.isfinite(u):
        raise ValueError(f"u must be finite. Got {u}")

    knots_arr = _as_knot_array(knots)
    _check_knot_vector(knots_arr, degree)

    max_span = knots_arr.size - degree - 2
    if span < degree or span > max_span:
        raise ValueError(f"span must be between {degree} and {max_span}. Got {span}")

    if out is None:
        out = np.empty(degree + 1, dtype=knots_arr.dtype)
    else:
        _validate_out_array(out, (degree + 1,), knots_arr.dtype)

    _compute_basis_functions_impl(float(u), int(span), degree, knots_arr, out)
    return out


def tabulate_basis_functions(
    pts: npt.ArrayLike,
    degree: int,
    knots: npt.ArrayLike,
    num_points: int,
) -> tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]:
    """Evaluate the non-zero basis functions at many parameters.

    Each parameter is located in its knot span and its `degree+1` active basis
    functions are computed.

    Args:
        pts (npt.ArrayLike): Parameter values (scalar or array of any shape).
            They must lie inside the curve domain, up to tolerance.
        degree (int): Curve degree.
        knots (npt.ArrayLike): Knot vector of length `num_points + degree + 1`.
        num_points (int): Number of control points.

    Returns:
        tuple[npt.NDArray[np.float32 | np.float64], npt.NDArray[np.int_]]: Tuple of
            (basis_values, first_basis_indices) where basis_values has shape
            `(*pts.shape, degree+1)` and first_basis_indices has the shape of `pts`
            and holds the index of the control point attached to the first value.

    Raises:
        ValueError: If any parameter lies outside the curve domain, or if the knot
            vector is inconsistent with `degree` and `num_points`.
        InvalidDegreeError: If the degree is negative or too high.

    Example:
        >>> tabulate_basis_functions([0.0, 1.0, 2.0], 1, [0, 0, 1, 2, 2], 3)
        (array([[1., 0.],
                [1., 0.],
                [0., 1.]]),
         array([0, 1, 1]))
    """
    input_shape = np.shape(pts)
    knots_arr = _validate_span_input(degree, _as_knot_array(knots), num_points)
    pts_arr = _normalize_parameters(pts).astype(knots_arr.dtype, copy=False)

    pts_arr = _clip_to_domain(
        pts_arr,
        get_parameter_domain(knots_arr, degree),
        get_default_tolerance(knots_arr.dtype),
        knots_arr.dtype,
        "knot vector domain",
    )

    num_pts = pts_arr.size
    basis = np.empty((num_pts, degree + 1), dtype=knots_arr.dtype)
    first_basis = np.empty(num_pts, dtype=np.int_)
    _tabulate_basis_functions_impl(pts_arr, degree, knots_arr, num_points, basis, first_basis)

    return (
        basis.reshape(_compute_final_output_shape_1D(input_shape, degree + 1)),
        first_basis.reshape(input_shape),
    )


__all__ = [
    "compute_basis_functions",
    "tabulate_basis_functions",
]
