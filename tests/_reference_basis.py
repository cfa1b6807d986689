"""Recursive Cox-de Boor definitions used as correctness oracles in tests.

These are exponential in the degree and are never used by the package itself.
"""

from __future__ import annotations

from collections.abc import Sequence


def basis_function_recursive(i: int, degree: int, u: float, knots: Sequence[float]) -> float:
    """Evaluate the `i`-th basis function of the given degree at `u`.

    The degree-0 functions are indicators of `[knots[i], knots[i+1])`; the
    last knot is included on the interval that ends at it, so the upper end
    of the domain is not lost.
    """
    if degree == 0:
        in_interval = knots[i] <= u < knots[i + 1]
        at_last_knot = u == knots[-1] and u == knots[i + 1] and knots[i] < knots[i + 1]
        return 1.0 if in_interval or at_last_knot else 0.0

    basis = 0.0

    left_denom = knots[i + degree] - knots[i]
    if left_denom != 0:
        left_term = (u - knots[i]) / left_denom
        basis += left_term * basis_function_recursive(i, degree - 1, u, knots)

    right_denom = knots[i + degree + 1] - knots[i + 1]
    if right_denom != 0:
        right_term = (knots[i + degree + 1] - u) / right_denom
        basis += right_term * basis_function_recursive(i + 1, degree - 1, u, knots)

    return basis


def curve_point_recursive(
    u: float,
    degree: int,
    knots: Sequence[float],
    points: Sequence[Sequence[float]],
) -> tuple[float, float]:
    """Evaluate a rational curve point summing over every control point."""
    x_num = y_num = den = 0.0
    for i, point in enumerate(points):
        weight = point[2] if len(point) > 2 else 1.0  # noqa: PLR2004
        basis = basis_function_recursive(i, degree, u, knots) * weight
        x_num += basis * point[0]
        y_num += basis * point[1]
        den += basis
    return x_num / den, y_num / den
