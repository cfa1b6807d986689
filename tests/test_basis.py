"""Tests for the evaluation of NURBS basis functions."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest
from _reference_basis import basis_function_recursive
from scipy.interpolate import BSpline

from nurbsketch.basis import compute_basis_functions, tabulate_basis_functions
from nurbsketch.knots import (
    create_clamped_knot_vector,
    create_uniform_knot_vector,
    find_span,
    get_parameter_domain,
)
from nurbsketch.tolerance import get_conservative_tolerance


def _scatter_basis(
    basis: np.ndarray, first_basis: np.ndarray, num_points: int
) -> np.ndarray:
    """Expand `(n_pts, degree+1)` active values into dense `(n_pts, num_points)` rows."""
    dense = np.zeros((basis.shape[0], num_points))
    for row, (values, first) in enumerate(zip(basis, first_basis, strict=True)):
        dense[row, first : first + values.size] = values
    return dense


def _knot_vectors() -> list[tuple[int, int, np.ndarray]]:
    cases = []
    for num_points in (2, 3, 4, 5, 8, 12):
        degree = min(3, num_points - 1)
        cases.append((num_points, degree, create_clamped_knot_vector(num_points, degree)))
        cases.append((num_points, degree, create_uniform_knot_vector(num_points, degree)))
    return cases


class TestComputeBasisFunctions:
    """Tests for `compute_basis_functions`."""

    def test_bezier_midpoint(self) -> None:
        """Cubic Bernstein values at the middle of a single span."""
        result = compute_basis_functions(0.5, 3, 3, [0, 0, 0, 0, 1, 1, 1, 1])
        nptest.assert_allclose(result, [0.125, 0.375, 0.375, 0.125], atol=1e-15)

    def test_clamped_ends(self) -> None:
        """Clamped knots give a single unit basis at both ends."""
        knots = create_clamped_knot_vector(4, 3)
        nptest.assert_array_equal(compute_basis_functions(0.0, 3, 3, knots), [1, 0, 0, 0])
        nptest.assert_array_equal(compute_basis_functions(1.0, 3, 3, knots), [0, 0, 0, 1])

    def test_uniform_cubic_at_knot(self) -> None:
        """Uniform cubic B-splines take the values 1/6, 4/6, 1/6 at a knot."""
        knots = create_uniform_knot_vector(7, 3)
        result = compute_basis_functions(4.0, 4, 3, knots)
        nptest.assert_allclose(result, [1 / 6, 4 / 6, 1 / 6, 0.0], atol=1e-15)

    def test_repeated_interior_knot(self) -> None:
        """A knot of multiplicity `degree` makes the curve interpolate a point."""
        knots = np.array([0, 0, 0, 1, 1, 2, 2, 2], dtype=np.float64)
        span = find_span(1.0, 2, knots, 5)
        assert span == 4  # noqa: PLR2004
        nptest.assert_allclose(compute_basis_functions(1.0, span, 2, knots), [1, 0, 0])

    def test_zero_length_span_gives_zeros(self) -> None:
        """Zero denominators contribute nothing instead of producing NaN."""
        knots = np.array([0, 0, 1, 1, 2, 2], dtype=np.float64)
        result = compute_basis_functions(1.0, 2, 1, knots)
        assert np.all(np.isfinite(result))
        nptest.assert_array_equal(result, [0.0, 0.0])

    def test_degree_zero(self) -> None:
        """A degree 0 basis is the indicator of the span."""
        nptest.assert_array_equal(compute_basis_functions(0.3, 0, 0, [0.0, 1.0]), [1.0])

    def test_out_parameter(self) -> None:
        """The output array is filled in place and returned."""
        out = np.empty(4, dtype=np.float64)
        result = compute_basis_functions(0.25, 3, 3, create_clamped_knot_vector(4, 3), out=out)
        assert result is out
        assert np.isclose(out.sum(), 1.0)

    def test_out_parameter_float32(self) -> None:
        """float32 knots produce float32 values."""
        knots = create_clamped_knot_vector(5, 2, dtype=np.float32)
        result = compute_basis_functions(1.5, 3, 2, knots)
        assert result.dtype == np.float32
        assert np.isclose(result.sum(), 1.0, atol=get_conservative_tolerance(np.float32))

    def test_out_wrong_shape_error(self) -> None:
        """Reject output arrays of the wrong shape."""
        with pytest.raises(ValueError, match="Output array has shape"):
            compute_basis_functions(0.5, 3, 3, create_clamped_knot_vector(4, 3), out=np.empty(3))

    def test_out_wrong_dtype_error(self) -> None:
        """Reject output arrays of the wrong dtype."""
        with pytest.raises(ValueError, match="Output array has dtype"):
            compute_basis_functions(
                0.5, 3, 3, create_clamped_knot_vector(4, 3), out=np.empty(4, dtype=np.float32)
            )

    def test_out_read_only_error(self) -> None:
        """Reject read-only output arrays."""
        out = np.empty(4)
        out.flags.writeable = False
        with pytest.raises(ValueError, match="not writeable"):
            compute_basis_functions(0.5, 3, 3, create_clamped_knot_vector(4, 3), out=out)

    def test_span_out_of_range_error(self) -> None:
        """Reject spans that would index outside the knot vector."""
        knots = create_clamped_knot_vector(6, 3)
        with pytest.raises(ValueError, match="span must be between 3 and 5"):
            compute_basis_functions(0.5, 2, 3, knots)
        with pytest.raises(ValueError, match="span must be between 3 and 5"):
            compute_basis_functions(0.5, 6, 3, knots)

    def test_non_finite_error(self) -> None:
        """Reject non-finite parameters."""
        with pytest.raises(ValueError, match="u must be finite"):
            compute_basis_functions(np.inf, 3, 3, create_clamped_knot_vector(4, 3))

    def test_decreasing_knots_error(self) -> None:
        """Reject decreasing knot vectors."""
        with pytest.raises(ValueError, match="knots must be non-decreasing"):
            compute_basis_functions(0.5, 1, 1, [0.0, 1.0, 0.5, 1.0])


class TestTabulateBasisFunctions:
    """Tests for `tabulate_basis_functions`."""

    def test_linear_example(self) -> None:
        """Active values and first indices for a piecewise linear basis."""
        basis, first = tabulate_basis_functions([0.0, 1.0, 2.0], 1, [0, 0, 1, 2, 2], 3)
        nptest.assert_allclose(basis, [[1, 0], [1, 0], [0, 1]])
        nptest.assert_array_equal(first, [0, 1, 1])

    def test_output_shapes(self) -> None:
        """Output shapes follow the parameter shape."""
        knots = create_clamped_knot_vector(6, 3)
        basis, first = tabulate_basis_functions(np.full((2, 5), 1.5), 3, knots, 6)
        assert basis.shape == (2, 5, 4)
        assert first.shape == (2, 5)

        basis, first = tabulate_basis_functions(1.5, 3, knots, 6)
        assert basis.shape == (4,)
        assert first.shape == ()

    @pytest.mark.parametrize(("num_points", "degree", "knots"), _knot_vectors())
    def test_partition_of_unity(self, num_points: int, degree: int, knots: np.ndarray) -> None:
        """Active values are non-negative and sum to one over the whole domain."""
        u_min, u_max = get_parameter_domain(knots, degree)
        pts = np.linspace(u_min, u_max, 101)
        basis, first = tabulate_basis_functions(pts, degree, knots, num_points)

        assert np.all(basis >= 0.0)
        nptest.assert_allclose(basis.sum(axis=-1), 1.0, atol=1e-9)
        assert np.all(first >= 0)
        assert np.all(first + degree <= num_points - 1)

    @pytest.mark.parametrize(("num_points", "degree", "knots"), _knot_vectors())
    def test_matches_recursive_definition(
        self, num_points: int, degree: int, knots: np.ndarray
    ) -> None:
        """The triangular table agrees with the recursive Cox-de Boor formula."""
        u_min, u_max = get_parameter_domain(knots, degree)
        pts = np.linspace(u_min, u_max, 23)
        basis, first = tabulate_basis_functions(pts, degree, knots, num_points)
        dense = _scatter_basis(basis, first, num_points)

        expected = np.array(
            [
                [basis_function_recursive(i, degree, u, knots) for i in range(num_points)]
                for u in pts
            ]
        )
        nptest.assert_allclose(dense, expected, atol=1e-12)

    @pytest.mark.parametrize(("num_points", "degree", "knots"), _knot_vectors())
    def test_matches_scipy(self, num_points: int, degree: int, knots: np.ndarray) -> None:
        """Dense basis values agree with scipy's B-spline evaluation."""
        u_min, u_max = get_parameter_domain(knots, degree)
        pts = np.linspace(u_min, u_max, 37)[:-1]
        basis, first = tabulate_basis_functions(pts, degree, knots, num_points)
        dense = _scatter_basis(basis, first, num_points)

        expected = BSpline(knots, np.eye(num_points), degree)(pts)
        nptest.assert_allclose(dense, expected, atol=1e-12)

    def test_marginally_outside_domain_is_clamped(self) -> None:
        """Values within tolerance of the domain are accepted and clamped."""
        knots = create_clamped_knot_vector(4, 3)
        basis, first = tabulate_basis_functions([-1e-14, 1.0 + 1e-14], 3, knots, 4)
        nptest.assert_allclose(basis, [[1, 0, 0, 0], [0, 0, 0, 1]], atol=1e-12)
        nptest.assert_array_equal(first, [0, 0])

    def test_domain_tolerance_scales_with_domain(self) -> None:
        """The domain tolerance is relative to the largest parameter."""
        knots = create_uniform_knot_vector(1000, 3)
        basis, first = tabulate_basis_functions(1000.0 + 1e-10, 3, knots, 1000)
        expected_basis, expected_first = tabulate_basis_functions(1000.0, 3, knots, 1000)
        nptest.assert_array_equal(basis, expected_basis)
        assert first == expected_first
        with pytest.raises(ValueError, match="outside the knot vector domain"):
            tabulate_basis_functions(1000.0 + 1e-6, 3, knots, 1000)

    def test_outside_domain_error(self) -> None:
        """Reject parameters outside the knot vector domain."""
        knots = create_clamped_knot_vector(4, 3)
        with pytest.raises(ValueError, match="outside the knot vector domain"):
            tabulate_basis_functions([0.5, 1.1], 3, knots, 4)

    def test_non_finite_error(self) -> None:
        """Reject NaN parameters."""
        knots = create_clamped_knot_vector(4, 3)
        with pytest.raises(ValueError, match="outside the knot vector domain"):
            tabulate_basis_functions([np.nan], 3, knots, 4)

    def test_inconsistent_knots_error(self) -> None:
        """Reject knot vectors of the wrong length."""
        with pytest.raises(ValueError, match="knots must have num_points\\+degree\\+1"):
            tabulate_basis_functions(0.5, 3, create_clamped_knot_vector(5, 3), 6)
