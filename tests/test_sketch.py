"""Tests for the render-ready sketch output and package settings."""

from __future__ import annotations

import numpy as np
import numpy.testing as nptest
import pytest

from nurbsketch import settings
from nurbsketch.errors import InvalidWeightError
from nurbsketch.settings import CLOSE_THRESHOLD, get_default_num_segments
from nurbsketch.sketch import (
    SketchFrame,
    build_frame,
    can_close,
    compute_polyline,
    is_near_start,
)
from nurbsketch.topology import ControlPoint, Topology


class TestGetDefaultNumSegments:
    """Tests for `get_default_num_segments`."""

    @pytest.mark.parametrize(
        ("num_points", "expected"), [(0, 200), (3, 200), (4, 200), (5, 250), (10, 500)]
    )
    def test_values(self, num_points: int, expected: int) -> None:
        """Resolution is max(200, 50 * n)."""
        assert get_default_num_segments(num_points) == expected

    def test_constants(self) -> None:
        """Sketch constants keep their documented values."""
        assert settings.MAX_DEGREE == 3  # noqa: PLR2004
        assert settings.MIN_POINTS == 2  # noqa: PLR2004
        assert settings.MIN_POINTS_TO_CLOSE == 3  # noqa: PLR2004
        assert settings.CLOSE_THRESHOLD == 20.0  # noqa: PLR2004
        assert settings.PREVIEW_POINT_RADIUS > settings.POINT_RADIUS > 0.0


class TestComputePolyline:
    """Tests for `compute_polyline`."""

    @pytest.mark.parametrize("num_segments", [None, 1, 50, 500])
    def test_two_open_points_draw_a_segment(self, num_segments: int | None) -> None:
        """Two open points give exactly their segment at any resolution."""
        polyline = compute_polyline([(0, 0), (100, 0)], num_segments=num_segments)
        nptest.assert_array_equal(polyline, [[0, 0], [100, 0]])

    @pytest.mark.parametrize("points", [[], [(5.0, 5.0)]])
    @pytest.mark.parametrize("closed", [False, True])
    def test_no_curve_yet(self, points: list, closed: bool) -> None:
        """Fewer than two points give an empty polyline."""
        polyline = compute_polyline(points, closed)
        assert polyline.shape == (0, 2)

    def test_open_curve(self, arch_points: list) -> None:
        """Open curves are sampled end to end."""
        polyline = compute_polyline(arch_points)
        assert polyline.shape == (201, 2)
        nptest.assert_allclose(polyline[0], [0.0, 0.0], atol=1e-12)
        nptest.assert_allclose(polyline[-1], [200.0, 0.0], atol=1e-12)

    def test_resolution_scales_with_points(self, zigzag_points: list) -> None:
        """More control points give more segments by default."""
        assert compute_polyline(zigzag_points).shape == (351, 2)
        assert compute_polyline(zigzag_points, num_segments=10).shape == (11, 2)

    def test_closed_two_points(self) -> None:
        """Two closed points are evaluated as a degenerate loop."""
        polyline = compute_polyline([(0, 0), (100, 0)], Topology.CLOSED, num_segments=200)
        assert polyline.shape == (201, 2)
        nptest.assert_allclose(polyline[0], [0.0, 0.0], atol=1e-12)
        nptest.assert_allclose(polyline[100], [100.0, 0.0], atol=1e-12)
        nptest.assert_allclose(polyline[-1], [0.0, 0.0], atol=1e-12)

    def test_closed_curve(self, square_points: list) -> None:
        """Closed curves form a loop."""
        polyline = compute_polyline(square_points, True)
        assert polyline.shape == (201, 2)
        nptest.assert_allclose(polyline[0], polyline[-1], atol=1e-6)

    def test_no_nan(self, zigzag_points: list) -> None:
        """The polyline only contains finite values."""
        assert np.all(np.isfinite(compute_polyline(zigzag_points, True)))

    def test_invalid_weight_error(self) -> None:
        """Invalid weights are reported, even for the straight segment."""
        with pytest.raises(InvalidWeightError):
            compute_polyline([(0, 0, 1), (1, 1, -2)])

    def test_invalid_num_segments_error(self, arch_points: list) -> None:
        """Reject resolutions below one segment."""
        with pytest.raises(ValueError, match="num_segments must be at least 1"):
            compute_polyline(arch_points, num_segments=0)


class TestIsNearStart:
    """Tests for `is_near_start` and `can_close`."""

    def test_near_start(self, arch_points: list) -> None:
        """The cursor must be strictly within the threshold."""
        assert is_near_start((5.0, 5.0), arch_points)
        assert not is_near_start((CLOSE_THRESHOLD, 0.0), arch_points)
        assert not is_near_start((100.0, 100.0), arch_points)

    def test_custom_threshold(self, arch_points: list) -> None:
        """The threshold can be tuned."""
        assert is_near_start((25.0, 0.0), arch_points, threshold=30.0)

    def test_closed_sketch(self, arch_points: list) -> None:
        """Closed sketches are never near their start."""
        assert not is_near_start((0.0, 0.0), arch_points, closed=True)

    def test_empty_sketch(self) -> None:
        """An empty sketch has no start."""
        assert not is_near_start((0.0, 0.0), [])

    def test_can_close(self, arch_points: list) -> None:
        """Closing requires three points and the cursor on the first one."""
        assert can_close((1.0, 1.0), arch_points)
        assert can_close((1.0, 1.0), arch_points[:3])
        assert not can_close((1.0, 1.0), arch_points[:2])
        assert not can_close((100.0, 1.0), arch_points)
        assert not can_close((1.0, 1.0), arch_points, closed=True)


class TestBuildFrame:
    """Tests for `build_frame`."""

    def test_open_sketch_with_preview(self, arch_points: list) -> None:
        """The preview point is displayed but not evaluated."""
        frame = build_frame(arch_points, preview_point=(300.0, 300.0))

        assert isinstance(frame, SketchFrame)
        assert not frame.closed
        assert len(frame.control_points) == 5  # noqa: PLR2004
        assert frame.control_points[-1] == ControlPoint(300.0, 300.0, 1.0, is_preview=True)
        assert not any(point.is_preview for point in frame.control_points[:-1])

        # Five displayed points: max(200, 5 * 50) segments.
        assert frame.polyline.shape == (251, 2)
        nptest.assert_allclose(frame.polyline[-1], [200.0, 0.0], atol=1e-12)

    def test_open_sketch_without_preview(self, arch_points: list) -> None:
        """Without preview the resolution only depends on the real points."""
        frame = build_frame(arch_points)
        assert len(frame.control_points) == 4  # noqa: PLR2004
        assert frame.polyline.shape == (201, 2)
        assert not frame.near_start

    def test_closed_sketch_ignores_preview(self, square_points: list) -> None:
        """Closed sketches do not show a preview point."""
        frame = build_frame(square_points, closed=True, preview_point=(5.0, 5.0), cursor=(0, 0))
        assert frame.closed
        assert len(frame.control_points) == 4  # noqa: PLR2004
        assert not frame.near_start
        nptest.assert_allclose(frame.polyline[0], frame.polyline[-1], atol=1e-6)

    def test_near_start_hint(self, arch_points: list) -> None:
        """The cursor hovering the first point raises the hint."""
        assert build_frame(arch_points, cursor=(3.0, -4.0)).near_start
        assert not build_frame(arch_points, cursor=(150.0, 100.0)).near_start

    def test_single_point_with_preview(self) -> None:
        """One placed point shows dots but no curve."""
        frame = build_frame([(10.0, 10.0)], preview_point=(50.0, 50.0))
        assert frame.polyline.shape == (0, 2)
        assert [point.is_preview for point in frame.control_points] == [False, True]

    def test_two_points_with_preview(self) -> None:
        """The preview point does not turn a segment into a curve."""
        frame = build_frame([(0.0, 0.0), (100.0, 0.0)], preview_point=(50.0, 80.0))
        nptest.assert_array_equal(frame.polyline, [[0, 0], [100, 0]])

    def test_explicit_resolution(self, arch_points: list) -> None:
        """An explicit resolution wins over the default."""
        frame = build_frame(arch_points, preview_point=(1.0, 1.0), num_segments=10)
        assert frame.polyline.shape == (11, 2)

    def test_weights_are_displayed(self) -> None:
        """Displayed control points keep their weights."""
        frame = build_frame([(0, 0, 2.0), (1, 1, 0.5), (2, 0, 1.0)])
        assert [point.weight for point in frame.control_points] == [2.0, 0.5, 1.0]

    def test_preview_flag_on_control_points(self, arch_points: list) -> None:
        """Control points flagged as preview keep their flag and stay off the curve."""
        points = [ControlPoint(x, y) for x, y in arch_points[:3]]
        points.append(ControlPoint(900.0, 900.0, is_preview=True))
        frame = build_frame(points)

        assert frame.control_points[-1] == ControlPoint(900.0, 900.0, 1.0, is_preview=True)
        assert [point.is_preview for point in frame.control_points] == [False] * 3 + [True]
        # Four displayed points: max(200, 4 * 50) segments.
        assert frame.polyline.shape == (201, 2)
        nptest.assert_allclose(frame.polyline[-1], [150.0, 100.0], atol=1e-12)

    def test_preview_flag_on_closed_sketch(self, square_points: list) -> None:
        """Closed sketches drop control points flagged as preview."""
        points = [*square_points, ControlPoint(500.0, 500.0, is_preview=True)]
        frame = build_frame(points, closed=True)
        assert len(frame.control_points) == 4  # noqa: PLR2004
        nptest.assert_allclose(frame.polyline, compute_polyline(square_points, True))


class TestPreviewControlPoints:
    """Tests for control points flagged as preview outside `build_frame`."""

    def test_compute_polyline_skips_preview(self) -> None:
        """A flagged point does not turn a segment into a curve."""
        points = [ControlPoint(0, 0), ControlPoint(100, 0), ControlPoint(50, 80, is_preview=True)]
        nptest.assert_array_equal(compute_polyline(points), [[0, 0], [100, 0]])

    def test_is_near_start_skips_preview(self) -> None:
        """The start of the sketch is its first non-preview point."""
        points = [ControlPoint(500, 500, is_preview=True), ControlPoint(0, 0)]
        assert is_near_start((1.0, 1.0), points)
        assert not is_near_start((500.0, 500.0), points)

    def test_can_close_counts_non_preview_points(self, arch_points: list) -> None:
        """Preview points do not count towards closing."""
        points = [ControlPoint(x, y) for x, y in arch_points[:2]]
        points.append(ControlPoint(10.0, 10.0, is_preview=True))
        assert not can_close((1.0, 1.0), points)

    def test_preview_weights_are_validated(self) -> None:
        """Flagged points are still validated."""
        with pytest.raises(InvalidWeightError):
            compute_polyline([(0, 0, 1), (1, 1, 1), ControlPoint(2, 2, -1.0, is_preview=True)])
