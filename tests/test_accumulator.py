"""Tests for the shape accumulator state machine."""

import logging
import math

import pytest

from arc_welder.accumulator import AccumulatorState, ShapeAccumulator
from arc_welder.models.config import MAX_RADIUS_MM, WelderConfig
from arc_welder.shape_kinds import ARC, SPLINE


def feed(accumulator, points):
    """Offer every point, returning the per-point results."""
    return [accumulator.try_add_point(point) for point in points]


class TestInitialization:
    """Tests for accumulator construction."""

    def test_defaults(self):
        """Test a fresh accumulator."""
        accumulator = ShapeAccumulator()
        assert accumulator.kind is ARC
        assert accumulator.state == AccumulatorState.EMPTY
        assert len(accumulator) == 0
        assert accumulator.shape is None
        assert accumulator.get_gcode() is None
        assert accumulator.get_gcode_length() == 0
        assert accumulator.get_length() == 0.0
        assert accumulator.get_min_segments() == 3
        assert accumulator.get_max_segments() == 50
        assert accumulator.xyz_tolerance == pytest.approx(0.001)

    def test_max_radius_is_clamped(self, caplog):
        """Test an oversized radius limit is clamped with a warning."""
        with caplog.at_level(logging.WARNING, logger="arc_welder.accumulator"):
            accumulator = ShapeAccumulator(ARC, WelderConfig(max_radius_mm=20000.0))

        assert accumulator.get_max_radius() == MAX_RADIUS_MM
        assert "clamping" in caplog.text

    def test_max_radius_within_limit(self):
        """Test a valid radius limit is kept."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(max_radius_mm=250.0))
        assert accumulator.get_max_radius() == 250.0

    def test_spline_has_no_max_radius(self):
        """Test splines report no radius limit."""
        assert ShapeAccumulator(SPLINE).get_max_radius() is None


class TestScenarios:
    """End-to-end accumulator behavior."""

    @pytest.mark.parametrize("kind", [ARC, SPLINE])
    def test_collinear_points_never_fit(self, kind, make_line_points):
        """Test four collinear points leave the accumulator empty."""
        accumulator = ShapeAccumulator(kind)
        results = feed(accumulator, make_line_points(count=4))

        # Start position and warm-up are accepted, the first fit fails
        assert results == [True, True, False, False]
        assert accumulator.state == AccumulatorState.EMPTY
        assert not accumulator.is_shape_active()
        assert accumulator.get_gcode() is None

    def test_circle_then_jump_produces_one_arc(self, make_arc_points):
        """Test a point off the circle ends the arc with one command."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(min_segments=6))
        points = make_arc_points(radius=10.0, count=10, step_degrees=10.0)

        assert all(feed(accumulator, points))
        assert accumulator.is_shape_active()
        assert len(accumulator) == 10

        jump = points[-1].moved_to(0.0, 0.0)
        assert not accumulator.try_add_point(jump)
        assert len(accumulator) == 10

        assert accumulator.flush() == "G3 X0.000 Y10.000 I-10.000 J0.000"
        assert accumulator.state == AccumulatorState.FLUSHED
        assert len(accumulator) == 0

    def test_warm_up_skips_fitting(self, make_arc_points):
        """Test no shape exists before the warm-up floor is reached."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(min_segments=6))
        points = make_arc_points(count=6)

        feed(accumulator, points[:5])
        assert accumulator.state == AccumulatorState.EMPTY
        assert accumulator.shape is None

        assert accumulator.try_add_point(points[5])
        assert accumulator.is_shape_active()

    def test_gcode_length_gate(self, make_arc_points):
        """Test a command over the length limit is refused and counted."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(max_gcode_length=32))
        points = make_arc_points(radius=10.0, count=11, step_degrees=10.0)

        # Up to 80 degrees every command is 32 characters
        assert all(feed(accumulator, points[:9]))
        assert accumulator.get_gcode_length() == 32

        # At 90 degrees Y gains a digit
        assert not accumulator.try_add_point(points[9])
        assert accumulator.num_gcode_length_exceptions == 1
        assert len(accumulator) == 9
        assert accumulator.shape.end_point == points[8]
        assert accumulator.get_gcode() == "G3 X1.736 Y9.848 I-10.000 J0.000"

    def test_firmware_compensation_gate(self, make_arc_points):
        """Test a tiny arc is refused when firmware would undersegment it."""
        config = WelderConfig(min_segments=10, mm_per_segment=1.0)
        accumulator = ShapeAccumulator(ARC, config)
        points = make_arc_points(radius=0.05, count=10, step_degrees=18.0)

        results = feed(accumulator, points)

        assert results[:9] == [True] * 9
        assert results[9] is False
        assert accumulator.num_firmware_compensations == 1
        assert accumulator.state == AccumulatorState.EMPTY
        assert len(accumulator) == 9

    def test_firmware_gate_disabled_without_segment_length(self, make_arc_points):
        """Test the same tiny arc is accepted when compensation is off."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(min_segments=10))
        points = make_arc_points(radius=0.05, count=10, step_degrees=18.0)

        assert all(feed(accumulator, points))
        assert accumulator.num_firmware_compensations == 0
        assert accumulator.is_shape_active()

    def test_firmware_gate_passes_large_arcs(self, make_arc_points):
        """Test large arcs render enough segments."""
        config = WelderConfig(min_segments=10, mm_per_segment=1.0)
        accumulator = ShapeAccumulator(ARC, config)
        points = make_arc_points(radius=50.0, count=12, step_degrees=2.0)

        assert all(feed(accumulator, points))
        assert accumulator.num_firmware_compensations == 0

    def test_degenerate_arc_is_rejected(self, make_arc_points):
        """Test an arc whose center offsets round to zero never becomes active."""
        accumulator = ShapeAccumulator(ARC)
        points = make_arc_points(radius=0.0004, count=5, step_degrees=30.0)

        results = feed(accumulator, points)

        assert results[:2] == [True, True]
        assert not any(results[2:])
        assert accumulator.state == AccumulatorState.EMPTY
        assert accumulator.get_gcode() is None

    def test_radius_cap(self, make_arc_points):
        """Test arcs larger than max_radius_mm are refused."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(max_radius_mm=5.0))
        feed(accumulator, make_arc_points(radius=10.0, count=6))
        assert not accumulator.is_shape_active()

    def test_spline_accumulates_arc_path(self, make_arc_points):
        """Test the spline kind accepts a gentle curve."""
        accumulator = ShapeAccumulator(SPLINE)
        points = make_arc_points(radius=10.0, count=10, step_degrees=10.0)

        assert all(feed(accumulator, points))
        gcode = accumulator.get_gcode()
        assert gcode.startswith("G5 X0.000 Y10.000")
        assert accumulator.get_gcode_length() == len(gcode)


    def test_full_circle_sweep_stays_below_one_turn(self, make_arc_points):
        """Test the move closing a full circle is refused; the arc ends at 350 degrees."""
        accumulator = ShapeAccumulator()
        points = make_arc_points(radius=10.0, count=37, step_degrees=10.0)

        results = feed(accumulator, points)

        assert results == [True] * 36 + [False]
        assert accumulator.shape.angle_radians < 2.0 * math.pi
        assert math.degrees(accumulator.shape.angle_radians) == pytest.approx(350.0)
        assert accumulator.get_gcode() == "G3 X9.848 Y-1.736 I-10.000 J0.000"


class TestRefusals:
    """Tests for moves refused before fitting."""

    def test_buffer_capacity(self, make_arc_points):
        """Test the accumulator refuses points once max_segments is reached."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(max_segments=5))
        points = make_arc_points(count=7)

        results = feed(accumulator, points)

        assert results == [True] * 5 + [False, False]
        assert len(accumulator) == 5

    def test_zero_length_move(self, make_arc_points):
        """Test a move that does not go anywhere is refused."""
        accumulator = ShapeAccumulator()
        points = make_arc_points(count=4)
        feed(accumulator, points)

        assert not accumulator.try_add_point(points[-1].moved_to(points[-1].x, points[-1].y))
        assert len(accumulator) == 4

    def test_feed_rate_change(self, make_arc_points):
        """Test a move at a different feed rate is refused."""
        accumulator = ShapeAccumulator()
        points = make_arc_points(count=5, f=1800.0)
        feed(accumulator, points[:4])

        faster = points[3].moved_to(points[4].x, points[4].y, f=3000.0)
        assert not accumulator.try_add_point(faster)
        assert accumulator.try_add_point(points[4])

    def test_extrusion_direction_change(self, make_arc_points):
        """Test a retraction is refused while extruding."""
        accumulator = ShapeAccumulator()
        points = make_arc_points(count=5, e_per_mm=0.05)
        feed(accumulator, points[:4])

        retract = points[3].moved_to(points[4].x, points[4].y, e_relative=-0.5)
        travel = points[3].moved_to(points[4].x, points[4].y)
        assert not accumulator.try_add_point(retract)
        assert not accumulator.try_add_point(travel)
        assert accumulator.try_add_point(points[4])


class TestRollback:
    """Tests for try/commit/rollback bookkeeping."""

    def test_buffer_growth_is_monotonic(self, make_arc_points):
        """Test success never shrinks the buffer and failure leaves it unchanged."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(max_segments=12))
        points = make_arc_points(count=8) + make_arc_points(
            radius=4.0, count=6, start_degrees=90.0, center=(0.0, 6.0)
        )[1:]

        for point in points:
            before = len(accumulator)
            if accumulator.try_add_point(point):
                assert len(accumulator) > before
            else:
                assert len(accumulator) == before

    def test_failed_fit_restores_totals(self, make_arc_points):
        """Test path length and extrusion are restored after a refusal."""
        accumulator = ShapeAccumulator()
        points = make_arc_points(count=6, e_per_mm=0.05)
        feed(accumulator, points)

        length = accumulator.original_shape_length
        e_relative = accumulator.e_relative
        shape = accumulator.shape

        off_path = points[-1].moved_to(0.0, 0.0, e_relative=0.3)
        assert not accumulator.try_add_point(off_path)

        assert accumulator.original_shape_length == length
        assert accumulator.e_relative == e_relative
        assert accumulator.shape is shape

    def test_totals_track_moves(self, make_arc_points):
        """Test the accumulated path length and extrusion ignore the start position."""
        accumulator = ShapeAccumulator()
        points = make_arc_points(count=6, e_per_mm=0.05)
        feed(accumulator, points)

        expected_length = sum(p.distance for p in points[1:])
        assert accumulator.original_shape_length == pytest.approx(expected_length)
        assert accumulator.e_relative == pytest.approx(0.05 * expected_length)


class TestLifecycle:
    """Tests for flush, reset and restart."""

    def test_flush_without_shape(self, make_line_points):
        """Test flushing an accumulation that never fit returns None."""
        accumulator = ShapeAccumulator()
        feed(accumulator, make_line_points(count=2))

        assert accumulator.flush() is None
        assert len(accumulator) == 0
        assert accumulator.state == AccumulatorState.EMPTY

    def test_flushed_state_until_next_point(self, make_arc_points):
        """Test FLUSHED is visible after returning a shape and ends with the next point."""
        accumulator = ShapeAccumulator()
        points = make_arc_points(count=5)
        feed(accumulator, points)

        assert accumulator.flush() is not None
        assert accumulator.state == AccumulatorState.FLUSHED
        assert not accumulator.is_shape_active()
        assert accumulator.get_gcode() is None

        assert accumulator.try_add_point(points[-1])
        assert accumulator.state == AccumulatorState.EMPTY
        assert len(accumulator) == 1

    def test_reset_clears_flushed_state(self, make_arc_points):
        """Test reset returns a flushed accumulator to EMPTY."""
        accumulator = ShapeAccumulator()
        feed(accumulator, make_arc_points(count=5))
        accumulator.flush()

        accumulator.reset()

        assert accumulator.state == AccumulatorState.EMPTY

    def test_counters_survive_reset_and_flush(self, make_arc_points):
        """Test rejection counters persist across accumulations."""
        accumulator = ShapeAccumulator(ARC, WelderConfig(max_gcode_length=32))
        points = make_arc_points(radius=10.0, count=11, step_degrees=10.0)
        feed(accumulator, points[:10])

        accumulator.flush()
        accumulator.reset()

        assert accumulator.num_gcode_length_exceptions == 1
        assert accumulator.e_relative == 0.0
        assert accumulator.original_shape_length == 0.0

    def test_restart_matches_fresh_accumulator(self, make_arc_points):
        """Test a flushed accumulator behaves like a new one."""
        first = make_arc_points(radius=10.0, count=10, step_degrees=10.0)
        second = make_arc_points(radius=5.0, count=8, step_degrees=-15.0, center=(3.0, -2.0))

        reused = ShapeAccumulator()
        feed(reused, first)
        reused.flush()
        reused_results = feed(reused, second)

        fresh = ShapeAccumulator()
        fresh_results = feed(fresh, second)

        assert reused_results == fresh_results
        assert len(reused) == len(fresh)
        assert reused.get_gcode() == fresh.get_gcode()
        assert reused.get_gcode().startswith("G2")


class TestPrecision:
    """Tests for dynamic output precision."""

    def test_precision_only_increases(self):
        """Test lower precisions are ignored."""
        accumulator = ShapeAccumulator()
        accumulator.update_xyz_precision(5)
        accumulator.update_xyz_precision(2)
        accumulator.update_e_precision(6)
        accumulator.update_e_precision(1)

        assert accumulator.xyz_precision == 5
        assert accumulator.e_precision == 6
        assert accumulator.xyz_tolerance == pytest.approx(1e-5)

    def test_precision_applies_to_output(self, make_arc_points):
        """Test the accepted shape renders at the raised precision."""
        accumulator = ShapeAccumulator()
        feed(accumulator, make_arc_points(radius=10.0, count=10, step_degrees=10.0))
        accumulator.update_xyz_precision(4)

        assert accumulator.get_gcode() == "G3 X0.0000 Y10.0000 I-10.0000 J0.0000"


class TestProperties:
    """Invariants of every accepted shape."""

    @pytest.mark.parametrize("xyz_precision", [0, 1, 3, 5])
    @pytest.mark.parametrize("e_precision", [0, 2, 5])
    @pytest.mark.parametrize("kind", [ARC, SPLINE])
    def test_length_matches_gcode(self, make_arc_points, xyz_precision, e_precision, kind):
        """Test the length oracle agrees with the rendered command."""
        config = WelderConfig(xyz_precision=xyz_precision, e_precision=e_precision)
        accumulator = ShapeAccumulator(kind, config)
        points = make_arc_points(
            radius=37.5, count=14, step_degrees=-4.0, start_degrees=200.0,
            center=(-12.25, 81.5), e_per_mm=0.0417,
        )

        for point in points:
            accumulator.try_add_point(point)
            if accumulator.is_shape_active():
                assert accumulator.get_gcode_length() == len(accumulator.get_gcode())

    def test_absorbed_points_within_resolution(self, make_arc_points):
        """Test every absorbed point lies within resolution of the arc."""
        config = WelderConfig(resolution_mm=0.05)
        accumulator = ShapeAccumulator(ARC, config)
        points = make_arc_points(radius=20.0, count=15, step_degrees=6.0)
        feed(accumulator, points)

        arc = accumulator.shape
        for point in accumulator.points:
            radial = math.hypot(point.x - arc.center_x, point.y - arc.center_y)
            assert abs(radial - arc.radius) <= config.resolution_mm

    def test_path_length_within_tolerance(self, make_arc_points):
        """Test the arc length stays within the path tolerance."""
        config = WelderConfig(path_tolerance_percent=5.0)
        accumulator = ShapeAccumulator(ARC, config)
        feed(accumulator, make_arc_points(radius=20.0, count=15, step_degrees=6.0))

        original = accumulator.original_shape_length
        assert abs(accumulator.get_length() - original) / original <= 0.05
