"""Incremental shape accumulator.

The accumulator decides, point by point, whether the points seen so far can
still be represented by one curved command within tolerance. It always holds
the longest prefix of the current run of moves that fits; the first move that
cannot be absorbed is refused, and the caller flushes the accepted shape and
starts a new accumulation.

Example:
    >>> from arc_welder.accumulator import ShapeAccumulator
    >>> from arc_welder.models import WelderConfig
    >>> from arc_welder.shape_kinds import ARC
    >>>
    >>> accumulator = ShapeAccumulator(ARC, WelderConfig(resolution_mm=0.05))
    >>> for point in points:
    ...     if not accumulator.try_add_point(point):
    ...         command = accumulator.flush()
    ...         break
"""

import logging
from enum import Enum
from typing import Optional, Tuple

from arc_welder.arc_fit import interpolated_segment_count
from arc_welder.models.config import MAX_RADIUS_MM, OutputOptions, WelderConfig
from arc_welder.models.point import SampledPoint
from arc_welder.numeric import is_zero
from arc_welder.point_buffer import PointBuffer
from arc_welder.shape_kinds import ARC, Shape, ShapeKind

logger = logging.getLogger(__name__)


class AccumulatorState(Enum):
    """Lifecycle of one accumulation."""

    EMPTY = "empty"  # No shape accepted yet
    FITTING = "fitting"  # A shape is accepted and being extended
    FLUSHED = "flushed"  # Shape handed to the caller; buffer already cleared


def _extrusion_direction(e_relative: float) -> int:
    """1 for extruding, -1 for retracting, 0 for travel moves."""
    if e_relative > 0:
        return 1
    if e_relative < 0:
        return -1
    return 0


class ShapeAccumulator:
    """
    Try/commit/rollback state machine fitting one shape at a time.

    Every new point is appended to the buffer and the whole buffer is refit.
    A failed fit, or a fit refused by one of the acceptance gates, rolls the
    point back and keeps the previously accepted shape.

    Acceptance gates, in order:
        1. Output length: the command must not exceed max_gcode_length
        2. Firmware interpolation (arcs only): the arc must still render as at
           least min_segments firmware segments
        3. Degeneracy: the shape must have a defined center and a length above
           the coordinate tolerance

    Attributes:
        kind: Shape kind being fitted (ARC or SPLINE)
        config: Fitting configuration
    """

    def __init__(self, kind: ShapeKind = ARC, config: Optional[WelderConfig] = None) -> None:
        """
        Initialize the accumulator.

        Args:
            kind: Shape kind to fit (default: ARC)
            config: Fitting configuration (default: WelderConfig())
        """
        self.kind = kind
        self.config = config if config is not None else WelderConfig()

        self._max_radius_mm = self.config.max_radius_mm
        if self._max_radius_mm > MAX_RADIUS_MM:
            logger.warning(
                f"max_radius_mm {self._max_radius_mm} exceeds the maximum of "
                f"{MAX_RADIUS_MM}, clamping"
            )
            self._max_radius_mm = MAX_RADIUS_MM

        self._xyz_precision = self.config.xyz_precision
        self._e_precision = self.config.e_precision

        self._buffer = PointBuffer(capacity=self.config.max_segments)
        self._shape: Optional[Shape] = None
        self._original_shape_length = 0.0
        self._e_relative = 0.0
        self._state = AccumulatorState.EMPTY

        self._num_gcode_length_exceptions = 0
        self._num_firmware_compensations = 0

    @property
    def state(self) -> AccumulatorState:
        return self._state

    @property
    def shape(self) -> Optional[Shape]:
        """Currently accepted shape, or None."""
        return self._shape

    @property
    def original_shape_length(self) -> float:
        """Sum of the linear move lengths currently buffered."""
        return self._original_shape_length

    @property
    def e_relative(self) -> float:
        """Extrusion delta accumulated over the buffered moves."""
        return self._e_relative

    @property
    def points(self) -> Tuple[SampledPoint, ...]:
        return tuple(self._buffer.get_points())

    @property
    def num_gcode_length_exceptions(self) -> int:
        """Shapes refused because their command exceeded max_gcode_length."""
        return self._num_gcode_length_exceptions

    @property
    def num_firmware_compensations(self) -> int:
        """Arcs refused because firmware would render too few segments."""
        return self._num_firmware_compensations

    @property
    def xyz_precision(self) -> int:
        return self._xyz_precision

    @property
    def e_precision(self) -> int:
        return self._e_precision

    @property
    def xyz_tolerance(self) -> float:
        return self.output_options.xyz_tolerance

    @property
    def output_options(self) -> OutputOptions:
        """Rendering options at the current output precision."""
        return OutputOptions(
            xyz_precision=self._xyz_precision,
            e_precision=self._e_precision,
            allow_3d_shapes=self.config.allow_3d_shapes,
        )

    def __len__(self) -> int:
        return len(self._buffer)

    def is_shape_active(self) -> bool:
        """Check whether a shape has been accepted in this accumulation."""
        return self._state == AccumulatorState.FITTING

    def get_min_segments(self) -> int:
        return self.config.min_segments

    def get_max_segments(self) -> int:
        return self.config.max_segments

    def get_max_radius(self) -> Optional[float]:
        """Effective (clamped) maximum radius, or None for kinds without one."""
        if not self.kind.uses_max_radius:
            return None
        return self._max_radius_mm

    def get_length(self) -> float:
        """Curve length of the accepted shape, 0.0 when there is none."""
        if self._shape is None:
            return 0.0
        return self._shape.length

    def get_gcode_length(self) -> int:
        """Predicted command length of the accepted shape, 0 when there is none."""
        if self._shape is None:
            return 0
        return self.kind.gcode_length(self._shape, self._e_relative, self.output_options)

    def get_gcode(self) -> Optional[str]:
        """Command text of the accepted shape, None when there is none."""
        if self._shape is None:
            return None
        return self.kind.format_gcode(self._shape, self._e_relative, self.output_options)

    def update_xyz_precision(self, precision: int) -> None:
        """Raise the coordinate output precision; lower values are ignored."""
        if precision > self._xyz_precision:
            logger.debug(f"Increasing xyz precision from {self._xyz_precision} to {precision}")
            self._xyz_precision = precision

    def update_e_precision(self, precision: int) -> None:
        """Raise the extrusion output precision; lower values are ignored."""
        if precision > self._e_precision:
            logger.debug(f"Increasing e precision from {self._e_precision} to {precision}")
            self._e_precision = precision

    def try_add_point(self, point: SampledPoint) -> bool:
        """
        Offer the next point of the path to the accumulator.

        The first point of an accumulation is the start position and is
        always accepted. Until the buffer reaches the warm-up floor
        (min_segments - 1 points) moves are buffered without fitting.

        Args:
            point: Next sampled point in path order

        Returns:
            True if the point was absorbed. False if it was refused; the
            buffer and the accepted shape are then exactly as before the call
            and the caller should flush and start a new accumulation.
        """
        if len(self._buffer) == 0:
            self._state = AccumulatorState.EMPTY
            self._buffer.append(point)
            return True

        if not self._accepts_move(point):
            return False

        if len(self._buffer) < self.config.min_segments - 1:
            self._append(point)
            return True

        return self._try_extend(point)

    def reset(self) -> None:
        """Clear the buffer and the accepted shape. Rejection counters persist."""
        self._buffer.clear()
        self._shape = None
        self._original_shape_length = 0.0
        self._e_relative = 0.0
        self._state = AccumulatorState.EMPTY

    def flush(self) -> Optional[str]:
        """
        Finalize the accumulation.

        Returns:
            Command text of the accepted shape, or None if no shape was
            accepted. The buffer is cleared either way; the state is FLUSHED
            after a shape was returned (EMPTY otherwise) until the next
            try_add_point() or reset().
        """
        gcode = self.get_gcode()
        moves = len(self._buffer) - 1
        self.reset()
        if gcode is not None:
            self._state = AccumulatorState.FLUSHED
            logger.debug(f"Flushed {self.kind.name} over {moves} moves: {gcode}")
        return gcode

    def _accepts_move(self, point: SampledPoint) -> bool:
        if self._buffer.is_full():
            return False
        if is_zero(point.distance):
            return False
        if len(self._buffer) > 1:
            # All moves of a shape share one feed rate and one extrusion direction
            first_move = self._buffer[1]
            if point.f != first_move.f:
                return False
            if _extrusion_direction(point.e_relative) != _extrusion_direction(
                first_move.e_relative
            ):
                return False
        return True

    def _append(self, point: SampledPoint) -> None:
        self._buffer.append(point)
        self._original_shape_length += point.distance
        self._e_relative += point.e_relative

    def _try_extend(self, point: SampledPoint) -> bool:
        previous_length = self._original_shape_length
        previous_e_relative = self._e_relative
        self._append(point)

        candidate = self.kind.try_fit(
            self._buffer.get_points(),
            self._original_shape_length,
            self.config,
            self._max_radius_mm,
            self.xyz_tolerance,
        )
        if candidate is not None and self._passes_gates(candidate):
            self._shape = candidate
            if self._state == AccumulatorState.EMPTY:
                logger.debug(f"{self.kind.name} accepted over {len(self._buffer)} points")
                self._state = AccumulatorState.FITTING
            return True

        # Roll back the append; the previous shape stays current
        self._buffer.remove_last()
        self._original_shape_length = previous_length
        self._e_relative = previous_e_relative
        return False

    def _passes_gates(self, candidate: Shape) -> bool:
        accepted = True
        max_gcode_length = self.config.max_gcode_length
        if max_gcode_length > 0:
            length = self.kind.gcode_length(candidate, self._e_relative, self.output_options)
            if length > max_gcode_length:
                logger.debug(
                    f"{self.kind.name} refused: command length {length} exceeds {max_gcode_length}"
                )
                self._num_gcode_length_exceptions += 1
                accepted = False

        if self.kind.firmware_compensated and self._firmware_undersegments(candidate):
            logger.debug(
                f"{self.kind.name} refused: radius {candidate.radius:.4f} renders too few "
                f"firmware segments"
            )
            self._num_firmware_compensations += 1
            accepted = False

        if accepted and self.kind.is_degenerate(candidate, self.xyz_tolerance):
            logger.debug(f"{self.kind.name} refused: degenerate geometry")
            accepted = False

        return accepted

    def _firmware_undersegments(self, arc: Shape) -> bool:
        min_segments = self.config.min_segments
        if min_segments <= 0 or self.config.mm_per_segment <= 0:
            return False
        if interpolated_segment_count(arc.radius, min_segments) >= min_segments:
            return False
        # Fall back to the path length actually being replaced
        segments = interpolated_segment_count(arc.radius, self._original_shape_length)
        return segments < min_segments

    def __repr__(self) -> str:
        return (
            f"ShapeAccumulator(kind={self.kind.name}, state={self._state.name}, "
            f"points={len(self._buffer)})"
        )
