"""End-to-end welding of linear moves into curved commands.

This module provides the GcodeWelder class that drives a ShapeAccumulator over
a stream of sampled points:
- Moves absorbed into an accepted shape are replaced by one G2/G3/G5 command
- Moves that never became part of a shape are emitted unchanged as G1
- After every flush the next accumulation starts at the current position

Example:
    >>> from arc_welder.welder import GcodeWelder
    >>> from arc_welder.models import SampledPoint, WelderConfig
    >>>
    >>> start = SampledPoint(x=10.0, y=0.0, f=1800.0)
    >>> points = [start, start.moved_to(9.848, 1.736, e_relative=0.05), ...]
    >>>
    >>> welder = GcodeWelder(WelderConfig(resolution_mm=0.05))
    >>> commands = welder.process(points)
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from arc_welder.accumulator import ShapeAccumulator
from arc_welder.gcode_format import format_linear
from arc_welder.models.config import WelderConfig
from arc_welder.models.point import SampledPoint
from arc_welder.shape_kinds import ARC, ShapeKind

logger = logging.getLogger(__name__)


@dataclass
class WeldStatistics:
    """
    Counters describing one processed stream.

    Attributes:
        points_processed: Points read, including the start position
        moves_processed: Linear moves read
        shapes_emitted: Curved commands written
        linear_moves_emitted: G1 commands written for moves left as they were
        moves_replaced: Linear moves absorbed into curved commands
        gcode_length_exceptions: Shapes refused by the output length limit
        firmware_compensations: Arcs refused by firmware compensation
    """

    points_processed: int = 0
    moves_processed: int = 0
    shapes_emitted: int = 0
    linear_moves_emitted: int = 0
    moves_replaced: int = 0
    gcode_length_exceptions: int = 0
    firmware_compensations: int = 0

    @property
    def commands_emitted(self) -> int:
        return self.shapes_emitted + self.linear_moves_emitted

    @property
    def compression_ratio(self) -> float:
        """Moves read per command written (1.0 when nothing was welded)."""
        if self.commands_emitted == 0:
            return 1.0
        return self.moves_processed / self.commands_emitted


class GcodeWelder:
    """Greedy single-pass welder of linear moves into arcs or splines.

    Args:
        config: Fitting configuration. Default: WelderConfig()
        kind: Shape kind to produce. Default: ARC

    Example:
        >>> welder = GcodeWelder(WelderConfig(max_gcode_length=80))
        >>> commands = welder.process(points)
        >>> welder.statistics.compression_ratio
    """

    def __init__(
        self,
        config: Optional[WelderConfig] = None,
        kind: ShapeKind = ARC,
    ):
        self.config = config if config is not None else WelderConfig()
        self.kind = kind
        self.statistics = WeldStatistics()

    def process(self, points: Iterable[SampledPoint]) -> List[str]:
        """Weld a stream of sampled points into commands.

        The first point is the starting position of the tool; every following
        point is the end of one linear move.

        Args:
            points: Sampled points in path order

        Returns:
            Commands in path order, without line terminators. Statistics for
            the run are available in self.statistics afterwards.

        Note:
            - An empty stream, or a stream holding only the start position,
              returns []
            - Output is deterministic for a given input and configuration
        """
        accumulator = ShapeAccumulator(self.kind, self.config)
        self.statistics = WeldStatistics()
        commands: List[str] = []
        position: Optional[SampledPoint] = None

        for point in points:
            self.statistics.points_processed += 1
            if position is None:
                accumulator.try_add_point(point)
                position = point
                continue

            self.statistics.moves_processed += 1
            if not accumulator.try_add_point(point):
                commands.extend(self._flush(accumulator))
                # Restart from the current position and offer the move again
                accumulator.try_add_point(position)
                if not accumulator.try_add_point(point):
                    commands.append(format_linear(point, position, accumulator.output_options))
                    self.statistics.linear_moves_emitted += 1
                    accumulator.reset()
                    accumulator.try_add_point(point)
            position = point

        commands.extend(self._flush(accumulator))

        self.statistics.gcode_length_exceptions = accumulator.num_gcode_length_exceptions
        self.statistics.firmware_compensations = accumulator.num_firmware_compensations
        logger.info(
            f"Welded {self.statistics.moves_processed} moves into "
            f"{self.statistics.commands_emitted} commands "
            f"({self.statistics.shapes_emitted} {self.kind.name.lower()}s, "
            f"compression {self.statistics.compression_ratio:.2f}x)"
        )
        return commands

    def _flush(self, accumulator: ShapeAccumulator) -> List[str]:
        points = accumulator.points
        options = accumulator.output_options
        gcode = accumulator.flush()
        if gcode is not None:
            self.statistics.shapes_emitted += 1
            self.statistics.moves_replaced += len(points) - 1
            return [gcode]

        linear = [
            format_linear(point, previous, options)
            for previous, point in zip(points, points[1:])
        ]
        self.statistics.linear_moves_emitted += len(linear)
        return linear

    def __repr__(self) -> str:
        return f"GcodeWelder(kind={self.kind.name}, config={self.config!r})"
