"""Curved motion primitives produced by the shape fitters."""

from dataclasses import dataclass

from arc_welder.models.point import SampledPoint


@dataclass(frozen=True)
class Arc:
    """Circular arc standing in for a run of linear moves.

    Attributes:
        start_point: Position where the arc begins (current printer position)
        end_point: Position where the arc ends
        angle_radians: Signed included angle; negative is clockwise (G2),
            positive is counter-clockwise (G3)
        radius: Arc radius in millimeters
        center_x: X coordinate of the arc center
        center_y: Y coordinate of the arc center
        length: Curve length in millimeters, including any Z travel
    """

    start_point: SampledPoint
    end_point: SampledPoint
    angle_radians: float
    radius: float
    center_x: float
    center_y: float
    length: float

    @property
    def i(self) -> float:
        """X offset from the start point to the center."""
        return self.center_x - self.start_point.x

    @property
    def j(self) -> float:
        """Y offset from the start point to the center."""
        return self.center_y - self.start_point.y

    @property
    def is_clockwise(self) -> bool:
        return self.angle_radians < 0


@dataclass(frozen=True)
class Spline:
    """Cubic Bezier spline standing in for a run of linear moves.

    Attributes:
        start_point: Position where the spline begins
        end_point: Position where the spline ends
        i: X offset from the start point to the first control point
        j: Y offset from the start point to the first control point
        p: X offset from the end point to the second control point
        q: Y offset from the end point to the second control point
        length: Curve length in millimeters
    """

    start_point: SampledPoint
    end_point: SampledPoint
    i: float
    j: float
    p: float
    q: float
    length: float
