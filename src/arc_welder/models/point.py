"""Sampled printer position model."""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class SampledPoint:
    """A printer position reached by one linear move.

    Produced by the position-tracking collaborator, one per input motion
    command, already resolved to absolute coordinates.

    Attributes:
        x: X position in millimeters
        y: Y position in millimeters
        z: Z position in millimeters
        e_offset: Absolute extruder position after the move
        e_relative: Extrusion delta of the move that reached this point
        f: Feed rate in millimeters per minute
        distance: Euclidean distance from the previous point
        is_extruder_relative: True when the program uses relative extrusion (M83)
    """

    x: float
    y: float
    z: float = 0.0
    e_offset: float = 0.0
    e_relative: float = 0.0
    f: float = 0.0
    distance: float = 0.0
    is_extruder_relative: bool = False

    def __post_init__(self) -> None:
        """Validate distance and feed rate."""
        if self.distance < 0:
            raise ValueError(f"distance must be non-negative, got {self.distance}")
        if self.f < 0:
            raise ValueError(f"f must be non-negative, got {self.f}")

    def moved_to(
        self,
        x: float,
        y: float,
        z: float | None = None,
        e_relative: float = 0.0,
        f: float | None = None,
    ) -> "SampledPoint":
        """Create the point reached by a linear move from this point.

        Distance and absolute extruder position are derived from this point,
        which is how the position-tracking collaborator fills them in.

        Args:
            x: Target X position
            y: Target Y position
            z: Target Z position (default: unchanged)
            e_relative: Extrusion delta of the move
            f: Feed rate of the move (default: unchanged)

        Returns:
            New SampledPoint at the target position
        """
        z = self.z if z is None else z
        f = self.f if f is None else f
        distance = math.sqrt((x - self.x) ** 2 + (y - self.y) ** 2 + (z - self.z) ** 2)
        return SampledPoint(
            x=x,
            y=y,
            z=z,
            e_offset=self.e_offset + e_relative,
            e_relative=e_relative,
            f=f,
            distance=distance,
            is_extruder_relative=self.is_extruder_relative,
        )
