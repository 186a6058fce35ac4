"""Welder configuration model."""

from dataclasses import dataclass

from arc_welder.numeric import xyz_tolerance

DEFAULT_ALLOW_3D_SHAPES = False
DEFAULT_MIN_SEGMENTS = 3
DEFAULT_MAX_SEGMENTS = 50
DEFAULT_MM_PER_SEGMENT = 0.0  # Firmware compensation disabled
DEFAULT_RESOLUTION_MM = 0.05
DEFAULT_PATH_TOLERANCE_PERCENT = 5.0
DEFAULT_MAX_GCODE_LENGTH = 0  # Unlimited
DEFAULT_XYZ_PRECISION = 3
DEFAULT_E_PRECISION = 5
DEFAULT_MAX_RADIUS_MM = 9999.0

# Hard upper bound for max_radius_mm; larger values are clamped
MAX_RADIUS_MM = 9999.0

# Fitting needs three points to define a circle or a curved spline
MIN_SEGMENTS_FLOOR = 3


@dataclass(frozen=True)
class WelderConfig:
    """Shape fitting configuration.

    Attributes:
        allow_3d_shapes: Permit arcs whose Z changes along the arc (helical moves)
        min_segments: Warm-up floor (the buffer is fit-tested once it holds
            min_segments - 1 points) and firmware interpolation divisor
        max_segments: Maximum number of points a single shape may absorb
        mm_per_segment: Firmware arc segment length; 0 disables the
            firmware-interpolation compensation
        resolution_mm: Maximum deviation between the original path and the curve
        path_tolerance_percent: Maximum curve length deviation from the original
            path length, in percent
        max_gcode_length: Maximum command length in characters, 0 = unlimited
        xyz_precision: Decimal places for X, Y, Z, I and J
        e_precision: Decimal places for E
        max_radius_mm: Largest accepted arc radius (clamped to MAX_RADIUS_MM)
    """

    allow_3d_shapes: bool = DEFAULT_ALLOW_3D_SHAPES
    min_segments: int = DEFAULT_MIN_SEGMENTS
    max_segments: int = DEFAULT_MAX_SEGMENTS
    mm_per_segment: float = DEFAULT_MM_PER_SEGMENT
    resolution_mm: float = DEFAULT_RESOLUTION_MM
    path_tolerance_percent: float = DEFAULT_PATH_TOLERANCE_PERCENT
    max_gcode_length: int = DEFAULT_MAX_GCODE_LENGTH
    xyz_precision: int = DEFAULT_XYZ_PRECISION
    e_precision: int = DEFAULT_E_PRECISION
    max_radius_mm: float = DEFAULT_MAX_RADIUS_MM

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.min_segments < MIN_SEGMENTS_FLOOR:
            raise ValueError(
                f"min_segments must be at least {MIN_SEGMENTS_FLOOR}, got {self.min_segments}"
            )
        if self.max_segments < self.min_segments:
            raise ValueError(
                f"max_segments must be >= min_segments ({self.min_segments}), "
                f"got {self.max_segments}"
            )
        if self.mm_per_segment < 0:
            raise ValueError(f"mm_per_segment must be non-negative, got {self.mm_per_segment}")
        if self.resolution_mm <= 0:
            raise ValueError(f"resolution_mm must be positive, got {self.resolution_mm}")
        if self.path_tolerance_percent < 0:
            raise ValueError(
                f"path_tolerance_percent must be non-negative, got {self.path_tolerance_percent}"
            )
        if self.max_gcode_length < 0:
            raise ValueError(
                f"max_gcode_length must be non-negative, got {self.max_gcode_length}"
            )
        if self.xyz_precision < 0:
            raise ValueError(f"xyz_precision must be non-negative, got {self.xyz_precision}")
        if self.e_precision < 0:
            raise ValueError(f"e_precision must be non-negative, got {self.e_precision}")
        if self.max_radius_mm <= 0:
            raise ValueError(f"max_radius_mm must be positive, got {self.max_radius_mm}")


@dataclass(frozen=True)
class OutputOptions:
    """Number rendering options for emitted commands.

    Attributes:
        xyz_precision: Decimal places for X, Y, Z, I and J
        e_precision: Decimal places for E
        allow_3d_shapes: Whether arcs may carry a Z word
    """

    xyz_precision: int = DEFAULT_XYZ_PRECISION
    e_precision: int = DEFAULT_E_PRECISION
    allow_3d_shapes: bool = DEFAULT_ALLOW_3D_SHAPES

    @property
    def xyz_tolerance(self) -> float:
        """Smallest coordinate difference representable at xyz_precision."""
        return xyz_tolerance(self.xyz_precision)
