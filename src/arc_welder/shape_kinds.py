"""Shape kinds the accumulator can fit.

A ShapeKind bundles the kind-specific operations (fit, length oracle,
formatter, degeneracy check) so a single ShapeAccumulator drives both arcs
and splines.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Union

from arc_welder.arc_fit import is_arc_degenerate, try_fit_arc
from arc_welder.gcode_format import format_arc, format_spline
from arc_welder.gcode_length import arc_gcode_length, spline_gcode_length
from arc_welder.models.config import OutputOptions, WelderConfig
from arc_welder.models.point import SampledPoint
from arc_welder.models.shapes import Arc, Spline
from arc_welder.spline_fit import is_spline_degenerate, try_fit_spline

Shape = Union[Arc, Spline]

# (points, original_shape_length, config, max_radius_mm, xyz_tolerance) -> shape
FitFunction = Callable[[Sequence[SampledPoint], float, WelderConfig, float, float], Optional[Shape]]


@dataclass(frozen=True)
class ShapeKind:
    """
    Kind-specific operations used by the shape accumulator.

    Attributes:
        name: Human readable kind name ("Arc", "Spline")
        try_fit: Fit the whole buffer, returning a shape or None
        gcode_length: Length oracle (shape, e_relative, options) -> int
        format_gcode: Command formatter (shape, e_relative, options) -> str
        is_degenerate: (shape, tolerance) -> True if the shape is unusable
        firmware_compensated: Whether the firmware-interpolation gate applies
        uses_max_radius: Whether max_radius_mm constrains this kind
    """

    name: str
    try_fit: FitFunction
    gcode_length: Callable[[Shape, float, OutputOptions], int]
    format_gcode: Callable[[Shape, float, OutputOptions], str]
    is_degenerate: Callable[[Shape, float], bool]
    firmware_compensated: bool
    uses_max_radius: bool


def _fit_arc(
    points: Sequence[SampledPoint],
    original_shape_length: float,
    config: WelderConfig,
    max_radius_mm: float,
    xyz_tolerance: float,
) -> Optional[Arc]:
    return try_fit_arc(
        points,
        original_shape_length,
        max_radius_mm=max_radius_mm,
        resolution_mm=config.resolution_mm,
        path_tolerance_percent=config.path_tolerance_percent,
        xyz_tolerance=xyz_tolerance,
        allow_3d_shapes=config.allow_3d_shapes,
    )


def _fit_spline(
    points: Sequence[SampledPoint],
    original_shape_length: float,
    config: WelderConfig,
    max_radius_mm: float,
    xyz_tolerance: float,
) -> Optional[Spline]:
    # Splines ignore the radius cap and always fit all three axes
    return try_fit_spline(
        points,
        original_shape_length,
        resolution_mm=config.resolution_mm,
        path_tolerance_percent=config.path_tolerance_percent,
    )


ARC = ShapeKind(
    name="Arc",
    try_fit=_fit_arc,
    gcode_length=arc_gcode_length,
    format_gcode=format_arc,
    is_degenerate=is_arc_degenerate,
    firmware_compensated=True,
    uses_max_radius=True,
)

SPLINE = ShapeKind(
    name="Spline",
    try_fit=_fit_spline,
    gcode_length=spline_gcode_length,
    format_gcode=format_spline,
    is_degenerate=is_spline_degenerate,
    firmware_compensated=False,
    uses_max_radius=False,
)
