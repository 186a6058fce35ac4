"""Anti-stutter welding of linear 3D printer moves into arcs and splines."""

from .accumulator import AccumulatorState, ShapeAccumulator
from .models import Arc, SampledPoint, Spline, WelderConfig
from .shape_kinds import ARC, SPLINE, ShapeKind
from .welder import GcodeWelder, WeldStatistics

__all__ = [
    "ShapeAccumulator",
    "AccumulatorState",
    "GcodeWelder",
    "WeldStatistics",
    "ShapeKind",
    "ARC",
    "SPLINE",
    "SampledPoint",
    "Arc",
    "Spline",
    "WelderConfig",
]
