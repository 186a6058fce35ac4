"""Core data models for shape welding.

This package contains the sampled point, shape and configuration models.
"""

from arc_welder.models.config import (
    DEFAULT_MAX_RADIUS_MM,
    MAX_RADIUS_MM,
    OutputOptions,
    WelderConfig,
)
from arc_welder.models.point import SampledPoint
from arc_welder.models.shapes import Arc, Spline

__all__ = [
    "SampledPoint",
    "Arc",
    "Spline",
    "WelderConfig",
    "OutputOptions",
    "DEFAULT_MAX_RADIUS_MM",
    "MAX_RADIUS_MM",
]
