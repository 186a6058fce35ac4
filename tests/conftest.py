"""Shared fixtures for shape welding tests."""

import math

import pytest

from arc_welder.models.point import SampledPoint


def arc_points(
    radius=10.0,
    count=10,
    step_degrees=10.0,
    start_degrees=0.0,
    center=(0.0, 0.0),
    z=0.0,
    z_step=0.0,
    e_per_mm=0.0,
    f=1800.0,
    relative=False,
):
    """Points sampled on a circle, start position first.

    Negative step_degrees walks clockwise.
    """
    cx, cy = center
    angle = math.radians(start_degrees)
    start = SampledPoint(
        x=cx + radius * math.cos(angle),
        y=cy + radius * math.sin(angle),
        z=z,
        f=f,
        is_extruder_relative=relative,
    )
    points = [start]
    for k in range(1, count):
        angle = math.radians(start_degrees + k * step_degrees)
        x = cx + radius * math.cos(angle)
        y = cy + radius * math.sin(angle)
        previous = points[-1]
        distance = math.hypot(x - previous.x, y - previous.y)
        points.append(
            previous.moved_to(x, y, z=z + k * z_step, e_relative=e_per_mm * distance, f=f)
        )
    return points


def line_points(count=4, step=1.0, f=1800.0, e_per_move=0.0):
    """Points on the X axis, start position first."""
    points = [SampledPoint(x=0.0, y=0.0, f=f)]
    for k in range(1, count):
        points.append(points[-1].moved_to(k * step, 0.0, e_relative=e_per_move))
    return points


@pytest.fixture
def make_arc_points():
    """Factory for points sampled on a circle."""
    return arc_points


@pytest.fixture
def make_line_points():
    """Factory for collinear points."""
    return line_points
