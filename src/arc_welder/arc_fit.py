"""Circular arc fitting over a buffer of sampled points.

The whole buffer is refit on every call: the circle is computed through the
first, middle and last points, so the arc starts and ends exactly on the
original path, and every other point (and every segment midpoint) must then
lie within the resolution of that circle.
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from arc_welder.models.point import SampledPoint
from arc_welder.models.shapes import Arc
from arc_welder.numeric import is_zero, within_percent
from arc_welder.point_buffer import positions

# Below this the three defining points are treated as collinear (mm²)
CIRCLE_DETERMINANT_TOLERANCE = 1e-12

TWO_PI = 2.0 * math.pi


def circle_from_points(
    p1: SampledPoint, p2: SampledPoint, p3: SampledPoint
) -> Optional[Tuple[float, float, float]]:
    """Compute the circle through three points in the XY plane.

    Coordinates are taken relative to p1 to keep the determinant well
    conditioned for points far from the origin.

    Args:
        p1: First point (arc start)
        p2: Second point
        p3: Third point (arc end)

    Returns:
        (center_x, center_y, radius), or None if the points are collinear

    Examples:
        >>> a, b, c = SampledPoint(x=1, y=0), SampledPoint(x=0, y=1), SampledPoint(x=-1, y=0)
        >>> circle_from_points(a, b, c)
        (0.0, 0.0, 1.0)
    """
    bx, by = p2.x - p1.x, p2.y - p1.y
    cx, cy = p3.x - p1.x, p3.y - p1.y
    determinant = 2.0 * (bx * cy - by * cx)
    if abs(determinant) < CIRCLE_DETERMINANT_TOLERANCE:
        return None

    b_squared = bx * bx + by * by
    c_squared = cx * cx + cy * cy
    ux = (cy * b_squared - by * c_squared) / determinant
    uy = (bx * c_squared - cx * b_squared) / determinant
    return (p1.x + ux, p1.y + uy, math.hypot(ux, uy))


def try_fit_arc(
    points: Sequence[SampledPoint],
    original_shape_length: float,
    max_radius_mm: float,
    resolution_mm: float,
    path_tolerance_percent: float,
    xyz_tolerance: float,
    allow_3d_shapes: bool,
) -> Optional[Arc]:
    """
    Attempt to represent every buffered point with a single arc.

    Args:
        points: Buffered points in path order; the first is the start position
        original_shape_length: Sum of the linear move lengths being replaced
        max_radius_mm: Largest acceptable radius
        resolution_mm: Maximum radial deviation of any point or segment midpoint
        path_tolerance_percent: Maximum arc length deviation from
            original_shape_length, in percent
        xyz_tolerance: Coordinate equality tolerance
        allow_3d_shapes: Permit Z to change linearly along the arc

    Returns:
        The fitted Arc, or None if the points cannot be represented within
        tolerance. Nothing is mutated either way.

    Algorithm:
        1. Reject non-planar input unless 3D shapes are allowed
        2. Circle through first, middle and last points; reject if collinear
           or the radius exceeds max_radius_mm
        3. Every step around the center must turn the same way and the total
           sweep must stay below one full turn
        4. Points and segment midpoints must lie within resolution_mm of the
           circle (and of the helix height for 3D arcs)
        5. Arc length must be within path_tolerance_percent of the path length
    """
    points = list(points)
    if len(points) < 3:
        return None

    start = points[0]
    end = points[-1]
    xyz = positions(points)

    if not allow_3d_shapes and np.any(np.abs(xyz[:, 2] - start.z) >= xyz_tolerance):
        return None

    circle = circle_from_points(start, points[len(points) // 2], end)
    if circle is None:
        return None
    center_x, center_y, radius = circle
    if radius > max_radius_mm:
        return None

    # Signed angle of each step around the center
    offsets = xyz[:, :2] - np.array([center_x, center_y])
    before, after = offsets[:-1], offsets[1:]
    cross = before[:, 0] * after[:, 1] - before[:, 1] * after[:, 0]
    dot = np.einsum("ij,ij->i", before, after)
    steps = np.arctan2(cross, dot)
    if not (np.all(steps > 0) or np.all(steps < 0)):
        return None
    angle = float(steps.sum())
    if abs(angle) >= TWO_PI or is_zero(angle):
        return None

    midpoints = (xyz[:-1, :2] + xyz[1:, :2]) / 2.0 - np.array([center_x, center_y])
    radial = np.concatenate(
        (np.hypot(offsets[:, 0], offsets[:, 1]), np.hypot(midpoints[:, 0], midpoints[:, 1]))
    )
    if np.max(np.abs(radial - radius)) > resolution_mm:
        return None

    z_delta = 0.0
    if allow_3d_shapes:
        z_delta = end.z - start.z
        progress = np.concatenate(([0.0], np.cumsum(steps))) / angle
        expected_z = start.z + z_delta * progress
        if np.max(np.abs(xyz[:, 2] - expected_z)) > resolution_mm:
            return None

    length = math.hypot(radius * abs(angle), z_delta)
    if not within_percent(length, original_shape_length, path_tolerance_percent):
        return None

    return Arc(
        start_point=start,
        end_point=end,
        angle_radians=angle,
        radius=radius,
        center_x=center_x,
        center_y=center_y,
        length=length,
    )


def is_arc_degenerate(arc: Arc, tolerance: float) -> bool:
    """Check whether an arc is unusable as a command.

    An arc is degenerate when both center offsets are zero within tolerance
    (the center is undefined) or its length is below tolerance.
    """
    if is_zero(arc.i, tolerance) and is_zero(arc.j, tolerance):
        return True
    return arc.length < tolerance


def interpolated_segment_count(radius: float, divisor: float) -> int:
    """Number of whole segments firmware renders a full circle of this radius into."""
    if divisor <= 0:
        return 0
    return int(math.floor(TWO_PI * radius / divisor))


def sample_arc(arc: Arc, count: int = 64) -> np.ndarray:
    """
    Sample positions along an arc.

    Args:
        arc: Arc to sample
        count: Number of samples including both end points

    Returns:
        (count, 3) array of x, y, z positions
    """
    if count < 2:
        raise ValueError(f"count must be at least 2, got {count}")

    start_angle = math.atan2(arc.start_point.y - arc.center_y, arc.start_point.x - arc.center_x)
    fraction = np.linspace(0.0, 1.0, count)
    theta = start_angle + arc.angle_radians * fraction
    x = arc.center_x + arc.radius * np.cos(theta)
    y = arc.center_y + arc.radius * np.sin(theta)
    z = arc.start_point.z + (arc.end_point.z - arc.start_point.z) * fraction
    return np.column_stack((x, y, z))
