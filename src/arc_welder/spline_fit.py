"""Cubic Bezier spline fitting over a buffer of sampled points.

End points are pinned to the first and last buffered points; the two inner
control points are solved by least squares over the points and their segment
midpoints (the same samples the deviation check measures), starting from a
chord-length parameterization refined with a few Newton passes
(Schneider, "An Algorithm for Automatically Fitting Digitized Curves",
Graphics Gems 1990). Splines always fit all three axes.
"""

from typing import Optional, Sequence

import numpy as np

from arc_welder.models.point import SampledPoint
from arc_welder.models.shapes import Spline
from arc_welder.numeric import within_percent
from arc_welder.point_buffer import positions

# Newton passes refining the curve parameter of each point
REPARAMETERIZE_ITERATIONS = 4

# Samples used to measure curve length and point deviation
CURVE_SAMPLES = 200

_DENOMINATOR_TOLERANCE = 1e-12


def _bernstein(u: np.ndarray) -> np.ndarray:
    """Cubic Bernstein basis, shape (n, 4)."""
    v = 1.0 - u
    return np.column_stack((v**3, 3.0 * v * v * u, 3.0 * v * u * u, u**3))


def bezier_points(control: np.ndarray, u: np.ndarray) -> np.ndarray:
    """Evaluate a cubic Bezier with (4, dims) control points at parameters u."""
    return _bernstein(u) @ control


def _first_derivative(control: np.ndarray, u: np.ndarray) -> np.ndarray:
    v = (1.0 - u)[:, None]
    u = u[:, None]
    return 3.0 * (
        v * v * (control[1] - control[0])
        + 2.0 * v * u * (control[2] - control[1])
        + u * u * (control[3] - control[2])
    )


def _second_derivative(control: np.ndarray, u: np.ndarray) -> np.ndarray:
    v = (1.0 - u)[:, None]
    u = u[:, None]
    return 6.0 * (
        v * (control[2] - 2.0 * control[1] + control[0])
        + u * (control[3] - 2.0 * control[2] + control[1])
    )


def chord_length_parameterize(xyz: np.ndarray) -> np.ndarray:
    """Curve parameter of each point proportional to path length travelled."""
    steps = np.linalg.norm(np.diff(xyz, axis=0), axis=1)
    cumulative = np.concatenate(([0.0], np.cumsum(steps)))
    if cumulative[-1] <= 0:
        return np.zeros(len(xyz))
    return cumulative / cumulative[-1]


def densify(xyz: np.ndarray) -> np.ndarray:
    """Interleave segment midpoints between consecutive positions, shape (2n - 1, dims)."""
    samples = np.empty((2 * len(xyz) - 1, xyz.shape[1]))
    samples[0::2] = xyz
    samples[1::2] = (xyz[:-1] + xyz[1:]) / 2.0
    return samples


def _solve_control_points(xyz: np.ndarray, u: np.ndarray) -> np.ndarray:
    basis = _bernstein(u)
    rhs = xyz - np.outer(basis[:, 0], xyz[0]) - np.outer(basis[:, 3], xyz[-1])
    inner, *_ = np.linalg.lstsq(basis[:, 1:3], rhs, rcond=None)
    return np.vstack((xyz[0], inner, xyz[-1]))


def _reparameterize(xyz: np.ndarray, control: np.ndarray, u: np.ndarray) -> np.ndarray:
    difference = bezier_points(control, u) - xyz
    d1 = _first_derivative(control, u)
    d2 = _second_derivative(control, u)
    numerator = np.einsum("ij,ij->i", difference, d1)
    denominator = np.einsum("ij,ij->i", d1, d1) + np.einsum("ij,ij->i", difference, d2)
    usable = np.abs(denominator) > _DENOMINATOR_TOLERANCE
    step = np.where(usable, numerator / np.where(usable, denominator, 1.0), 0.0)
    refined = np.clip(u - step, 0.0, 1.0)
    refined[0] = 0.0
    refined[-1] = 1.0
    return np.maximum.accumulate(refined)


def distances_to_polyline(queries: np.ndarray, polyline: np.ndarray) -> np.ndarray:
    """
    Shortest distance from each query point to a polyline.

    Args:
        queries: (m, dims) array of points
        polyline: (s, dims) array of polyline vertices, s >= 1

    Returns:
        (m,) array of distances
    """
    if len(polyline) == 1:
        return np.linalg.norm(queries - polyline[0], axis=1)

    origins = polyline[:-1]
    directions = polyline[1:] - origins
    lengths_squared = np.einsum("ij,ij->i", directions, directions)
    relative = queries[:, None, :] - origins[None, :, :]
    projection = np.einsum("mij,ij->mi", relative, directions)
    t = np.where(
        lengths_squared > 0, projection / np.where(lengths_squared > 0, lengths_squared, 1.0), 0.0
    )
    closest = origins[None, :, :] + np.clip(t, 0.0, 1.0)[:, :, None] * directions[None, :, :]
    return np.linalg.norm(queries[:, None, :] - closest, axis=2).min(axis=1)


def try_fit_spline(
    points: Sequence[SampledPoint],
    original_shape_length: float,
    resolution_mm: float,
    path_tolerance_percent: float,
) -> Optional[Spline]:
    """
    Attempt to represent every buffered point with a single cubic spline.

    Args:
        points: Buffered points in path order; the first is the start position
        original_shape_length: Sum of the linear move lengths being replaced
        resolution_mm: Maximum deviation of any point or segment midpoint
        path_tolerance_percent: Maximum spline length deviation from
            original_shape_length, in percent

    Returns:
        The fitted Spline, or None if the points are straight within
        resolution (nothing to gain over linear moves) or cannot be
        represented within tolerance.
    """
    points = list(points)
    if len(points) < 3:
        return None

    xyz = positions(points)

    # Zero curvature: the chord already represents the path
    chord = np.vstack((xyz[0], xyz[-1]))
    if np.max(distances_to_polyline(xyz, chord)) <= resolution_mm:
        return None

    samples = densify(xyz)
    u = chord_length_parameterize(samples)
    control = _solve_control_points(samples, u)
    for _ in range(REPARAMETERIZE_ITERATIONS):
        u = _reparameterize(samples, control, u)
        control = _solve_control_points(samples, u)

    curve = bezier_points(control, np.linspace(0.0, 1.0, CURVE_SAMPLES))
    if np.max(distances_to_polyline(samples, curve)) > resolution_mm:
        return None

    length = float(np.sum(np.linalg.norm(np.diff(curve, axis=0), axis=1)))
    if not within_percent(length, original_shape_length, path_tolerance_percent):
        return None

    start, end = points[0], points[-1]
    return Spline(
        start_point=start,
        end_point=end,
        i=float(control[1, 0] - start.x),
        j=float(control[1, 1] - start.y),
        p=float(control[2, 0] - end.x),
        q=float(control[2, 1] - end.y),
        length=length,
    )


def is_spline_degenerate(spline: Spline, tolerance: float) -> bool:
    """A spline shorter than the coordinate tolerance is meaningless."""
    return spline.length < tolerance


def sample_spline(spline: Spline, count: int = 64) -> np.ndarray:
    """
    Sample positions along a spline.

    Control points are rebuilt from the stored XY offsets; Z is interpolated
    linearly between the end points.

    Returns:
        (count, 3) array of x, y, z positions
    """
    if count < 2:
        raise ValueError(f"count must be at least 2, got {count}")

    start, end = spline.start_point, spline.end_point
    control = np.array(
        [
            (start.x, start.y),
            (start.x + spline.i, start.y + spline.j),
            (end.x + spline.p, end.y + spline.q),
            (end.x, end.y),
        ]
    )
    u = np.linspace(0.0, 1.0, count)
    xy = bezier_points(control, u)
    z = start.z + (end.z - start.z) * u
    return np.column_stack((xy, z))
