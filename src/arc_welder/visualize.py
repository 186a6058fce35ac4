"""Visualization utilities for shape welding analysis.

This module provides functions to compare fitted shapes with the linear path
they replace and to summarize a welding run.
"""

from typing import List, Optional, Sequence

import matplotlib.pyplot as plt
import numpy as np

from arc_welder.arc_fit import sample_arc
from arc_welder.models.point import SampledPoint
from arc_welder.models.shapes import Arc
from arc_welder.point_buffer import positions
from arc_welder.shape_kinds import Shape
from arc_welder.spline_fit import distances_to_polyline, sample_spline
from arc_welder.welder import WeldStatistics


def _sample_shape(shape: Shape, count: int) -> np.ndarray:
    if isinstance(shape, Arc):
        return sample_arc(shape, count)
    return sample_spline(shape, count)


def plot_shape_fit(
    points: Sequence[SampledPoint],
    shape: Shape,
    resolution_mm: Optional[float] = None,
    title: Optional[str] = None,
    show: bool = True,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Plot a fitted shape over the linear path it replaces.

    Creates a two-panel visualization showing:
    - The original moves and the fitted curve in the XY plane
    - The deviation of every original point from the curve

    Args:
        points: Points absorbed into the shape, start position first
        shape: Fitted Arc or Spline
        resolution_mm: Optional resolution to draw as a limit line
        title: Optional custom title (default: auto-generated)
        show: Whether to display the plot (default: True)
        save_path: Optional path to save the figure

    Returns:
        matplotlib Figure object

    Example:
        >>> accumulator = ShapeAccumulator(ARC, config)
        >>> ...
        >>> plot_shape_fit(accumulator.points, accumulator.shape, config.resolution_mm)
    """
    if len(points) < 2:
        raise ValueError("Cannot plot fewer than 2 points")

    xyz = positions(points)
    curve = _sample_shape(shape, 256)
    deviations = distances_to_polyline(xyz[:, :2], curve[:, :2])

    fig, (ax1, ax2) = plt.subplots(1, 2, figsize=(14, 6))

    if title is None:
        kind = "Arc" if isinstance(shape, Arc) else "Spline"
        title = (
            f"{kind} Fit over {len(points) - 1} Moves\n"
            f"Curve: {shape.length:.3f} mm | Max deviation: {deviations.max():.4f} mm"
        )

    fig.suptitle(title, fontsize=14, fontweight="bold")

    # Plot 1: Path
    ax1.plot(xyz[:, 0], xyz[:, 1], "o--", label="Linear moves", alpha=0.7)
    ax1.plot(curve[:, 0], curve[:, 1], linewidth=2, label="Fitted curve")
    if isinstance(shape, Arc):
        ax1.plot(shape.center_x, shape.center_y, "x", color="red", label="Center")
    ax1.set_xlabel("X (mm)")
    ax1.set_ylabel("Y (mm)")
    ax1.set_title("Toolpath")
    ax1.set_aspect("equal", adjustable="datalim")
    ax1.legend()
    ax1.grid(True, alpha=0.3)

    # Plot 2: Deviation per point
    ax2.bar(np.arange(len(deviations)), deviations, label="Deviation")
    if resolution_mm is not None:
        ax2.axhline(
            resolution_mm,
            color="red",
            linestyle="--",
            linewidth=2,
            label=f"Resolution ({resolution_mm:.3f} mm)",
        )
    ax2.set_xlabel("Point index")
    ax2.set_ylabel("Deviation (mm)")
    ax2.set_title("Deviation from Fitted Curve")
    ax2.legend()
    ax2.grid(True, alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()

    return fig


def plot_weld_summary(
    statistics: WeldStatistics,
    title: str = "Welding Summary",
    show: bool = True,
    save_path: Optional[str] = None,
) -> plt.Figure:
    """Plot the command counts and rejection counters of a welding run (single panel).

    Args:
        statistics: Statistics from GcodeWelder.process()
        title: Plot title
        show: Whether to display the plot
        save_path: Optional path to save the figure

    Returns:
        matplotlib Figure object
    """
    if statistics.moves_processed == 0:
        raise ValueError("Cannot plot statistics of an empty run")

    labels: List[str] = [
        "Moves in",
        "Commands out",
        "Shapes",
        "Linear",
        "Length limit",
        "Firmware",
    ]
    values = [
        statistics.moves_processed,
        statistics.commands_emitted,
        statistics.shapes_emitted,
        statistics.linear_moves_emitted,
        statistics.gcode_length_exceptions,
        statistics.firmware_compensations,
    ]

    fig, ax = plt.subplots(figsize=(12, 4))
    ax.bar(labels, values)
    ax.set_ylabel("Count")
    ax.set_title(f"{title} (compression {statistics.compression_ratio:.2f}x)")
    ax.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")

    if show:
        plt.show()

    return fig
