"""Basic usage example.

This example demonstrates:
- Building sampled points for a perimeter with a rounded corner
- Welding the linear moves into arcs
- Displaying the commands written and the run statistics
- Saving diagnostic plots of the fit

This is the simplest way to use the arc welder.
"""

import logging
import math
from pathlib import Path

from arc_welder import ARC, GcodeWelder, SampledPoint, ShapeAccumulator, WelderConfig
from arc_welder.visualize import plot_shape_fit, plot_weld_summary


def build_perimeter():
    """Straight edge, a 90 degree rounded corner of radius 5 mm, then another edge."""
    start = SampledPoint(x=0.0, y=0.0, z=0.2, f=1800.0)
    points = [start]

    # Straight edge along X (1 mm moves)
    for k in range(1, 11):
        points.append(points[-1].moved_to(float(k), 0.0, e_relative=0.0333))

    # Rounded corner sampled every 5 degrees around (10, 5)
    for k in range(1, 19):
        angle = math.radians(-90.0 + 5.0 * k)
        x = 10.0 + 5.0 * math.cos(angle)
        y = 5.0 + 5.0 * math.sin(angle)
        distance = math.hypot(x - points[-1].x, y - points[-1].y)
        points.append(points[-1].moved_to(x, y, e_relative=0.0333 * distance))

    # Straight edge along Y
    for k in range(1, 11):
        points.append(points[-1].moved_to(15.0, 5.0 + float(k), e_relative=0.0333))

    return points


def main():
    """Weld a simple perimeter and show the result."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    print("=" * 80)
    print("BASIC ARC WELDER USAGE")
    print("=" * 80)

    points = build_perimeter()

    # resolution_mm: Maximum deviation between the moves and the arc
    # max_gcode_length: 0 means unlimited
    config = WelderConfig(resolution_mm=0.05, path_tolerance_percent=5.0)

    print("\nInput Configuration:")
    print(f"  Resolution: {config.resolution_mm} mm")
    print(f"  Path tolerance: {config.path_tolerance_percent}%")
    print(f"  Moves: {len(points) - 1} linear moves to process\n")

    welder = GcodeWelder(config)
    commands = welder.process(points)

    print("Output Commands:")
    print("  " + "-" * 70)
    for command in commands:
        print(f"  {command}")

    statistics = welder.statistics
    print("\nSummary:")
    print("  " + "-" * 70)
    print(f"  Moves in:       {statistics.moves_processed}")
    print(f"  Commands out:   {statistics.commands_emitted}")
    print(f"  Arcs:           {statistics.shapes_emitted}")
    print(f"  Compression:    {statistics.compression_ratio:.2f}x")

    print("\n" + "=" * 80)
    print("GENERATING PLOTS")
    print("=" * 80)

    # Refit the corner on its own to plot it
    corner = points[10:29]
    accumulator = ShapeAccumulator(ARC, config)
    for point in corner:
        if not accumulator.try_add_point(point):
            break

    output_dir = Path(__file__).parent
    if accumulator.shape is not None:
        fit_path = output_dir / "basic_usage_fit.png"
        plot_shape_fit(
            accumulator.points,
            accumulator.shape,
            resolution_mm=config.resolution_mm,
            show=False,
            save_path=str(fit_path),
        )
        print(f"  Plot saved: {fit_path}")

    summary_path = output_dir / "basic_usage_summary.png"
    plot_weld_summary(statistics, show=False, save_path=str(summary_path))
    print(f"  Plot saved: {summary_path}")
    print()


if __name__ == "__main__":
    main()
