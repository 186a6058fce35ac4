"""Command text formatting for fitted shapes and linear moves.

Word order is fixed: X, Y, [Z], [I, J], [E], [F]. Every shape formatter here
has a counterpart in gcode_length that predicts its output length.
"""

from dataclasses import dataclass

from arc_welder.models.config import OutputOptions
from arc_welder.models.point import SampledPoint
from arc_welder.models.shapes import Arc, Spline
from arc_welder.numeric import format_number, greater_than_or_equal, is_equal

ARC_CLOCKWISE_CODE = "G2"
ARC_COUNTER_CLOCKWISE_CODE = "G3"
SPLINE_CODE = "G5"
LINEAR_CODE = "G1"

# F is an integer word
FEED_RATE_PRECISION = 0


@dataclass(frozen=True)
class OptionalWords:
    """Presence and values of the optional Z, E and F words of a shape command."""

    has_z: bool
    has_e: bool
    e: float
    has_f: bool
    f: float


def optional_words(
    start_point: SampledPoint,
    end_point: SampledPoint,
    e_relative: float,
    options: OutputOptions,
    z_allowed: bool,
) -> OptionalWords:
    """
    Decide which optional words a shape command carries.

    Args:
        start_point: Shape start position
        end_point: Shape end position
        e_relative: Extrusion delta accumulated over the shape
        options: Output precision options
        z_allowed: Whether this shape kind may emit Z at all

    Returns:
        OptionalWords describing Z, E and F
    """
    e = e_relative if end_point.is_extruder_relative else end_point.e_offset
    f = 0.0 if start_point.f == end_point.f else end_point.f
    has_z = z_allowed and not is_equal(start_point.z, end_point.z, options.xyz_tolerance)
    return OptionalWords(
        has_z=has_z,
        has_e=e_relative != 0,
        e=e,
        has_f=greater_than_or_equal(f, 1),
        f=f,
    )


def _word(letter: str, value: float, precision: int) -> str:
    return f" {letter}{format_number(value, precision)}"


def format_arc(arc: Arc, e_relative: float, options: OutputOptions) -> str:
    """
    Render an arc as a G2 (clockwise) or G3 (counter-clockwise) command.

    I and J are always emitted, even when one of them is zero.

    Args:
        arc: Arc to render
        e_relative: Extrusion delta accumulated over the arc
        options: Output precision options

    Returns:
        Command text without trailing whitespace, e.g.
        "G3 X0.000 Y10.000 I-10.000 J0.000 E1.25000"
    """
    words = optional_words(
        arc.start_point, arc.end_point, e_relative, options, options.allow_3d_shapes
    )
    xyz = options.xyz_precision

    gcode = ARC_CLOCKWISE_CODE if arc.is_clockwise else ARC_COUNTER_CLOCKWISE_CODE
    gcode += _word("X", arc.end_point.x, xyz)
    gcode += _word("Y", arc.end_point.y, xyz)
    if words.has_z:
        gcode += _word("Z", arc.end_point.z, xyz)
    gcode += _word("I", arc.i, xyz)
    gcode += _word("J", arc.j, xyz)
    if words.has_e:
        gcode += _word("E", words.e, options.e_precision)
    if words.has_f:
        gcode += _word("F", words.f, FEED_RATE_PRECISION)
    return gcode


def format_spline(spline: Spline, e_relative: float, options: OutputOptions) -> str:
    """Render a spline as a G5 command.

    The control offsets (I, J, P, Q) are carried by the Spline but not
    emitted.
    """
    words = optional_words(spline.start_point, spline.end_point, e_relative, options, True)
    xyz = options.xyz_precision

    gcode = SPLINE_CODE
    gcode += _word("X", spline.end_point.x, xyz)
    gcode += _word("Y", spline.end_point.y, xyz)
    if words.has_z:
        gcode += _word("Z", spline.end_point.z, xyz)
    if words.has_e:
        gcode += _word("E", words.e, options.e_precision)
    if words.has_f:
        gcode += _word("F", words.f, FEED_RATE_PRECISION)
    return gcode


def format_linear(point: SampledPoint, previous: SampledPoint, options: OutputOptions) -> str:
    """Render the linear move from previous to point as a G1 command.

    Used for moves that were not absorbed into any shape.
    """
    xyz = options.xyz_precision

    gcode = LINEAR_CODE
    gcode += _word("X", point.x, xyz)
    gcode += _word("Y", point.y, xyz)
    if not is_equal(point.z, previous.z, options.xyz_tolerance):
        gcode += _word("Z", point.z, xyz)
    if point.e_relative != 0:
        e = point.e_relative if point.is_extruder_relative else point.e_offset
        gcode += _word("E", e, options.e_precision)
    if point.f != previous.f and greater_than_or_equal(point.f, 1):
        gcode += _word("F", point.f, FEED_RATE_PRECISION)
    return gcode
