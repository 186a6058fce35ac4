"""Exact command length prediction for fitted shapes.

Lengths are computed from digit counts instead of rendering the command, so
the accumulator can enforce max_gcode_length on every candidate cheaply. Each
function here must agree exactly with its formatter in gcode_format.
"""

from arc_welder.gcode_format import FEED_RATE_PRECISION, optional_words
from arc_welder.models.config import OutputOptions
from arc_welder.models.shapes import Arc, Spline
from arc_welder.numeric import digit_count, is_negative

# Two-character command code, e.g. "G2"
COMMAND_CODE_LENGTH = 2


def word_length(value: float, precision: int) -> int:
    """
    Length of one " <letter><number>" word.

    Counts the separating space, the parameter letter, the digits, the
    decimal point (absent at precision 0) and any minus sign.
    """
    return (
        2
        + digit_count(value, precision)
        + (1 if precision > 0 else 0)
        + (1 if is_negative(value, precision) else 0)
    )


def arc_gcode_length(arc: Arc, e_relative: float, options: OutputOptions) -> int:
    """Predict len(format_arc(arc, e_relative, options))."""
    words = optional_words(
        arc.start_point, arc.end_point, e_relative, options, options.allow_3d_shapes
    )
    xyz = options.xyz_precision

    length = COMMAND_CODE_LENGTH
    length += word_length(arc.end_point.x, xyz) + word_length(arc.end_point.y, xyz)
    if words.has_z:
        length += word_length(arc.end_point.z, xyz)
    length += word_length(arc.i, xyz) + word_length(arc.j, xyz)
    if words.has_e:
        length += word_length(words.e, options.e_precision)
    if words.has_f:
        length += word_length(words.f, FEED_RATE_PRECISION)
    return length


def spline_gcode_length(spline: Spline, e_relative: float, options: OutputOptions) -> int:
    """Predict len(format_spline(spline, e_relative, options))."""
    words = optional_words(spline.start_point, spline.end_point, e_relative, options, True)
    xyz = options.xyz_precision

    length = COMMAND_CODE_LENGTH
    length += word_length(spline.end_point.x, xyz) + word_length(spline.end_point.y, xyz)
    if words.has_z:
        length += word_length(spline.end_point.z, xyz)
    if words.has_e:
        length += word_length(words.e, options.e_precision)
    if words.has_f:
        length += word_length(words.f, FEED_RATE_PRECISION)
    return length
