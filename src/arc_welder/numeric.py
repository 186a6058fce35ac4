"""Fixed-precision number rendering and tolerance comparisons.

format_number() and digit_count() must always agree: the length oracle
predicts command lengths from digit_count() without building any text.

Examples:
    >>> format_number(-12.3456, 3)
    '-12.346'
    >>> digit_count(-12.3456, 3)
    5
    >>> format_number(-0.0001, 3)
    '0.000'
"""

# Default tolerance for floating point comparisons
ZERO_TOLERANCE = 1e-9


def round_to_precision(value: float, precision: int) -> float:
    """Round a value to a number of decimal places, normalizing negative zero."""
    rounded = round(value, precision)
    if rounded == 0:
        return 0.0
    return rounded


def format_number(value: float, precision: int) -> str:
    """Render a value with a fixed number of fractional digits.

    Values that round to zero are rendered without a minus sign.
    A precision of 0 renders an integer without a decimal point.
    """
    return f"{round_to_precision(value, precision):.{precision}f}"


def digit_count(value: float, precision: int) -> int:
    """Count the digits format_number() produces, excluding sign and decimal point."""
    integer_part = int(abs(round_to_precision(value, precision)))
    integer_digits = 1
    while integer_part >= 10:
        integer_part //= 10
        integer_digits += 1
    return integer_digits + precision


def is_negative(value: float, precision: int) -> bool:
    """True when format_number() renders a leading minus sign."""
    return round_to_precision(value, precision) < 0


def xyz_tolerance(precision: int) -> float:
    """Smallest coordinate difference representable at a precision."""
    return 10.0 ** -precision


def is_zero(value: float, tolerance: float = ZERO_TOLERANCE) -> bool:
    return abs(value) < tolerance


def is_equal(a: float, b: float, tolerance: float = ZERO_TOLERANCE) -> bool:
    return abs(a - b) < tolerance


def greater_than_or_equal(a: float, b: float, tolerance: float = ZERO_TOLERANCE) -> bool:
    return a > b or is_equal(a, b, tolerance)


def within_percent(value: float, reference: float, percent: float) -> bool:
    """Check that value deviates from a positive reference by at most percent."""
    if reference <= 0:
        return False
    return abs(value - reference) / reference <= percent / 100.0
