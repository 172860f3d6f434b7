# rounding.py
import math


def clamp(value: float, lower_bound: float, upper_bound: float) -> float:
    """
    Restrict `value` to stay within [lower_bound, upper_bound].
    """
    return max(lower_bound, min(upper_bound, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """
    Round halves upwards (2.5 -> 3.0, 7.854 -> 7.9 at digits=1).

    Python's round() rounds halves to even, which would shift impact points
    and emissions by one unit on exact .5 values.
    """
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
