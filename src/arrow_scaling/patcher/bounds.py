"""Bounded float arithmetic for computed entry point values.

Entry point values are stored as float32 and the game misbehaves with
infinities and exact zeros, so every computed value is pulled into
[-INFINITY, -ZERO] ∪ [ZERO, INFINITY] by ensure_bounds().

power() and reciprocal() return IEEE-754 style results (inf, nan) where
Python would raise, so their output can always go through ensure_bounds().
"""

import math


INFINITY = float(0x10000)
ZERO = 1.0 / INFINITY


def _sign(x: float) -> int:
    """Sign of *x*; 0 for zero and NaN."""
    if x > 0:
        return 1
    if x < 0:
        return -1
    return 0


def is_infinity(x: float) -> bool:
    return abs(x) >= INFINITY


def is_zero(x: float) -> bool:
    return abs(x) <= ZERO


def ensure_bounds(x: float) -> float:
    """Clamp *x* into the representable range.

    Values at or beyond ±INFINITY become ±INFINITY, values within ZERO of 0
    become ±ZERO (plain ZERO for 0 itself), everything else is unchanged.
    """
    if is_infinity(x):
        return _sign(x) * INFINITY
    if is_zero(x) or math.isnan(x):
        sign = _sign(x)
        if sign == 0:
            return ZERO
        return sign * ZERO
    return float(x)


def power(base: float, exponent: float) -> float:
    if base == 0 and exponent < 0:
        return math.inf
    try:
        return math.pow(base, exponent)
    except OverflowError:
        if base < 0 and float(exponent).is_integer() and int(exponent) % 2:
            return -math.inf
        return math.inf
    except ValueError:
        # negative base with a fractional exponent
        return math.nan


def reciprocal(x: float) -> float:
    if x == 0:
        return math.copysign(math.inf, x)
    return 1.0 / x
