"""Saturating step and range limits applied to every produced value."""

from __future__ import annotations

import math

__all__ = ["clamp_delta", "clamp_range", "emit_integer"]


def clamp_range(value: float, lo: float, hi: float) -> float:
    """Restrict ``value`` to ``[lo, hi]``."""

    return min(hi, max(lo, value))


def clamp_delta(next_value: float, prev_value: float, max_delta: float) -> float:
    """Restrict the step from ``prev_value`` to ``[-max_delta, +max_delta]``."""

    return prev_value + clamp_range(next_value - prev_value, -max_delta, max_delta)


def emit_integer(
    value: float,
    previous: int | None,
    max_delta: float,
    lo: int,
    hi: int,
) -> int:
    """Quantise ``value`` so the published integers keep the same limits.

    Rounding may widen a step by up to one unit, so the integer step is
    limited to ``floor(max_delta)`` around the previously emitted integer.
    """

    rounded = int(math.floor(value + 0.5))
    if previous is not None:
        rounded = int(clamp_delta(rounded, previous, math.floor(max_delta)))
    return int(clamp_range(rounded, lo, hi))
