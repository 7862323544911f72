from __future__ import annotations

import pytest

from kline_core.continuity import clamp_delta, clamp_range, emit_integer


def test_clamp_range() -> None:
    assert clamp_range(5.0, 0.0, 10.0) == 5.0
    assert clamp_range(-1.0, 0.0, 10.0) == 0.0
    assert clamp_range(11.0, 0.0, 10.0) == 10.0


@pytest.mark.parametrize(
    ("proposed", "previous", "limit", "expected"),
    [
        (60.0, 50.0, 18.0, 60.0),
        (90.0, 50.0, 18.0, 68.0),
        (10.0, 50.0, 18.0, 32.0),
    ],
)
def test_clamp_delta(proposed: float, previous: float, limit: float, expected: float) -> None:
    assert clamp_delta(proposed, previous, limit) == pytest.approx(expected)


def test_emit_integer_rounds_half_up_without_history() -> None:
    assert emit_integer(41.5, None, 18.0, 0, 100) == 42
    assert emit_integer(41.49, None, 18.0, 0, 100) == 41


def test_emit_integer_never_widens_the_step() -> None:
    # 50 -> 68.6 would round to 69, one point beyond the float limit
    assert emit_integer(68.6, 50, 18.0, 0, 100) == 68
    assert emit_integer(40.4, 50, 9.7, 0, 100) == 41


def test_emit_integer_respects_the_range() -> None:
    assert emit_integer(104.0, 99, 18.0, 0, 100) == 100
    assert emit_integer(87.0, 80, 18.0, 0, 84) == 84
    assert emit_integer(-3.0, None, 18.0, 0, 100) == 0
