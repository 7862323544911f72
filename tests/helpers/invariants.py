"""Assertions for the output contract of a trajectory."""

from __future__ import annotations

from kline_core.models import AGE_COUNT, Trajectory


def assert_trajectory_invariants(trajectory: Trajectory) -> None:
    assert len(trajectory) == AGE_COUNT
    assert [point.age for point in trajectory] == list(range(AGE_COUNT))
    assert len(trajectory.achievement_step_limits) == AGE_COUNT

    previous = None
    for index, point in enumerate(trajectory):
        assert isinstance(point.luck, int) and 0 <= point.luck <= 100
        assert isinstance(point.achievement, int) and 0 <= point.achievement <= 100
        assert 0.0 <= point.confidence <= 1.0
        assert point.achievement <= trajectory.cap
        assert point.drivers and all(isinstance(tag, str) and tag for tag in point.drivers)
        if previous is not None:
            assert abs(point.luck - previous.luck) <= trajectory.max_luck_delta
            assert (
                abs(point.achievement - previous.achievement)
                <= trajectory.achievement_step_limits[index]
            )
        previous = point
