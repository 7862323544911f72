from __future__ import annotations

import pytest

from kline_core.config.settings import EngineSettings, NormalizedSettings
from kline_core.drivers import REGIME_TAGS
from kline_core.normalized import normalized_achievement
from kline_core.simulator import TrajectorySimulator, generate_trajectory
from tests.helpers import (
    assert_trajectory_invariants,
    build_chart,
    build_rich_chart,
    strong_chart,
    weak_chart,
)


@pytest.fixture
def simulator() -> TrajectorySimulator:
    return TrajectorySimulator(EngineSettings(achievement_policy="normalized"))


@pytest.mark.parametrize("factory", [build_chart, build_rich_chart, strong_chart, weak_chart])
def test_normalized_policy_keeps_the_output_contract(simulator, factory) -> None:
    trajectory = simulator.run(factory())

    assert trajectory.policy == "normalized"
    assert_trajectory_invariants(trajectory)


def test_normalized_policy_forces_normal_regimes(simulator) -> None:
    trajectory = simulator.run(build_rich_chart())
    tags = set(REGIME_TAGS.values())

    assert set(trajectory.regimes.values()) == {"normal"}
    assert all(not tags & set(point.drivers) for point in trajectory)


def test_luck_series_does_not_depend_on_the_policy(simulator) -> None:
    chart = build_rich_chart()

    normalized = simulator.run(chart)
    regime = generate_trajectory(chart)

    assert normalized.luck_array().tolist() == regime.luck_array().tolist()
    assert normalized.seed == regime.seed


def test_policy_can_be_selected_through_overrides() -> None:
    settings = EngineSettings().with_overrides({"achievement_policy": "normalized"})

    trajectory = generate_trajectory(build_chart(), settings=settings)

    assert trajectory.policy == "normalized"
    cfg = settings.normalized
    assert cfg.cap_min <= trajectory.cap <= cfg.cap_max


def test_direct_call_is_deterministic_and_bounded() -> None:
    luck = [50 + (age % 20) for age in range(101)]
    switches = [age % 10 == 0 and age > 0 for age in range(101)]
    sparkles = [age in (25, 60) for age in range(101)]

    first = normalized_achievement(luck, switches, sparkles, 99)
    second = normalized_achievement(luck, switches, sparkles, 99)

    assert first == second
    assert len(first.values) == 101
    assert all(0.0 <= value <= first.cap for value in first.values)
    steps = [abs(b - a) for a, b in zip(first.values, first.values[1:])]
    assert max(steps) <= first.max_step + 1e-9


def test_empty_luck_series_yields_no_values() -> None:
    result = normalized_achievement([], [], [], 1)
    settings = NormalizedSettings()

    assert result.values == ()
    assert result.cap == int(settings.cap_min)
