from __future__ import annotations

from dataclasses import replace

import pytest

from kline_core.drivers import (
    REGIME_TAGS,
    TAG_BASELINE,
    TAG_CYCLE,
    TAG_DECADE,
    TAG_MOMENTUM,
    TAG_SHOCK,
    TAG_SPARKLE,
    TAG_STAY,
    TAG_SWITCH,
    TAG_TARGET,
    TAG_VOLATILITY,
    DriverAnnotator,
    DriverContext,
)
from kline_core.regime import Regime


@pytest.fixture
def context() -> DriverContext:
    return DriverContext(
        age=34,
        palace="财帛",
        decade_range="32-41",
        palace_changed=False,
        baseline=61.4,
        target=66.6,
        shock=0.0,
        volatility=9.3,
        sparkle=0.0,
        momentum=-1.6,
    )


def test_quiet_age_tags(context: DriverContext) -> None:
    tags = DriverAnnotator().annotate(context)

    assert tags == (
        f"{TAG_DECADE} 32-41",
        f"{TAG_STAY} 财帛",
        f"{TAG_BASELINE} 61",
        f"{TAG_TARGET} 67",
        f"{TAG_VOLATILITY} 9",
        f"{TAG_MOMENTUM} -2",
    )


def test_switch_with_shock_and_sparkle(context: DriverContext) -> None:
    tags = DriverAnnotator().annotate(
        replace(context, palace_changed=True, shock=4.6, sparkle=7.2, regime=Regime.LEAP)
    )

    assert tags[1] == f"{TAG_SWITCH} 财帛"
    assert f"{TAG_SHOCK} +5" in tags
    assert f"{TAG_SPARKLE} +7" in tags
    assert tags[-1] == REGIME_TAGS[Regime.LEAP]


def test_negative_shock_keeps_its_sign(context: DriverContext) -> None:
    tags = DriverAnnotator().annotate(replace(context, palace_changed=True, shock=-8.2))

    assert f"{TAG_SHOCK} -8" in tags


def test_age_zero_is_never_a_switch(context: DriverContext) -> None:
    tags = DriverAnnotator().annotate(replace(context, age=0, palace_changed=True))

    assert tags[1] == f"{TAG_STAY} 财帛"


def test_missing_range_falls_back_to_the_age_cycle(context: DriverContext) -> None:
    tags = DriverAnnotator().annotate(replace(context, decade_range=None, regime=Regime.PLATEAU))

    assert tags[0] == f"{TAG_CYCLE} 30-39"
    assert tags[-1] == REGIME_TAGS[Regime.PLATEAU]


def test_normal_regime_adds_no_tag(context: DriverContext) -> None:
    tags = DriverAnnotator().annotate(context)

    assert not set(REGIME_TAGS.values()) & set(tags)
