"""Human-readable driver tags attached to each trajectory point."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from kline_core.regime import Regime, decade_start

__all__ = [
    "DriverAnnotator",
    "DriverContext",
    "TAG_DECADE",
    "TAG_CYCLE",
    "TAG_SWITCH",
    "TAG_STAY",
    "TAG_BASELINE",
    "TAG_TARGET",
    "TAG_SHOCK",
    "TAG_VOLATILITY",
    "TAG_SPARKLE",
    "TAG_MOMENTUM",
    "REGIME_TAGS",
]


TAG_DECADE = "大限"
TAG_CYCLE = "运程"
TAG_SWITCH = "转宫"
TAG_STAY = "坐守"
TAG_BASELINE = "基线"
TAG_TARGET = "目标"
TAG_SHOCK = "冲击"
TAG_VOLATILITY = "波动"
TAG_SPARKLE = "惊喜"
TAG_MOMENTUM = "惯性"

REGIME_TAGS = {
    Regime.LEAP: "跃迁期",
    Regime.PLATEAU: "平台期",
}


@dataclass(frozen=True, slots=True)
class DriverContext:
    """Forces that shaped the luck value at one age."""

    age: int
    palace: str
    decade_range: Optional[str]
    palace_changed: bool
    baseline: float
    target: float
    shock: float
    volatility: float
    sparkle: float
    momentum: float
    regime: Regime = Regime.NORMAL


def _signed(value: float) -> str:
    rounded = int(round(value))
    return f"+{rounded}" if rounded > 0 else str(rounded)


class DriverAnnotator:
    """Summarise the dominant forces of an age as short tags.

    Tags are presentation metadata only and never feed back into the
    simulation.
    """

    def phase_label(self, context: DriverContext) -> str:
        if context.decade_range:
            return f"{TAG_DECADE} {context.decade_range}"
        start = decade_start(context.age)
        return f"{TAG_CYCLE} {start}-{start + 9}"

    def annotate(self, context: DriverContext) -> Tuple[str, ...]:
        switched = context.palace_changed and context.age != 0
        tags = [
            self.phase_label(context),
            f"{TAG_SWITCH if switched else TAG_STAY} {context.palace}",
            f"{TAG_BASELINE} {int(round(context.baseline))}",
            f"{TAG_TARGET} {int(round(context.target))}",
        ]
        if context.shock != 0:
            tags.append(f"{TAG_SHOCK} {_signed(context.shock)}")
        else:
            tags.append(f"{TAG_VOLATILITY} {int(round(context.volatility))}")
        if context.sparkle != 0:
            tags.append(f"{TAG_SPARKLE} +{int(round(context.sparkle))}")
        else:
            tags.append(f"{TAG_MOMENTUM} {_signed(context.momentum)}")
        regime_tag = REGIME_TAGS.get(context.regime)
        if regime_tag is not None:
            tags.append(regime_tag)
        return tuple(tags)
