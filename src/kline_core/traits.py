"""Per-chart personality traits drawn from the trait channel."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from kline_core.seeding import Channel, sample

__all__ = ["ArcType", "ChartTraits", "derive_traits"]


class ArcType(str, Enum):
    """Shape of the achievement arc over a life."""

    EARLY = "early"
    BALANCED = "balanced"
    LATE = "late"


_ARC_ORDER = (ArcType.EARLY, ArcType.BALANCED, ArcType.LATE)

# Trait channel indices.
_RISK = 0
_OPTIMISM = 1
_AMBITION = 2
_RESILIENCE = 3
_PATIENCE = 4
_ARC = 5


@dataclass(frozen=True, slots=True)
class ChartTraits:
    """Global traits in ``[0, 1)`` shared by every age of one run."""

    risk: float
    optimism: float
    ambition: float
    resilience: float
    patience: float
    arc: ArcType


def derive_traits(seed: int) -> ChartTraits:
    arc_index = int(sample(seed, Channel.TRAIT, _ARC) * len(_ARC_ORDER))
    return ChartTraits(
        risk=sample(seed, Channel.TRAIT, _RISK),
        optimism=sample(seed, Channel.TRAIT, _OPTIMISM),
        ambition=sample(seed, Channel.TRAIT, _AMBITION),
        resilience=sample(seed, Channel.TRAIT, _RESILIENCE),
        patience=sample(seed, Channel.TRAIT, _PATIENCE),
        arc=_ARC_ORDER[min(arc_index, len(_ARC_ORDER) - 1)],
    )
