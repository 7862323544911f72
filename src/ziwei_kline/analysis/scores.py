"""Headline 0-100 scores derived from a chart and its trajectory."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Optional

import numpy as np

from kline_core.chart import NatalChart, Palace
from kline_core.continuity import clamp_range
from kline_core.models import Trajectory

__all__ = ["ChartScores", "MISSING_PALACE_SCORE", "build_scores", "palace_density_score"]


MISSING_PALACE_SCORE = 50

_DENSITY_BASE = 40
_MAIN_WEIGHT = 6
_SUB_WEIGHT = 2
_TRANSFORM_WEIGHT = 3


@dataclass(frozen=True, slots=True)
class ChartScores:
    total: int
    wealth: int
    career: int
    emotion: int
    health: int

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


def palace_density_score(palace: Optional[Palace]) -> int:
    """Score a palace by how many symbols it carries."""

    if palace is None:
        return MISSING_PALACE_SCORE
    raw = (
        _DENSITY_BASE
        + len(palace.main_stars) * _MAIN_WEIGHT
        + len(palace.sub_stars) * _SUB_WEIGHT
        + len(palace.transforms) * _TRANSFORM_WEIGHT
    )
    return int(clamp_range(raw, 0, 100))


def _round_half_up(value: float) -> int:
    return int(np.floor(value + 0.5))


def build_scores(chart: NatalChart, trajectory: Trajectory) -> ChartScores:
    luck = trajectory.luck_array()
    total = _round_half_up(float(luck.mean())) if luck.size else MISSING_PALACE_SCORE
    emotion = _round_half_up(
        (
            palace_density_score(chart.palace("夫妻"))
            + palace_density_score(chart.palace("交友"))
        )
        / 2
    )
    return ChartScores(
        total=int(clamp_range(total, 0, 100)),
        wealth=palace_density_score(chart.palace("财帛")),
        career=palace_density_score(chart.palace("官禄")),
        emotion=emotion,
        health=palace_density_score(chart.palace("疾厄")),
    )
