"""Decade-level summary of the luck curve: rising, falling and stable spans."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Tuple

import numpy as np

from kline_core.models import MAX_AGE, Trajectory

__all__ = [
    "DecadeStats",
    "TrajectoryPhases",
    "build_phases",
    "decade_stats",
    "default_label",
]


RISE_THRESHOLD = 2.0
FALL_THRESHOLD = -2.0
MAX_RISING = 3
MAX_FALLING = 2

LabelFormatter = Callable[[int, int], str]


def default_label(start: int, end: int) -> str:
    return f"{start}-{end}岁"


@dataclass(frozen=True, slots=True)
class DecadeStats:
    start: int
    end: int
    mean: float
    variance: float


@dataclass(frozen=True, slots=True)
class TrajectoryPhases:
    rising: Tuple[str, ...]
    falling: Tuple[str, ...]
    stable: str

    def as_dict(self) -> Dict[str, object]:
        return {"rising": list(self.rising), "falling": list(self.falling), "stable": self.stable}


def decade_stats(trajectory: Trajectory) -> List[DecadeStats]:
    """Mean and population variance of luck per decade; the last decade ends at 100."""

    ages = np.fromiter((point.age for point in trajectory), dtype=int, count=len(trajectory))
    luck = trajectory.luck_array()
    stats: List[DecadeStats] = []
    for start in range(0, 100, 10):
        end = MAX_AGE if start == 90 else start + 9
        window = luck[(ages >= start) & (ages <= end)]
        if window.size:
            mean = float(window.mean())
            variance = float(window.var())
        else:
            mean = 0.0
            variance = 0.0
        stats.append(DecadeStats(start, end, mean, variance))
    return stats


def build_phases(trajectory: Trajectory, *, label: LabelFormatter = default_label) -> TrajectoryPhases:
    stats = decade_stats(trajectory)
    deltas = [(current, current.mean - previous.mean) for previous, current in zip(stats, stats[1:])]

    # sorted() is stable, so ties keep chronological order.
    rising = sorted((item for item in deltas if item[1] > RISE_THRESHOLD), key=lambda item: -item[1])
    falling = sorted((item for item in deltas if item[1] < FALL_THRESHOLD), key=lambda item: item[1])
    stable = min(stats, key=lambda item: item.variance) if stats else None

    return TrajectoryPhases(
        rising=tuple(label(item.start, item.end) for item, _ in rising[:MAX_RISING]),
        falling=tuple(label(item.start, item.end) for item, _ in falling[:MAX_FALLING]),
        stable=label(stable.start, stable.end) if stable is not None else "",
    )
