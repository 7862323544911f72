"""Output records of the trajectory engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Tuple, overload

import numpy as np

from kline_core.traits import ChartTraits

__all__ = ["AGE_COUNT", "MAX_AGE", "Trajectory", "TrajectoryPoint"]


MAX_AGE = 100
AGE_COUNT = MAX_AGE + 1


@dataclass(frozen=True, slots=True)
class TrajectoryPoint:
    """Luck, achievement and display metadata for one integer age."""

    age: int
    luck: int
    achievement: int
    confidence: float
    drivers: Tuple[str, ...]

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["drivers"] = list(self.drivers)
        return payload


@dataclass(frozen=True)
class Trajectory:
    """Ordered points for ages ``0..100`` plus run metadata.

    ``achievement_step_limits[i]`` bounds ``|achievement[i] - achievement[i - 1]|``
    and ``max_luck_delta`` bounds the luck steps.
    """

    points: Tuple[TrajectoryPoint, ...]
    seed: int
    cap: int
    floor: float
    baseline: float
    policy: str
    traits: ChartTraits
    max_luck_delta: float
    achievement_step_limits: Tuple[float, ...]
    regimes: Mapping[int, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", tuple(self.points))
        object.__setattr__(self, "achievement_step_limits", tuple(self.achievement_step_limits))
        object.__setattr__(self, "regimes", MappingProxyType(dict(self.regimes)))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[TrajectoryPoint]:
        return iter(self.points)

    @overload
    def __getitem__(self, index: int) -> TrajectoryPoint: ...

    @overload
    def __getitem__(self, index: slice) -> Tuple[TrajectoryPoint, ...]: ...

    def __getitem__(self, index):
        return self.points[index]

    def regime_at(self, age: int) -> str:
        return self.regimes[(age // 10) * 10]

    def luck_array(self) -> np.ndarray:
        return np.fromiter((point.luck for point in self.points), dtype=float, count=len(self.points))

    def achievement_array(self) -> np.ndarray:
        return np.fromiter(
            (point.achievement for point in self.points), dtype=float, count=len(self.points)
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "cap": self.cap,
            "floor": self.floor,
            "baseline": self.baseline,
            "policy": self.policy,
            "traits": {
                "risk": self.traits.risk,
                "optimism": self.traits.optimism,
                "ambition": self.traits.ambition,
                "resilience": self.traits.resilience,
                "patience": self.traits.patience,
                "arc": self.traits.arc.value,
            },
            "regimes": {str(start): regime for start, regime in sorted(self.regimes.items())},
            "points": [point.as_dict() for point in self.points],
        }
