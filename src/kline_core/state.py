"""Rolling state of one simulation run."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional

from kline_core.regime import RegimeDecision

__all__ = ["SimulationState"]


@dataclass(slots=True)
class SimulationState:
    """Values carried from age ``n - 1`` (and ``n - 2``) into age ``n``.

    A fresh instance is created for every run and discarded afterwards.
    """

    cap: float
    floor: float
    prev_luck: float
    prev_prev_luck: float
    achievement: float
    prev_palace: Optional[str] = None
    emitted_luck: Optional[int] = None
    emitted_achievement: Optional[int] = None
    regimes: Dict[int, RegimeDecision] = field(default_factory=dict)

    def advance_luck(self, value: float) -> None:
        self.prev_prev_luck = self.prev_luck
        self.prev_luck = value

    @property
    def momentum_delta(self) -> float:
        return self.prev_luck - self.prev_prev_luck
