"""Per-decade regime classification (normal, leap, plateau)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from kline_core.config.settings import RegimeSettings
from kline_core.continuity import clamp_range
from kline_core.seeding import Channel, sample
from kline_core.traits import ChartTraits

__all__ = [
    "Regime",
    "RegimeController",
    "RegimeDecision",
    "decade_phase",
    "decade_start",
]


class Regime(str, Enum):
    NORMAL = "normal"
    LEAP = "leap"
    PLATEAU = "plateau"


@dataclass(frozen=True, slots=True)
class RegimeDecision:
    """Regime of one decade and the strength shaping its achievement effects."""

    decade_start: int
    regime: Regime
    strength: float
    roll: float


def decade_start(age: int) -> int:
    return (age // 10) * 10


def decade_phase(age: int) -> float:
    """Fraction of the decade elapsed at ``age`` (0.0 .. 0.9)."""

    return (age - decade_start(age)) / 10.0


class RegimeController:
    """Classify decades from the regime roll, palace signal and traits.

    The decision is a pure function of its inputs. Callers latch it at the
    first age of a decade and keep it for the remaining ages.
    """

    def __init__(self, settings: RegimeSettings | None = None) -> None:
        self.settings = settings or RegimeSettings()

    def leap_probability(self, palace_signal: float, traits: ChartTraits) -> float:
        cfg = self.settings
        return clamp_range(
            cfg.leap_base
            + max(0.0, palace_signal) * cfg.leap_signal_scale
            + traits.optimism * cfg.leap_optimism_scale,
            cfg.leap_min,
            cfg.leap_max,
        )

    def strength(
        self, palace_signal: float, transform_signal: float, traits: ChartTraits
    ) -> float:
        cfg = self.settings
        return clamp_range(
            cfg.strength_base
            + palace_signal * cfg.strength_palace
            + transform_signal * cfg.strength_transform
            + traits.optimism * cfg.strength_optimism
            - traits.risk * cfg.strength_risk,
            cfg.strength_min,
            cfg.strength_max,
        )

    def decide(
        self,
        seed: int,
        start: int,
        palace_signal: float,
        transform_signal: float,
        traits: ChartTraits,
    ) -> RegimeDecision:
        cfg = self.settings
        roll = sample(seed, Channel.REGIME, start)
        if roll < self.leap_probability(palace_signal, traits):
            regime = Regime.LEAP
        elif roll > cfg.plateau_roll and (
            palace_signal < cfg.plateau_palace_signal
            or transform_signal < cfg.plateau_transform_signal
        ):
            regime = Regime.PLATEAU
        else:
            regime = Regime.NORMAL
        return RegimeDecision(
            decade_start=start,
            regime=regime,
            strength=self.strength(palace_signal, transform_signal, traits),
            roll=roll,
        )
