"""Normalisation-based achievement policy.

This is the historical variant of the achievement signal: instead of being
driven by decade regimes it is derived after the luck pass from the spread
of the luck series, palace switches and sparkle breakthroughs. It is selected
with ``EngineSettings(achievement_policy="normalized")``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np

from kline_core.config.settings import NormalizedSettings
from kline_core.continuity import clamp_delta, clamp_range
from kline_core.seeding import Channel, sample, sample_centered

__all__ = ["NormalizedAchievement", "normalized_achievement"]


# Channel indices reserved for this policy.
_AMBITION = 10
_RESILIENCE = 11
_PATIENCE = 12
_CAP_JITTER = 10
_LEVEL_JITTER = 11


@dataclass(frozen=True, slots=True)
class NormalizedAchievement:
    values: Tuple[float, ...]
    cap: int
    max_step: float


def normalized_achievement(
    luck: Sequence[float],
    palace_switches: Sequence[bool],
    sparkles: Sequence[bool],
    seed: int,
    settings: NormalizedSettings | None = None,
) -> NormalizedAchievement:
    """Derive an achievement series from a finished luck series."""

    cfg = settings or NormalizedSettings()
    series = np.asarray(luck, dtype=float)
    if series.size == 0:
        return NormalizedAchievement(values=(), cap=int(cfg.cap_min), max_step=cfg.max_step_base)

    mean = float(series.mean())
    spread = float(series.std()) or 1.0

    ambition = cfg.ambition_base + sample(seed, Channel.TRAIT, _AMBITION) * cfg.ambition_span
    resilience = cfg.resilience_base + sample(seed, Channel.TRAIT, _RESILIENCE) * cfg.resilience_span
    patience = cfg.patience_base + sample(seed, Channel.TRAIT, _PATIENCE) * cfg.patience_span

    cap = int(
        round(
            clamp_range(
                cfg.cap_base
                + (mean - cfg.cap_mean_pivot) * cfg.cap_mean_scale
                + sample_centered(seed, Channel.INITIAL, _CAP_JITTER) * cfg.cap_jitter,
                cfg.cap_min,
                cfg.cap_max,
            )
        )
    )
    level = clamp_range(
        cfg.level_base
        + (mean - cfg.level_mean_pivot) * cfg.level_mean_scale
        + sample_centered(seed, Channel.INITIAL, _LEVEL_JITTER) * cfg.level_jitter,
        cfg.level_min,
        min(cfg.level_max, cap),
    )
    max_step = cfg.max_step_base + ambition * cfg.max_step_ambition

    samples = series.tolist()
    values: list[float] = []
    for index, value in enumerate(samples):
        prev = samples[index - 1] if index > 0 else value
        positive = max(0.0, (value - cfg.luck_pivot) / cfg.positive_span)
        negative = max(0.0, (cfg.luck_pivot - value) / cfg.negative_span)
        momentum = clamp_range((value - prev) / cfg.momentum_divisor, -cfg.momentum_limit, cfg.momentum_limit)
        switched = 1.0 if index < len(palace_switches) and palace_switches[index] else 0.0
        sparkle = index < len(sparkles) and sparkles[index]

        growth_rate = clamp_range(
            (cfg.growth_base + (spread / cfg.growth_spread_divisor) * cfg.growth_spread_scale)
            * ambition
            * (cfg.growth_positive_base + positive * cfg.growth_positive_scale),
            cfg.growth_min,
            cfg.growth_max,
        )
        headroom = max(0.0, cap - level)
        drift = headroom * growth_rate
        setback = (
            (level - cfg.setback_floor)
            * (cfg.setback_base + negative * cfg.setback_negative + switched * cfg.setback_switch)
            * (cfg.setback_resilience - resilience)
        )
        breakthrough = (
            clamp_range(
                cfg.breakthrough_base + positive * cfg.breakthrough_positive,
                cfg.breakthrough_base,
                cfg.breakthrough_max,
            )
            if sparkle
            else 0.0
        )
        noise = sample_centered(seed, Channel.ACHIEVEMENT_NOISE, index) * (
            cfg.noise_base + (1.0 - resilience) * cfg.noise_resilience
        )
        brake = (
            (1.0 - patience) * (cfg.brake_base - headroom / cfg.brake_divisor)
            if headroom < cfg.brake_headroom
            else 0.0
        )

        proposed = (
            level
            + drift
            - setback
            + momentum * (1.0 + positive * cfg.momentum_positive_scale)
            + breakthrough
            + noise
            - brake
        )
        level = clamp_range(clamp_delta(proposed, level, max_step), 0.0, float(cap))
        values.append(level)

    return NormalizedAchievement(values=tuple(values), cap=cap, max_step=max_step)
