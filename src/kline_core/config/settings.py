"""Tunable constants of the trajectory engine.

Every weight, threshold and blending coefficient lives here as a named,
overridable field. Correctness of the engine only depends on the bound,
continuity and determinism guarantees, not on the particular values, so the
defaults are product-tuned heuristics rather than derived quantities.
"""

from __future__ import annotations

from collections.abc import Iterable as IterableABC
from collections.abc import Mapping as MappingABC
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Tuple

from kline_core.catalog import StarCatalog, catalog_from_mapping, default_catalog

__all__ = [
    "ACHIEVEMENT_POLICIES",
    "POLICY_NORMALIZED",
    "POLICY_REGIME",
    "AchievementSettings",
    "AggregationSettings",
    "EngineSettings",
    "LuckSettings",
    "NormalizedSettings",
    "RegimeSettings",
    "ScoreWeights",
]


POLICY_REGIME = "regime"
POLICY_NORMALIZED = "normalized"
ACHIEVEMENT_POLICIES: Tuple[str, ...] = (POLICY_REGIME, POLICY_NORMALIZED)


@dataclass(frozen=True)
class ScoreWeights:
    """Palace scorer weights (main stars count roughly three sub stars)."""

    main_good: float = 9.0
    main_bad: float = -9.0
    sub_good: float = 3.0
    sub_bad: float = -3.0
    transform_good: float = 7.0
    transform_bad: float = -10.0
    # unweighted goodness used by the simulator
    goodness_transform_good: float = 1.2
    goodness_transform_bad: float = 1.6


@dataclass(frozen=True)
class AggregationSettings:
    """Baseline and luck floor derived from the key palaces."""

    key_palaces: Tuple[str, ...] = ("命宫", "财帛", "官禄", "迁移", "福德")
    neutral_baseline: float = 60.0
    transform_good_weight: float = 0.8
    transform_bad_weight: float = 1.2
    goodness_scale: float = 3.0
    optimism_scale: float = 6.0
    baseline_min: float = 42.0
    baseline_max: float = 82.0
    floor_base: float = 14.0
    floor_goodness_scale: float = 2.0
    floor_optimism_scale: float = 3.0
    floor_min: float = 12.0
    floor_max: float = 30.0


@dataclass(frozen=True)
class LuckSettings:
    """Mean-reverting luck walk."""

    ceiling: float = 98.0
    max_delta: float = 18.0
    initial_jitter: float = 8.0
    initial_max: float = 92.0
    # target
    target_goodness_scale: float = 6.0
    target_score_scale: float = 0.06
    target_score_limit: float = 6.0
    target_floor_margin: float = 6.0
    target_max: float = 96.0
    # volatility
    volatility_base: float = 6.0
    volatility_per_symbol: float = 1.1
    volatility_per_bad_transform: float = 1.2
    volatility_negative_goodness: float = 0.8
    volatility_min: float = 6.0
    volatility_max: float = 24.0
    risk_volatility_base: float = 0.85
    risk_volatility_scale: float = 0.6
    noise_primary: float = 1.25
    noise_secondary: float = 0.55
    # momentum
    momentum_factor: float = 0.35
    momentum_limit: float = 5.0
    # palace switch shock
    shock_goodness_scale: float = 2.2
    shock_base_min: float = -10.0
    shock_base_max: float = 12.0
    shock_jitter: float = 6.0
    shock_min: float = -12.0
    shock_max: float = 14.0
    # sparkle
    sparkle_threshold: float = 0.988
    sparkle_optimism_scale: float = 0.006
    sparkle_base: float = 6.0
    sparkle_goodness_scale: float = 2.0
    sparkle_max: float = 16.0
    # blending coefficient
    alpha_min: float = 0.18
    alpha_max: float = 0.32
    alpha_goodness_scale: float = 0.02
    alpha_goodness_limit: float = 0.12
    alpha_risk_scale: float = 0.05
    # display confidence
    confidence_base: float = 0.56
    confidence_symbol_divisor: float = 28.0
    confidence_symbol_limit: float = 0.18
    confidence_volatility_divisor: float = 200.0
    confidence_volatility_limit: float = 0.12
    confidence_min: float = 0.45
    confidence_max: float = 0.82


@dataclass(frozen=True)
class AchievementSettings:
    """Cumulative, capped achievement signal of the regime policy."""

    cap_base: float = 76.0
    cap_goodness_scale: float = 2.2
    cap_optimism_scale: float = 10.0
    cap_ambition_scale: float = 8.0
    cap_jitter: float = 10.0
    cap_min: float = 72.0
    cap_max: float = 99.0
    initial_base: float = 14.0
    initial_baseline_pivot: float = 50.0
    initial_baseline_scale: float = 0.6
    initial_optimism_scale: float = 18.0
    initial_jitter: float = 14.0
    initial_min: float = 8.0
    initial_max: float = 62.0
    # signals
    luck_pivot: float = 52.0
    luck_span: float = 48.0
    signal_limit: float = 1.2
    palace_signal_divisor: float = 10.0
    transform_signal_good: float = 0.9
    transform_signal_bad: float = 1.25
    transform_signal_limit: float = 6.0
    # drift
    drift_base: float = 0.28
    drift_optimism: float = 0.55
    drift_patience: float = 0.18
    drift_ambition_base: float = 0.85
    drift_ambition_scale: float = 0.75
    luck_growth_base: float = 1.2
    luck_growth_strength: float = 1.4
    luck_growth_ambition_base: float = 0.65
    luck_growth_ambition_scale: float = 0.75
    palace_growth_base: float = 0.9
    transform_growth: float = 0.12
    approach_base: float = 0.28
    approach_divisor: float = 160.0
    # drawdown
    drawdown_luck_base: float = 1.8
    drawdown_risk_base: float = 0.75
    drawdown_risk_scale: float = 0.7
    drawdown_palace_base: float = 1.1
    drawdown_palace_scale: float = 0.6
    drawdown_transform_scale: float = 0.08
    # milestone at decade boundaries
    milestone_luck_threshold: float = 0.35
    milestone_base: float = 0.8
    milestone_strength: float = 1.2
    milestone_palace: float = 1.6
    milestone_min: float = 0.4
    milestone_max: float = 4.6
    # noise and step limits
    noise_base: float = 0.9
    noise_resilience: float = 2.0
    max_step_base: float = 4.0
    max_step_ambition: float = 6.0
    leap_step_bonus: float = 6.0
    # life arc archetypes: early bloomer, balanced, late bloomer
    early_center: float = 30.0
    early_width: float = 5.0
    late_center: float = 42.0
    late_width: float = 6.0
    mid_rise_center: float = 16.0
    mid_rise_width: float = 6.0
    mid_fall_center: float = 76.0
    mid_fall_width: float = 10.0
    arc_floor: float = 0.25
    arc_gain: float = 1.05
    balanced_floor: float = 0.55
    balanced_gain: float = 0.8


@dataclass(frozen=True)
class RegimeSettings:
    """Per-decade regime classification and its achievement effects."""

    leap_base: float = 0.18
    leap_signal_scale: float = 0.22
    leap_optimism_scale: float = 0.08
    leap_min: float = 0.10
    leap_max: float = 0.55
    plateau_roll: float = 0.72
    plateau_palace_signal: float = -0.1
    plateau_transform_signal: float = -1.0
    strength_base: float = 0.85
    strength_palace: float = 0.55
    strength_transform: float = 0.05
    strength_optimism: float = 0.35
    strength_risk: float = 0.15
    strength_min: float = 0.3
    strength_max: float = 1.8
    leap_kick_window: float = 0.22
    leap_kick_base: float = 2.2
    leap_kick_strength: float = 2.2
    leap_kick_sparkle: float = 2.4
    leap_kick_min: float = 1.5
    leap_kick_max: float = 9.5
    plateau_brake_base: float = 0.65
    plateau_brake_patience: float = 0.9
    plateau_brake_signal_base: float = 0.6


@dataclass(frozen=True)
class NormalizedSettings:
    """Parameters of the normalisation-based achievement policy."""

    ambition_base: float = 0.75
    ambition_span: float = 0.9
    resilience_base: float = 0.55
    resilience_span: float = 0.45
    patience_base: float = 0.5
    patience_span: float = 0.7
    cap_base: float = 86.0
    cap_mean_pivot: float = 55.0
    cap_mean_scale: float = 0.35
    cap_jitter: float = 10.0
    cap_min: float = 80.0
    cap_max: float = 99.0
    level_base: float = 18.0
    level_mean_pivot: float = 50.0
    level_mean_scale: float = 0.25
    level_jitter: float = 16.0
    level_min: float = 8.0
    level_max: float = 55.0
    luck_pivot: float = 52.0
    positive_span: float = 48.0
    negative_span: float = 52.0
    momentum_divisor: float = 30.0
    momentum_limit: float = 0.8
    momentum_positive_scale: float = 0.6
    growth_base: float = 0.022
    growth_spread_divisor: float = 40.0
    growth_spread_scale: float = 0.02
    growth_positive_base: float = 0.85
    growth_positive_scale: float = 0.8
    growth_min: float = 0.016
    growth_max: float = 0.06
    setback_floor: float = 8.0
    setback_base: float = 0.012
    setback_negative: float = 0.025
    setback_switch: float = 0.01
    setback_resilience: float = 1.05
    breakthrough_base: float = 2.0
    breakthrough_positive: float = 6.0
    breakthrough_max: float = 10.0
    noise_base: float = 1.4
    noise_resilience: float = 2.2
    brake_headroom: float = 18.0
    brake_base: float = 0.6
    brake_divisor: float = 30.0
    max_step_base: float = 10.0
    max_step_ambition: float = 4.0


_SECTIONS: Tuple[str, ...] = (
    "weights",
    "aggregation",
    "luck",
    "achievement",
    "regime",
    "normalized",
)


def _replace_section(section: Any, overrides: Mapping[str, Any], name: str) -> Any:
    if not isinstance(overrides, MappingABC):
        raise TypeError(f"Engine settings section '{name}' must be a mapping")
    known = {item.name: item for item in fields(section)}
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        key_str = str(key)
        if key_str not in known:
            raise KeyError(f"Unknown engine setting '{name}.{key_str}'")
        current = getattr(section, key_str)
        if isinstance(current, tuple):
            if isinstance(value, (str, bytes)) or not isinstance(value, IterableABC):
                raise TypeError(
                    f"Engine setting '{name}.{key_str}' must be a list of names, "
                    f"got {type(value).__name__}"
                )
            changes[key_str] = tuple(str(item) for item in value)
        else:
            changes[key_str] = float(value)
    return replace(section, **changes)


@dataclass(frozen=True)
class EngineSettings:
    """Complete configuration for one trajectory engine instance."""

    weights: ScoreWeights = field(default_factory=ScoreWeights)
    aggregation: AggregationSettings = field(default_factory=AggregationSettings)
    luck: LuckSettings = field(default_factory=LuckSettings)
    achievement: AchievementSettings = field(default_factory=AchievementSettings)
    regime: RegimeSettings = field(default_factory=RegimeSettings)
    normalized: NormalizedSettings = field(default_factory=NormalizedSettings)
    catalog: StarCatalog = field(default_factory=default_catalog)
    achievement_policy: str = POLICY_REGIME

    def __post_init__(self) -> None:
        if self.achievement_policy not in ACHIEVEMENT_POLICIES:
            raise ValueError(
                f"Unknown achievement policy {self.achievement_policy!r}; "
                f"expected one of {', '.join(ACHIEVEMENT_POLICIES)}"
            )
        # published integers move by at most floor(limit); below 1 they freeze
        for name, value in (
            ("luck.max_delta", self.luck.max_delta),
            ("achievement.max_step_base", self.achievement.max_step_base),
            ("normalized.max_step_base", self.normalized.max_step_base),
        ):
            if value < 1.0:
                raise ValueError(f"Engine setting '{name}' must be at least 1, got {value}")
        for name, value in (
            ("achievement.max_step_ambition", self.achievement.max_step_ambition),
            ("achievement.leap_step_bonus", self.achievement.leap_step_bonus),
            ("normalized.max_step_ambition", self.normalized.max_step_ambition),
        ):
            if value < 0.0:
                raise ValueError(f"Engine setting '{name}' must not be negative, got {value}")

    def with_overrides(self, overrides: Mapping[str, Any] | None) -> "EngineSettings":
        """Return a copy with ``overrides`` applied section by section."""

        if not overrides:
            return self
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            key_str = str(key)
            if key_str in _SECTIONS:
                changes[key_str] = _replace_section(getattr(self, key_str), value, key_str)
            elif key_str == "catalog":
                changes["catalog"] = catalog_from_mapping(
                    value, base=self.catalog, source="engine settings"
                )
            elif key_str == "achievement_policy":
                changes["achievement_policy"] = str(value)
            else:
                raise KeyError(f"Unknown engine settings section '{key_str}'")
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {name: asdict(getattr(self, name)) for name in _SECTIONS}
        payload["catalog"] = {
            "auspicious": sorted(self.catalog.auspicious),
            "inauspicious": sorted(self.catalog.inauspicious),
            "favorable_markers": list(self.catalog.favorable_markers),
            "unfavorable_markers": list(self.catalog.unfavorable_markers),
        }
        payload["achievement_policy"] = self.achievement_policy
        return payload
