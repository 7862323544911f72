"""Configuration helpers for the trajectory engine."""

from kline_core.config.loader import (
    ENGINE_CONFIG_NAME,
    load_engine_config,
    merge_overrides,
    resolve_settings,
)
from kline_core.config.settings import (
    ACHIEVEMENT_POLICIES,
    POLICY_NORMALIZED,
    POLICY_REGIME,
    AchievementSettings,
    AggregationSettings,
    EngineSettings,
    LuckSettings,
    NormalizedSettings,
    RegimeSettings,
    ScoreWeights,
)

__all__ = [
    "ACHIEVEMENT_POLICIES",
    "ENGINE_CONFIG_NAME",
    "POLICY_NORMALIZED",
    "POLICY_REGIME",
    "AchievementSettings",
    "AggregationSettings",
    "EngineSettings",
    "LuckSettings",
    "NormalizedSettings",
    "RegimeSettings",
    "ScoreWeights",
    "load_engine_config",
    "merge_overrides",
    "resolve_settings",
]
