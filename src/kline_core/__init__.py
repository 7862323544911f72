"""Deterministic life-trajectory engine for Zi Wei Dou Shu charts.

The engine maps a twelve-palace natal chart to two integer signals over ages
0..100: a volatile *luck* walk and a smoother, capped *achievement* curve.
"""

from __future__ import annotations

from kline_core.catalog import StarCatalog, catalog_from_mapping, default_catalog, load_catalog
from kline_core.chart import (
    PALACE_COUNT,
    PALACE_NAMES,
    DecadeRange,
    NatalChart,
    Palace,
    ValidationError,
    parse_decade_range,
    validate_chart,
)
from kline_core.config import (
    ACHIEVEMENT_POLICIES,
    POLICY_NORMALIZED,
    POLICY_REGIME,
    EngineSettings,
    load_engine_config,
    resolve_settings,
)
from kline_core.continuity import clamp_delta, clamp_range, emit_integer
from kline_core.drivers import DriverAnnotator, DriverContext
from kline_core.models import AGE_COUNT, MAX_AGE, Trajectory, TrajectoryPoint
from kline_core.normalized import NormalizedAchievement, normalized_achievement
from kline_core.regime import Regime, RegimeController, RegimeDecision
from kline_core.scoring import FeatureAggregator, PalaceScore, score_palace
from kline_core.seeding import Channel, derive_seed, sample, sample_centered
from kline_core.simulator import LuckStep, TrajectorySimulator, generate_trajectory
from kline_core.traits import ArcType, ChartTraits, derive_traits

__all__ = [
    "ACHIEVEMENT_POLICIES",
    "AGE_COUNT",
    "MAX_AGE",
    "PALACE_COUNT",
    "PALACE_NAMES",
    "POLICY_NORMALIZED",
    "POLICY_REGIME",
    "ArcType",
    "Channel",
    "ChartTraits",
    "DecadeRange",
    "DriverAnnotator",
    "DriverContext",
    "EngineSettings",
    "FeatureAggregator",
    "LuckStep",
    "NatalChart",
    "NormalizedAchievement",
    "Palace",
    "PalaceScore",
    "Regime",
    "RegimeController",
    "RegimeDecision",
    "StarCatalog",
    "Trajectory",
    "TrajectoryPoint",
    "TrajectorySimulator",
    "ValidationError",
    "catalog_from_mapping",
    "clamp_delta",
    "clamp_range",
    "default_catalog",
    "derive_seed",
    "derive_traits",
    "emit_integer",
    "generate_trajectory",
    "load_catalog",
    "load_engine_config",
    "normalized_achievement",
    "parse_decade_range",
    "resolve_settings",
    "sample",
    "sample_centered",
    "score_palace",
    "validate_chart",
]
