"""Sequential dual-signal trajectory simulation over ages 0..100."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from time import monotonic
from typing import List, Optional, Sequence

from kline_core.chart import NatalChart, Palace, validate_chart
from kline_core.config.settings import POLICY_NORMALIZED, EngineSettings
from kline_core.continuity import clamp_delta, clamp_range, emit_integer
from kline_core.drivers import DriverAnnotator, DriverContext
from kline_core.models import AGE_COUNT, Trajectory, TrajectoryPoint
from kline_core.normalized import normalized_achievement
from kline_core.regime import Regime, RegimeController, RegimeDecision, decade_phase, decade_start
from kline_core.scoring import FeatureAggregator, PalaceScore
from kline_core.seeding import Channel, derive_seed, sample, sample_centered
from kline_core.state import SimulationState
from kline_core.traits import ArcType, ChartTraits, derive_traits

__all__ = ["LuckStep", "TrajectorySimulator", "generate_trajectory"]

logger = logging.getLogger(__name__)

_MASK32 = 0xFFFFFFFF

# Initial-state channel indices.
_INITIAL_LUCK = 0
_CAP_JITTER = 1
_ACHIEVEMENT_JITTER = 2


def _sigmoid(value: float) -> float:
    return 1.0 / (1.0 + math.exp(-value))


@dataclass(frozen=True, slots=True)
class LuckStep:
    """Luck value of one age together with the forces that produced it."""

    value: float
    target: float
    volatility: float
    noise: float
    momentum: float
    shock: float
    sparkle: float
    alpha: float
    confidence: float


@dataclass(frozen=True, slots=True)
class _AgeRecord:
    age: int
    palace: Palace
    score: PalaceScore
    changed: bool
    luck: LuckStep
    regime: RegimeDecision


class TrajectorySimulator:
    """Produce the luck and achievement signals of a chart.

    Each call to :meth:`run` owns a fresh :class:`SimulationState`; the
    simulator itself holds configuration only and can be shared between
    threads.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        *,
        annotator: DriverAnnotator | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self.regime_controller = RegimeController(self.settings.regime)
        self.annotator = annotator or DriverAnnotator()

    # ------------------------------------------------------------------
    # Signals
    # ------------------------------------------------------------------
    def palace_signal(self, score: PalaceScore) -> float:
        cfg = self.settings.achievement
        return clamp_range(
            score.goodness / cfg.palace_signal_divisor, -cfg.signal_limit, cfg.signal_limit
        )

    def transform_signal(self, score: PalaceScore) -> float:
        cfg = self.settings.achievement
        return clamp_range(
            score.transform_good * cfg.transform_signal_good
            - score.transform_bad * cfg.transform_signal_bad,
            -cfg.transform_signal_limit,
            cfg.transform_signal_limit,
        )

    def luck_signal(self, luck: float) -> float:
        cfg = self.settings.achievement
        return clamp_range((luck - cfg.luck_pivot) / cfg.luck_span, -cfg.signal_limit, cfg.signal_limit)

    def arc_weight(self, age: int, arc: ArcType) -> float:
        cfg = self.settings.achievement
        if arc is ArcType.EARLY:
            window = 1.0 - _sigmoid((age - cfg.early_center) / cfg.early_width)
            return cfg.arc_floor + cfg.arc_gain * window
        if arc is ArcType.LATE:
            window = _sigmoid((age - cfg.late_center) / cfg.late_width)
            return cfg.arc_floor + cfg.arc_gain * window
        window = _sigmoid((age - cfg.mid_rise_center) / cfg.mid_rise_width) * (
            1.0 - _sigmoid((age - cfg.mid_fall_center) / cfg.mid_fall_width)
        )
        return cfg.balanced_floor + cfg.balanced_gain * window

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------
    def luck_step(
        self,
        age: int,
        score: PalaceScore,
        changed: bool,
        state: SimulationState,
        baseline: float,
        traits: ChartTraits,
        seed: int,
    ) -> LuckStep:
        cfg = self.settings.luck
        goodness = score.goodness

        target = clamp_range(
            baseline
            + goodness * cfg.target_goodness_scale
            + clamp_range(score.score * cfg.target_score_scale, -cfg.target_score_limit, cfg.target_score_limit),
            state.floor + cfg.target_floor_margin,
            cfg.target_max,
        )

        volatility = clamp_range(
            cfg.volatility_base
            + score.star_total * cfg.volatility_per_symbol
            + score.transform_bad * cfg.volatility_per_bad_transform
            + max(0.0, -goodness) * cfg.volatility_negative_goodness,
            cfg.volatility_min,
            cfg.volatility_max,
        ) * (cfg.risk_volatility_base + traits.risk * cfg.risk_volatility_scale)

        noise = (
            sample_centered(seed, Channel.LUCK_NOISE, age) * cfg.noise_primary
            + sample_centered(seed, Channel.LUCK_NOISE_SECONDARY, age) * cfg.noise_secondary
        ) * volatility

        momentum = clamp_range(
            state.momentum_delta * cfg.momentum_factor, -cfg.momentum_limit, cfg.momentum_limit
        )

        shock = 0.0
        if changed and age != 0:
            shock_base = clamp_range(
                goodness * cfg.shock_goodness_scale, cfg.shock_base_min, cfg.shock_base_max
            )
            shock = clamp_range(
                shock_base + sample_centered(seed, Channel.SHOCK, age) * cfg.shock_jitter,
                cfg.shock_min,
                cfg.shock_max,
            )

        sparkle = 0.0
        gate = cfg.sparkle_threshold - traits.optimism * cfg.sparkle_optimism_scale
        if goodness > 0 and sample(seed, Channel.SPARKLE, age) > gate:
            sparkle = clamp_range(
                cfg.sparkle_base + goodness * cfg.sparkle_goodness_scale,
                cfg.sparkle_base,
                cfg.sparkle_max,
            )

        alpha = clamp_range(
            cfg.alpha_min
            + min(cfg.alpha_goodness_limit, abs(goodness) * cfg.alpha_goodness_scale)
            + (1.0 - traits.risk) * cfg.alpha_risk_scale,
            cfg.alpha_min,
            cfg.alpha_max,
        )

        prev = state.prev_luck
        proposed = prev * (1.0 - alpha) + target * alpha + noise + momentum + shock + sparkle
        value = clamp_range(clamp_delta(proposed, prev, cfg.max_delta), state.floor, cfg.ceiling)

        confidence = clamp_range(
            cfg.confidence_base
            + min(cfg.confidence_symbol_limit, score.star_total / cfg.confidence_symbol_divisor)
            - min(cfg.confidence_volatility_limit, volatility / cfg.confidence_volatility_divisor),
            cfg.confidence_min,
            cfg.confidence_max,
        )

        return LuckStep(
            value=value,
            target=target,
            volatility=volatility,
            noise=noise,
            momentum=momentum,
            shock=shock,
            sparkle=sparkle,
            alpha=alpha,
            confidence=confidence,
        )

    def max_achievement_step(self, traits: ChartTraits, regime: Regime) -> float:
        cfg = self.settings.achievement
        bonus = cfg.leap_step_bonus if regime is Regime.LEAP else 0.0
        return cfg.max_step_base + traits.ambition * cfg.max_step_ambition + bonus

    def achievement_step(
        self,
        age: int,
        luck: LuckStep,
        score: PalaceScore,
        decision: RegimeDecision,
        state: SimulationState,
        traits: ChartTraits,
        seed: int,
    ) -> float:
        cfg = self.settings.achievement
        regime_cfg = self.settings.regime
        luck_signal = self.luck_signal(luck.value)
        palace_signal = self.palace_signal(score)
        transform_signal = self.transform_signal(score)
        strength = decision.strength
        leap = decision.regime is Regime.LEAP

        leap_kick = 0.0
        if leap and decade_phase(age) < regime_cfg.leap_kick_window:
            leap_kick = clamp_range(
                regime_cfg.leap_kick_base
                + strength * regime_cfg.leap_kick_strength
                + (regime_cfg.leap_kick_sparkle if luck.sparkle else 0.0),
                regime_cfg.leap_kick_min,
                regime_cfg.leap_kick_max,
            )

        plateau_brake = 0.0
        if decision.regime is Regime.PLATEAU:
            plateau_brake = (
                regime_cfg.plateau_brake_base + (1.0 - traits.patience) * regime_cfg.plateau_brake_patience
            ) * (regime_cfg.plateau_brake_signal_base + max(0.0, -palace_signal))

        headroom = max(0.0, state.cap - state.achievement)
        base_drift = (
            (cfg.drift_base + traits.optimism * cfg.drift_optimism + traits.patience * cfg.drift_patience)
            * (cfg.drift_ambition_base + traits.ambition * cfg.drift_ambition_scale)
            * self.arc_weight(age, traits.arc)
        )
        growth_from_luck = (
            max(0.0, luck_signal)
            * (cfg.luck_growth_base + strength * cfg.luck_growth_strength)
            * (cfg.luck_growth_ambition_base + traits.ambition * cfg.luck_growth_ambition_scale)
        )
        growth_from_palace = (
            max(0.0, palace_signal) * (cfg.palace_growth_base + strength)
            + max(0.0, transform_signal) * cfg.transform_growth
        )

        fragility = cfg.drawdown_palace_base - traits.resilience
        drawdown = (
            max(0.0, -luck_signal)
            * (cfg.drawdown_luck_base - traits.resilience)
            * (cfg.drawdown_risk_base + traits.risk * cfg.drawdown_risk_scale)
            + max(0.0, -palace_signal) * fragility * cfg.drawdown_palace_scale
            + max(0.0, -transform_signal) * fragility * cfg.drawdown_transform_scale
        )

        milestone = 0.0
        if age % 10 == 0 and age != 0 and (leap or luck_signal > cfg.milestone_luck_threshold):
            milestone = clamp_range(
                cfg.milestone_base
                + strength * cfg.milestone_strength
                + max(0.0, palace_signal) * cfg.milestone_palace,
                cfg.milestone_min,
                cfg.milestone_max,
            )

        noise = sample_centered(seed, Channel.ACHIEVEMENT_NOISE, age) * (
            cfg.noise_base + (1.0 - traits.resilience) * cfg.noise_resilience
        )

        approach = cfg.approach_base + headroom / cfg.approach_divisor
        proposed = (
            state.achievement
            + (base_drift + growth_from_luck + growth_from_palace) * approach
            - drawdown
            - plateau_brake
            + leap_kick
            + milestone
            + noise
        )
        max_step = self.max_achievement_step(traits, decision.regime)
        return clamp_range(clamp_delta(proposed, state.achievement, max_step), 0.0, state.cap)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------
    def initial_state(
        self,
        aggregator: FeatureAggregator,
        baseline: float,
        traits: ChartTraits,
        seed: int,
    ) -> SimulationState:
        luck_cfg = self.settings.luck
        cfg = self.settings.achievement
        floor = aggregator.luck_floor(traits.optimism)
        first_luck = clamp_range(
            baseline + sample_centered(seed, Channel.INITIAL, _INITIAL_LUCK) * luck_cfg.initial_jitter,
            floor,
            luck_cfg.initial_max,
        )
        cap = float(
            round(
                clamp_range(
                    cfg.cap_base
                    + aggregator.baseline_goodness * cfg.cap_goodness_scale
                    + traits.optimism * cfg.cap_optimism_scale
                    + traits.ambition * cfg.cap_ambition_scale
                    + sample_centered(seed, Channel.INITIAL, _CAP_JITTER) * cfg.cap_jitter,
                    cfg.cap_min,
                    cfg.cap_max,
                )
            )
        )
        achievement = clamp_range(
            cfg.initial_base
            + (baseline - cfg.initial_baseline_pivot) * cfg.initial_baseline_scale
            + traits.optimism * cfg.initial_optimism_scale
            + sample_centered(seed, Channel.INITIAL, _ACHIEVEMENT_JITTER) * cfg.initial_jitter,
            cfg.initial_min,
            min(cfg.initial_max, cap),
        )
        return SimulationState(
            cap=cap,
            floor=floor,
            prev_luck=first_luck,
            prev_prev_luck=first_luck,
            achievement=achievement,
        )

    def _decide_regime(
        self,
        age: int,
        score: PalaceScore,
        state: SimulationState,
        traits: ChartTraits,
        seed: int,
    ) -> RegimeDecision:
        start = decade_start(age)
        decision = state.regimes.get(start)
        if decision is None:
            if self.settings.achievement_policy == POLICY_NORMALIZED:
                decision = RegimeDecision(start, Regime.NORMAL, 0.0, 0.0)
            else:
                decision = self.regime_controller.decide(
                    seed,
                    start,
                    self.palace_signal(score),
                    self.transform_signal(score),
                    traits,
                )
            state.regimes[start] = decision
        return decision

    def run(self, chart: NatalChart | Sequence[Palace], *, seed: Optional[int] = None) -> Trajectory:
        """Simulate ``chart`` and return its 101-point trajectory.

        ``seed`` overrides the content-derived seed so callers can vary chart
        features while holding every stochastic draw fixed.
        """

        chart = validate_chart(chart)
        started = monotonic()
        run_seed = derive_seed(chart) if seed is None else int(seed) & _MASK32
        traits = derive_traits(run_seed)
        aggregator = FeatureAggregator(
            chart,
            self.settings.catalog,
            weights=self.settings.weights,
            settings=self.settings.aggregation,
        )
        baseline = aggregator.baseline(traits.optimism)
        state = self.initial_state(aggregator, baseline, traits, run_seed)
        normalized = self.settings.achievement_policy == POLICY_NORMALIZED

        records: List[_AgeRecord] = []
        achievements: List[float] = []
        step_limits: List[float] = []
        for age in range(AGE_COUNT):
            palace = aggregator.active_palace(age)
            score = aggregator.score(palace)
            changed = age == 0 or palace.name != state.prev_palace
            decision = self._decide_regime(age, score, state, traits, run_seed)

            luck = self.luck_step(age, score, changed, state, baseline, traits, run_seed)
            if not normalized:
                state.achievement = self.achievement_step(
                    age, luck, score, decision, state, traits, run_seed
                )
                achievements.append(state.achievement)
                step_limits.append(self.max_achievement_step(traits, decision.regime))

            records.append(_AgeRecord(age, palace, score, changed, luck, decision))
            state.advance_luck(luck.value)
            state.prev_palace = palace.name

        luck_values: List[int] = []
        for record in records:
            state.emitted_luck = emit_integer(
                record.luck.value, state.emitted_luck, self.settings.luck.max_delta, 0, 100
            )
            luck_values.append(state.emitted_luck)

        cap = int(state.cap)
        if normalized:
            derived = normalized_achievement(
                luck_values,
                [record.changed and record.age != 0 for record in records],
                [record.luck.sparkle != 0 for record in records],
                run_seed,
                self.settings.normalized,
            )
            achievements = list(derived.values)
            cap = derived.cap
            step_limits = [derived.max_step] * len(records)

        points: List[TrajectoryPoint] = []
        for record, luck_value, achievement, limit in zip(records, luck_values, achievements, step_limits):
            state.emitted_achievement = emit_integer(
                achievement, state.emitted_achievement, limit, 0, min(cap, 100)
            )
            drivers = self.annotator.annotate(
                DriverContext(
                    age=record.age,
                    palace=record.palace.name,
                    decade_range=record.palace.decade_range,
                    palace_changed=record.changed,
                    baseline=baseline,
                    target=record.luck.target,
                    shock=record.luck.shock,
                    volatility=record.luck.volatility,
                    sparkle=record.luck.sparkle,
                    momentum=record.luck.momentum,
                    regime=record.regime.regime,
                )
            )
            points.append(
                TrajectoryPoint(
                    age=record.age,
                    luck=luck_value,
                    achievement=state.emitted_achievement,
                    confidence=float(record.luck.confidence),
                    drivers=drivers,
                )
            )

        trajectory = Trajectory(
            points=tuple(points),
            seed=run_seed,
            cap=cap,
            floor=state.floor,
            baseline=baseline,
            policy=self.settings.achievement_policy,
            traits=traits,
            max_luck_delta=self.settings.luck.max_delta,
            achievement_step_limits=tuple(step_limits),
            regimes={start: decision.regime.value for start, decision in state.regimes.items()},
        )

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Trajectory generated",
                extra={
                    "event": "trajectory.generated",
                    "seed": run_seed,
                    "policy": trajectory.policy,
                    "cap": trajectory.cap,
                    "floor": round(trajectory.floor, 3),
                    "baseline": round(baseline, 3),
                    "elapsed_ms": round((monotonic() - started) * 1000.0, 3),
                },
            )
        return trajectory


def generate_trajectory(
    chart: NatalChart | Sequence[Palace],
    *,
    settings: EngineSettings | None = None,
    seed: Optional[int] = None,
) -> Trajectory:
    """Convenience wrapper around :meth:`TrajectorySimulator.run`."""

    return TrajectorySimulator(settings).run(chart, seed=seed)
