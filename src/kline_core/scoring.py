"""Palace scoring and chart-wide feature aggregation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

from kline_core.catalog import StarCatalog
from kline_core.chart import NatalChart, Palace
from kline_core.config.settings import AggregationSettings, ScoreWeights
from kline_core.continuity import clamp_range

__all__ = ["FeatureAggregator", "PalaceScore", "score_palace"]


@dataclass(frozen=True, slots=True)
class PalaceScore:
    """Counts and derived scalars of a single palace."""

    main_good: int
    main_bad: int
    sub_good: int
    sub_bad: int
    transform_good: int
    transform_bad: int
    score: float
    goodness: float
    star_total: int

    @property
    def star_good(self) -> int:
        return self.main_good + self.sub_good

    @property
    def star_bad(self) -> int:
        return self.main_bad + self.sub_bad


def score_palace(
    palace: Palace,
    catalog: StarCatalog,
    weights: ScoreWeights | None = None,
) -> PalaceScore:
    """Score ``palace`` from symbol counts; symbol order is irrelevant.

    ``score`` is the weighted sum used to nudge the luck target while
    ``goodness`` is the count balance that drives shocks, volatility and the
    achievement signals.
    """

    weights = weights or ScoreWeights()
    main_good = catalog.count_auspicious(palace.main_stars)
    main_bad = catalog.count_inauspicious(palace.main_stars)
    sub_good = catalog.count_auspicious(palace.sub_stars)
    sub_bad = catalog.count_inauspicious(palace.sub_stars)
    transform_good, transform_bad = catalog.count_transforms(palace.transforms)

    score = (
        main_good * weights.main_good
        + sub_good * weights.sub_good
        + main_bad * weights.main_bad
        + sub_bad * weights.sub_bad
        + transform_good * weights.transform_good
        + transform_bad * weights.transform_bad
    )
    goodness = (
        (main_good + sub_good)
        - (main_bad + sub_bad)
        + transform_good * weights.goodness_transform_good
        - transform_bad * weights.goodness_transform_bad
    )
    star_total = len(palace.main_stars) + len(palace.sub_stars) + len(palace.transforms)

    return PalaceScore(
        main_good=main_good,
        main_bad=main_bad,
        sub_good=sub_good,
        sub_bad=sub_bad,
        transform_good=transform_good,
        transform_bad=transform_bad,
        score=float(score),
        goodness=float(goodness),
        star_total=star_total,
    )


class FeatureAggregator:
    """Chart-wide baseline and the age to active palace lookup."""

    def __init__(
        self,
        chart: NatalChart,
        catalog: StarCatalog,
        *,
        weights: ScoreWeights | None = None,
        settings: AggregationSettings | None = None,
    ) -> None:
        self.chart = chart
        self.catalog = catalog
        self.weights = weights or ScoreWeights()
        self.settings = settings or AggregationSettings()
        self._scores: Dict[str, PalaceScore] = {}
        self.key_palaces: Sequence[Palace] = tuple(
            palace
            for palace in (chart.palace(name) for name in self.settings.key_palaces)
            if palace is not None
        )
        self._canonical = chart.canonical_palaces
        self._ranges = tuple((palace, palace.parsed_range) for palace in self._canonical)
        self.baseline_goodness = self._baseline_goodness()

    def score(self, palace: Palace) -> PalaceScore:
        cached = self._scores.get(palace.name)
        if cached is None:
            cached = score_palace(palace, self.catalog, self.weights)
            self._scores[palace.name] = cached
        return cached

    def _baseline_goodness(self) -> float:
        if not self.key_palaces:
            return 0.0
        good = 0
        bad = 0
        transform_good = 0
        transform_bad = 0
        for palace in self.key_palaces:
            stars = (*palace.main_stars, *palace.sub_stars)
            good += self.catalog.count_auspicious(stars)
            bad += self.catalog.count_inauspicious(stars)
            tg, tb = self.catalog.count_transforms(palace.transforms)
            transform_good += tg
            transform_bad += tb
        return (good - bad) + (
            transform_good * self.settings.transform_good_weight
            - transform_bad * self.settings.transform_bad_weight
        )

    def baseline(self, optimism: float) -> float:
        """Gravitational centre of the luck walk.

        Without any key palace the documented neutral baseline is returned.
        """

        cfg = self.settings
        if not self.key_palaces:
            return cfg.neutral_baseline
        return clamp_range(
            cfg.neutral_baseline
            + self.baseline_goodness * cfg.goodness_scale
            + (optimism - 0.5) * cfg.optimism_scale,
            cfg.baseline_min,
            cfg.baseline_max,
        )

    def luck_floor(self, optimism: float) -> float:
        cfg = self.settings
        return clamp_range(
            cfg.floor_base
            + max(0.0, self.baseline_goodness) * cfg.floor_goodness_scale
            + optimism * cfg.floor_optimism_scale,
            cfg.floor_min,
            cfg.floor_max,
        )

    def active_palace(self, age: int) -> Palace:
        """Return the palace whose decade range covers ``age``.

        Without a covering range the palace at ``floor(age / 10) mod n`` in
        canonical palace order is used, so the provider order of the palaces
        never changes the trajectory.
        """

        for palace, parsed in self._ranges:
            if parsed is not None and parsed.covers(age):
                return palace
        return self._canonical[(age // 10) % len(self._canonical)]
