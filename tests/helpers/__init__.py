"""Convenience re-exports for test helpers."""

from __future__ import annotations

from tests.helpers.charts import (
    BAD_MAINS,
    BAD_SUBS,
    GOOD_MAINS,
    GOOD_SUBS,
    build_chart,
    build_palace,
    build_rich_chart,
    build_uniform_chart,
    chart_payload,
    strong_chart,
    weak_chart,
    with_transform,
)
from tests.helpers.cli import run_cli_in_tmp
from tests.helpers.invariants import assert_trajectory_invariants
from tests.helpers.trajectories import stepped_luck, trajectory_from_luck

__all__ = [
    "BAD_MAINS",
    "BAD_SUBS",
    "GOOD_MAINS",
    "GOOD_SUBS",
    "assert_trajectory_invariants",
    "build_chart",
    "build_palace",
    "build_rich_chart",
    "build_uniform_chart",
    "chart_payload",
    "run_cli_in_tmp",
    "stepped_luck",
    "strong_chart",
    "trajectory_from_luck",
    "weak_chart",
    "with_transform",
]
