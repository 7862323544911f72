"""Top-level package for ziwei-kline.

This package turns a Zi Wei Dou Shu natal chart into a life "K-line": the
luck and achievement signals produced by :mod:`kline_core`, plus the score,
phase, prompt and export helpers built around them.
"""

from ._version import __version__
from kline_core import (
    EngineSettings,
    NatalChart,
    Palace,
    Trajectory,
    TrajectoryPoint,
    TrajectorySimulator,
    ValidationError,
    derive_seed,
    generate_trajectory,
)
from .analysis import (
    ChartScores,
    TrajectoryPhases,
    build_chat_context,
    build_phases,
    build_scores,
    build_tone_proverb,
    build_user_prompt,
)
from .exporters import exporters_registry
from .io import chart_from_payload, chart_to_payload, load_chart

__all__ = [
    "ChartScores",
    "EngineSettings",
    "NatalChart",
    "Palace",
    "Trajectory",
    "TrajectoryPhases",
    "TrajectoryPoint",
    "TrajectorySimulator",
    "ValidationError",
    "__version__",
    "build_chat_context",
    "build_phases",
    "build_scores",
    "build_tone_proverb",
    "build_user_prompt",
    "chart_from_payload",
    "chart_to_payload",
    "derive_seed",
    "exporters_registry",
    "generate_trajectory",
    "load_chart",
]
