"""Summaries and text built on top of a generated trajectory."""

from ziwei_kline.analysis.phases import DecadeStats, TrajectoryPhases, build_phases, decade_stats
from ziwei_kline.analysis.prompt import (
    CHAT_SYSTEM_PROMPT_CN,
    DEVELOPER_PROMPT_CN,
    SYSTEM_PROMPT_CN,
    build_chat_context,
    build_user_prompt,
)
from ziwei_kline.analysis.scores import ChartScores, build_scores, palace_density_score
from ziwei_kline.analysis.tone import (
    ToneProverb,
    ToneTheme,
    build_tone_proverb,
    format_analysis_with_tone,
    infer_theme,
    split_tone_from_analysis_text,
)

__all__ = [
    "CHAT_SYSTEM_PROMPT_CN",
    "DEVELOPER_PROMPT_CN",
    "SYSTEM_PROMPT_CN",
    "ChartScores",
    "DecadeStats",
    "ToneProverb",
    "ToneTheme",
    "TrajectoryPhases",
    "build_chat_context",
    "build_phases",
    "build_scores",
    "build_tone_proverb",
    "build_user_prompt",
    "decade_stats",
    "format_analysis_with_tone",
    "infer_theme",
    "palace_density_score",
    "split_tone_from_analysis_text",
]
