"""Short proverb that sets the tone of a generated analysis."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Tuple

import numpy as np

from kline_core.chart import NatalChart
from kline_core.models import Trajectory
from kline_core.seeding import fnv1a_32
from ziwei_kline.analysis.scores import ChartScores

__all__ = [
    "FALLBACK_PROVERB",
    "MAX_PROVERB_CHARS",
    "PROVERB_POOL",
    "TONE_TITLE",
    "ToneProverb",
    "ToneTheme",
    "build_tone_proverb",
    "format_analysis_with_tone",
    "infer_theme",
    "pick_proverb",
    "split_tone_from_analysis_text",
]


MAX_PROVERB_CHARS = 40
TONE_TITLE = "【箴言定调语】"
FALLBACK_PROVERB = "先稳住心，再往前走。"


class ToneTheme(str, Enum):
    ANXIOUS_GAIN_LOSS = "患得患失"
    PAST_AND_FUTURE = "太在意从前、又太担心将来"
    HASTE = "急于求成"
    HESITANT_REACH = "不敢伸手"
    OVERREACH = "用力过猛"
    FEAR_OF_LOSS = "恐惧失去"
    INDECISION = "犹豫不决"
    RESTLESS = "不肯止、不肯慢"


PROVERB_POOL: Mapping[ToneTheme, Tuple[str, ...]] = {
    ToneTheme.ANXIOUS_GAIN_LOSS: (
        "心越抓紧，越容易失手；先松一口气再走。",
        "你怕失去，才会用力；把力气留给当下。",
    ),
    ToneTheme.PAST_AND_FUTURE: (
        "别把昨天当枷锁，也别把明天当审判。",
        "过去放在心里，未来放在脚下。",
    ),
    ToneTheme.HASTE: (
        "快不是本事，稳才是底气。",
        "先把路走对，再谈走多快。",
    ),
    ToneTheme.HESITANT_REACH: (
        "机会不怕晚，怕的是你从未伸手。",
        "你不必完美才配得上开始。",
    ),
    ToneTheme.OVERREACH: (
        "用力太满，反而走不远；留一分给呼吸。",
        "别把自己拧成一根弦，松一点更准。",
    ),
    ToneTheme.FEAR_OF_LOSS: (
        "越怕失去，越难拥有；先学会安住自己。",
        "你守得住的，从来不是抓紧，而是从容。",
    ),
    ToneTheme.INDECISION: (
        "想得太多会停在原地，先做一步再修正。",
        "选择不必完美，只要愿意承担。",
    ),
    ToneTheme.RESTLESS: (
        "停一下不是退，是给自己换气。",
        "慢一点，你才能听见心里真正要走的方向。",
    ),
}

_WHITESPACE = re.compile(r"\s+")
_NEWLINES = re.compile(r"\r?\n")


@dataclass(frozen=True, slots=True)
class ToneProverb:
    theme: ToneTheme
    text: str


def infer_theme(trajectory: Trajectory, scores: ChartScores) -> ToneTheme:
    """Classify the emotional theme from luck spread, slope and scores."""

    values = trajectory.luck_array()
    std = float(values.std()) if values.size else 0.0
    start = float(values[0]) if values.size else 50.0
    end = float(values[-1]) if values.size else 50.0
    slope = end - start
    low_count = int(np.count_nonzero(values < 35))
    high_count = int(np.count_nonzero(values > 75))

    if std >= 16 and low_count >= 12:
        return ToneTheme.ANXIOUS_GAIN_LOSS
    if std >= 18:
        return ToneTheme.FEAR_OF_LOSS
    if slope >= 18 and scores.career >= 70:
        return ToneTheme.HASTE
    if slope <= -12 and scores.emotion <= 55:
        return ToneTheme.PAST_AND_FUTURE
    if scores.career <= 55 and scores.wealth <= 55:
        return ToneTheme.HESITANT_REACH
    if std >= 14 and high_count >= 18:
        return ToneTheme.OVERREACH
    if scores.emotion <= 58 and std <= 10:
        return ToneTheme.INDECISION
    return ToneTheme.RESTLESS


def _normalise(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def pick_proverb(theme: ToneTheme, seed: int) -> str:
    """Pick the first pool entry from ``seed`` onwards that fits the length limit."""

    items = PROVERB_POOL.get(theme, ())
    for offset in range(len(items)):
        candidate = _normalise(items[(seed + offset) % len(items)])
        if candidate and len(candidate) <= MAX_PROVERB_CHARS:
            return candidate
    return FALLBACK_PROVERB


def build_tone_proverb(
    chart: NatalChart, trajectory: Trajectory, scores: ChartScores
) -> ToneProverb:
    theme = infer_theme(trajectory, scores)
    center = chart.center
    first = str(trajectory[0].luck) if len(trajectory) else ""
    last = str(trajectory[-1].luck) if len(trajectory) else ""
    key = "|".join(
        (
            theme.value,
            str(center.get("solarDate") or center.get("solar_date") or ""),
            str(center.get("time") or ""),
            str(scores.total),
            first,
            last,
        )
    )
    return ToneProverb(theme=theme, text=pick_proverb(theme, fnv1a_32(key)))


def format_analysis_with_tone(proverb: ToneProverb, analysis_text: Optional[str]) -> str:
    body = (analysis_text or "").strip()
    return "\n".join((TONE_TITLE, proverb.text, "", body)).strip()


def split_tone_from_analysis_text(analysis_text: Optional[str]) -> Tuple[str, str]:
    """Return ``(proverb, body)``; the proverb is empty when no tone header leads the text."""

    raw = analysis_text or ""
    lines = _NEWLINES.split(raw)
    first = next((index for index, line in enumerate(lines) if line.strip()), None)
    if first is None:
        return "", ""
    if lines[first].strip() != TONE_TITLE:
        return "", raw

    proverb_index = next(
        (index for index in range(first + 1, len(lines)) if lines[index].strip()), None
    )
    proverb = lines[proverb_index].strip() if proverb_index is not None else ""
    body_start = proverb_index + 1 if proverb_index is not None else first + 1
    return proverb, "\n".join(lines[body_start:]).lstrip()
