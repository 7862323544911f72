"""A complete sample chart used by the quickstart and the examples."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict

from kline_core.chart import NatalChart
from ziwei_kline.io import chart_from_payload

__all__ = ["SAMPLE_CHART_PAYLOAD", "sample_chart", "sample_chart_payload", "write_sample_chart"]


SAMPLE_CHART_PAYLOAD: Dict[str, Any] = {
    "center": {
        "gender": "female",
        "solarDate": "1990-05-17",
        "lunarDate": "一九九〇年四月廿三",
        "time": "08:30",
        "fatePalace": "命宫",
        "bodyPalace": "官禄",
        "fourTransforms": ["太阳化禄", "武曲化权", "太阴化科", "天同化忌"],
    },
    "palaces": [
        {"name": "命宫", "mainStars": ["紫微", "天府"], "subStars": ["左辅", "文昌"], "transforms": [], "decadeRange": "3-12"},
        {"name": "兄弟", "mainStars": ["天机"], "subStars": ["陀罗"], "transforms": [], "decadeRange": "13-22"},
        {"name": "夫妻", "mainStars": ["破军"], "subStars": ["红鸾", "天刑"], "transforms": [], "decadeRange": "23-32"},
        {"name": "子女", "mainStars": ["太阳"], "subStars": ["天魁"], "transforms": ["化禄"], "decadeRange": "33-42"},
        {"name": "财帛", "mainStars": ["武曲", "七杀"], "subStars": ["禄存"], "transforms": ["化权"], "decadeRange": "43-52"},
        {"name": "疾厄", "mainStars": ["天同"], "subStars": ["火星"], "transforms": ["化忌"], "decadeRange": "53-62"},
        {"name": "迁移", "mainStars": ["廉贞", "贪狼"], "subStars": ["天马", "擎羊"], "transforms": [], "decadeRange": "63-72"},
        {"name": "仆役", "mainStars": ["巨门"], "subStars": ["地空"], "transforms": [], "decadeRange": "73-82"},
        {"name": "官禄", "mainStars": ["天相"], "subStars": ["右弼", "天钺"], "transforms": [], "decadeRange": "83-92"},
        {"name": "田宅", "mainStars": ["天梁"], "subStars": [], "transforms": [], "decadeRange": "93-102"},
        {"name": "福德", "mainStars": ["太阴"], "subStars": ["文曲"], "transforms": ["化科"], "decadeRange": "103-112"},
        {"name": "父母", "mainStars": [], "subStars": ["铃星", "地劫"], "transforms": [], "decadeRange": "113-122"},
    ],
}


def sample_chart_payload() -> Dict[str, Any]:
    """Return a private copy of the sample payload (provider aliases included)."""

    return copy.deepcopy(SAMPLE_CHART_PAYLOAD)


def sample_chart() -> NatalChart:
    return chart_from_payload(sample_chart_payload())


def write_sample_chart(destination: Path) -> Path:
    """Write the sample payload as JSON to ``destination``."""

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(
        json.dumps(SAMPLE_CHART_PAYLOAD, ensure_ascii=False, indent=2), encoding="utf-8"
    )
    return destination
