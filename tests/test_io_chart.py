from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from kline_core.chart import PALACE_NAMES, ValidationError
from tests.helpers import build_rich_chart, chart_payload
from ziwei_kline.examples import sample_chart, sample_chart_payload, write_sample_chart
from ziwei_kline.io import chart_from_payload, chart_to_payload, load_chart


def test_provider_alias_is_renamed() -> None:
    chart = chart_from_payload(sample_chart_payload())

    assert "交友" in chart.names
    assert "仆役" not in chart.names
    assert chart.palace("交友").main_stars == ("巨门",)
    assert chart.center["solarDate"] == "1990-05-17"


def test_alternative_key_spellings_are_accepted() -> None:
    palaces = [
        {
            "name": name,
            "majorStars": [{"name": "紫微"}, {"name": ""}],
            "minorStars": ["左辅"],
            "transformationStars": "化禄",
            "decadal": {"range": [index * 10, index * 10 + 9]},
        }
        for index, name in enumerate(PALACE_NAMES)
    ]

    chart = chart_from_payload(palaces)

    first = chart.palaces[0]
    assert first.main_stars == ("紫微",)
    assert first.sub_stars == ("左辅",)
    assert first.transforms == ("化禄",)
    assert first.decade_range == "0-9"
    assert chart.palaces[3].parsed_range.start == 30


def test_snake_case_and_mapping_ranges() -> None:
    payload = {
        "palaces": [
            {
                "name": name,
                "main_stars": ["天机"],
                "sub_stars": [],
                "decade": {"range": {"start": 5 + index * 10, "end": 14 + index * 10}},
            }
            for index, name in enumerate(PALACE_NAMES)
        ]
    }

    chart = chart_from_payload(payload)

    assert chart.palace("命宫").decade_range == "5-14"
    assert chart.palace("父母").main_stars == ("天机",)
    assert chart.center == {}


def test_partial_payload_is_rejected_unless_filled() -> None:
    payload = {"palaces": [{"name": "官禄", "mainStars": ["天相"]}, {"name": "仆役"}]}

    with pytest.raises(ValidationError) as excinfo:
        chart_from_payload(payload)
    assert excinfo.value.reason == "palace_count"

    chart = chart_from_payload(payload, fill_missing=True)
    assert chart.names == PALACE_NAMES
    assert chart.palace("官禄").main_stars == ("天相",)
    assert chart.palace("命宫").main_stars == ()


def test_fill_missing_still_rejects_unknown_names() -> None:
    with pytest.raises(ValidationError) as excinfo:
        chart_from_payload({"palaces": [{"name": "天宫"}]}, fill_missing=True)

    assert excinfo.value.reason == "palace_name"


@pytest.mark.parametrize(
    ("payload", "reason"),
    [
        ({"palaces": "命宫"}, "payload_shape"),
        ({"center": {}}, "payload_shape"),
        ({"palaces": [["命宫"]]}, "palace_type"),
        ({"palaces": [{"mainStars": ["紫微"]}]}, "palace_name"),
    ],
)
def test_malformed_payloads(payload, reason: str) -> None:
    with pytest.raises(ValidationError) as excinfo:
        chart_from_payload(payload)

    assert excinfo.value.reason == reason


def test_payload_serialisation_preserves_the_chart() -> None:
    chart = build_rich_chart()

    payload = chart_to_payload(chart)

    assert payload == chart_payload(chart)
    assert chart_from_payload(payload) == chart


def test_load_chart_from_json_and_yaml(tmp_path: Path) -> None:
    json_path = write_sample_chart(tmp_path / "nested" / "chart.json")
    yaml_path = tmp_path / "chart.yml"
    yaml_path.write_text(
        yaml.safe_dump(sample_chart_payload(), allow_unicode=True), encoding="utf-8"
    )

    assert load_chart(json_path) == sample_chart()
    assert load_chart(yaml_path) == sample_chart()


def test_load_chart_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_chart(tmp_path / "missing.json")

    text = tmp_path / "chart.txt"
    text.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="Unsupported chart format"):
        load_chart(text)

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    with pytest.raises(ValidationError):
        load_chart(empty)

    broken = tmp_path / "broken.json"
    broken.write_text("{", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        load_chart(broken)
