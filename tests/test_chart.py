from __future__ import annotations

import pytest

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
from kline_core.simulator import TrajectorySimulator
from tests.helpers import build_chart, build_palace


def test_canonical_palace_names_are_twelve_and_unique() -> None:
    assert PALACE_COUNT == 12
    assert len(set(PALACE_NAMES)) == 12
    assert PALACE_NAMES[0] == "命宫"


def test_palace_coerces_star_lists_to_tuples() -> None:
    palace = Palace(name="命宫", main_stars=["紫微"], sub_stars="左辅", transforms=None)

    assert palace.main_stars == ("紫微",)
    assert palace.sub_stars == ("左辅",)
    assert palace.transforms == ()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("30-39", DecadeRange(30, 39)),
        ("[2,11]", DecadeRange(2, 11)),
        ("44 ~ 53", DecadeRange(44, 53)),
        ("103-112", DecadeRange(103, 112)),
    ],
)
def test_parse_decade_range_accepts_common_shapes(raw: str, expected: DecadeRange) -> None:
    assert parse_decade_range(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "abc", "42"])
def test_parse_decade_range_treats_malformed_values_as_absent(raw) -> None:
    assert parse_decade_range(raw) is None


def test_decade_range_is_inclusive() -> None:
    window = DecadeRange(30, 39)

    assert window.covers(30)
    assert window.covers(39)
    assert not window.covers(29)
    assert not window.covers(40)


def test_validate_chart_accepts_plain_palace_sequences() -> None:
    palaces = [build_palace(name) for name in PALACE_NAMES]

    chart = validate_chart(palaces)

    assert isinstance(chart, NatalChart)
    assert chart.names == PALACE_NAMES
    assert chart.palace("官禄") is chart.palaces[8]
    assert chart.palace("missing") is None


def test_ten_palace_chart_is_rejected_before_generation(monkeypatch: pytest.MonkeyPatch) -> None:
    chart = build_chart(names=PALACE_NAMES[:10])
    calls = []
    monkeypatch.setattr(
        "kline_core.simulator.derive_seed", lambda value: calls.append(value) or 0
    )

    with pytest.raises(ValidationError) as excinfo:
        TrajectorySimulator().run(chart)

    assert excinfo.value.reason == "palace_count"
    assert excinfo.value.context == {"expected": 12, "actual": 10}
    assert calls == []


def test_duplicate_palace_names_are_rejected() -> None:
    names = list(PALACE_NAMES)
    names[5] = "命宫"

    with pytest.raises(ValidationError) as excinfo:
        validate_chart(build_chart(names=names))

    assert excinfo.value.reason == "palace_duplicate"


def test_unknown_palace_names_are_rejected() -> None:
    names = list(PALACE_NAMES)
    names[7] = "仆役"

    with pytest.raises(ValidationError) as excinfo:
        validate_chart(build_chart(names=names))

    assert excinfo.value.reason == "palace_name"
    assert "仆役" in str(excinfo.value)


def test_non_palace_entries_are_rejected() -> None:
    palaces = [build_palace(name) for name in PALACE_NAMES[:11]] + [{"name": "父母"}]

    with pytest.raises(ValidationError) as excinfo:
        validate_chart(palaces)

    assert excinfo.value.reason == "palace_type"


def test_validation_error_is_a_value_error() -> None:
    assert issubclass(ValidationError, ValueError)


def test_chart_center_is_read_only() -> None:
    chart = NatalChart(palaces=build_chart().palaces, center={"gender": "male"})

    with pytest.raises(TypeError):
        chart.center["gender"] = "female"  # type: ignore[index]
