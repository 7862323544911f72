"""Conversion between chart-provider payloads and :class:`NatalChart`."""

from __future__ import annotations

import json
from collections.abc import Mapping as ABCMapping
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import yaml

from kline_core.chart import PALACE_NAMES, NatalChart, Palace, ValidationError, validate_chart

__all__ = [
    "PALACE_ALIASES",
    "chart_from_payload",
    "chart_to_payload",
    "load_chart",
]


PALACE_ALIASES: Mapping[str, str] = {"仆役": "交友"}

_MAIN_KEYS: Tuple[str, ...] = ("mainStars", "main_stars", "majorStars", "stars")
_SUB_KEYS: Tuple[str, ...] = ("subStars", "sub_stars", "minorStars", "assistStars")
_TRANSFORM_KEYS: Tuple[str, ...] = (
    "transforms",
    "transformationStars",
    "fourTransforms",
)
_RANGE_KEYS: Tuple[str, ...] = ("decadeRange", "decade_range", "tenYearRange")
_NESTED_RANGE_KEYS: Tuple[str, ...] = ("decade", "decadal")


def _first_present(payload: Mapping[str, Any], keys: Iterable[str]) -> Any:
    for key in keys:
        value = payload.get(key)
        if value is not None:
            return value
    return None


def _pick_names(items: Any) -> Tuple[str, ...]:
    if items is None:
        return ()
    if isinstance(items, str):
        items = [items]
    if not isinstance(items, Sequence):
        return ()
    names: List[str] = []
    for item in items:
        if isinstance(item, str):
            name = item
        elif isinstance(item, ABCMapping):
            name = str(item.get("name") or "")
        else:
            name = ""
        if name:
            names.append(name)
    return tuple(names)


def _normalise_range(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, ABCMapping):
        start, end = value.get("start"), value.get("end")
        if isinstance(start, (int, float)) and isinstance(end, (int, float)):
            return f"{int(start)}-{int(end)}"
        return None
    if isinstance(value, Sequence) and len(value) >= 2:
        return f"{value[0]}-{value[1]}"
    return None


def _pick_range(payload: Mapping[str, Any]) -> Optional[str]:
    for key in _NESTED_RANGE_KEYS:
        nested = payload.get(key)
        if isinstance(nested, ABCMapping) and nested.get("range") is not None:
            return _normalise_range(nested["range"])
    return _normalise_range(_first_present(payload, _RANGE_KEYS))


def _palace_from_payload(payload: Mapping[str, Any], index: int) -> Palace:
    if not isinstance(payload, ABCMapping):
        raise ValidationError(
            f"Palace entry #{index} must be a mapping, got {type(payload).__name__}.",
            reason="palace_type",
            context={"index": index, "type": type(payload).__name__},
        )
    raw_name = payload.get("name") or payload.get("palaceName")
    if not raw_name:
        raise ValidationError(
            f"Palace entry #{index} has no name.",
            reason="palace_name",
            context={"index": index},
        )
    name = PALACE_ALIASES.get(str(raw_name), str(raw_name))
    return Palace(
        name=name,
        main_stars=_pick_names(_first_present(payload, _MAIN_KEYS)),
        sub_stars=_pick_names(_first_present(payload, _SUB_KEYS)),
        transforms=_pick_names(_first_present(payload, _TRANSFORM_KEYS)),
        decade_range=_pick_range(payload),
    )


def _fill_canonical(palaces: Sequence[Palace]) -> Tuple[Palace, ...]:
    by_name: Dict[str, Palace] = {}
    for palace in palaces:
        by_name.setdefault(palace.name, palace)
    return tuple(by_name.get(name) or Palace(name=name) for name in PALACE_NAMES)


def chart_from_payload(payload: Mapping[str, Any], *, fill_missing: bool = False) -> NatalChart:
    """Build a validated :class:`NatalChart` from a provider payload.

    ``payload`` is either ``{"palaces": [...], "center": {...}}`` or a bare
    list of palace mappings. With ``fill_missing`` the palaces are arranged in
    canonical order and absent ones are added empty, the way chart providers
    normalise partial astrolabes; otherwise the payload must already describe
    all twelve palaces.
    """

    center: Mapping[str, Any] = {}
    if isinstance(payload, ABCMapping):
        raw_palaces = payload.get("palaces")
        raw_center = payload.get("center")
        if isinstance(raw_center, ABCMapping):
            center = raw_center
    else:
        raw_palaces = payload

    if not isinstance(raw_palaces, Sequence) or isinstance(raw_palaces, (str, bytes)):
        raise ValidationError(
            "Chart payload must contain a 'palaces' list.",
            reason="payload_shape",
        )

    palaces = [_palace_from_payload(item, index) for index, item in enumerate(raw_palaces)]
    if fill_missing:
        unknown = [palace.name for palace in palaces if palace.name not in PALACE_NAMES]
        if unknown:
            raise ValidationError(
                f"Unknown palace names: {', '.join(unknown)}.",
                reason="palace_name",
                context={"unknown": ",".join(unknown)},
            )
        palaces = list(_fill_canonical(palaces))

    return validate_chart(NatalChart(palaces=tuple(palaces), center=dict(center)))


def chart_to_payload(chart: NatalChart) -> Dict[str, Any]:
    """Serialise ``chart`` to the camelCase provider shape."""

    palaces: List[Dict[str, Any]] = []
    for palace in chart.palaces:
        entry: Dict[str, Any] = {
            "name": palace.name,
            "mainStars": list(palace.main_stars),
            "subStars": list(palace.sub_stars),
            "transforms": list(palace.transforms),
        }
        if palace.decade_range:
            entry["decadeRange"] = palace.decade_range
        palaces.append(entry)
    return {"palaces": palaces, "center": dict(chart.center)}


def load_chart(path: Path | str, *, fill_missing: bool = False) -> NatalChart:
    """Read a chart from a ``.json``, ``.yaml`` or ``.yml`` file."""

    source = Path(path)
    suffix = source.suffix.lower()
    with source.open("r", encoding="utf-8") as handle:
        if suffix == ".json":
            payload = json.load(handle)
        elif suffix in {".yaml", ".yml"}:
            payload = yaml.safe_load(handle)
        else:
            raise ValueError(f"Unsupported chart format '{source.suffix}' for {source}.")
    if payload is None:
        raise ValidationError(f"Chart file {source} is empty.", reason="payload_shape")
    return chart_from_payload(payload, fill_missing=fill_missing)
