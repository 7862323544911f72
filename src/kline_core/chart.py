"""Natal chart data model and the entry-boundary validation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

__all__ = [
    "PALACE_NAMES",
    "PALACE_COUNT",
    "DecadeRange",
    "NatalChart",
    "Palace",
    "ValidationError",
    "parse_decade_range",
    "validate_chart",
]


PALACE_NAMES: Tuple[str, ...] = (
    "命宫",
    "兄弟",
    "夫妻",
    "子女",
    "财帛",
    "疾厄",
    "迁移",
    "交友",
    "官禄",
    "田宅",
    "福德",
    "父母",
)

PALACE_COUNT = len(PALACE_NAMES)

_RANGE_PATTERN = re.compile(r"(\d+)\D+(\d+)")


class ValidationError(ValueError):
    """Raised when a chart violates the palace cardinality or naming rules."""

    def __init__(
        self,
        message: str,
        *,
        reason: str = "invalid_chart",
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.context = dict(context or {})


@dataclass(frozen=True, slots=True)
class DecadeRange:
    """Inclusive age interval during which a palace is active."""

    start: int
    end: int

    def covers(self, age: int) -> bool:
        return self.start <= age <= self.end


def parse_decade_range(value: Optional[str]) -> Optional[DecadeRange]:
    """Return the first two integers in ``value`` as a :class:`DecadeRange`.

    Strings such as ``"[30,39]"``, ``"30-39"`` or ``"30 ~ 39"`` are accepted.
    Anything without two integers is treated as an absent range.
    """

    if not value:
        return None
    match = _RANGE_PATTERN.search(str(value))
    if match is None:
        return None
    return DecadeRange(int(match.group(1)), int(match.group(2)))


def _as_tuple(values: Iterable[str] | None) -> Tuple[str, ...]:
    if values is None:
        return ()
    if isinstance(values, str):
        return (values,)
    return tuple(str(item) for item in values)


@dataclass(frozen=True, slots=True)
class Palace:
    """One of the twelve life-domain slots of a chart."""

    name: str
    main_stars: Tuple[str, ...] = ()
    sub_stars: Tuple[str, ...] = ()
    transforms: Tuple[str, ...] = ()
    decade_range: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "main_stars", _as_tuple(self.main_stars))
        object.__setattr__(self, "sub_stars", _as_tuple(self.sub_stars))
        object.__setattr__(self, "transforms", _as_tuple(self.transforms))

    @property
    def parsed_range(self) -> Optional[DecadeRange]:
        return parse_decade_range(self.decade_range)


@dataclass(frozen=True)
class NatalChart:
    """Ordered palaces produced by the external chart provider.

    ``center`` carries provider metadata (birth data, fate and body palace,
    the four transforms) for downstream consumers; the simulator ignores it.
    """

    palaces: Tuple[Palace, ...]
    center: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "palaces", tuple(self.palaces))
        object.__setattr__(self, "center", MappingProxyType(dict(self.center or {})))

    def __len__(self) -> int:
        return len(self.palaces)

    def palace(self, name: str) -> Optional[Palace]:
        for palace in self.palaces:
            if palace.name == name:
                return palace
        return None

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(palace.name for palace in self.palaces)

    @property
    def canonical_palaces(self) -> Tuple[Palace, ...]:
        """Palaces sorted by :data:`PALACE_NAMES`, whatever the provider order."""

        rank = {name: index for index, name in enumerate(PALACE_NAMES)}
        return tuple(sorted(self.palaces, key=lambda palace: rank.get(palace.name, len(rank))))


def validate_chart(chart: NatalChart | Sequence[Palace]) -> NatalChart:
    """Check the chart invariants and return it as a :class:`NatalChart`."""

    if not isinstance(chart, NatalChart):
        chart = NatalChart(palaces=tuple(chart))

    count = len(chart.palaces)
    if count != PALACE_COUNT:
        raise ValidationError(
            f"Chart must contain exactly {PALACE_COUNT} palaces, got {count}.",
            reason="palace_count",
            context={"expected": PALACE_COUNT, "actual": count},
        )

    for palace in chart.palaces:
        if not isinstance(palace, Palace):
            raise ValidationError(
                f"Chart entries must be Palace instances, got {type(palace).__name__}.",
                reason="palace_type",
                context={"type": type(palace).__name__},
            )

    names = chart.names
    unknown = [name for name in names if name not in PALACE_NAMES]
    if unknown:
        raise ValidationError(
            f"Unknown palace names: {', '.join(unknown)}.",
            reason="palace_name",
            context={"unknown": ",".join(unknown)},
        )

    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ValidationError(
            f"Duplicate palace names: {', '.join(duplicates)}.",
            reason="palace_duplicate",
            context={"duplicates": ",".join(duplicates)},
        )

    return chart
