"""Star and transform polarity tables used by the palace scorer."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, FrozenSet, Iterable, Mapping, Tuple

import yaml

__all__ = ["StarCatalog", "catalog_from_mapping", "default_catalog", "load_catalog"]


_CATALOG_RESOURCE_PACKAGE = "kline_core.data"
_CATALOG_RESOURCE_NAME = "catalog.yaml"
_CATALOG_KEYS = ("auspicious", "inauspicious", "favorable_markers", "unfavorable_markers")


@dataclass(frozen=True, slots=True)
class StarCatalog:
    """Polarity lookup for stars and transform tags."""

    auspicious: FrozenSet[str]
    inauspicious: FrozenSet[str]
    favorable_markers: Tuple[str, ...]
    unfavorable_markers: Tuple[str, ...]

    def count_auspicious(self, stars: Iterable[str]) -> int:
        return sum(1 for star in stars if star in self.auspicious)

    def count_inauspicious(self, stars: Iterable[str]) -> int:
        return sum(1 for star in stars if star in self.inauspicious)

    def is_favorable(self, tag: str) -> bool:
        return any(marker in tag for marker in self.favorable_markers)

    def is_unfavorable(self, tag: str) -> bool:
        return any(marker in tag for marker in self.unfavorable_markers)

    def count_transforms(self, transforms: Iterable[str]) -> Tuple[int, int]:
        """Return ``(favorable, unfavorable)`` tag counts."""

        good = 0
        bad = 0
        for tag in transforms:
            if self.is_favorable(tag):
                good += 1
            if self.is_unfavorable(tag):
                bad += 1
        return good, bad


def _string_set(payload: Mapping[str, Any], key: str, source: str) -> Tuple[str, ...]:
    raw = payload.get(key)
    if raw is None:
        return ()
    if isinstance(raw, str) or not isinstance(raw, Iterable):
        raise TypeError(f"Catalog entry '{key}' in {source} must be a list of strings")
    return tuple(str(item) for item in raw)


def catalog_from_mapping(
    payload: Mapping[str, Any],
    *,
    base: StarCatalog | None = None,
    source: str = "<mapping>",
) -> StarCatalog:
    """Build a catalog from ``payload``; missing keys fall back to ``base``."""

    if not isinstance(payload, MappingABC):
        raise TypeError(f"Star catalog in {source} must decode to a mapping")
    unknown = sorted(str(key) for key in payload if key not in _CATALOG_KEYS)
    if unknown:
        raise KeyError(f"Unknown star catalog keys in {source}: {', '.join(unknown)}")

    def pick(key: str) -> Tuple[str, ...]:
        if key in payload:
            return _string_set(payload, key, source)
        if base is not None:
            value = getattr(base, key)
            return tuple(sorted(value)) if isinstance(value, frozenset) else tuple(value)
        return ()

    return StarCatalog(
        auspicious=frozenset(pick("auspicious")),
        inauspicious=frozenset(pick("inauspicious")),
        favorable_markers=pick("favorable_markers"),
        unfavorable_markers=pick("unfavorable_markers"),
    )


def _load_catalog_from_text(payload: str, *, source: str) -> StarCatalog:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in star catalog: {source}") from exc
    if data is None:
        data = {}
    return catalog_from_mapping(data, source=source)


def load_catalog(path: str | Path | None = None) -> StarCatalog:
    """Load a star catalog from ``path`` or the packaged defaults."""

    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
        return _load_catalog_from_text(
            candidate.read_text(encoding="utf-8"), source=str(candidate)
        )
    return default_catalog()


@lru_cache(maxsize=1)
def default_catalog() -> StarCatalog:
    """Return the catalog bundled with :mod:`kline_core`."""

    resource = resources.files(_CATALOG_RESOURCE_PACKAGE).joinpath(_CATALOG_RESOURCE_NAME)
    return _load_catalog_from_text(resource.read_text(encoding="utf-8"), source=str(resource))
