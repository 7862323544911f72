"""Load engine setting overrides from YAML files."""

from __future__ import annotations

from collections.abc import Iterable, Mapping as MappingABC
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from kline_core.config.settings import EngineSettings

__all__ = ["ENGINE_CONFIG_NAME", "load_engine_config", "merge_overrides", "resolve_settings"]


ENGINE_CONFIG_NAME = "engine.yaml"


def load_engine_config(
    path: str | Path | None = None,
    *,
    search_paths: Iterable[str | Path] | None = None,
) -> Mapping[str, Any]:
    """Load an engine override table.

    Parameters
    ----------
    path:
        Absolute or relative path to a YAML file. When supplied the loader
        skips the search order and reads this file directly.
    search_paths:
        Optional iterable of directories or files to inspect. Entries pointing
        to directories are resolved against ``engine.yaml``. The first
        existing file wins. When nothing is found the result is empty and the
        built-in defaults apply unchanged.
    """

    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise FileNotFoundError(candidate)
        return _load_engine_payload(candidate)

    candidates: list[Path] = []
    if search_paths is not None:
        for entry in search_paths:
            entry_path = Path(entry).expanduser()
            if entry_path.is_dir():
                candidates.append(entry_path / ENGINE_CONFIG_NAME)
            else:
                candidates.append(entry_path)

    for candidate in candidates:
        if candidate.is_file():
            return _load_engine_payload(candidate)
    return MappingProxyType({})


def merge_overrides(*payloads: Mapping[str, Any] | None) -> Mapping[str, Any]:
    """Deep-merge override tables; later payloads win."""

    result: dict[str, Any] = {}
    for payload in payloads:
        if isinstance(payload, MappingABC):
            _deep_merge(result, payload)
    return MappingProxyType(result)


def resolve_settings(
    overrides: Mapping[str, Any] | None = None,
    *,
    base: EngineSettings | None = None,
) -> EngineSettings:
    """Apply ``overrides`` on top of ``base`` (or the defaults)."""

    settings = base if base is not None else EngineSettings()
    if not overrides:
        return settings
    return settings.with_overrides(_deep_copy_mapping(overrides))


def _deep_merge(target: dict[str, Any], source: Mapping[str, Any]) -> None:
    for key, value in source.items():
        key_str = str(key)
        existing = target.get(key_str)
        if isinstance(existing, MappingABC) and isinstance(value, MappingABC):
            merged = dict(existing)
            _deep_merge(merged, value)
            target[key_str] = merged
        elif isinstance(value, MappingABC):
            target[key_str] = _deep_copy_mapping(value)
        else:
            target[key_str] = value


def _deep_copy_mapping(source: Mapping[str, Any]) -> dict[str, Any]:
    copied: dict[str, Any] = {}
    for key, value in source.items():
        key_str = str(key)
        if isinstance(value, MappingABC):
            copied[key_str] = _deep_copy_mapping(value)
        else:
            copied[key_str] = value
    return copied


def _load_engine_payload(path: Path) -> Mapping[str, Any]:
    with path.open("r", encoding="utf-8") as buffer:
        payload = buffer.read()
    return _load_engine_from_text(payload, source=str(path))


def _load_engine_from_text(payload: str, *, source: str) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(payload)
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in engine configuration: {source}") from exc

    if data is None:
        return MappingProxyType({})
    if not isinstance(data, MappingABC):
        raise TypeError(f"Engine configuration in {source!s} must decode to a mapping")
    return MappingProxyType(_deep_copy_mapping(data))
