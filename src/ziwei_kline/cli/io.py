"""Chart, engine-configuration and output helpers for the CLI."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from kline_core.chart import NatalChart, ValidationError
from kline_core.config import EngineSettings, load_engine_config, merge_overrides, resolve_settings
from ziwei_kline.cli.errors import CliError
from ziwei_kline.io import load_chart

__all__ = ["load_chart_argument", "resolve_engine_settings", "write_output"]

logger = logging.getLogger(__name__)


def load_chart_argument(source: Path, *, fill_missing: bool = False) -> NatalChart:
    """Load ``source`` as a chart, translating failures into :class:`CliError`."""

    if not source.exists():
        raise CliError(
            f"Chart file {source} does not exist",
            category="not_found",
            context={"path": str(source)},
        )
    try:
        return load_chart(source, fill_missing=fill_missing)
    except ValidationError as exc:
        raise CliError(
            f"Invalid chart {source}: {exc}",
            category="validation",
            context={"path": str(source), "reason": exc.reason, **exc.context},
        ) from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise CliError(
            f"Chart file {source} could not be parsed: {exc}",
            category="io",
            context={"path": str(source)},
        ) from exc
    except (OSError, UnicodeDecodeError) as exc:
        # UnicodeDecodeError is a ValueError; it must not be reported as usage
        raise CliError(
            f"Unable to read chart file {source}: {exc}",
            category="io",
            context={"path": str(source)},
        ) from exc
    except ValueError as exc:
        raise CliError(
            str(exc),
            category="usage",
            context={"path": str(source), "suffix": source.suffix},
        ) from exc


def resolve_engine_settings(
    config: Mapping[str, Any],
    *,
    engine_config: Optional[Path] = None,
    policy: Optional[str] = None,
) -> EngineSettings:
    """Combine YAML overrides, the inline ``engine`` table and the ``--policy`` flag.

    Later sources win: the configured ``engine_config`` file, then the
    explicit ``--engine-config`` file, then ``[tool.ziwei_kline.engine]``,
    then ``policy``.
    """

    payloads: list[Mapping[str, Any]] = []
    for candidate in (config.get("engine_config"), engine_config):
        if not candidate:
            continue
        path = Path(candidate)
        try:
            payloads.append(load_engine_config(path))
        except FileNotFoundError as exc:
            raise CliError(
                f"Engine configuration {path} does not exist",
                category="not_found",
                context={"path": str(path)},
            ) from exc
        except (TypeError, ValueError) as exc:
            raise CliError(
                str(exc),
                category="validation",
                context={"path": str(path)},
            ) from exc

    inline = config.get("engine")
    if isinstance(inline, Mapping):
        payloads.append(inline)
    if policy:
        payloads.append({"achievement_policy": policy})

    try:
        return resolve_settings(merge_overrides(*payloads))
    except (KeyError, TypeError, ValueError) as exc:
        message = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
        raise CliError(
            f"Invalid engine settings: {message}",
            category="validation",
        ) from exc


def write_output(content: str | bytes, destination: Path) -> Path:
    destination = destination.expanduser()
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            destination.write_bytes(content)
        else:
            destination.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise CliError(
            f"Unable to write {destination}: {exc}",
            category="io",
            context={"path": str(destination)},
        ) from exc
    logger.info(
        "Export written",
        extra={"event": "cli.export_written", "path": str(destination)},
    )
    return destination
