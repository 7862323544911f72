"""Logging configuration helpers shared by the CLI and library callers."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, TextIO

__all__ = ["JsonFormatter", "setup_logging"]


_HANDLER_MARKER = "_ziwei_kline_handler"

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes present on every LogRecord; anything else arrived through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if isinstance(value, Path):
        return str(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object.

    Fields passed through ``extra=`` are merged into the top-level payload.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=_json_default)


def _resolve_level(value: Any) -> int:
    if isinstance(value, int):
        return value
    name = str(value or "info").strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown logging level '{value}'.")
    return level


def _resolve_stream(output: str) -> Optional[TextIO]:
    lowered = output.strip().lower()
    if lowered == "stdout":
        return sys.stdout
    if lowered == "stderr":
        return sys.stderr
    return None


def setup_logging(config: Optional[Mapping[str, Any]] = None) -> logging.Handler:
    """Configure the root logger from the ``logging`` table of ``config``.

    Recognised keys are ``level`` (name or number), ``output`` (``stdout``,
    ``stderr`` or a file path) and ``format`` (``json`` or ``text``). Calling
    the function again replaces the handler installed by a previous call.
    """

    config = dict(config or {})
    raw_logging = config.get("logging", config)
    logging_cfg = dict(raw_logging) if isinstance(raw_logging, Mapping) else {}

    level = _resolve_level(logging_cfg.get("level", "info"))
    output = str(logging_cfg.get("output", "stderr"))
    fmt = str(logging_cfg.get("format", "json")).strip().lower()
    if fmt not in {"json", "text"}:
        raise ValueError(f"Unknown logging format '{fmt}'; expected 'json' or 'text'.")

    stream = _resolve_stream(output)
    handler: logging.Handler
    if stream is not None:
        handler = logging.StreamHandler(stream)
    else:
        path = Path(output).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, encoding="utf-8")

    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, _HANDLER_MARKER, False):
            root.removeHandler(existing)
            existing.close()
    root.addHandler(handler)
    root.setLevel(level)
    return handler
