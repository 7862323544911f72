from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from ziwei_kline.logging import JsonFormatter, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("ziwei_kline.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_extra_fields() -> None:
    payload = json.loads(
        JsonFormatter().format(_record(event="demo", path=Path("a/b"), tags=("运势",), _hidden=1))
    )

    assert payload["message"] == "hello world"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "ziwei_kline.test"
    assert payload["event"] == "demo"
    assert payload["path"] == str(Path("a/b"))
    assert payload["tags"] == ["运势"]
    assert "_hidden" not in payload
    assert "timestamp" in payload


def test_json_formatter_includes_exceptions() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        import sys

        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert "RuntimeError: boom" in payload["exc_info"]


def test_setup_logging_replaces_its_own_handler() -> None:
    root = logging.getLogger()
    foreign = logging.NullHandler()
    root.addHandler(foreign)

    first = setup_logging({"logging": {"level": "debug", "output": "stderr"}})
    second = setup_logging({"level": "warning", "output": "stdout", "format": "text"})

    assert first not in root.handlers
    assert second in root.handlers
    assert foreign in root.handlers
    assert root.level == logging.WARNING
    assert not isinstance(second.formatter, JsonFormatter)
    root.removeHandler(foreign)


def test_setup_logging_to_file(tmp_path: Path) -> None:
    target = tmp_path / "logs" / "run.log"
    handler = setup_logging({"output": str(target), "level": "info"})

    logging.getLogger("ziwei_kline.test").info("written", extra={"event": "test.file"})
    handler.flush()

    line = target.read_text(encoding="utf-8").strip().splitlines()[-1]
    assert json.loads(line)["event"] == "test.file"


@pytest.mark.parametrize("config", [{"format": "xml"}, {"level": "chatty"}])
def test_setup_logging_rejects_bad_values(config) -> None:
    with pytest.raises(ValueError):
        setup_logging(config)
