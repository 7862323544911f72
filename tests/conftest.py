from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for _path in (SRC_ROOT, ROOT):
    if str(_path) not in sys.path:
        sys.path.insert(0, str(_path))

from kline_core.chart import NatalChart  # noqa: E402
from tests.helpers import build_chart, build_rich_chart  # noqa: E402
from ziwei_kline.examples import sample_chart_payload  # noqa: E402


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture
def empty_chart() -> NatalChart:
    return build_chart()


@pytest.fixture
def rich_chart() -> NatalChart:
    return build_rich_chart()


@pytest.fixture
def sample_chart_file(tmp_path: Path) -> Path:
    target = tmp_path / "chart.json"
    target.write_text(json.dumps(sample_chart_payload(), ensure_ascii=False), encoding="utf-8")
    return target


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run inside an empty directory with no inherited CLI configuration."""

    workdir = tmp_path / "workdir"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    monkeypatch.delenv("ZIWEI_KLINE_CONFIG", raising=False)
    return workdir


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    # only handlers installed by setup_logging; pytest manages its own
    for handler in list(root.handlers):
        if getattr(handler, "_ziwei_kline_handler", False) and handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
