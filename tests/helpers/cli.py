"""CLI-related test helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

import pytest

from ziwei_kline.cli import run_cli as _run_cli


def run_cli_in_tmp(
    args: Sequence[str] | Iterable[str],
    *,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str] | None = None,
    capture_output: bool = False,
) -> str | tuple[str, pytest.CaptureResult[str]]:
    """Execute ``run_cli`` from within ``tmp_path``.

    Parameters
    ----------
    args:
        Command-line arguments to pass to :func:`ziwei_kline.cli.run_cli`.
    tmp_path:
        Temporary directory that should be treated as the working directory for
        the duration of the command invocation.
    monkeypatch:
        ``pytest`` fixture used to swap the process working directory.
    capsys:
        Optional ``pytest`` capturing fixture. Required when ``capture_output``
        is ``True``.
    capture_output:
        When ``True`` the return value includes the captured stdout/stderr via
        ``capsys.readouterr()``.
    """

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("ZIWEI_KLINE_CONFIG", raising=False)
    result = _run_cli(list(args))

    if capture_output:
        if capsys is None:
            raise ValueError("capsys fixture is required when capture_output=True")
        return result, capsys.readouterr()
    return result
