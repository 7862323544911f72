"""Command line utilities for ziwei-kline."""

from ziwei_kline.cli.app import main, run_cli
from ziwei_kline.cli.errors import CliError

__all__ = ["CliError", "main", "run_cli"]
