"""Argument parsing for the ziwei-kline CLI."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Mapping, Optional

from kline_core.config import ACHIEVEMENT_POLICIES
from ziwei_kline._version import __version__
from ziwei_kline.cli.workflows import handle_generate, handle_prompt, handle_seed, handle_summary
from ziwei_kline.exporters import exporters_registry

__all__ = ["build_parser"]


def _seed_value(raw: str) -> int:
    try:
        value = int(raw, 0)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid seed '{raw}'") from exc
    if value < 0:
        raise argparse.ArgumentTypeError("seed must be non-negative")
    return value


def _add_chart_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "chart",
        type=Path,
        help="Chart file (.json, .yaml or .yml) with the twelve palaces.",
    )
    parser.add_argument(
        "--fill-missing",
        action="store_true",
        help="Add empty palaces for names absent from the chart file.",
    )


def _add_engine_arguments(parser: argparse.ArgumentParser, cli_cfg: Mapping[str, Any]) -> None:
    parser.add_argument(
        "--seed",
        type=_seed_value,
        default=None,
        help="Override the seed derived from the chart content.",
    )
    default_policy = cli_cfg.get("policy")
    parser.add_argument(
        "--policy",
        choices=ACHIEVEMENT_POLICIES,
        default=default_policy if default_policy in ACHIEVEMENT_POLICIES else None,
        help="Achievement policy (default: regime).",
    )
    parser.add_argument(
        "--engine-config",
        dest="engine_config",
        type=Path,
        default=None,
        help="YAML file with engine setting overrides.",
    )


def build_parser(config: Optional[Mapping[str, Any]] = None) -> argparse.ArgumentParser:
    config = dict(config or {})
    logging_cfg = dict(config.get("logging", {}))
    cli_cfg_raw = config.get("cli", {})
    cli_cfg = dict(cli_cfg_raw) if isinstance(cli_cfg_raw, Mapping) else {}

    parser = argparse.ArgumentParser(
        prog="ziwei-kline",
        description="Zi Wei Dou Shu life trajectory (luck and achievement K-line) generator",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        dest="config_path",
        type=Path,
        default=None,
        help="Path to the pyproject.toml (or its directory) to load.",
    )
    parser.add_argument(
        "--log-level",
        dest="log_level",
        default=logging_cfg.get("level", "info"),
        help="Logging level (e.g. debug, info, warning).",
    )
    parser.add_argument(
        "--log-output",
        dest="log_output",
        default=logging_cfg.get("output", "stderr"),
        help="Logging destination (stdout, stderr or a file path).",
    )
    parser.add_argument(
        "--log-format",
        dest="log_format",
        choices=("json", "text"),
        default=logging_cfg.get("format", "json"),
        help="Logging formatter (json or text).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    default_export = cli_cfg.get("export")
    if default_export not in exporters_registry:
        default_export = "json"
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the luck and achievement trajectory for ages 0-100.",
    )
    _add_chart_argument(generate_parser)
    _add_engine_arguments(generate_parser, cli_cfg)
    generate_parser.add_argument(
        "--export",
        choices=sorted(exporters_registry.keys()),
        default=default_export,
        help=f"Output format (default: {default_export}).",
    )
    generate_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the export to this file instead of stdout.",
    )
    generate_parser.set_defaults(handler=handle_generate)

    summary_parser = subparsers.add_parser(
        "summary",
        help="Print scores, life phases and the tone proverb as JSON.",
    )
    _add_chart_argument(summary_parser)
    _add_engine_arguments(summary_parser, cli_cfg)
    summary_parser.set_defaults(handler=handle_summary)

    prompt_parser = subparsers.add_parser(
        "prompt",
        help="Build the analysis prompt, or the chat context when --question is given.",
    )
    _add_chart_argument(prompt_parser)
    _add_engine_arguments(prompt_parser, cli_cfg)
    prompt_parser.add_argument(
        "--question",
        default=None,
        help="Follow-up question to embed in a chat context.",
    )
    prompt_parser.set_defaults(handler=handle_prompt)

    seed_parser = subparsers.add_parser("seed", help="Print the seed derived from a chart.")
    _add_chart_argument(seed_parser)
    seed_parser.set_defaults(handler=handle_seed)

    return parser
