"""Command line application entry point for ziwei-kline."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Sequence

from ziwei_kline.cli.errors import CliError, log_cli_error
from ziwei_kline.cli.parser import build_parser
from ziwei_kline.configuration import load_cli_config
from ziwei_kline.logging.config import setup_logging

CommandHandler = Callable[..., str]


def _preliminary_parser() -> argparse.ArgumentParser:
    config_parser = argparse.ArgumentParser(add_help=False)
    config_parser.add_argument("--config", dest="config_path", type=Path, default=None)
    config_parser.add_argument("--log-level", dest="log_level", default=None)
    config_parser.add_argument("--log-output", dest="log_output", default=None)
    config_parser.add_argument(
        "--log-format", dest="log_format", choices=("json", "text"), default=None
    )
    return config_parser


def _logging_config(preliminary: argparse.Namespace, config: Mapping[str, Any]) -> dict[str, Any]:
    raw = config.get("logging", {})
    logging_config = dict(raw) if isinstance(raw, Mapping) else {}
    for key in ("level", "output", "format"):
        value = getattr(preliminary, f"log_{key}")
        if value is not None:
            logging_config[key] = value
    logging_config.setdefault("level", "info")
    logging_config.setdefault("output", "stderr")
    logging_config.setdefault("format", "json")
    return logging_config


def _emit(text: str) -> None:
    sys.stdout.write(text)
    if not text.endswith("\n"):
        sys.stdout.write("\n")


def run_cli(args: Optional[Sequence[str]] = None) -> str:
    """Execute the ziwei-kline command line interface and return its output."""

    preliminary, _ = _preliminary_parser().parse_known_args(args)

    config = load_cli_config(preliminary.config_path)
    config["logging"] = _logging_config(preliminary, config)
    try:
        setup_logging(config)
    except ValueError as exc:
        _emit(str(exc))
        raise SystemExit(2) from exc

    parser = build_parser(config)
    namespace = parser.parse_args(args)
    namespace.config = config

    handler: Optional[CommandHandler] = getattr(namespace, "handler", None)
    if handler is None:
        raise CliError(
            f"Unknown command '{getattr(namespace, 'command', None)}'.",
            category="usage",
            context={"command": getattr(namespace, "command", None)},
        )

    try:
        result = handler(namespace, config=config)
    except CliError as exc:
        if not exc.logged:
            log_cli_error(exc.payload, exc_info=exc)
            exc.logged = True
        if exc.payload.message:
            _emit(exc.payload.message)
        raise SystemExit(exc.status_code) from exc
    if result:
        _emit(result)
    return result


def main() -> None:  # pragma: no cover - thin wrapper
    run_cli()


if __name__ == "__main__":  # pragma: no cover - CLI invocation guard
    main()
