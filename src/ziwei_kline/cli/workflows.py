"""Command handlers for the ziwei-kline CLI."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from kline_core.chart import NatalChart
from kline_core.models import Trajectory
from kline_core.seeding import derive_seed
from kline_core.simulator import TrajectorySimulator
from ziwei_kline.analysis import (
    DEVELOPER_PROMPT_CN,
    SYSTEM_PROMPT_CN,
    CHAT_SYSTEM_PROMPT_CN,
    build_chat_context,
    build_phases,
    build_scores,
    build_tone_proverb,
    build_user_prompt,
)
from ziwei_kline.cli.errors import CliError
from ziwei_kline.cli.io import load_chart_argument, resolve_engine_settings, write_output
from ziwei_kline.exporters import BINARY_EXPORTERS, ExportDependencyError, exporters_registry

__all__ = [
    "generate_payload",
    "handle_generate",
    "handle_prompt",
    "handle_seed",
    "handle_summary",
]

logger = logging.getLogger(__name__)


def _load_inputs(
    namespace: argparse.Namespace, config: Mapping[str, Any]
) -> Tuple[NatalChart, Trajectory]:
    chart = load_chart_argument(Path(namespace.chart), fill_missing=bool(namespace.fill_missing))
    settings = resolve_engine_settings(
        config,
        engine_config=getattr(namespace, "engine_config", None),
        policy=getattr(namespace, "policy", None),
    )
    trajectory = TrajectorySimulator(settings).run(chart, seed=getattr(namespace, "seed", None))
    logger.info(
        "Trajectory ready",
        extra={
            "event": "cli.trajectory",
            "chart": str(namespace.chart),
            "seed": trajectory.seed,
            "policy": trajectory.policy,
        },
    )
    return chart, trajectory


def generate_payload(chart: NatalChart, trajectory: Trajectory) -> Dict[str, Any]:
    payload = trajectory.as_dict()
    payload["scores"] = build_scores(chart, trajectory).as_dict()
    payload["phases"] = build_phases(trajectory).as_dict()
    return payload


def handle_generate(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    exporter_name: str = namespace.export
    output: Optional[Path] = namespace.output
    if exporter_name in BINARY_EXPORTERS and output is None:
        raise CliError(
            f"The '{exporter_name}' exporter writes binary data and requires --output.",
            category="usage",
            context={"export": exporter_name},
        )

    chart, trajectory = _load_inputs(namespace, config)
    payload = generate_payload(chart, trajectory)
    try:
        rendered = exporters_registry[exporter_name](payload)
    except ExportDependencyError as exc:
        raise CliError(str(exc), category="usage", context={"export": exporter_name}) from exc

    if output is not None:
        destination = write_output(rendered, output)
        return f"Wrote {exporter_name} trajectory to {destination}"
    return str(rendered)


def handle_summary(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    chart, trajectory = _load_inputs(namespace, config)
    scores = build_scores(chart, trajectory)
    proverb = build_tone_proverb(chart, trajectory, scores)
    summary = {
        "seed": trajectory.seed,
        "policy": trajectory.policy,
        "cap": trajectory.cap,
        "scores": scores.as_dict(),
        "phases": build_phases(trajectory).as_dict(),
        "tone": {"theme": proverb.theme.value, "text": proverb.text},
    }
    return json.dumps(summary, indent=2, ensure_ascii=False)


def handle_prompt(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    chart, trajectory = _load_inputs(namespace, config)
    scores = build_scores(chart, trajectory)
    question: Optional[str] = namespace.question
    sections: List[str]
    if question:
        sections = [
            "# system",
            CHAT_SYSTEM_PROMPT_CN,
            "# user",
            build_chat_context(chart, trajectory, scores, question),
        ]
    else:
        sections = [
            "# system",
            SYSTEM_PROMPT_CN,
            "# developer",
            DEVELOPER_PROMPT_CN,
            "# user",
            build_user_prompt(chart, trajectory, scores),
        ]
    return "\n\n".join(sections)


def handle_seed(namespace: argparse.Namespace, *, config: Mapping[str, Any]) -> str:
    chart = load_chart_argument(Path(namespace.chart), fill_missing=bool(namespace.fill_missing))
    return str(derive_seed(chart))
