"""Exporter registry for trajectory payloads."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from enum import Enum
from io import BytesIO, StringIO
from typing import Any, Dict, Iterable, List, Mapping, Protocol

from kline_core.models import Trajectory

__all__ = [
    "BINARY_EXPORTERS",
    "CSV_COLUMNS",
    "Exporter",
    "ExportDependencyError",
    "csv_exporter",
    "exporters_registry",
    "json_exporter",
    "markdown_exporter",
    "parquet_exporter",
    "trajectory_rows",
]


CSV_COLUMNS = ("age", "luck", "achievement", "confidence", "drivers")
DRIVER_SEPARATOR = ";"

_PARQUET_DEPENDENCY_MESSAGE = (
    "Parquet export requires the 'pandas' package and a compatible engine "
    "(install 'pyarrow' or 'fastparquet')."
)


class ExportDependencyError(RuntimeError):
    """Raised when an exporter's optional dependency is unavailable."""


class Exporter(Protocol):
    """Exporter callable protocol."""

    def __call__(self, results: Mapping[str, Any]) -> str | bytes:  # pragma: no cover - interface only
        ...


def _normalise(value: Any) -> Any:
    if isinstance(value, Trajectory):
        return value.as_dict()
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return _normalise(asdict(value))
    if isinstance(value, (list, tuple)):
        return [_normalise(item) for item in value]
    if isinstance(value, Mapping):
        return {str(key): _normalise(item) for key, item in value.items()}
    return value


def _points(results: Mapping[str, Any] | Trajectory) -> List[Mapping[str, Any]]:
    payload = _normalise(results)
    if isinstance(payload, Mapping) and "trajectory" in payload and "points" not in payload:
        payload = payload["trajectory"]
    points = payload.get("points") if isinstance(payload, Mapping) else None
    if not isinstance(points, list):
        raise TypeError("Trajectory exporters expect a payload with a 'points' list")
    return points


def trajectory_rows(results: Mapping[str, Any] | Trajectory) -> List[Dict[str, Any]]:
    """Flatten trajectory points into one row per age."""

    rows: List[Dict[str, Any]] = []
    for point in _points(results):
        drivers: Iterable[str] = point.get("drivers") or ()
        rows.append(
            {
                "age": int(point["age"]),
                "luck": int(point["luck"]),
                "achievement": int(point["achievement"]),
                "confidence": float(point["confidence"]),
                "drivers": DRIVER_SEPARATOR.join(str(item) for item in drivers),
            }
        )
    return rows


def json_exporter(results: Mapping[str, Any]) -> str:
    payload = _normalise(results)
    return json.dumps(payload, indent=2, sort_keys=True, ensure_ascii=False)


def csv_exporter(results: Mapping[str, Any]) -> str:
    import csv

    buffer = StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\n")
    writer.writeheader()
    for row in trajectory_rows(results):
        writer.writerow({**row, "confidence": f"{row['confidence']:.3f}"})
    return buffer.getvalue()


def markdown_exporter(results: Mapping[str, Any]) -> str:
    """Render the trajectory as a Markdown table followed by run metadata."""

    payload = _normalise(results)
    lines = [
        "| 年龄 | 运势 | 成就 | 置信度 | 驱动因素 |",
        "| --- | --- | --- | --- | --- |",
    ]
    for row in trajectory_rows(payload):
        drivers = row["drivers"].replace(DRIVER_SEPARATOR, "，") or "-"
        lines.append(
            f"| {row['age']} | {row['luck']} | {row['achievement']} | "
            f"{row['confidence']:.2f} | {drivers} |"
        )

    if isinstance(payload, Mapping):
        meta = payload.get("trajectory", payload)
        details = [
            (label, meta.get(key))
            for label, key in (("Seed", "seed"), ("Cap", "cap"), ("Policy", "policy"))
            if isinstance(meta, Mapping) and meta.get(key) is not None
        ]
        if details:
            lines.append("")
            lines.extend(f"- **{label}**: {value}" for label, value in details)
    return "\n".join(lines)


def parquet_exporter(results: Mapping[str, Any]) -> bytes:
    rows = trajectory_rows(results)
    try:
        import pandas as pd  # type: ignore
    except ModuleNotFoundError as exc:
        raise ExportDependencyError(_PARQUET_DEPENDENCY_MESSAGE) from exc

    frame = pd.DataFrame(rows, columns=list(CSV_COLUMNS))
    buffer = BytesIO()
    try:
        frame.to_parquet(buffer, index=False)
    except (ImportError, ValueError) as exc:
        raise ExportDependencyError(_PARQUET_DEPENDENCY_MESSAGE) from exc
    return buffer.getvalue()


exporters_registry: Dict[str, Exporter] = {
    "json": json_exporter,
    "csv": csv_exporter,
    "markdown": markdown_exporter,
    "parquet": parquet_exporter,
}

BINARY_EXPORTERS = frozenset({"parquet"})
