import csv
import io
import json
import sys

import pytest

from kline_core.simulator import generate_trajectory
from tests.helpers import build_rich_chart
from ziwei_kline.cli.workflows import generate_payload
from ziwei_kline.exporters import (
    CSV_COLUMNS,
    ExportDependencyError,
    csv_exporter,
    exporters_registry,
    json_exporter,
    markdown_exporter,
    parquet_exporter,
    trajectory_rows,
)


@pytest.fixture
def trajectory():
    return generate_trajectory(build_rich_chart())


@pytest.fixture
def payload(trajectory):
    return generate_payload(build_rich_chart(), trajectory)


def test_registry_names():
    assert set(exporters_registry) == {"json", "csv", "markdown", "parquet"}


def test_trajectory_rows_accept_every_payload_shape(trajectory, payload):
    direct = trajectory_rows(trajectory)

    assert direct == trajectory_rows(payload)
    assert direct == trajectory_rows({"trajectory": trajectory})
    assert direct[5]["age"] == 5
    assert direct[5]["drivers"] == ";".join(trajectory[5].drivers)

    with pytest.raises(TypeError):
        trajectory_rows({"seed": 1})


def test_json_exporter_keeps_chinese_text(payload):
    rendered = json_exporter(payload)

    assert "坐守" in rendered
    assert json.loads(rendered) == json.loads(json.dumps(payload))


def test_csv_exporter_columns(trajectory, payload):
    rows = list(csv.DictReader(io.StringIO(csv_exporter(payload))))

    assert tuple(rows[0]) == CSV_COLUMNS
    assert len(rows) == 101
    assert rows[10]["luck"] == str(trajectory[10].luck)
    assert rows[10]["confidence"] == f"{trajectory[10].confidence:.3f}"


def test_markdown_exporter_table_and_metadata(trajectory, payload):
    lines = markdown_exporter(payload).splitlines()

    assert lines[0] == "| 年龄 | 运势 | 成就 | 置信度 | 驱动因素 |"
    assert lines[2].startswith(f"| 0 | {trajectory[0].luck} | {trajectory[0].achievement} |")
    assert lines[-3:] == [
        f"- **Seed**: {trajectory.seed}",
        f"- **Cap**: {trajectory.cap}",
        "- **Policy**: regime",
    ]


def test_parquet_exporter_reports_missing_pandas(payload, monkeypatch):
    monkeypatch.setitem(sys.modules, "pandas", None)

    with pytest.raises(ExportDependencyError):
        parquet_exporter(payload)


def test_parquet_exporter_round_trip(tmp_path, trajectory, payload):
    pd = pytest.importorskip("pandas")
    pytest.importorskip("pyarrow")

    target = tmp_path / "trajectory.parquet"
    target.write_bytes(parquet_exporter(payload))
    frame = pd.read_parquet(target)

    assert list(frame.columns) == list(CSV_COLUMNS)
    assert frame["luck"].tolist() == [point.luck for point in trajectory]
