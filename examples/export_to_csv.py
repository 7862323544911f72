"""Example that exports the sample chart's trajectory to CSV."""

from __future__ import annotations

from kline_core import generate_trajectory
from ziwei_kline.examples import sample_chart
from ziwei_kline.exporters import csv_exporter


def main() -> None:
    trajectory = generate_trajectory(sample_chart())
    csv_output = csv_exporter(trajectory.as_dict())
    print(csv_output)


if __name__ == "__main__":
    main()
