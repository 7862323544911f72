"""Example data bundled with ziwei-kline."""

from ziwei_kline.examples.sample_chart import (
    SAMPLE_CHART_PAYLOAD,
    sample_chart,
    sample_chart_payload,
    write_sample_chart,
)

__all__ = ["SAMPLE_CHART_PAYLOAD", "sample_chart", "sample_chart_payload", "write_sample_chart"]
