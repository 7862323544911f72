"""Input/output helpers for chart payloads."""

from ziwei_kline.io.chart import PALACE_ALIASES, chart_from_payload, chart_to_payload, load_chart

__all__ = ["PALACE_ALIASES", "chart_from_payload", "chart_to_payload", "load_chart"]
