"""Logging utilities for ziwei-kline."""

from ziwei_kline.logging.config import JsonFormatter, setup_logging

__all__ = ["JsonFormatter", "setup_logging"]
