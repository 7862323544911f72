"""Packaged data files for :mod:`kline_core`."""
