"""Seed derivation and the keyed stochastic channels.

There is no random number generator object in the engine. Every stochastic
draw is a pure function of ``(seed, channel, index)`` so draws can be made in
any order, from any index, and always reproduce.
"""

from __future__ import annotations

from enum import IntEnum

from kline_core.chart import NatalChart, Palace

__all__ = [
    "Channel",
    "FNV_OFFSET_BASIS",
    "FNV_PRIME",
    "canonical_chart_text",
    "derive_seed",
    "fmix32",
    "fnv1a_32",
    "sample",
    "sample_centered",
]


FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
_MASK32 = 0xFFFFFFFF
_GOLDEN = 0x9E3779B1
_KNUTH = 2654435761
_SCALE = float(1 << 32)


class Channel(IntEnum):
    """Independent stochastic streams."""

    LUCK_NOISE = 1
    LUCK_NOISE_SECONDARY = 2
    SHOCK = 3
    SPARKLE = 4
    REGIME = 5
    ACHIEVEMENT_NOISE = 6
    TRAIT = 7
    INITIAL = 8


def fnv1a_32(data: bytes | str) -> int:
    """Return the 32-bit FNV-1a hash of ``data`` (strings are UTF-8 encoded)."""

    if isinstance(data, str):
        data = data.encode("utf-8")
    value = FNV_OFFSET_BASIS
    for byte in data:
        value ^= byte
        value = (value * FNV_PRIME) & _MASK32
    return value


def fmix32(value: int) -> int:
    """Murmur3 32-bit finaliser."""

    value &= _MASK32
    value ^= value >> 16
    value = (value * 0x85EBCA6B) & _MASK32
    value ^= value >> 13
    value = (value * 0xC2B2AE35) & _MASK32
    value ^= value >> 16
    return value


def _palace_text(palace: Palace) -> str:
    return ":".join(
        (
            palace.name,
            ",".join(palace.main_stars),
            ",".join(palace.sub_stars),
            ",".join(palace.transforms),
            palace.decade_range or "",
        )
    )


def canonical_chart_text(chart: NatalChart) -> str:
    """Serialise the chart content in canonical palace order."""

    return "|".join(_palace_text(palace) for palace in chart.canonical_palaces)


def derive_seed(chart: NatalChart) -> int:
    """Return the reproducible 32-bit seed of ``chart``."""

    return fnv1a_32(canonical_chart_text(chart))


def sample(seed: int, channel: int, index: int) -> float:
    """Return a value in ``[0, 1)`` for ``(seed, channel, index)``."""

    salt = fmix32(((int(channel) + 1) * _GOLDEN) & _MASK32)
    key = (((int(index) + 1) * _KNUTH) ^ salt) & _MASK32
    return fmix32((int(seed) & _MASK32) ^ key) / _SCALE


def sample_centered(seed: int, channel: int, index: int) -> float:
    """Return a value in ``[-0.5, 0.5)``."""

    return sample(seed, channel, index) - 0.5
