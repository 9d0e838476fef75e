from __future__ import annotations

import math
from typing import List

from .buffer import CHANNELS, PixelBuffer

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


def contrast_factor(contrast: float) -> float:
    """Return the contrast multiplier for a slider value in [-100, 100].

    The formula has a pole at ``contrast == 259``; that value maps to
    ``inf``. Channels then clamp to 0 or 255, except a channel of exactly
    128 which becomes NaN and turns the whole pixel black.
    """

    denominator = 255 * (259 - contrast)
    if denominator == 0:
        return math.inf
    return (259 * (contrast + 255)) / denominator


def clamp_channel(value: float) -> float:
    # NaN (inf * 0 at the contrast pole) passes through so the luma sum stays NaN.
    if math.isnan(value):
        return value
    return min(255.0, max(0.0, value))


def tone_lut(brightness: float, contrast: float) -> List[float]:
    factor = contrast_factor(contrast)
    return [
        clamp_channel(factor * ((value + brightness) - 128) + 128)
        for value in range(256)
    ]


def to_byte(value: float) -> int:
    # An undefined gray level is stored as black.
    if math.isnan(value):
        return 0
    return int(min(255, max(0, round(value))))


def to_grayscale(buffer: PixelBuffer, brightness: float, contrast: float) -> bytearray:
    """Apply brightness/contrast, then collapse RGB to luma.

    Returns a fresh interleaved RGBA array with R, G and B all holding the
    rounded gray level and alpha copied from ``buffer``.
    """

    lut = tone_lut(brightness, contrast)
    wr, wg, wb = LUMA_WEIGHTS
    out = bytearray(buffer.data)
    for offset in range(0, len(out), CHANNELS):
        gray = to_byte(
            wr * lut[out[offset]] + wg * lut[out[offset + 1]] + wb * lut[out[offset + 2]]
        )
        out[offset] = gray
        out[offset + 1] = gray
        out[offset + 2] = gray
    return out
