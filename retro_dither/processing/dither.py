from __future__ import annotations

from array import array

from .buffer import CHANNELS
from .kernels import BAYER_4X4, DiffusionKernel

BLACK = 0
WHITE = 255
MIDPOINT = 128


def _seed_accumulator(pixels: bytearray) -> array:
    # Single precision matches the reference renderer's accumulated rounding.
    # A bytearray initializer would be read as raw float bytes, hence the list.
    return array("f", list(pixels[::CHANNELS]))


def _write_level(pixels: bytearray, index: int, level: int) -> None:
    offset = index * CHANNELS
    pixels[offset] = level
    pixels[offset + 1] = level
    pixels[offset + 2] = level


def ordered_dither(pixels: bytearray, width: int, height: int) -> bytearray:
    """Threshold gray ``pixels`` in place against the tiled Bayer 4x4 matrix."""

    thresholds = [[value / 16 * 255 for value in row] for row in BAYER_4X4]
    values = _seed_accumulator(pixels)
    for y in range(height):
        row = thresholds[y % 4]
        for x in range(width):
            index = y * width + x
            _write_level(pixels, index, WHITE if values[index] > row[x % 4] else BLACK)
    return pixels


def diffuse_error(
    pixels: bytearray, width: int, height: int, kernel: DiffusionKernel
) -> bytearray:
    """Quantize gray ``pixels`` in place to black/white, spreading the error.

    Pixels are visited in raster order. Each quantization error is pushed to
    the kernel's taps; taps that fall outside the image are dropped.
    """

    accumulator = _seed_accumulator(pixels)
    divisor = kernel.divisor
    taps = kernel.taps
    for y in range(height):
        for x in range(width):
            index = y * width + x
            old = accumulator[index]
            new = BLACK if old < MIDPOINT else WHITE
            _write_level(pixels, index, new)
            error = old - new
            if not error:
                continue
            for dx, dy, weight in taps:
                nx = x + dx
                ny = y + dy
                if 0 <= nx < width and 0 <= ny < height:
                    accumulator[ny * width + nx] += error * weight / divisor
    return pixels
