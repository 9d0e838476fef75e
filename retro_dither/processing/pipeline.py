from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from typing import Tuple

from PIL import Image

from .buffer import PixelBuffer
from .dither import diffuse_error, ordered_dither
from .kernels import ALGORITHMS, Algorithm, DitherMode
from .tone import to_grayscale
from ..config import SETTINGS, DitherSettings

LOGGER = logging.getLogger("retro-dither")


@dataclass(frozen=True)
class ProcessedStats:
    width: int
    height: int
    process_time_ms: int


def transform(
    buffer: PixelBuffer,
    algorithm: "Algorithm | str",
    brightness: float,
    contrast: float,
) -> PixelBuffer:
    """Tone-map, reduce to luma and dither ``buffer`` into a new buffer.

    The input is never modified. Alpha is copied through untouched; every
    other mode than ``Grayscale Only`` leaves R=G=B at exactly 0 or 255.
    """

    spec = ALGORITHMS[Algorithm.from_name(algorithm)]
    width, height = buffer.size
    pixels = to_grayscale(buffer, brightness, contrast)

    if spec.mode is DitherMode.ORDERED:
        ordered_dither(pixels, width, height)
    elif spec.mode is DitherMode.DIFFUSION:
        diffuse_error(pixels, width, height, spec.kernel)

    return PixelBuffer(width, height, bytes(pixels))


def compute_target_size(
    src_width: int,
    src_height: int,
    resolution_scale: float,
    short_side: int = 384,
) -> Tuple[int, int]:
    """Scale so the shorter side equals ``short_side``, then by ``resolution_scale``."""

    if src_width < 1 or src_height < 1:
        raise ValueError(f"Invalid source size: {src_width}x{src_height}")
    if not 0 < resolution_scale <= 1:
        raise ValueError(f"Resolution scale must be in (0, 1], got {resolution_scale}")

    aspect_ratio = src_width / src_height
    if src_width < src_height:
        target_width = short_side
        target_height = target_width / aspect_ratio
    else:
        target_height = short_side
        target_width = target_height * aspect_ratio

    width = max(1, math.floor(target_width * resolution_scale))
    height = max(1, math.floor(target_height * resolution_scale))
    return width, height


def prepare_source(
    img: Image.Image,
    resolution_scale: float,
    settings: DitherSettings = SETTINGS,
) -> Image.Image:
    size = compute_target_size(
        img.width, img.height, resolution_scale, settings.reference_short_side
    )
    # Nearest neighbour keeps hard pixel edges for the retro look.
    return img.convert("RGBA").resize(size, Image.Resampling.NEAREST)


def process_image(
    img: Image.Image,
    algorithm: "Algorithm | str",
    brightness: float,
    contrast: float,
    resolution_scale: float,
    settings: DitherSettings = SETTINGS,
) -> Tuple[Image.Image, ProcessedStats]:
    start = time.perf_counter()
    algorithm = Algorithm.from_name(algorithm)
    source = PixelBuffer.from_image(prepare_source(img, resolution_scale, settings=settings))
    result = transform(source, algorithm, brightness, contrast)
    elapsed_ms = round((time.perf_counter() - start) * 1000)

    stats = ProcessedStats(width=result.width, height=result.height, process_time_ms=elapsed_ms)
    LOGGER.debug(
        "Dithered %dx%d with %s (brightness=%s, contrast=%s) in %d ms",
        stats.width,
        stats.height,
        algorithm.value,
        brightness,
        contrast,
        stats.process_time_ms,
    )
    return result.to_image(), stats
