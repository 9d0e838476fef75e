"""Monochrome dithering engine and the image preparation around it."""

from .buffer import InvalidBufferError, PixelBuffer
from .dither import diffuse_error, ordered_dither
from .kernels import ALGORITHMS, Algorithm, AlgorithmSpec, DiffusionKernel, DitherMode, UnknownAlgorithmError
from .pipeline import ProcessedStats, compute_target_size, prepare_source, process_image, transform
from .tone import contrast_factor, to_grayscale

__all__ = [
    "InvalidBufferError",
    "PixelBuffer",
    "diffuse_error",
    "ordered_dither",
    "ALGORITHMS",
    "Algorithm",
    "AlgorithmSpec",
    "DiffusionKernel",
    "DitherMode",
    "UnknownAlgorithmError",
    "ProcessedStats",
    "compute_target_size",
    "prepare_source",
    "process_image",
    "transform",
    "contrast_factor",
    "to_grayscale",
]
