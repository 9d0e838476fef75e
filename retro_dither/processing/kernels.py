"""Dithering algorithm catalogue.

Every algorithm the engine understands is described here as data: an
``Algorithm`` selector maps to an ``AlgorithmSpec`` which says whether the
algorithm stops after grayscale reduction, thresholds against the Bayer
matrix, or diffuses quantization error through a kernel.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from typing import Dict, Optional, Tuple


class UnknownAlgorithmError(ValueError):
    """Raised when an algorithm name does not match any known selector."""


class Algorithm(str, Enum):
    ATKINSON = "Atkinson"
    FLOYD_STEINBERG = "Floyd-Steinberg"
    STUCKI = "Stucki"
    BURKES = "Burkes"
    SIERRA = "Sierra"
    BAYER_4X4 = "Bayer 4x4 (Ordered)"
    GRAYSCALE = "Grayscale Only"

    @classmethod
    def from_name(cls, name: "str | Algorithm") -> "Algorithm":
        if isinstance(name, cls):
            return name
        for member in cls:
            if member.value == name:
                return member
        raise UnknownAlgorithmError(f"Unknown dithering algorithm: {name!r}")


class DitherMode(str, Enum):
    GRAYSCALE = "grayscale"
    ORDERED = "ordered"
    DIFFUSION = "diffusion"


# (dx, dy, numerator) relative to the pixel being quantized.
Tap = Tuple[int, int, int]


@dataclass(frozen=True)
class DiffusionKernel:
    divisor: int
    taps: Tuple[Tap, ...]

    @property
    def total_weight(self) -> Fraction:
        return Fraction(sum(weight for _, _, weight in self.taps), self.divisor)


@dataclass(frozen=True)
class AlgorithmSpec:
    mode: DitherMode
    kernel: Optional[DiffusionKernel] = None


BAYER_4X4: Tuple[Tuple[int, ...], ...] = (
    (0, 8, 2, 10),
    (12, 4, 14, 6),
    (3, 11, 1, 9),
    (15, 7, 13, 5),
)

FLOYD_STEINBERG = DiffusionKernel(
    divisor=16,
    taps=((1, 0, 7), (-1, 1, 3), (0, 1, 5), (1, 1, 1)),
)

# Atkinson only spreads 6/8 of the error; the remainder is dropped on purpose.
ATKINSON = DiffusionKernel(
    divisor=8,
    taps=((1, 0, 1), (2, 0, 1), (-1, 1, 1), (0, 1, 1), (1, 1, 1), (0, 2, 1)),
)

STUCKI = DiffusionKernel(
    divisor=42,
    taps=(
        (1, 0, 8), (2, 0, 4),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
        (-2, 2, 1), (-1, 2, 2), (0, 2, 4), (1, 2, 2), (2, 2, 1),
    ),
)

BURKES = DiffusionKernel(
    divisor=32,
    taps=(
        (1, 0, 8), (2, 0, 4),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 8), (1, 1, 4), (2, 1, 2),
    ),
)

SIERRA = DiffusionKernel(
    divisor=32,
    taps=(
        (1, 0, 5), (2, 0, 3),
        (-2, 1, 2), (-1, 1, 4), (0, 1, 5), (1, 1, 4), (2, 1, 2),
        (-1, 2, 2), (0, 2, 3), (1, 2, 2),
    ),
)

ALGORITHMS: Dict[Algorithm, AlgorithmSpec] = {
    Algorithm.ATKINSON: AlgorithmSpec(DitherMode.DIFFUSION, ATKINSON),
    Algorithm.FLOYD_STEINBERG: AlgorithmSpec(DitherMode.DIFFUSION, FLOYD_STEINBERG),
    Algorithm.STUCKI: AlgorithmSpec(DitherMode.DIFFUSION, STUCKI),
    Algorithm.BURKES: AlgorithmSpec(DitherMode.DIFFUSION, BURKES),
    Algorithm.SIERRA: AlgorithmSpec(DitherMode.DIFFUSION, SIERRA),
    Algorithm.BAYER_4X4: AlgorithmSpec(DitherMode.ORDERED),
    Algorithm.GRAYSCALE: AlgorithmSpec(DitherMode.GRAYSCALE),
}
