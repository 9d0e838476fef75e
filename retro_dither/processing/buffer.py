from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from PIL import Image

CHANNELS = 4


class InvalidBufferError(ValueError):
    """Raised when a pixel buffer's dimensions do not describe its data."""


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major interleaved RGBA pixels.

    Channel ``c`` of pixel ``(x, y)`` lives at ``(y * width + x) * 4 + c``.
    The data is stored as immutable ``bytes`` so callers can never observe a
    transform writing into their buffer.
    """

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise InvalidBufferError(
                    f"invalid buffer dimensions: {name} must be a positive integer, got {value!r}"
                )
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise InvalidBufferError(
                f"invalid buffer dimensions: {self.width}x{self.height} RGBA needs "
                f"{expected} bytes, got {len(self.data)}"
            )
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        offset = (y * self.width + x) * CHANNELS
        r, g, b, a = self.data[offset : offset + CHANNELS]
        return r, g, b, a

    @classmethod
    def from_image(cls, img: Image.Image) -> "PixelBuffer":
        rgba = img.convert("RGBA")
        width, height = rgba.size
        return cls(width, height, rgba.tobytes())

    def to_image(self) -> Image.Image:
        return Image.frombytes("RGBA", self.size, self.data)
