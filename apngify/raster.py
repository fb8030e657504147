"""Decoded pixel grids: 8-bit RGBA, row-major."""

from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass(frozen=True, eq=False)
class Raster:
    """Pixel grid of ``height`` rows by ``width`` RGBA pixels.

    ``pixels`` is a C-contiguous ``uint8`` array of shape (height, width, 4).
    """

    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Raster must be at least 1x1, got {self.width}x{self.height}")
        expected = (self.height, self.width, 4)
        if self.pixels.shape != expected:
            raise ValueError(f"Pixel array shape {self.pixels.shape} != {expected}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Pixel array must be uint8, got {self.pixels.dtype}")
        if not self.pixels.flags["C_CONTIGUOUS"]:
            object.__setattr__(self, "pixels", np.ascontiguousarray(self.pixels))

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Raster":
        h, w = arr.shape[:2]
        return cls(w, h, np.ascontiguousarray(arr, dtype=np.uint8))

    @classmethod
    def from_samples(cls, width: int, height: int, samples) -> "Raster":
        """Build from a row-major RGBA byte sequence of width*height*4 bytes."""
        if len(samples) != width * height * 4:
            raise ValueError(
                f"Sample count mismatch: got {len(samples)} expected {width * height * 4}"
            )
        arr = np.frombuffer(bytes(samples), dtype=np.uint8).reshape(height, width, 4)
        return cls(width, height, arr.copy())

    @classmethod
    def from_image(cls, img: Image.Image) -> "Raster":
        if img.mode != 'RGBA':
            img = img.convert('RGBA')
        return cls.from_array(np.asarray(img))

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    @property
    def size(self):
        return self.width, self.height

    @property
    def samples(self) -> bytes:
        return self.pixels.tobytes()
