"""
Shrink a raster until its PNG encoding fits a byte budget.

Each pass scales both sides by sqrt(budget / size) * SAFETY_MARGIN: PNG size
grows roughly with pixel count, and the margin absorbs compression ratio
changing at the new size. The raster decoded from the source is resampled
directly; the PNG from the previous pass is only used for its size.
"""

import math
from dataclasses import dataclass

from .constants import COMPRESS_LEVEL, MAX_DOWNSCALE_STEPS, SAFETY_MARGIN
from .errors import BudgetUnattainable
from .png_encoder import EncodedImage, encode_png
from .raster import Raster


@dataclass(frozen=True)
class DownscaleResult:
    png: EncodedImage
    steps: int
    sizes: tuple    # (width, height) of every raster that was encoded

    @property
    def width(self):
        return self.png.width

    @property
    def height(self):
        return self.png.height


def next_size(width: int, height: int, encoded_length: int, budget: int):
    """Dimensions for the next pass; never larger, always smaller than before."""
    scale = math.sqrt(budget / encoded_length) * SAFETY_MARGIN
    new_w = max(1, round(width * scale))
    new_h = max(1, round(height * scale))
    if (new_w, new_h) == (width, height):
        # Rounding swallowed the shrink (tiny rasters); force one pixel off
        new_w = max(1, width - 1)
        new_h = max(1, height - 1)
    return min(new_w, width), min(new_h, height)


def fit_to_budget(raster: Raster, budget: int, backend, compress_level: int = COMPRESS_LEVEL,
                  max_steps: int = MAX_DOWNSCALE_STEPS, verbose: bool = False) -> DownscaleResult:
    """Encode ``raster``, resampling it with ``backend`` until the PNG is <= budget bytes.

    Raises BudgetUnattainable if a 1x1 raster is still too large or the
    budget is not met within ``max_steps`` resamples.
    """
    if budget <= 0:
        raise ValueError(f"Byte budget must be positive, got {budget}")

    sizes = []
    steps = 0
    while True:
        png = encode_png(raster, compress_level=compress_level)
        sizes.append(raster.size)
        if verbose:
            print(f"  {raster.width}x{raster.height}: {len(png) / 1024:.1f} KB")

        if len(png) <= budget:
            return DownscaleResult(png, steps, tuple(sizes))

        if raster.size == (1, 1):
            raise BudgetUnattainable(
                f"A 1x1 PNG is {len(png)} bytes, over the {budget} byte budget"
            )
        if steps >= max_steps:
            raise BudgetUnattainable(
                f"Still {len(png)} bytes at {raster.width}x{raster.height} "
                f"after {steps} downscale steps (budget {budget})"
            )

        size = next_size(raster.width, raster.height, len(png), budget)
        # Only the newest raster and PNG are kept alive between passes
        del png
        raster = backend.resample(raster, size)
        steps += 1
