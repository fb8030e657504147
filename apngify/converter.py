"""
Image bytes in, size-bounded single-frame APNG out.

decode -> encode/downscale until under budget -> splice acTL/fcTL.
Any stage failing raises its ConversionError subclass and stops the run.
"""

import os
import time
from pathlib import Path

from .apng import splice_apng
from .backends import get_backend
from .constants import APNG_OVERHEAD, COMPRESS_LEVEL, DEFAULT_BYTE_BUDGET
from .downscale import fit_to_budget
from .errors import BudgetUnattainable
from .formats import ImageFormat


def convert(image_bytes: bytes, fmt, byte_budget: int = DEFAULT_BYTE_BUDGET,
            backend=None, compress_level: int = COMPRESS_LEVEL,
            verbose: bool = False) -> bytes:
    """Convert encoded image bytes to a single-frame APNG of at most ``byte_budget`` bytes.

    Args:
        fmt: ImageFormat, MIME type or short name of the input.
        backend: Backend name ("pillow", "opencv"), ImageBackend instance, or None for Pillow.
    """
    fmt = ImageFormat.from_tag(fmt)
    if byte_budget <= 0:
        raise ValueError(f"Byte budget must be positive, got {byte_budget}")
    png_budget = byte_budget - APNG_OVERHEAD
    if png_budget <= 0:
        raise BudgetUnattainable(
            f"Budget of {byte_budget} bytes leaves no room for the image "
            f"(animation chunks alone take {APNG_OVERHEAD})"
        )
    backend = get_backend(backend)

    if verbose:
        print(f"Decoding {fmt.name} ({len(image_bytes) / 1024:.1f} KB) with {backend.name}...")
    raster = backend.decode(image_bytes, fmt)
    if verbose:
        print(f"  {raster.width}x{raster.height}")
        print(f"Encoding PNG (budget {byte_budget / 1024 / 1024:.2f} MB)...")

    fitted = fit_to_budget(raster, png_budget, backend,
                           compress_level=compress_level, verbose=verbose)
    del raster
    if verbose and fitted.steps:
        print(f"  Downscaled {fitted.steps}x to {fitted.width}x{fitted.height}")

    return splice_apng(fitted.png.data)


def default_output_path(input_path) -> Path:
    """converted-<unix ms>.png next to the input."""
    return Path(input_path).parent / f"converted-{int(time.time() * 1000)}.png"


def convert_file(input_path, output_path=None, fmt=None,
                 byte_budget: int = DEFAULT_BYTE_BUDGET, **kwargs) -> Path:
    """Convert an image file; format comes from the extension unless given."""
    input_path = Path(input_path)
    fmt = ImageFormat.from_tag(fmt) if fmt else ImageFormat.from_path(input_path)
    data = input_path.read_bytes()

    apng = convert(data, fmt, byte_budget=byte_budget, **kwargs)

    output_path = Path(output_path) if output_path else default_output_path(input_path)
    os.makedirs(output_path.parent, exist_ok=True)
    output_path.write_bytes(apng)
    return output_path
