"""Convert images to minimal single-frame APNGs under a byte budget."""

from .apng import read_animation, splice_apng
from .backends import ImageBackend, OpenCVBackend, PillowBackend, get_backend
from .converter import convert, convert_file
from .downscale import fit_to_budget
from .errors import (
    BudgetUnattainable,
    ConversionError,
    DecodeError,
    EncodeError,
    MalformedInput,
    UnsupportedFormat,
)
from .formats import ImageFormat
from .png_encoder import EncodedImage, encode_png
from .raster import Raster

__version__ = "0.1.0"
