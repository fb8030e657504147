"""
Baseline PNG encoder for RGBA rasters.

Writes signature, IHDR (8-bit truecolour + alpha, no interlace), IDAT
chunks holding the deflated, filtered scanlines, and IEND.
"""

import struct
import zlib
from dataclasses import dataclass

import numpy as np

from .chunks import make_chunk
from .constants import (
    BIT_DEPTH,
    COLOR_TYPE_RGBA,
    COMPRESS_LEVEL,
    COMPRESSION_METHOD,
    FILTER_METHOD,
    IDAT_CHUNK_SIZE,
    INTERLACE_METHOD,
    PNG_SIGNATURE,
)
from .errors import EncodeError
from .raster import Raster

BYTES_PER_PIXEL = 4

FILTER_NONE = 0
FILTER_SUB = 1
FILTER_UP = 2
FILTER_AVERAGE = 3
FILTER_PAETH = 4

FILTER_STRATEGIES = {
    "none": FILTER_NONE,
    "sub": FILTER_SUB,
    "up": FILTER_UP,
    "average": FILTER_AVERAGE,
    "paeth": FILTER_PAETH,
    "adaptive": None,
}

# Rows filtered per pass; bounds temporary memory on very large rasters
ROW_BAND = 256


@dataclass(frozen=True)
class EncodedImage:
    """An encoded PNG and the dimensions it was encoded at."""

    data: bytes
    width: int
    height: int

    def __len__(self):
        return len(self.data)


def _filter_band(rows: np.ndarray, prev: np.ndarray, filter_type):
    """Filter a band of scanlines.

    rows/prev are (n, stride) uint8 arrays; prev[i] is the unfiltered row
    above rows[i] (zeros above the first image row). Filtering works on the
    original bytes, so every row is independent and the band is done at once.
    Returns an (n, stride + 1) array with the filter type byte first.
    """
    n, stride = rows.shape
    left = np.zeros_like(rows)
    left[:, BYTES_PER_PIXEL:] = rows[:, :-BYTES_PER_PIXEL]
    upleft = np.zeros_like(prev)
    upleft[:, BYTES_PER_PIXEL:] = prev[:, :-BYTES_PER_PIXEL]

    def paeth():
        a = left.astype(np.int16)
        b = prev.astype(np.int16)
        c = upleft.astype(np.int16)
        p = a + b - c
        pa = np.abs(p - a)
        pb = np.abs(p - b)
        pc = np.abs(p - c)
        pred = np.where((pa <= pb) & (pa <= pc), a, np.where(pb <= pc, b, c))
        return rows - pred.astype(np.uint8)

    candidates = {
        FILTER_NONE: lambda: rows,
        FILTER_SUB: lambda: rows - left,
        FILTER_UP: lambda: rows - prev,
        FILTER_AVERAGE: lambda: rows - ((left.astype(np.uint16) + prev) >> 1).astype(np.uint8),
        FILTER_PAETH: paeth,
    }

    out = np.empty((n, stride + 1), dtype=np.uint8)
    if filter_type is not None:
        out[:, 0] = filter_type
        out[:, 1:] = candidates[filter_type]()
        return out

    # Adaptive: per row, the filter with the smallest sum of absolute
    # differences (bytes read as signed)
    filtered = [candidates[f]() for f in sorted(candidates)]
    scores = np.stack([
        np.abs(f.view(np.int8).astype(np.int32)).sum(axis=1) for f in filtered
    ])
    best = scores.argmin(axis=0)
    out[:, 0] = best
    stacked = np.stack(filtered)
    out[:, 1:] = stacked[best, np.arange(n)]
    return out


def _compress_scanlines(raster: Raster, compress_level: int, filter_type) -> bytes:
    stride = raster.width * BYTES_PER_PIXEL
    rows = raster.pixels.reshape(raster.height, stride)
    compressor = zlib.compressobj(compress_level)

    parts = []
    for start in range(0, raster.height, ROW_BAND):
        band = rows[start:start + ROW_BAND]
        prev = np.zeros_like(band)
        if start > 0:
            prev[0] = rows[start - 1]
        prev[1:] = band[:-1]
        parts.append(compressor.compress(_filter_band(band, prev, filter_type).tobytes()))
    parts.append(compressor.flush())
    return b"".join(parts)


def encode_png(raster: Raster, compress_level: int = COMPRESS_LEVEL,
               filter_strategy: str = "adaptive") -> EncodedImage:
    """Encode ``raster`` as a baseline RGBA PNG.

    Raises EncodeError if memory or zlib fail; ValueError for an unknown
    filter strategy or compression level.
    """
    if filter_strategy not in FILTER_STRATEGIES:
        raise ValueError(
            f"Unknown filter strategy {filter_strategy!r} "
            f"(choose from {', '.join(FILTER_STRATEGIES)})"
        )
    if not 0 <= compress_level <= 9:
        raise ValueError(f"compress_level must be 0-9, got {compress_level}")

    ihdr = struct.pack(
        ">IIBBBBB",
        raster.width,
        raster.height,
        BIT_DEPTH,
        COLOR_TYPE_RGBA,
        COMPRESSION_METHOD,
        FILTER_METHOD,
        INTERLACE_METHOD,
    )

    try:
        idat = _compress_scanlines(raster, compress_level, FILTER_STRATEGIES[filter_strategy])
        out = bytearray(PNG_SIGNATURE)
        out += make_chunk(b"IHDR", ihdr)
        for i in range(0, len(idat), IDAT_CHUNK_SIZE):
            out += make_chunk(b"IDAT", idat[i:i + IDAT_CHUNK_SIZE])
        out += make_chunk(b"IEND", b"")
    except (MemoryError, zlib.error) as exc:
        raise EncodeError(
            f"Could not encode {raster.width}x{raster.height} PNG: {exc!r}"
        ) from exc

    return EncodedImage(bytes(out), raster.width, raster.height)
