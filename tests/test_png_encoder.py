import io
import struct
import zlib

import numpy as np
import pytest
from PIL import Image

from apngify import png_encoder
from apngify.chunks import parse_png, read_ihdr
from apngify.constants import IDAT_CHUNK_SIZE, PNG_SIGNATURE
from apngify.errors import EncodeError
from apngify.png_encoder import FILTER_STRATEGIES, encode_png
from apngify.raster import Raster

from conftest import noise


def decode(png: bytes) -> np.ndarray:
    img = Image.open(io.BytesIO(png))
    assert img.format == "PNG"
    assert img.mode == "RGBA"
    return np.asarray(img)


@pytest.mark.parametrize("strategy", sorted(FILTER_STRATEGIES))
def test_every_filter_strategy_decodes_losslessly(noise_raster, strategy):
    png = encode_png(noise_raster, filter_strategy=strategy)
    assert np.array_equal(decode(png.data), noise_raster.pixels)


@pytest.mark.parametrize("strategy", sorted(FILTER_STRATEGIES))
def test_filters_across_row_bands(monkeypatch, gradient, strategy):
    monkeypatch.setattr(png_encoder, "ROW_BAND", 5)
    raster = Raster.from_array(gradient)
    png = encode_png(raster, filter_strategy=strategy)
    assert np.array_equal(decode(png.data), gradient)


def test_layout_and_header(gradient):
    png = encode_png(Raster.from_array(gradient))
    assert png.data.startswith(PNG_SIGNATURE)
    assert (png.width, png.height) == (64, 48)
    assert len(png) == len(png.data)

    chunks = parse_png(png.data)
    names = [c.name for c in chunks]
    assert names[0] == "IHDR" and names[-1] == "IEND"
    assert set(names[1:-1]) == {"IDAT"}

    header = read_ihdr(chunks[0])
    assert (header.width, header.height) == (64, 48)
    assert (header.bit_depth, header.color_type) == (8, 6)
    assert (header.compression, header.filter_method, header.interlace) == (0, 0, 0)


def test_adaptive_picks_filters_per_row(gradient):
    png = encode_png(Raster.from_array(gradient), filter_strategy="adaptive")
    idat = b"".join(c.data for c in parse_png(png.data) if c.type == b"IDAT")
    raw = zlib.decompress(idat)
    stride = 64 * 4 + 1
    filter_bytes = {raw[i * stride] for i in range(48)}
    assert filter_bytes <= {0, 1, 2, 3, 4}
    # A smooth gradient never favours leaving rows unfiltered
    assert 0 not in filter_bytes


def test_large_data_is_split_into_idat_chunks():
    raster = Raster.from_array(noise(200, 200, seed=3))
    png = encode_png(raster, compress_level=1)
    idats = [c for c in parse_png(png.data) if c.type == b"IDAT"]
    assert len(idats) > 1
    assert all(c.length == IDAT_CHUNK_SIZE for c in idats[:-1])
    assert np.array_equal(decode(png.data), raster.pixels)


def test_single_pixel():
    raster = Raster.from_samples(1, 1, b"\x10\x20\x30\x40")
    png = encode_png(raster)
    assert decode(png.data)[0, 0].tolist() == [0x10, 0x20, 0x30, 0x40]
    assert struct.unpack(">II", png.data[16:24]) == (1, 1)


def test_rejects_bad_arguments(noise_raster):
    with pytest.raises(ValueError):
        encode_png(noise_raster, filter_strategy="median")
    with pytest.raises(ValueError):
        encode_png(noise_raster, compress_level=10)


def test_memory_exhaustion_is_encode_error(monkeypatch, noise_raster):
    def exhausted(*args, **kwargs):
        raise MemoryError()

    monkeypatch.setattr(png_encoder.zlib, "compressobj", exhausted)
    with pytest.raises(EncodeError):
        encode_png(noise_raster)
