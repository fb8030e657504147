import io

import numpy as np
import pytest
from PIL import Image

from apngify.raster import Raster


def save_image(arr: np.ndarray, fmt: str, **params) -> bytes:
    """Encode an RGBA array with Pillow, dropping alpha where the format needs it."""
    img = Image.fromarray(arr)
    if fmt == "JPEG":
        img = img.convert("RGB")
    elif fmt == "GIF":
        img = img.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE)
    buf = io.BytesIO()
    img.save(buf, format=fmt, **params)
    return buf.getvalue()


def noise(width: int, height: int, seed: int = 0) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)


@pytest.fixture(name="gradient")
def fixture_gradient() -> np.ndarray:
    h, w = 48, 64
    arr = np.zeros((h, w, 4), dtype=np.uint8)
    arr[:, :, 0] = np.linspace(0, 255, w, dtype=np.uint8)[None, :]
    arr[:, :, 1] = np.linspace(0, 255, h, dtype=np.uint8)[:, None]
    arr[:, :, 2] = 128
    arr[:, :, 3] = 255
    return arr


@pytest.fixture(name="noise_raster")
def fixture_noise_raster() -> Raster:
    return Raster.from_array(noise(37, 23, seed=7))
