"""
Decode/resample capabilities.

The converter only needs two things from an imaging library: turn encoded
bytes of a known format into an RGBA raster, and resize a raster. Pillow is
the default; OpenCV is available as an alternative.
"""

import io

import numpy as np
from PIL import Image, ImageOps

from .errors import DecodeError
from .formats import ImageFormat, sniff_format
from .raster import Raster


class ImageBackend:
    """Base class for decode/resample implementations."""

    name = None

    def decode(self, data: bytes, fmt: ImageFormat) -> Raster:
        """Decode ``data`` claimed to be ``fmt`` into an RGBA raster.

        Raises DecodeError when the bytes are empty, do not carry the magic
        of the claimed format, or the library fails to decode them.
        """
        if not data:
            raise DecodeError("No image data")
        found = sniff_format(data)
        if found is not fmt:
            seen = found.name if found else "unknown data"
            raise DecodeError(f"Expected {fmt.name} data, found {seen}")

        raster = self._decode(data, fmt)
        if raster.width <= 0 or raster.height <= 0:
            raise DecodeError(f"Decoded image is empty ({raster.width}x{raster.height})")
        return raster

    def resample(self, raster: Raster, size) -> Raster:
        raise NotImplementedError

    def _decode(self, data: bytes, fmt: ImageFormat) -> Raster:
        raise NotImplementedError


class PillowBackend(ImageBackend):
    name = "pillow"

    def _decode(self, data, fmt):
        try:
            img = Image.open(io.BytesIO(data), formats=[fmt.pil_name])
            # Force a full decode so truncated files fail here, not later
            img.load()
            if img.width == 0 or img.height == 0:
                raise DecodeError(f"{fmt.name} image has zero size")
            img = _narrow_wide_modes(img)
            # Browsers draw JPEGs upright, so honour EXIF orientation
            img = ImageOps.exif_transpose(img)
            img = img.convert('RGBA')
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Could not decode {fmt.name} image: {exc}") from exc
        return Raster.from_image(img)

    def resample(self, raster, size):
        img = raster.to_image().resize(size, Image.Resampling.BILINEAR)
        return Raster.from_image(img)


class OpenCVBackend(ImageBackend):
    name = "opencv"

    def __init__(self):
        import cv2
        self._cv2 = cv2

    def _decode(self, data, fmt):
        cv2 = self._cv2
        buf = np.frombuffer(data, dtype=np.uint8)
        try:
            arr = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
        except cv2.error as exc:
            raise DecodeError(f"Could not decode {fmt.name} image: {exc}") from exc
        if arr is None or arr.size == 0:
            raise DecodeError(f"Could not decode {fmt.name} image")

        arr = _to_uint8(arr)
        if arr.ndim == 2:
            rgba = cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        elif arr.shape[2] == 3:
            rgba = cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
        elif arr.shape[2] == 4:
            rgba = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        else:
            raise DecodeError(f"Unexpected channel count {arr.shape[2]} in {fmt.name} image")
        return Raster.from_array(rgba)

    def resample(self, raster, size):
        # Resize premultiplied so transparent pixels do not bleed colour
        px = raster.pixels.astype(np.float32)
        px[:, :, :3] *= px[:, :, 3:] / 255.0
        # INTER_AREA averages source pixels when shrinking
        out = self._cv2.resize(px, size, interpolation=self._cv2.INTER_AREA)
        out = out.reshape(size[1], size[0], 4)
        alpha = out[:, :, 3:]
        rgb = np.where(alpha > 0, out[:, :, :3] * 255.0 / np.maximum(alpha, 1e-6), 0.0)
        out = np.concatenate([rgb, alpha], axis=2)
        return Raster.from_array(np.clip(out + 0.5, 0, 255).astype(np.uint8))


def _narrow_wide_modes(img: Image.Image) -> Image.Image:
    """Scale 16-bit and 32-bit grey modes down to 8-bit "L".

    Pillow clamps these to 0-255 in convert(), which would turn most
    16-bit images white.
    """
    if not (img.mode.startswith("I;16") or img.mode in ("I", "F")):
        return img
    arr = np.asarray(img)
    if arr.dtype.kind in "iu":
        arr = np.clip(arr, 0, 0xFFFF).astype(np.uint16)
    return Image.fromarray(_to_uint8(arr))


def _to_uint8(arr: np.ndarray) -> np.ndarray:
    """Reduce 16-bit and float samples to 8 bits."""
    if arr.dtype == np.uint8:
        return arr
    if arr.dtype == np.uint16:
        return (arr >> 8).astype(np.uint8)
    if np.issubdtype(arr.dtype, np.floating):
        return (np.clip(arr, 0.0, 1.0) * 255.0 + 0.5).astype(np.uint8)
    raise DecodeError(f"Unsupported sample type {arr.dtype}")


BACKENDS = {
    PillowBackend.name: PillowBackend,
    OpenCVBackend.name: OpenCVBackend,
}


def get_backend(name=None) -> ImageBackend:
    """Return a backend instance by name (None means Pillow), or pass an instance through."""
    if name is None:
        name = PillowBackend.name
    if isinstance(name, ImageBackend):
        return name
    try:
        cls = BACKENDS[name]
    except KeyError:
        raise ValueError(
            f"Unknown backend {name!r} (choose from {', '.join(sorted(BACKENDS))})"
        ) from None
    return cls()
