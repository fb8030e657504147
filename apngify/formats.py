"""
Input format allow-list.

Formats are identified by MIME type, the way a browser file picker reports
them, with short names and file extensions accepted as aliases.
"""

import enum
from pathlib import Path

from .constants import PNG_SIGNATURE
from .errors import UnsupportedFormat


class ImageFormat(enum.Enum):
    JPEG = "image/jpeg"
    PNG = "image/png"
    WEBP = "image/webp"
    GIF = "image/gif"
    BMP = "image/bmp"
    TIFF = "image/tiff"

    @property
    def pil_name(self) -> str:
        """Format name as registered with Pillow."""
        return self.name

    @classmethod
    def from_tag(cls, tag) -> "ImageFormat":
        """Resolve an enum member, MIME type or short name to a format."""
        if isinstance(tag, cls):
            return tag
        if not isinstance(tag, str):
            raise UnsupportedFormat(f"Unsupported format tag: {tag!r}")

        key = tag.strip().lower()
        for fmt in cls:
            if key == fmt.value:
                return fmt
        key = key.lstrip(".")
        if key in _ALIASES:
            return _ALIASES[key]
        raise UnsupportedFormat(f"Unsupported format: {tag}")

    @classmethod
    def from_path(cls, path) -> "ImageFormat":
        suffix = Path(path).suffix
        if not suffix:
            raise UnsupportedFormat(f"Cannot tell format of {path} (no extension)")
        return cls.from_tag(suffix)


_ALIASES = {
    "jpeg": ImageFormat.JPEG,
    "jpg": ImageFormat.JPEG,
    "jpe": ImageFormat.JPEG,
    "jfif": ImageFormat.JPEG,
    "png": ImageFormat.PNG,
    "webp": ImageFormat.WEBP,
    "gif": ImageFormat.GIF,
    "bmp": ImageFormat.BMP,
    "dib": ImageFormat.BMP,
    "image/x-ms-bmp": ImageFormat.BMP,
    "tif": ImageFormat.TIFF,
    "tiff": ImageFormat.TIFF,
}


def sniff_format(data: bytes):
    """Identify an allow-listed format from its magic bytes, or None."""
    head = bytes(data[:12])
    if head.startswith(b"\xff\xd8\xff"):
        return ImageFormat.JPEG
    if head.startswith(PNG_SIGNATURE):
        return ImageFormat.PNG
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return ImageFormat.WEBP
    if head[:6] in (b"GIF87a", b"GIF89a"):
        return ImageFormat.GIF
    if head.startswith(b"BM"):
        return ImageFormat.BMP
    # classic TIFF, then BigTIFF
    if head[:4] in (b"II*\x00", b"MM\x00*", b"II+\x00", b"MM\x00+"):
        return ImageFormat.TIFF
    return None
