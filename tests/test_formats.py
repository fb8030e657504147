import pytest

from apngify.errors import UnsupportedFormat
from apngify.formats import ImageFormat, sniff_format


@pytest.mark.parametrize("tag, expected", [
    ("image/jpeg", ImageFormat.JPEG),
    ("IMAGE/PNG", ImageFormat.PNG),
    ("webp", ImageFormat.WEBP),
    ("jpg", ImageFormat.JPEG),
    (".tif", ImageFormat.TIFF),
    ("image/x-ms-bmp", ImageFormat.BMP),
    (ImageFormat.GIF, ImageFormat.GIF),
])
def test_from_tag(tag, expected):
    assert ImageFormat.from_tag(tag) is expected


@pytest.mark.parametrize("tag", ["audio/mpeg", "image/svg+xml", "heic", "", None, 42])
def test_from_tag_rejects_unlisted(tag):
    with pytest.raises(UnsupportedFormat):
        ImageFormat.from_tag(tag)


def test_from_path():
    assert ImageFormat.from_path("photos/IMG_0001.JPG") is ImageFormat.JPEG
    assert ImageFormat.from_path("scan.tiff") is ImageFormat.TIFF
    with pytest.raises(UnsupportedFormat):
        ImageFormat.from_path("song.mp3")
    with pytest.raises(UnsupportedFormat):
        ImageFormat.from_path("README")


@pytest.mark.parametrize("head, expected", [
    (b"\xff\xd8\xff\xe0\x00\x10JFIF", ImageFormat.JPEG),
    (b"\x89PNG\r\n\x1a\n\x00\x00\x00\x0d", ImageFormat.PNG),
    (b"RIFF\x10\x00\x00\x00WEBPVP8 ", ImageFormat.WEBP),
    (b"GIF89a\x01\x00", ImageFormat.GIF),
    (b"BM\x36\x00\x00\x00", ImageFormat.BMP),
    (b"II*\x00\x08\x00\x00\x00", ImageFormat.TIFF),
    (b"MM\x00*\x00\x00\x00\x08", ImageFormat.TIFF),
    (b"II+\x00\x08\x00\x00\x00", ImageFormat.TIFF),
    (b"MM\x00+\x00\x08\x00\x00", ImageFormat.TIFF),
    (b"ID3\x04\x00", None),
    (b"", None),
])
def test_sniff_format(head, expected):
    assert sniff_format(head) is expected
