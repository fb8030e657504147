"""
Turn a baseline PNG into a single-frame APNG.

acTL and fcTL go straight after IHDR, ahead of the first IDAT, so the
existing image data doubles as the one and only animation frame. Nothing
else in the file is touched.
"""

import struct
from dataclasses import dataclass

from .chunks import PngChunk, make_chunk, parse_png, read_ihdr
from .constants import (
    BLEND_OP_SOURCE,
    CHUNK_OVERHEAD,
    DELAY_DEN,
    DELAY_NUM,
    DISPOSE_OP_NONE,
    NUM_FRAMES,
    NUM_PLAYS,
    PNG_SIGNATURE,
    SEQUENCE_NUMBER,
    X_OFFSET,
    Y_OFFSET,
)
from .errors import MalformedInput


def build_actl() -> bytes:
    return make_chunk(b"acTL", struct.pack(">II", NUM_FRAMES, NUM_PLAYS))


def build_fctl(width: int, height: int) -> bytes:
    payload = struct.pack(
        ">IIIIIHHBB",
        SEQUENCE_NUMBER,
        width,
        height,
        X_OFFSET,
        Y_OFFSET,
        DELAY_NUM,
        DELAY_DEN,
        DISPOSE_OP_NONE,
        BLEND_OP_SOURCE,
    )
    return make_chunk(b"fcTL", payload)


def splice_apng(png: bytes) -> bytes:
    """Insert acTL + fcTL after IHDR of ``png``.

    The IHDR and every chunk after it are copied byte for byte. Raises
    MalformedInput if ``png`` is not a well-formed PNG, has no IDAT, or is
    already animated.
    """
    png = bytes(png)
    chunks = parse_png(png)
    header = read_ihdr(chunks[0])

    types = [c.type for c in chunks]
    if b"IDAT" not in types:
        raise MalformedInput("PNG has no IDAT chunk")
    if b"acTL" in types or b"fcTL" in types:
        raise MalformedInput("PNG is already animated")

    ihdr_end = len(PNG_SIGNATURE) + CHUNK_OVERHEAD + chunks[0].length
    png_end = len(PNG_SIGNATURE) + sum(CHUNK_OVERHEAD + c.length for c in chunks)

    return b"".join([
        png[:ihdr_end],
        build_actl(),
        build_fctl(header.width, header.height),
        png[ihdr_end:png_end],
    ])


@dataclass(frozen=True)
class AnimationInfo:
    width: int
    height: int
    num_frames: int
    num_plays: int
    sequence_number: int
    frame_width: int
    frame_height: int
    x_offset: int
    y_offset: int
    delay_num: int
    delay_den: int
    dispose_op: int
    blend_op: int
    chunk_types: tuple

    @property
    def delay(self) -> float:
        """Frame delay in seconds (a zero denominator means 1/100 s)."""
        return self.delay_num / (self.delay_den or 100)


def _find(chunks, chunk_type) -> PngChunk:
    for chunk in chunks:
        if chunk.type == chunk_type:
            return chunk
    raise MalformedInput(f"No {chunk_type.decode()} chunk")


def read_animation(data: bytes) -> AnimationInfo:
    """Read back the animation fields of a single-frame APNG.

    Checks the chunk order IHDR, acTL, fcTL, IDAT..., IEND as well as the
    framing of each chunk.
    """
    chunks = parse_png(data)
    header = read_ihdr(chunks[0])
    types = tuple(c.name for c in chunks)

    if types[1:3] != ("acTL", "fcTL"):
        raise MalformedInput(f"Expected IHDR, acTL, fcTL at start, got {', '.join(types[:3])}")
    idat = types[3:-1]
    if not idat or any(t != "IDAT" for t in idat):
        raise MalformedInput(f"Expected only IDAT between fcTL and IEND, got {', '.join(idat)}")

    actl = _find(chunks, b"acTL")
    fctl = _find(chunks, b"fcTL")
    if actl.length != 8 or fctl.length != 26:
        raise MalformedInput(f"Bad acTL/fcTL lengths ({actl.length}, {fctl.length})")

    num_frames, num_plays = struct.unpack(">II", actl.data)
    fields = struct.unpack(">IIIIIHHBB", fctl.data)
    return AnimationInfo(header.width, header.height, num_frames, num_plays, *fields,
                         chunk_types=types)
