"""
PNG chunk framing.

Every chunk is [length: u32 BE][type: 4 ASCII bytes][data][CRC-32 of type+data].
"""

import struct
import zlib
from dataclasses import dataclass

from .constants import CHUNK_OVERHEAD, IHDR_LENGTH, PNG_SIGNATURE
from .errors import MalformedInput


def crc32(chunk_type: bytes, data: bytes) -> int:
    crc = zlib.crc32(chunk_type)
    crc = zlib.crc32(data, crc)
    return crc & 0xFFFFFFFF


def make_chunk(chunk_type: bytes, data: bytes) -> bytes:
    """Frame ``data`` as a chunk of ``chunk_type``, computing length and CRC."""
    if len(chunk_type) != 4:
        raise ValueError(f"Chunk type must be 4 bytes, got {chunk_type!r}")
    return (
        struct.pack(">I", len(data))
        + chunk_type
        + data
        + struct.pack(">I", crc32(chunk_type, data))
    )


@dataclass(frozen=True)
class PngChunk:
    type: bytes
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def crc(self) -> int:
        return crc32(self.type, self.data)

    @property
    def name(self) -> str:
        return self.type.decode("latin-1")

    def to_bytes(self) -> bytes:
        return make_chunk(self.type, self.data)


@dataclass(frozen=True)
class Header:
    """Decoded IHDR payload."""

    width: int
    height: int
    bit_depth: int
    color_type: int
    compression: int
    filter_method: int
    interlace: int


def parse_png(data: bytes):
    """Split a PNG byte stream into chunks, verifying framing and CRCs.

    Returns the list of chunks up to and including IEND. Raises
    MalformedInput on a missing signature, a truncated chunk, a CRC
    mismatch, a first chunk other than IHDR, or a missing IEND.
    """
    data = bytes(data)
    if not data.startswith(PNG_SIGNATURE):
        raise MalformedInput("Missing PNG signature")

    chunks = []
    offset = len(PNG_SIGNATURE)
    size = len(data)
    while offset < size:
        if offset + 8 > size:
            raise MalformedInput(f"Truncated chunk header at offset {offset}")
        length, chunk_type = struct.unpack_from(">I4s", data, offset)
        end = offset + CHUNK_OVERHEAD + length
        if end > size:
            raise MalformedInput(
                f"Truncated {chunk_type!r} chunk at offset {offset} "
                f"({length} byte payload, {size - offset - 8} available)"
            )
        payload = data[offset + 8:offset + 8 + length]
        stored_crc, = struct.unpack_from(">I", data, end - 4)

        chunk = PngChunk(chunk_type, payload)
        if stored_crc != chunk.crc:
            raise MalformedInput(
                f"CRC mismatch in {chunk_type!r} chunk at offset {offset}: "
                f"stored {stored_crc:08x}, computed {chunk.crc:08x}"
            )
        if not chunks and chunk_type != b"IHDR":
            raise MalformedInput(f"First chunk is {chunk_type!r}, expected IHDR")

        chunks.append(chunk)
        offset = end
        if chunk_type == b"IEND":
            break

    if not chunks:
        raise MalformedInput("No chunks after PNG signature")
    if chunks[-1].type != b"IEND":
        raise MalformedInput("Missing IEND chunk")
    return chunks


def read_ihdr(chunk: PngChunk) -> Header:
    if chunk.type != b"IHDR" or chunk.length != IHDR_LENGTH:
        raise MalformedInput(f"Bad IHDR chunk ({chunk.type!r}, {chunk.length} bytes)")
    header = Header(*struct.unpack(">IIBBBBB", chunk.data))
    if header.width == 0 or header.height == 0:
        raise MalformedInput(f"IHDR declares empty image ({header.width}x{header.height})")
    return header


def join_chunks(chunks) -> bytes:
    return PNG_SIGNATURE + b"".join(c.to_bytes() for c in chunks)
