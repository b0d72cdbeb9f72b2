# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
PNG DPI codec

This module reads and writes the pHYs chunk, which stores the
physical pixel density of a PNG image as pixels per unit.

pHYs payload layout (9 bytes):
    0-3   pixels per unit, X axis (big-endian)
    4-7   pixels per unit, Y axis (big-endian)
    8     unit specifier (0 = unknown / aspect ratio, 1 = meter)

pHYs must appear before the first IDAT chunk.

Copyright 2025 DNAi inc.
"""

import logging
import struct
import zlib
from typing import Iterator, List, Optional, Union

from dpichanger.byte_buffer import ByteBuffer
from dpichanger.exceptions import MalformedInputError, ValueOutOfRangeError
from dpichanger.format_detector import PNG_SIGNATURE
from dpichanger.results import DecodeResult, DecodeStatus, DpiValue, Segment, round_half_up

logger = logging.getLogger(__name__)

INCHES_PER_METER = 39.3701


def dpi_to_ppm(dpi: int) -> int:
    """Convert pixels per inch to pixels per meter."""
    return round_half_up(dpi * INCHES_PER_METER)


def ppm_to_dpi(ppm: int) -> int:
    """Convert pixels per meter to pixels per inch."""
    return round_half_up(ppm / INCHES_PER_METER)


class PNGDpiCodec:
    """
    Reads and writes DPI in a PNG file held in memory.
    """

    # PNG chunk types
    CHUNK_IHDR = b'IHDR'
    CHUNK_PHYS = b'pHYs'
    CHUNK_IDAT = b'IDAT'
    CHUNK_IEND = b'IEND'

    PHYS_LENGTH = 9
    UNIT_METER = 1
    # PNG four-byte unsigned integers are limited to 2^31 - 1
    MAX_PPM = 0x7FFFFFFF

    def __init__(self, file_data: Union[bytes, bytearray, ByteBuffer]):
        """
        Initialize PNG codec.

        Args:
            file_data: Complete PNG file data
        """
        self.buffer = file_data if isinstance(file_data, ByteBuffer) else ByteBuffer(file_data)
        if not self.buffer.startswith(PNG_SIGNATURE):
            raise MalformedInputError("Invalid PNG file: missing PNG signature")

    def iter_chunks(self) -> Iterator[Segment]:
        """
        Yield the chunks that precede the image data.

        The walk stops at the first IDAT or IEND chunk, or at a clean
        end of buffer.

        Raises:
            MalformedInputError: If a chunk header, payload or CRC is cut short
        """
        buf = self.buffer
        offset = len(PNG_SIGNATURE)

        while offset < len(buf):
            # Read chunk length (4 bytes, big-endian) and type (4 bytes)
            chunk_length = buf.u32(offset)
            chunk_type = buf.slice(offset + 4, 4)

            if chunk_type in (self.CHUNK_IDAT, self.CHUNK_IEND):
                logger.debug("PNG walk stopped at %s, offset %s", chunk_type, offset)
                return

            if not buf.has(offset, 8 + chunk_length + 4):
                raise MalformedInputError(
                    f"Chunk {chunk_type!r} at offset {offset} runs past end of file"
                )

            yield Segment(chunk_type, offset, chunk_length, offset + 8)
            offset += 8 + chunk_length + 4

    def iter_trailing_chunk_types(self, offset: int) -> Iterator[bytes]:
        """
        Yield the chunk types from ``offset`` (the first IDAT) up to IEND.

        Raises:
            MalformedInputError: If a chunk runs past the end of the file
        """
        buf = self.buffer
        while offset < len(buf):
            chunk_length = buf.u32(offset)
            chunk_type = buf.slice(offset + 4, 4)
            if chunk_type == self.CHUNK_IEND:
                return
            if not buf.has(offset, 8 + chunk_length + 4):
                raise MalformedInputError(
                    f"Chunk {chunk_type!r} at offset {offset} runs past end of file"
                )
            yield chunk_type
            offset += 8 + chunk_length + 4

    def find_phys_chunk(self) -> Optional[Segment]:
        """Return the pHYs chunk if it precedes the image data, or None."""
        for chunk in self.iter_chunks():
            if chunk.type_code == self.CHUNK_PHYS:
                return chunk
        return None

    def crc_matches(self, chunk: Segment) -> bool:
        """Check the stored CRC-32 of a chunk against its type and payload."""
        body = self.buffer.slice(chunk.offset + 4, 4 + chunk.length)
        stored = self.buffer.u32(chunk.payload_offset + chunk.length)
        return (zlib.crc32(body) & 0xffffffff) == stored

    def read_dpi(self, verify_crc: bool = False) -> DecodeResult:
        """
        Decode the density stored in the pHYs chunk.

        Args:
            verify_crc: Treat a pHYs chunk with a bad CRC as absent

        Returns:
            DecodeResult with status FOUND, or NOT_FOUND when there is no
            pHYs chunk before IDAT or its unit is not the meter

        Raises:
            MalformedInputError: If the stream breaks before a pHYs chunk
        """
        chunk = self.find_phys_chunk()
        if chunk is None or chunk.length < self.PHYS_LENGTH:
            return DecodeResult.not_found()

        if verify_crc and not self.crc_matches(chunk):
            logger.debug("pHYs CRC mismatch at offset %s", chunk.offset)
            return DecodeResult.not_found()

        buf = self.buffer
        ppm_x = buf.u32(chunk.payload_offset)
        ppm_y = buf.u32(chunk.payload_offset + 4)
        unit = buf.u8(chunk.payload_offset + 8)

        if unit != self.UNIT_METER:
            logger.debug("pHYs unit %s carries no resolution", unit)
            return DecodeResult.not_found()

        x_dpi = ppm_to_dpi(ppm_x)
        y_dpi = ppm_to_dpi(ppm_y)
        if x_dpi < 1 or y_dpi < 1:
            return DecodeResult.not_found()

        return DecodeResult(
            status=DecodeStatus.FOUND,
            dpi=DpiValue(x_dpi, y_dpi),
            source='pHYs',
            segment=chunk,
            units=unit,
            raw_density=(ppm_x, ppm_y),
        )

    @classmethod
    def build_phys_payload(cls, dpi: DpiValue) -> bytes:
        """
        Build the 9-byte pHYs payload for ``dpi`` in pixels per meter.

        Raises:
            ValueOutOfRangeError: If the converted density exceeds 2^31 - 1
        """
        ppm_x = dpi_to_ppm(dpi.x)
        ppm_y = dpi_to_ppm(dpi.y)
        if ppm_x > cls.MAX_PPM or ppm_y > cls.MAX_PPM:
            raise ValueOutOfRangeError(
                f"DPI {dpi} exceeds the PNG pixels-per-meter limit"
            )
        return struct.pack('>IIB', ppm_x, ppm_y, cls.UNIT_METER)

    @staticmethod
    def write_chunk(chunk_type: bytes, chunk_data: bytes) -> bytes:
        """
        Write a PNG chunk with CRC.

        Args:
            chunk_type: Chunk type (4 bytes)
            chunk_data: Chunk data

        Returns:
            Complete chunk bytes (length + type + data + CRC)
        """
        crc = zlib.crc32(chunk_type + chunk_data) & 0xffffffff
        return struct.pack('>I', len(chunk_data)) + chunk_type + chunk_data + struct.pack('>I', crc)

    def write_dpi(self, dpi: DpiValue) -> bytes:
        """
        Return a copy of the file carrying ``dpi`` in its pHYs chunk.

        An existing pHYs chunk is overwritten in place. Otherwise a new
        one is inserted right after IHDR.

        Raises:
            ValueOutOfRangeError: If the density cannot be stored
            MalformedInputError: If the chunk stream is broken or IHDR is
                not the first chunk
                or a pHYs chunk follows the image data
        """
        payload = self.build_phys_payload(dpi)

        chunks: List[Segment] = list(self.iter_chunks())
        if not chunks or chunks[0].type_code != self.CHUNK_IHDR:
            raise MalformedInputError("Invalid PNG file: IHDR is not the first chunk")

        last = chunks[-1]
        if self.CHUNK_PHYS in self.iter_trailing_chunk_types(last.offset + 8 + last.length + 4):
            raise MalformedInputError("Invalid PNG file: pHYs chunk after image data")

        phys = next((c for c in chunks if c.type_code == self.CHUNK_PHYS), None)
        data = self.buffer.data

        if phys is None:
            ihdr = chunks[0]
            insert_at = ihdr.offset + 8 + ihdr.length + 4
            logger.debug("No pHYs chunk, inserting one at offset %s", insert_at)
            new_data = data[:insert_at] + self.write_chunk(self.CHUNK_PHYS, payload) + data[insert_at:]
            chunk_offset = insert_at
        else:
            if phys.length != self.PHYS_LENGTH:
                raise MalformedInputError(
                    f"pHYs chunk at offset {phys.offset} has length {phys.length}, expected 9"
                )
            logger.debug("Overwriting pHYs chunk at offset %s", phys.offset)
            patched = bytearray(data)
            patched[phys.offset:phys.offset + 12 + self.PHYS_LENGTH] = self.write_chunk(
                self.CHUNK_PHYS, payload
            )
            new_data = bytes(patched)
            chunk_offset = phys.offset

        self._verify_written_chunk(new_data, chunk_offset)
        return new_data

    def _verify_written_chunk(self, new_data: bytes, offset: int) -> None:
        written = PNGDpiCodec(new_data)
        chunk = Segment(self.CHUNK_PHYS, offset, self.PHYS_LENGTH, offset + 8)
        if written.buffer.slice(offset + 4, 4) != self.CHUNK_PHYS or not written.crc_matches(chunk):
            raise MalformedInputError("pHYs chunk failed CRC verification after writing")
