# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
JPEG DPI codec

This module reads and writes the density fields of the JFIF APP0
segment. Everything outside the APP0 segment is copied unchanged,
including the entropy-coded image data.

JFIF APP0 payload layout (offsets from the first byte after the length):
    0-4   identifier "JFIF\\0"
    5-6   version (major, minor)
    7     density units (0 = aspect ratio, 1 = per inch, 2 = per cm)
    8-9   X density (big-endian)
    10-11 Y density (big-endian)
    12-13 thumbnail width and height

Copyright 2025 DNAi inc.
"""

import logging
import struct
from typing import Iterator, List, Optional, Union

from dpichanger.byte_buffer import ByteBuffer
from dpichanger.exceptions import MalformedInputError, ValueOutOfRangeError
from dpichanger.results import DecodeResult, DecodeStatus, DpiValue, Segment, round_half_up

logger = logging.getLogger(__name__)


class JPEGDpiCodec:
    """
    Reads and writes DPI in a JPEG file held in memory.

    The marker stream is walked from just after SOI up to the first
    SOS (or EOI, or a standalone marker). Segments after the scan
    starts are never inspected.
    """

    # JPEG markers
    SOI = 0xFFD8  # Start of Image
    EOI = 0xFFD9  # End of Image
    SOS = 0xFFDA  # Start of Scan
    APP0 = 0xFFE0  # APP0 (JFIF)
    TEM = 0xFF01

    JFIF_IDENTIFIER = b'JFIF\x00'
    # Length field value needed to reach the end of the Y density
    JFIF_MIN_LENGTH = 2 + 12

    UNITS_NONE = 0
    UNITS_INCH = 1
    UNITS_CM = 2

    MAX_DENSITY = 0xFFFF

    def __init__(self, file_data: Union[bytes, bytearray, ByteBuffer]):
        """
        Initialize JPEG codec.

        Args:
            file_data: Complete JPEG file data
        """
        self.buffer = file_data if isinstance(file_data, ByteBuffer) else ByteBuffer(file_data)
        if not self.buffer.startswith(b'\xff\xd8'):
            raise MalformedInputError("Invalid JPEG file: missing SOI marker")

    @classmethod
    def _is_standalone(cls, marker: int) -> bool:
        return marker == cls.TEM or 0xFFD0 <= marker <= cls.EOI

    def iter_segments(self) -> Iterator[Segment]:
        """
        Yield the header segments that precede the image scan.

        Raises:
            MalformedInputError: If a marker is missing or a segment
                runs past the end of the buffer
        """
        buf = self.buffer
        offset = 2

        while offset < len(buf):
            if buf.u8(offset) != 0xFF:
                raise MalformedInputError(f"Expected JPEG marker at offset {offset}")

            # Skip fill bytes
            while buf.u8(offset + 1) == 0xFF:
                offset += 1

            marker = buf.u16(offset)
            if marker == 0xFF00:
                raise MalformedInputError(f"Stuffed byte outside scan data at offset {offset}")
            if marker == self.SOS or self._is_standalone(marker):
                logger.debug("JPEG walk stopped at marker 0x%04X, offset %s", marker, offset)
                return

            length = buf.u16(offset + 2)
            if length < 2:
                raise MalformedInputError(f"Invalid segment length {length} at offset {offset}")
            if not buf.has(offset + 2, length):
                raise MalformedInputError(
                    f"Segment 0x{marker:04X} at offset {offset} runs past end of file"
                )

            yield Segment(marker, offset, length, offset + 4)
            offset += 2 + length

    def _is_jfif(self, segment: Segment) -> bool:
        return (
            segment.type_code == self.APP0
            and segment.length >= 2 + len(self.JFIF_IDENTIFIER)
            and self.buffer.slice(segment.payload_offset, 5) == self.JFIF_IDENTIFIER
        )

    def find_jfif_segment(self) -> Optional[Segment]:
        """
        Return the first JFIF APP0 segment, or None.

        APP0 segments with another identifier (JFXX, Adobe, ...) are skipped.
        """
        for segment in self.iter_segments():
            if self._is_jfif(segment):
                return segment
        return None

    def read_dpi(self) -> DecodeResult:
        """
        Decode the density stored in the JFIF APP0 segment.

        Returns:
            DecodeResult with status FOUND, or NOT_FOUND when there is no
            JFIF segment or its units carry no physical resolution

        Raises:
            MalformedInputError: If the stream breaks before a JFIF segment
        """
        segment = self.find_jfif_segment()
        if segment is None or segment.length < self.JFIF_MIN_LENGTH:
            return DecodeResult.not_found()

        buf = self.buffer
        payload = segment.payload_offset
        units = buf.u8(payload + 7)
        x_density = buf.u16(payload + 8)
        y_density = buf.u16(payload + 10)

        if units == self.UNITS_INCH:
            x_dpi, y_dpi = x_density, y_density
        elif units == self.UNITS_CM:
            x_dpi = round_half_up(x_density * 2.54)
            y_dpi = round_half_up(y_density * 2.54)
        else:
            logger.debug("JFIF density units %s carry no resolution", units)
            return DecodeResult.not_found()

        if x_dpi < 1 or y_dpi < 1:
            return DecodeResult.not_found()

        return DecodeResult(
            status=DecodeStatus.FOUND,
            dpi=DpiValue(x_dpi, y_dpi),
            source='JFIF',
            segment=segment,
            units=units,
            raw_density=(x_density, y_density),
        )

    @classmethod
    def build_jfif_segment(cls, dpi: DpiValue) -> bytes:
        """
        Build a minimal JFIF 1.01 APP0 segment with densities in inches.

        Args:
            dpi: Target resolution

        Returns:
            Complete APP0 segment bytes (marker, length and payload)
        """
        cls._check_range(dpi)
        segment_data = (
            cls.JFIF_IDENTIFIER +
            bytes([1, 1]) +
            bytes([cls.UNITS_INCH]) +
            struct.pack('>HH', dpi.x, dpi.y) +
            bytes([0, 0])
        )
        return b'\xff\xe0' + struct.pack('>H', len(segment_data) + 2) + segment_data

    @classmethod
    def _check_range(cls, dpi: DpiValue) -> None:
        if dpi.x > cls.MAX_DENSITY or dpi.y > cls.MAX_DENSITY:
            raise ValueOutOfRangeError(
                f"DPI {dpi} exceeds the JPEG density limit of {cls.MAX_DENSITY}"
            )

    def write_dpi(self, dpi: DpiValue) -> bytes:
        """
        Return a copy of the file carrying ``dpi`` in its JFIF segment.

        An existing JFIF segment is patched in place (units and densities
        only). Otherwise a new segment is inserted right after SOI.

        Raises:
            ValueOutOfRangeError: If a component exceeds 65535
            MalformedInputError: If the header segments cannot be walked
        """
        self._check_range(dpi)

        segments: List[Segment] = list(self.iter_segments())
        jfif = next((s for s in segments if self._is_jfif(s)), None)
        data = self.buffer.data

        if jfif is None:
            logger.debug("No JFIF segment, inserting one after SOI")
            return data[:2] + self.build_jfif_segment(dpi) + data[2:]

        if jfif.length < self.JFIF_MIN_LENGTH:
            raise MalformedInputError(
                f"JFIF segment at offset {jfif.offset} is too short ({jfif.length} bytes)"
            )

        logger.debug("Patching JFIF segment at offset %s", jfif.offset)
        new_data = bytearray(data)
        units_offset = jfif.payload_offset + 7
        new_data[units_offset] = self.UNITS_INCH
        new_data[units_offset + 1:units_offset + 5] = struct.pack('>HH', dpi.x, dpi.y)
        return bytes(new_data)
