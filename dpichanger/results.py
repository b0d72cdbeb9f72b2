# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Value and result types shared by the DPI codecs

Copyright 2025 DNAi inc.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Tuple, Union

from dpichanger.exceptions import (
    DPIChangerError,
    MalformedInputError,
    UnsupportedFormatError,
    ValueOutOfRangeError,
)


# Largest DPI accepted for writing, the width of the JFIF density fields
MAX_DPI = 0xFFFF


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves upward (not to even)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class DpiValue:
    """
    Horizontal and vertical resolution in pixels per inch.

    Both components are whole numbers >= 1. Format-specific upper bounds
    are enforced by the codecs.
    """
    x: int
    y: int

    def __post_init__(self):
        for name, value in (('x', self.x), ('y', self.y)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueOutOfRangeError(f"DPI {name} must be a whole number, got {value!r}")
            if value < 1:
                raise ValueOutOfRangeError(f"DPI {name} must be at least 1, got {value}")

    @classmethod
    def uniform(cls, dpi: int) -> 'DpiValue':
        """Build a DpiValue with the same horizontal and vertical resolution."""
        return cls(dpi, dpi)

    @classmethod
    def coerce(cls, value: Union['DpiValue', int, Tuple[int, int]]) -> 'DpiValue':
        """
        Accept a DpiValue, a scalar DPI or an (x, y) pair.

        Raises:
            ValueOutOfRangeError: If the value is not a valid DPI
        """
        if isinstance(value, DpiValue):
            return value
        if isinstance(value, (tuple, list)):
            if len(value) != 2:
                raise ValueOutOfRangeError(f"DPI pair must have two components, got {len(value)}")
            return cls(value[0], value[1])
        return cls.uniform(value)

    @property
    def is_uniform(self) -> bool:
        return self.x == self.y

    def __str__(self) -> str:
        if self.is_uniform:
            return str(self.x)
        return f"{self.x}x{self.y}"


class Segment(NamedTuple):
    """
    Location of one JPEG segment or PNG chunk inside a buffer.

    For JPEG, ``type_code`` is the 16-bit marker and ``length`` the declared
    segment length (which counts its own two length bytes). For PNG,
    ``type_code`` is the 4-byte chunk type and ``length`` the payload length.
    """
    type_code: Union[int, bytes]
    offset: int
    length: int
    payload_offset: int


class DecodeStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    UNSUPPORTED = "unsupported"


class ErrorKind(Enum):
    UNSUPPORTED = "unsupported"
    MALFORMED_INPUT = "malformed_input"
    VALUE_OUT_OF_RANGE = "value_out_of_range"


_ERROR_CLASSES = {
    ErrorKind.UNSUPPORTED: UnsupportedFormatError,
    ErrorKind.MALFORMED_INPUT: MalformedInputError,
    ErrorKind.VALUE_OUT_OF_RANGE: ValueOutOfRangeError,
}


def error_kind_for(error: DPIChangerError) -> ErrorKind:
    """Map an exception instance to the ErrorKind reported in results."""
    if isinstance(error, ValueOutOfRangeError):
        return ErrorKind.VALUE_OUT_OF_RANGE
    if isinstance(error, UnsupportedFormatError):
        return ErrorKind.UNSUPPORTED
    return ErrorKind.MALFORMED_INPUT


@dataclass(frozen=True)
class DecodeResult:
    """
    Outcome of reading the DPI from a buffer.

    ``source`` names the structure that supplied the value ("JFIF" or
    "pHYs"), ``units`` is its raw unit code and ``raw_density`` the
    density pair exactly as stored.
    """
    status: DecodeStatus
    dpi: Optional[DpiValue] = None
    source: Optional[str] = None
    segment: Optional[Segment] = None
    units: Optional[int] = None
    raw_density: Optional[Tuple[int, int]] = None

    @classmethod
    def not_found(cls) -> 'DecodeResult':
        return cls(DecodeStatus.NOT_FOUND)

    @classmethod
    def unsupported(cls) -> 'DecodeResult':
        return cls(DecodeStatus.UNSUPPORTED)

    @property
    def found(self) -> bool:
        return self.status is DecodeStatus.FOUND

    def dpi_or(self, default: int = 72) -> DpiValue:
        """Return the decoded DPI, or ``default`` on both axes when absent."""
        if self.dpi is not None:
            return self.dpi
        return DpiValue.uniform(default)


@dataclass(frozen=True)
class EncodeResult:
    """
    Outcome of writing a DPI into a buffer.

    On success ``data`` holds the complete new file and ``inserted`` tells
    whether the DPI structure was synthesized rather than patched in place.
    """
    data: Optional[bytes] = None
    inserted: bool = False
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, data: bytes, inserted: bool) -> 'EncodeResult':
        return cls(data=data, inserted=inserted)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> 'EncodeResult':
        return cls(error=error, message=message)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> bytes:
        """
        Return the encoded bytes.

        Raises:
            DPIChangerError: The subclass matching ``error`` if encoding failed
        """
        if self.error is not None:
            raise _ERROR_CLASSES[self.error](self.message)
        return self.data
