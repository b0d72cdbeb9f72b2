# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Bounds-checked byte buffer

All container parsing reads through this class so that a truncated
or corrupt file fails with TruncatedDataError instead of an IndexError
or a short struct read.

Copyright 2025 DNAi inc.
"""

import struct
from typing import Union

from dpichanger.exceptions import TruncatedDataError


class ByteBuffer:
    """
    Immutable view over a complete file held in memory.

    Multi-byte integers are read big-endian, which is the byte order
    of both the JPEG marker stream and the PNG chunk stream.
    """

    __slots__ = ('_data',)

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        """
        Initialize the buffer.

        Args:
            data: Raw file bytes (copied if mutable)
        """
        self._data = bytes(data)

    def __len__(self) -> int:
        return len(self._data)

    @property
    def data(self) -> bytes:
        """The underlying bytes."""
        return self._data

    def _check(self, offset: int, size: int) -> None:
        if offset < 0 or size < 0 or offset + size > len(self._data):
            raise TruncatedDataError(offset, size, len(self._data))

    def has(self, offset: int, size: int) -> bool:
        """Return True if ``size`` bytes are available at ``offset``."""
        return 0 <= offset and 0 <= size and offset + size <= len(self._data)

    def u8(self, offset: int) -> int:
        self._check(offset, 1)
        return self._data[offset]

    def u16(self, offset: int) -> int:
        self._check(offset, 2)
        return struct.unpack('>H', self._data[offset:offset + 2])[0]

    def u32(self, offset: int) -> int:
        self._check(offset, 4)
        return struct.unpack('>I', self._data[offset:offset + 4])[0]

    def slice(self, offset: int, size: int) -> bytes:
        """
        Return ``size`` bytes starting at ``offset``.

        Raises:
            TruncatedDataError: If the range is not fully inside the buffer
        """
        self._check(offset, size)
        return self._data[offset:offset + size]

    def startswith(self, prefix: bytes) -> bool:
        return self._data.startswith(prefix)
