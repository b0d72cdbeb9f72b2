# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
File format detector

This module picks the DPI codec for a buffer from its leading
signature bytes. It performs no further interpretation.

Copyright 2025 DNAi inc.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Union


JPEG_SIGNATURE = b'\xff\xd8'
PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'


class ImageFormat(Enum):
    JPEG = "JPEG"
    PNG = "PNG"
    UNKNOWN = "UNKNOWN"


class FormatDetector:
    """
    Detects JPEG and PNG buffers from their magic numbers.
    """

    # Format signatures (magic numbers)
    FORMAT_SIGNATURES: Dict[bytes, ImageFormat] = {
        PNG_SIGNATURE: ImageFormat.PNG,
        JPEG_SIGNATURE: ImageFormat.JPEG,
    }

    # Shortest buffer considered at all (length of the PNG signature)
    MIN_LENGTH = len(PNG_SIGNATURE)

    # Extension to format mapping
    EXTENSION_FORMATS: Dict[str, ImageFormat] = {
        '.jpg': ImageFormat.JPEG, '.jpeg': ImageFormat.JPEG,
        '.jpe': ImageFormat.JPEG, '.jfif': ImageFormat.JPEG,
        '.png': ImageFormat.PNG,
    }

    MIME_TYPES: Dict[ImageFormat, str] = {
        ImageFormat.JPEG: 'image/jpeg',
        ImageFormat.PNG: 'image/png',
    }

    @classmethod
    def identify(cls, file_data: Union[bytes, bytearray, memoryview]) -> ImageFormat:
        """
        Identify the container format of a buffer.

        Buffers shorter than MIN_LENGTH are UNKNOWN rather than
        malformed, whatever their first bytes.

        Args:
            file_data: Complete file data (or at least its first 8 bytes)

        Returns:
            ImageFormat.JPEG, ImageFormat.PNG or ImageFormat.UNKNOWN
        """
        if len(file_data) < cls.MIN_LENGTH:
            return ImageFormat.UNKNOWN
        head = bytes(file_data[:len(PNG_SIGNATURE)])
        for signature, image_format in cls.FORMAT_SIGNATURES.items():
            if head.startswith(signature):
                return image_format
        return ImageFormat.UNKNOWN

    @classmethod
    def from_extension(cls, file_path: Union[str, Path]) -> ImageFormat:
        """
        Guess the format from a file name.

        Args:
            file_path: Path to file

        Returns:
            Format guessed from the suffix, or ImageFormat.UNKNOWN
        """
        ext = Path(file_path).suffix.lower()
        return cls.EXTENSION_FORMATS.get(ext, ImageFormat.UNKNOWN)

    @classmethod
    def mime_type(cls, image_format: ImageFormat) -> Optional[str]:
        """Return the MIME type of a supported format, or None."""
        return cls.MIME_TYPES.get(image_format)


def identify(file_data: Union[bytes, bytearray, memoryview]) -> ImageFormat:
    """Shortcut for FormatDetector.identify()."""
    return FormatDetector.identify(file_data)
