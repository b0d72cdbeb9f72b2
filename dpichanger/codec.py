# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
Public DPI codec entry points

decode_dpi() and encode_dpi() dispatch on the buffer signature and
report every failure as a typed result instead of an exception.

Copyright 2025 DNAi inc.
"""

import logging
from typing import Tuple, Union

from dpichanger.exceptions import DPIChangerError, MalformedInputError
from dpichanger.format_detector import FormatDetector, ImageFormat
from dpichanger.jpeg_dpi import JPEGDpiCodec
from dpichanger.png_dpi import PNGDpiCodec
from dpichanger.results import MAX_DPI, DecodeResult, DpiValue, EncodeResult, ErrorKind, error_kind_for

logger = logging.getLogger(__name__)

BufferLike = Union[bytes, bytearray, memoryview]
DpiLike = Union[DpiValue, int, Tuple[int, int]]

_CODECS = {
    ImageFormat.JPEG: JPEGDpiCodec,
    ImageFormat.PNG: PNGDpiCodec,
}


def decode_dpi(data: BufferLike, verify_crc: bool = False) -> DecodeResult:
    """
    Read the DPI stored in a JPEG or PNG buffer.

    Never raises for corrupt input: anything that cannot be walked up to
    the DPI structure is reported as NOT_FOUND.

    Args:
        data: Complete file data
        verify_crc: For PNG, ignore a pHYs chunk whose CRC does not match

    Returns:
        DecodeResult (FOUND, NOT_FOUND or UNSUPPORTED)

    Example:
        >>> result = decode_dpi(Path('photo.jpg').read_bytes())
        >>> result.dpi_or(72)
        DpiValue(x=300, y=300)
    """
    image_format = FormatDetector.identify(data)
    if image_format is ImageFormat.UNKNOWN:
        return DecodeResult.unsupported()

    try:
        if image_format is ImageFormat.PNG:
            return PNGDpiCodec(data).read_dpi(verify_crc=verify_crc)
        return JPEGDpiCodec(data).read_dpi()
    except MalformedInputError as e:
        logger.debug("Stopped reading %s metadata: %s", image_format.value, e)
        return DecodeResult.not_found()


def encode_dpi(data: BufferLike, target: DpiLike) -> EncodeResult:
    """
    Write a new DPI into a JPEG or PNG buffer.

    The input is never modified. On success the result carries a complete
    new file in which only the DPI segment or chunk differs (or has been
    inserted). On failure no data is returned.

    Args:
        data: Complete file data
        target: DpiValue, a scalar DPI, or an (x, y) pair

    Returns:
        EncodeResult; failures are UNSUPPORTED, MALFORMED_INPUT or
        VALUE_OUT_OF_RANGE
    """
    try:
        dpi = DpiValue.coerce(target)
    except DPIChangerError as e:
        return EncodeResult.failure(error_kind_for(e), e.message)
    if dpi.x > MAX_DPI or dpi.y > MAX_DPI:
        return EncodeResult.failure(
            ErrorKind.VALUE_OUT_OF_RANGE, f"DPI {dpi} exceeds the maximum of {MAX_DPI}"
        )

    image_format = FormatDetector.identify(data)
    codec_class = _CODECS.get(image_format)
    if codec_class is None:
        return EncodeResult.failure(ErrorKind.UNSUPPORTED, "Unsupported format: not a JPEG or PNG file")

    try:
        codec = codec_class(data)
        new_data = codec.write_dpi(dpi)
    except DPIChangerError as e:
        logger.debug("Cannot write DPI %s to %s: %s", dpi, image_format.value, e)
        return EncodeResult.failure(error_kind_for(e), e.message)

    return EncodeResult.success(new_data, inserted=len(new_data) != len(data))
