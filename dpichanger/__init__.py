# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
dpichanger - change the DPI/PPI metadata of JPEG and PNG files

Reads and rewrites the JFIF APP0 density fields of JPEG files and the
pHYs chunk of PNG files directly from the binary structure. Pixel data
and every other segment or chunk are preserved byte for byte.

Copyright 2025 DNAi inc.
"""

__version__ = "0.1.0"
__author__ = "DNAi inc."

from dpichanger.codec import decode_dpi, encode_dpi
from dpichanger.config import DPIChangerConfig
from dpichanger.data_url import decode_dpi_data_url, encode_dpi_data_url
from dpichanger.exceptions import (
    DPIChangerError,
    MalformedInputError,
    TruncatedDataError,
    UnsupportedFormatError,
    ValueOutOfRangeError,
)
from dpichanger.file_utils import default_output_path, get_pixel_dimensions, read_dpi, write_dpi
from dpichanger.format_detector import FormatDetector, ImageFormat, identify
from dpichanger.print_size import (
    PAPER_FORMATS,
    PaperFormat,
    PrintSize,
    find_paper_format,
    fits_on_paper,
    might_appear_pixelated,
    print_dimensions,
)
from dpichanger.results import (
    DecodeResult,
    DecodeStatus,
    DpiValue,
    EncodeResult,
    ErrorKind,
    Segment,
)

__all__ = [
    "decode_dpi",
    "encode_dpi",
    "decode_dpi_data_url",
    "encode_dpi_data_url",
    "identify",
    "FormatDetector",
    "ImageFormat",
    "DPIChangerConfig",
    "DPIChangerError",
    "MalformedInputError",
    "TruncatedDataError",
    "UnsupportedFormatError",
    "ValueOutOfRangeError",
    "DecodeResult",
    "DecodeStatus",
    "DpiValue",
    "EncodeResult",
    "ErrorKind",
    "Segment",
    "read_dpi",
    "write_dpi",
    "default_output_path",
    "get_pixel_dimensions",
    "PAPER_FORMATS",
    "PaperFormat",
    "PrintSize",
    "find_paper_format",
    "fits_on_paper",
    "might_appear_pixelated",
    "print_dimensions",
]
