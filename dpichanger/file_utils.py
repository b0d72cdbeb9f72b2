# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
File-level helpers around the DPI codec.

This module provides the operations a front end needs: reading the
DPI of a file on disk, writing a re-tagged copy, naming that copy,
and getting the pixel dimensions for print-size calculations.

Copyright 2025 DNAi inc.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, UnidentifiedImageError

from dpichanger.codec import DpiLike, decode_dpi, encode_dpi
from dpichanger.exceptions import UnsupportedFormatError
from dpichanger.print_size import PaperFormat
from dpichanger.results import DecodeResult, DpiValue

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def read_dpi(file_path: PathLike, verify_crc: bool = False) -> DecodeResult:
    """
    Read the DPI metadata of an image file.

    Args:
        file_path: Path to a JPEG or PNG file
        verify_crc: For PNG, ignore a pHYs chunk whose CRC does not match

    Returns:
        DecodeResult for the file contents

    Raises:
        OSError: If the file cannot be read

    Example:
        >>> read_dpi('scan.png').dpi_or(72)
        DpiValue(x=300, y=300)
    """
    path = Path(file_path)
    with open(path, 'rb') as f:
        file_data = f.read()
    result = decode_dpi(file_data, verify_crc=verify_crc)
    logger.debug("%s: %s", path, result.status.value)
    return result


def default_output_path(
    file_path: PathLike,
    dpi: DpiLike,
    paper: Optional[PaperFormat] = None
) -> Path:
    """
    Name the re-tagged copy of a file.

    The copy sits beside the original as ``<stem>[_<Paper_Name>]_<dpi>dpi<suffix>``,
    e.g. ``photo_A4_Photo_300dpi.jpg``.
    """
    path = Path(file_path)
    dpi = DpiValue.coerce(dpi)
    paper_suffix = f"_{'_'.join(paper.name.split())}" if paper else ""
    return path.with_name(f"{path.stem}{paper_suffix}_{dpi}dpi{path.suffix}")


def write_dpi(
    file_path: PathLike,
    dpi: DpiLike,
    output_path: Optional[PathLike] = None,
    paper: Optional[PaperFormat] = None
) -> Path:
    """
    Write a copy of an image file carrying a new DPI.

    The output file is only created once encoding has succeeded, so a
    failed call never leaves a partially modified file behind.

    Args:
        file_path: Path to a JPEG or PNG file
        dpi: Target DPI (scalar, (x, y) pair or DpiValue)
        output_path: Destination; defaults to default_output_path()
        paper: Paper preset, only used to name the default output

    Returns:
        Path of the written file

    Raises:
        UnsupportedFormatError: If the file is not JPEG or PNG
        MalformedInputError: If the file structure cannot be modified safely
        ValueOutOfRangeError: If the DPI cannot be stored
    """
    path = Path(file_path)
    with open(path, 'rb') as f:
        file_data = f.read()

    new_data = encode_dpi(file_data, dpi).unwrap()

    if output_path is None:
        output_path = default_output_path(path, dpi, paper)
    output_path = Path(output_path)

    with open(output_path, 'wb') as f:
        f.write(new_data)

    logger.debug("Wrote %s (%s bytes) with DPI %s", output_path, len(new_data), DpiValue.coerce(dpi))
    return output_path


def get_pixel_dimensions(file_path: PathLike) -> Tuple[int, int]:
    """
    Return (width, height) in pixels.

    Only the image header is parsed; pixel data is not decoded.

    Raises:
        UnsupportedFormatError: If Pillow cannot identify the file or refuses
            it as a decompression bomb
    """
    try:
        with Image.open(file_path) as img:
            return img.size
    except (UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise UnsupportedFormatError(f"Cannot read image dimensions: {e}")
