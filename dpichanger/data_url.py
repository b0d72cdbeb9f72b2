# Copyright 2025 DNAi inc.

# Dual-licensed under the DNAi Free License v1.1 and the
# DNAi Commercial License v1.1.
# See the LICENSE files in the project root for details.

"""
DPI read/write for base64 data URLs

Browsers hand image files around as ``data:image/png;base64,...``
strings. These helpers unwrap the payload, run the byte codec on it
and wrap the result again with the original MIME prefix. A prefix
without a usable image MIME type is labelled with the sniffed one.

Copyright 2025 DNAi inc.
"""

import base64
import binascii
import re
from typing import Tuple

from dpichanger.codec import DpiLike, decode_dpi, encode_dpi
from dpichanger.exceptions import MalformedInputError
from dpichanger.format_detector import FormatDetector
from dpichanger.results import DecodeResult, EncodeResult, ErrorKind

_DATA_URL_RE = re.compile(r'^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(?:;[^;,]*)*);base64,(?P<payload>.*)$', re.DOTALL)

GENERIC_MIME_TYPES = ('', 'application/octet-stream')


def split_data_url(url: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URL into its header and decoded payload.

    Args:
        url: ``data:<mime>[;params];base64,<payload>`` string

    Returns:
        (header, payload) where header is everything up to and including
        the comma

    Raises:
        MalformedInputError: If the URL is not a base64 data URL
    """
    match = _DATA_URL_RE.match(url.strip())
    if not match:
        raise MalformedInputError("Not a base64 data URL")
    header = url.strip()[:match.start('payload')]
    try:
        payload = base64.b64decode(match.group('payload'), validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputError(f"Invalid base64 payload: {e}")
    return header, payload


def label_header(header: str, data: bytes) -> str:
    """Replace a missing or generic MIME type in ``header`` with the sniffed one."""
    mime = header[len('data:'):].split(';', 1)[0]
    sniffed = FormatDetector.mime_type(FormatDetector.identify(data))
    if sniffed is None or mime.lower() not in GENERIC_MIME_TYPES:
        return header
    return f"data:{sniffed}{header[len('data:') + len(mime):]}"


def decode_dpi_data_url(url: str, verify_crc: bool = False) -> DecodeResult:
    """Read the DPI from a data URL; UNSUPPORTED if the URL is not usable."""
    try:
        _, payload = split_data_url(url)
    except MalformedInputError:
        return DecodeResult.unsupported()
    return decode_dpi(payload, verify_crc=verify_crc)


def encode_dpi_data_url(url: str, target: DpiLike) -> Tuple[EncodeResult, str]:
    """
    Write a new DPI into the image carried by a data URL.

    Returns:
        (result, new_url). ``new_url`` is empty when the result is a failure.
    """
    try:
        header, payload = split_data_url(url)
    except MalformedInputError as e:
        return EncodeResult.failure(ErrorKind.MALFORMED_INPUT, e.message), ''

    result = encode_dpi(payload, target)
    if not result.ok:
        return result, ''
    return result, label_header(header, result.data) + base64.b64encode(result.data).decode('ascii')
