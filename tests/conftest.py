import io
import struct
import zlib

import pytest
from PIL import Image

PNG_SIGNATURE = b'\x89PNG\r\n\x1a\n'

# Minimal scan: SOS header for one component, a few entropy-coded bytes
# (including a stuffed 0xFF00) and EOI
SOS_SEGMENT = b'\xff\xda\x00\x08\x01\x01\x00\x00\x3f\x00'
SCAN_DATA = b'\x12\x34\xff\x00\x56\x78'
EOI = b'\xff\xd9'


def jpeg_segment(marker: int, payload: bytes) -> bytes:
    return struct.pack('>HH', marker, len(payload) + 2) + payload


def jfif_payload(units: int, x: int, y: int, version=(1, 2)) -> bytes:
    return b'JFIF\x00' + bytes(version) + bytes([units]) + struct.pack('>HH', x, y) + b'\x00\x00'


def png_chunk(chunk_type: bytes, data: bytes, crc=None) -> bytes:
    if crc is None:
        crc = zlib.crc32(chunk_type + data) & 0xffffffff
    return struct.pack('>I', len(data)) + chunk_type + data + struct.pack('>I', crc)


IHDR_CHUNK = png_chunk(b'IHDR', struct.pack('>IIBBBBB', 2, 2, 8, 2, 0, 0, 0))
IDAT_CHUNK = png_chunk(b'IDAT', zlib.compress(b'\x00' + b'\xff\x00\x00' * 2 + b'\x00' + b'\x00\xff\x00' * 2))
IEND_CHUNK = png_chunk(b'IEND', b'')


@pytest.fixture
def make_jpeg():
    """Build a JPEG byte stream from (marker, payload) header segments."""
    def _make(*segments):
        body = b''.join(jpeg_segment(marker, payload) for marker, payload in segments)
        return b'\xff\xd8' + body + SOS_SEGMENT + SCAN_DATA + EOI
    return _make


@pytest.fixture
def make_png():
    """Build a PNG byte stream with the given chunks between IHDR and IDAT."""
    def _make(*chunks, ihdr=True, trailing=b''):
        head = PNG_SIGNATURE + (IHDR_CHUNK if ihdr else b'')
        return head + b''.join(chunks) + IDAT_CHUNK + trailing + IEND_CHUNK
    return _make


def _pillow_image():
    img = Image.new('RGB', (40, 30))
    for x in range(40):
        for y in range(30):
            img.putpixel((x, y), (x * 6, y * 8, (x + y) * 3))
    return img


@pytest.fixture
def pillow_jpeg():
    """Encode a small gradient as JPEG with Pillow (optionally with dpi)."""
    def _make(**save_kwargs):
        out = io.BytesIO()
        _pillow_image().save(out, 'JPEG', quality=90, **save_kwargs)
        return out.getvalue()
    return _make


@pytest.fixture
def pillow_png():
    """Encode a small gradient as PNG with Pillow (optionally with dpi)."""
    def _make(**save_kwargs):
        out = io.BytesIO()
        _pillow_image().save(out, 'PNG', **save_kwargs)
        return out.getvalue()
    return _make
