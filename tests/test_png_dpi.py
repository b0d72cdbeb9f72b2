import io
import struct
import zlib

import pytest
from PIL import Image

from conftest import IDAT_CHUNK, png_chunk
from dpichanger.exceptions import MalformedInputError, ValueOutOfRangeError
from dpichanger.png_dpi import PNGDpiCodec, dpi_to_ppm, ppm_to_dpi
from dpichanger.results import DecodeStatus, DpiValue

IHDR_END = 8 + 8 + 13 + 4


def phys(x, y, unit=1):
    return png_chunk(b'pHYs', struct.pack('>IIB', x, y, unit))


def test_read_dpi_from_meters(make_png):
    result = PNGDpiCodec(make_png(phys(2835, 2835))).read_dpi()
    assert result.status is DecodeStatus.FOUND
    assert result.dpi == DpiValue(72, 72)
    assert result.source == 'pHYs'
    assert result.raw_density == (2835, 2835)
    assert result.segment.offset == IHDR_END
    assert result.segment.length == 9


def test_read_anisotropic_dpi(make_png):
    result = PNGDpiCodec(make_png(phys(11811, 5906))).read_dpi()
    assert result.dpi == DpiValue(300, 150)


def test_unknown_unit_is_not_found(make_png):
    assert PNGDpiCodec(make_png(phys(1, 1, unit=0))).read_dpi().status is DecodeStatus.NOT_FOUND


def test_phys_after_idat_is_ignored(make_png):
    data = make_png(trailing=phys(11811, 11811))
    assert PNGDpiCodec(data).read_dpi().status is DecodeStatus.NOT_FOUND


def test_other_chunks_are_skipped(make_png):
    data = make_png(png_chunk(b'tEXt', b'Comment\x00hello'), phys(3780, 3780))
    assert PNGDpiCodec(data).read_dpi().dpi == DpiValue(96, 96)


def test_crc_is_only_checked_on_request(make_png):
    data = make_png(png_chunk(b'pHYs', struct.pack('>IIB', 2835, 2835, 1), crc=0))
    assert PNGDpiCodec(data).read_dpi().dpi == DpiValue(72, 72)
    assert PNGDpiCodec(data).read_dpi(verify_crc=True).status is DecodeStatus.NOT_FOUND


def test_truncated_chunk_raises_on_walk(make_png):
    data = make_png(png_chunk(b'tEXt', b'Comment\x00hello'))
    with pytest.raises(MalformedInputError):
        PNGDpiCodec(data[:IHDR_END + 10]).read_dpi()


def test_missing_signature_is_rejected():
    with pytest.raises(MalformedInputError):
        PNGDpiCodec(b'\xff\xd8\xff\xe0\x00\x10JFIF')


def test_write_inserts_after_ihdr(make_png):
    data = make_png(png_chunk(b'gAMA', struct.pack('>I', 45455)))
    new_data = PNGDpiCodec(data).write_dpi(DpiValue.uniform(300))

    expected_chunk = png_chunk(b'pHYs', struct.pack('>IIB', 11811, 11811, 1))
    assert len(expected_chunk) == 21
    assert new_data == data[:IHDR_END] + expected_chunk + data[IHDR_END:]
    assert PNGDpiCodec(new_data).read_dpi(verify_crc=True).dpi == DpiValue(300, 300)


def test_write_overwrites_existing_chunk(make_png):
    data = make_png(png_chunk(b'gAMA', struct.pack('>I', 45455)), phys(2835, 2835))
    new_data = PNGDpiCodec(data).write_dpi(DpiValue(600, 300))

    assert len(new_data) == len(data)
    start = IHDR_END + 16
    end = start + 21
    assert new_data[:start] == data[:start]
    assert new_data[end:] == data[end:]
    assert new_data[start:end] == png_chunk(b'pHYs', struct.pack('>IIB', 23622, 11811, 1))


def test_write_keeps_idat_untouched(make_png):
    data = make_png()
    new_data = PNGDpiCodec(data).write_dpi(DpiValue.uniform(150))
    assert IDAT_CHUNK in new_data
    assert new_data.index(IDAT_CHUNK) == data.index(IDAT_CHUNK) + 21


def test_write_requires_ihdr_first(make_png):
    data = make_png(png_chunk(b'gAMA', struct.pack('>I', 45455)), ihdr=False)
    with pytest.raises(MalformedInputError):
        PNGDpiCodec(data).write_dpi(DpiValue.uniform(300))


def test_write_refuses_odd_sized_phys(make_png):
    data = make_png(png_chunk(b'pHYs', struct.pack('>IIBB', 2835, 2835, 1, 0)))
    with pytest.raises(MalformedInputError):
        PNGDpiCodec(data).write_dpi(DpiValue.uniform(300))


def test_write_refuses_phys_after_image_data(make_png):
    data = make_png(trailing=phys(2835, 2835))
    with pytest.raises(MalformedInputError):
        PNGDpiCodec(data).write_dpi(DpiValue.uniform(300))


def test_trailing_chunk_walk_stops_at_iend(make_png):
    data = make_png(trailing=png_chunk(b'tEXt', b'Comment\x00hi'))
    codec = PNGDpiCodec(data)
    assert list(codec.iter_trailing_chunk_types(data.index(IDAT_CHUNK))) == [b'IDAT', b'tEXt']


def test_write_refuses_truncated_stream(make_png):
    data = make_png(png_chunk(b'tEXt', b'Comment\x00hello'))
    with pytest.raises(MalformedInputError):
        PNGDpiCodec(data[:IHDR_END + 12]).write_dpi(DpiValue.uniform(300))


def test_build_payload_rejects_huge_density():
    with pytest.raises(ValueOutOfRangeError):
        PNGDpiCodec.build_phys_payload(DpiValue.uniform(60_000_000))


def test_write_chunk_crc():
    chunk = PNGDpiCodec.write_chunk(b'pHYs', b'\x00' * 9)
    assert chunk[:8] == b'\x00\x00\x00\x09pHYs'
    assert struct.unpack('>I', chunk[-4:])[0] == zlib.crc32(b'pHYs' + b'\x00' * 9) & 0xffffffff


def test_conversion_round_trips_for_every_16_bit_dpi():
    for dpi in range(1, 65536):
        assert ppm_to_dpi(dpi_to_ppm(dpi)) == dpi


def test_72_dpi_conversion():
    assert dpi_to_ppm(72) == 2835
    assert ppm_to_dpi(2835) == 72


def test_pillow_reads_written_density(pillow_png):
    data = pillow_png()
    new_data = PNGDpiCodec(data).write_dpi(DpiValue.uniform(300))
    with Image.open(io.BytesIO(new_data)) as img:
        assert img.info['dpi'] == pytest.approx((300, 300), abs=0.01)
        img.load()


def test_reads_pillow_density(pillow_png):
    data = pillow_png(dpi=(96, 96))
    assert PNGDpiCodec(data).read_dpi().dpi == DpiValue(96, 96)
