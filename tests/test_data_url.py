import base64

import pytest

from dpichanger.data_url import decode_dpi_data_url, encode_dpi_data_url, split_data_url
from dpichanger.exceptions import MalformedInputError
from dpichanger.results import DecodeStatus, DpiValue, ErrorKind


def as_data_url(data, mime='image/png'):
    return f"data:{mime};base64,{base64.b64encode(data).decode('ascii')}"


def test_split_data_url(pillow_png):
    data = pillow_png()
    header, payload = split_data_url(as_data_url(data))
    assert header == 'data:image/png;base64,'
    assert payload == data


def test_split_rejects_non_base64_urls():
    with pytest.raises(MalformedInputError):
        split_data_url('data:text/plain,hello')
    with pytest.raises(MalformedInputError):
        split_data_url('https://example.com/image.png')
    with pytest.raises(MalformedInputError):
        split_data_url('data:image/png;base64,@@@@')


def test_encode_and_decode_data_url(pillow_jpeg, pillow_png):
    for data, mime in ((pillow_jpeg(), 'image/jpeg'), (pillow_png(), 'image/png')):
        result, new_url = encode_dpi_data_url(as_data_url(data, mime), 300)
        assert result.ok
        assert new_url.startswith(f'data:{mime};base64,')
        assert decode_dpi_data_url(new_url).dpi == DpiValue(300, 300)


def test_data_url_parameters_are_kept(pillow_png):
    url = f"data:image/png;name=scan.png;base64,{base64.b64encode(pillow_png()).decode('ascii')}"
    result, new_url = encode_dpi_data_url(url, 150)
    assert result.ok
    assert new_url.startswith('data:image/png;name=scan.png;base64,')


def test_bad_data_urls():
    assert decode_dpi_data_url('not a url').status is DecodeStatus.UNSUPPORTED
    result, new_url = encode_dpi_data_url('not a url', 300)
    assert result.error is ErrorKind.MALFORMED_INPUT
    assert new_url == ''


def test_encode_failure_returns_empty_url(pillow_png):
    result, new_url = encode_dpi_data_url(as_data_url(pillow_png()), 70000)
    assert result.error is ErrorKind.VALUE_OUT_OF_RANGE
    assert new_url == ''


@pytest.mark.parametrize('mime', ['', 'application/octet-stream'])
def test_generic_mime_type_is_replaced(mime, pillow_jpeg):
    result, new_url = encode_dpi_data_url(as_data_url(pillow_jpeg(), mime), 300)
    assert result.ok
    assert new_url.startswith('data:image/jpeg;base64,')


def test_specific_mime_type_is_kept(pillow_png):
    result, new_url = encode_dpi_data_url(as_data_url(pillow_png(), 'image/x-png'), 300)
    assert new_url.startswith('data:image/x-png;base64,')
