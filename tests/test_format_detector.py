from dpichanger.format_detector import FormatDetector, ImageFormat, identify


def test_identify_jpeg_and_png(make_jpeg, make_png):
    assert identify(make_jpeg()) is ImageFormat.JPEG
    assert identify(make_png()) is ImageFormat.PNG


def test_identify_unknown():
    assert identify(b'GIF89a\x01\x00\x01\x00') is ImageFormat.UNKNOWN
    assert identify(b'\x89PNG\r\n\x1a\x00rest') is ImageFormat.UNKNOWN


def test_short_buffers_are_unknown():
    assert identify(b'') is ImageFormat.UNKNOWN
    assert identify(b'\xff\xd8') is ImageFormat.UNKNOWN
    assert identify(b'\x89PNG\r\n\x1a') is ImageFormat.UNKNOWN


def test_identify_accepts_bytearray_and_memoryview(make_png):
    data = make_png()
    assert identify(bytearray(data)) is ImageFormat.PNG
    assert identify(memoryview(data)) is ImageFormat.PNG


def test_from_extension_and_mime_type():
    assert FormatDetector.from_extension('photo.JPG') is ImageFormat.JPEG
    assert FormatDetector.from_extension('scan.png') is ImageFormat.PNG
    assert FormatDetector.from_extension('anim.gif') is ImageFormat.UNKNOWN
    assert FormatDetector.mime_type(ImageFormat.PNG) == 'image/png'
    assert FormatDetector.mime_type(ImageFormat.UNKNOWN) is None
