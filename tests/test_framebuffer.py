import struct

import pytest

from lanedash.framebuffer import (
    BmpImage,
    FbGeometry,
    Framebuffer,
    PixelFormat,
    Surface,
    draw_bmp,
    load_bmp,
)


def _bmp_bytes(rows):
    """Build a 24-bit BMP from rows of (r, g, b) given top row first."""
    height = len(rows)
    width = len(rows[0])
    stride = (width * 3 + 3) & ~3
    body = b""
    for row in reversed(rows):
        line = b"".join(bytes((b, g, r)) for r, g, b in row)
        body += line + bytes(stride - len(line))
    header = bytearray(54)
    header[0:2] = b"BM"
    struct.pack_into("<ii", header, 18, width, height)
    return bytes(header) + body


ROWS = [
    [(10, 20, 30), (40, 50, 60)],
    [(70, 80, 90), (100, 110, 120)],
]


def test_pixel_is_opaque_and_channels_round_trip():
    fmt = PixelFormat()
    value = fmt.pixel(0x12, 0x34, 0x56)
    assert (value >> fmt.transp) & 0xFF == 0xFF
    assert (value >> fmt.red) & 0xFF == 0x12
    assert (value >> fmt.green) & 0xFF == 0x34
    assert (value >> fmt.blue) & 0xFF == 0x56


def test_pixel_follows_custom_offsets():
    fmt = PixelFormat(red=0, green=8, blue=16, transp=24)
    value = fmt.pixel(1, 2, 3)
    assert value & 0xFF == 1
    assert (value >> 16) & 0xFF == 3
    assert value <= 0xFFFFFFFF


def test_surface_put_get_fill_clear():
    surface = Surface(4, 3)
    surface.put(3, 2, 0xAABBCCDD)
    assert surface.get(3, 2) == 0xAABBCCDD
    assert surface.get(0, 0) == 0
    surface.fill(7)
    assert all(surface.get(x, y) == 7 for x in range(4) for y in range(3))
    surface.clear()
    assert set(surface.pixels) == {0}


def test_surface_rejects_out_of_range():
    surface = Surface(2, 2)
    with pytest.raises(IndexError):
        surface.put(2, 0, 1)
    with pytest.raises(IndexError):
        surface.get(0, -1)
    with pytest.raises(ValueError):
        Surface(0, 5)


def test_row_bytes_matches_pixels():
    surface = Surface(2, 2)
    surface.put(1, 1, 0x01020304)
    assert surface.row_bytes(1) == struct.pack("=II", 0, 0x01020304)


def test_load_bmp_reads_size_and_data(tmp_path):
    path = tmp_path / "img.bmp"
    path.write_bytes(_bmp_bytes(ROWS))
    image = load_bmp(path)
    assert (image.width, image.height) == (2, 2)
    assert image.row_stride % 4 == 0
    assert len(image.data) == image.row_stride * image.height


def test_load_bmp_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_bmp(tmp_path / "missing.bmp")
    short = tmp_path / "short.bmp"
    short.write_bytes(_bmp_bytes(ROWS)[:60])
    with pytest.raises(ValueError):
        load_bmp(short)
    header_only = tmp_path / "header.bmp"
    header_only.write_bytes(b"BM")
    with pytest.raises(ValueError):
        load_bmp(header_only)


def test_draw_bmp_flips_rows_and_clears_rest(tmp_path):
    path = tmp_path / "img.bmp"
    path.write_bytes(_bmp_bytes(ROWS))
    fmt = PixelFormat()
    surface = Surface(4, 4)
    surface.fill(5)
    draw_bmp(surface, load_bmp(path), fmt)
    assert surface.get(0, 0) == fmt.pixel(*ROWS[0][0])
    assert surface.get(1, 0) == fmt.pixel(*ROWS[0][1])
    assert surface.get(1, 1) == fmt.pixel(*ROWS[1][1])
    assert surface.get(3, 3) == 0


def test_draw_bmp_is_clipped_to_surface():
    rows = [[(1, 2, 3), (4, 5, 6), (7, 8, 9)]]
    stride = 12
    data = b"".join(bytes((b, g, r)) for r, g, b in rows[0])
    image = BmpImage(3, 1, data + bytes(stride - len(data)))
    fmt = PixelFormat()
    surface = Surface(2, 2)
    draw_bmp(surface, image, fmt)
    assert surface.get(1, 0) == fmt.pixel(4, 5, 6)
    assert surface.get(0, 1) == 0


def test_present_writes_rows_with_stride(tmp_path):
    device = tmp_path / "fb"
    device.write_bytes(bytes(32))
    geometry = FbGeometry(width=3, height=2, line_length=16)
    surface = Surface(3, 2)
    surface.put(2, 1, 0xAABBCCDD)
    surface.put(0, 0, 0x11223344)
    with Framebuffer(device, geometry=geometry, console=None) as fb:
        fb.present(surface)
    data = device.read_bytes()
    assert data[0:4] == struct.pack("=I", 0x11223344)
    assert data[16 + 8 : 16 + 12] == struct.pack("=I", 0xAABBCCDD)
    assert data[12:16] == bytes(4)


def test_present_rejects_wrong_size_and_closed(tmp_path):
    device = tmp_path / "fb"
    device.write_bytes(bytes(32))
    fb = Framebuffer(
        device, geometry=FbGeometry(width=3, height=2, line_length=16), console=None
    )
    with pytest.raises(ValueError):
        fb.present(Surface(2, 2))
    fb.close()
    fb.close()
    with pytest.raises(RuntimeError):
        fb.present(Surface(3, 2))


def test_framebuffer_requires_32_bpp(tmp_path):
    device = tmp_path / "fb"
    device.write_bytes(bytes(32))
    geometry = FbGeometry(width=3, height=2, line_length=16, bits_per_pixel=16)
    with pytest.raises(ValueError):
        Framebuffer(device, geometry=geometry, console=None)