"""Off-screen drawing surfaces, BMP loading and the Linux frame buffer."""

from __future__ import annotations

import fcntl
import mmap
import os
import struct
from array import array
from dataclasses import dataclass, field
from pathlib import Path

FBDEV_FILE = "/dev/fb0"
CONSOLE_FILE = "/dev/tty0"

FBIOGET_VSCREENINFO = 0x4600
FBIOGET_FSCREENINFO = 0x4602
KDSETMODE = 0x4B3A
KD_TEXT = 0x00
KD_GRAPHICS = 0x01

BMP_SIZE_OFFSET = 18
BMP_DATA_OFFSET = 54

_PIXEL_MASK = 0xFFFFFFFF
_PIXEL_TYPE = "I" if array("I").itemsize == 4 else "L"
# xres, yres, xres_virtual, yres_virtual, xoffset, yoffset, bits_per_pixel,
# grayscale, then offset/length/msb_right for red, green, blue and transp.
_VAR_INFO = struct.Struct("=20I")
# id, smem_start, smem_len, type, type_aux, visual, xpanstep, ypanstep,
# ywrapstep, line_length.
_FIX_INFO = struct.Struct("@16sLIIIIHHHI")


@dataclass(frozen=True)
class PixelFormat:
    """Bit offsets of the colour channels inside a 32-bit pixel."""

    red: int = 16
    green: int = 8
    blue: int = 0
    transp: int = 24

    def pixel(self, r: int, g: int, b: int) -> int:
        """Pack an opaque pixel from 8-bit red, green and blue values."""
        value = (
            (0xFF << self.transp)
            | ((r & 0xFF) << self.red)
            | ((g & 0xFF) << self.green)
            | ((b & 0xFF) << self.blue)
        )
        return value & _PIXEL_MASK


class Surface:
    """A width x height grid of 32-bit pixels, stored row by row."""

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"surface size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.pixels = array(_PIXEL_TYPE, bytes(4 * width * height))

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside {self.width}x{self.height}")
        return y * self.width + x

    def put(self, x: int, y: int, value: int) -> None:
        """Set the pixel at column ``x``, row ``y``."""
        self.pixels[self._index(x, y)] = value & _PIXEL_MASK

    def get(self, x: int, y: int) -> int:
        """Return the pixel at column ``x``, row ``y``."""
        return self.pixels[self._index(x, y)]

    def fill(self, value: int) -> None:
        """Set every pixel to ``value``."""
        self.pixels[:] = array(_PIXEL_TYPE, [value & _PIXEL_MASK]) * (
            self.width * self.height
        )

    def clear(self) -> None:
        """Set every pixel to zero."""
        self.fill(0)

    def row_bytes(self, y: int) -> bytes:
        """Return row ``y`` as raw native-order 32-bit pixels."""
        if not 0 <= y < self.height:
            raise IndexError(f"row {y} is outside a surface of height {self.height}")
        start = y * self.width
        return self.pixels[start : start + self.width].tobytes()


@dataclass(frozen=True)
class BmpImage:
    """Uncompressed 24-bit BMP pixel data, bottom row first, rows padded to 4 bytes."""

    width: int
    height: int
    data: bytes

    @property
    def row_stride(self) -> int:
        return (self.width * 3 + 3) & ~3


def load_bmp(path: str | Path) -> BmpImage:
    """Read the size and 24-bit pixel data of a BMP file."""
    raw = Path(path).read_bytes()
    if len(raw) < BMP_DATA_OFFSET:
        raise ValueError(f"{path}: truncated BMP header")
    width, height = struct.unpack_from("<ii", raw, BMP_SIZE_OFFSET)
    if width <= 0 or height <= 0:
        raise ValueError(f"{path}: unsupported BMP size {width}x{height}")
    stride = (width * 3 + 3) & ~3
    size = stride * height
    data = raw[BMP_DATA_OFFSET : BMP_DATA_OFFSET + size]
    if len(data) < size:
        raise ValueError(f"{path}: truncated BMP pixel data")
    return BmpImage(width, height, data)


def draw_bmp(
    surface: Surface,
    image: BmpImage,
    pixel_format: PixelFormat = PixelFormat(),
) -> None:
    """Clear ``surface`` and copy ``image`` into its top-left corner, clipped."""
    surface.clear()
    stride = image.row_stride
    data = image.data
    for y in range(min(image.height, surface.height)):
        row_start = (image.height - 1 - y) * stride
        for x in range(min(image.width, surface.width)):
            idx = row_start + x * 3
            b, g, r = data[idx], data[idx + 1], data[idx + 2]
            surface.put(x, y, pixel_format.pixel(r, g, b))


@dataclass(frozen=True)
class FbGeometry:
    """Visible size, row stride and pixel layout of a frame buffer."""

    width: int
    height: int
    line_length: int
    bits_per_pixel: int = 32
    pixel_format: PixelFormat = field(default_factory=PixelFormat)


def query_geometry(fd: int) -> FbGeometry:
    """Ask the frame buffer driver for its screen information."""
    var = bytearray(160)
    fcntl.ioctl(fd, FBIOGET_VSCREENINFO, var)
    fix = bytearray(128)
    fcntl.ioctl(fd, FBIOGET_FSCREENINFO, fix)
    values = _VAR_INFO.unpack_from(var)
    pixel_format = PixelFormat(
        red=values[8], green=values[11], blue=values[14], transp=values[17]
    )
    line_length = _FIX_INFO.unpack_from(fix)[-1]
    return FbGeometry(
        width=values[0],
        height=values[1],
        line_length=line_length,
        bits_per_pixel=values[6],
        pixel_format=pixel_format,
    )


def _set_console_mode(console: str | Path, mode: int) -> bool:
    try:
        fd = os.open(console, os.O_RDWR)
    except OSError:
        return False
    try:
        fcntl.ioctl(fd, KDSETMODE, mode)
    except OSError:
        return False
    finally:
        os.close(fd)
    return True


class Framebuffer:
    """A memory-mapped 32-bpp frame buffer that surfaces are presented to."""

    def __init__(
        self,
        path: str | Path = FBDEV_FILE,
        geometry: FbGeometry | None = None,
        console: str | Path | None = CONSOLE_FILE,
    ) -> None:
        self.console = console
        self._graphics = console is not None and _set_console_mode(
            console, KD_GRAPHICS
        )
        self._map: mmap.mmap | None = None
        self._fd: int | None = os.open(path, os.O_RDWR)
        try:
            if geometry is None:
                geometry = query_geometry(self._fd)
            if geometry.bits_per_pixel != 32:
                raise ValueError(
                    f"not a 32-bpp frame buffer ({geometry.bits_per_pixel} bpp)"
                )
            if geometry.line_length < geometry.width * 4:
                raise ValueError("line length is shorter than a row of pixels")
            self.geometry = geometry
            self._map = mmap.mmap(
                self._fd,
                geometry.line_length * geometry.height,
                mmap.MAP_SHARED,
                mmap.PROT_READ | mmap.PROT_WRITE,
            )
        except BaseException:
            self.close()
            raise

    @property
    def width(self) -> int:
        return self.geometry.width

    @property
    def height(self) -> int:
        return self.geometry.height

    @property
    def pixel_format(self) -> PixelFormat:
        return self.geometry.pixel_format

    def new_surface(self) -> Surface:
        """Return a blank surface the size of the screen."""
        return Surface(self.width, self.height)

    def present(self, surface: Surface) -> None:
        """Copy ``surface`` to the screen row by row."""
        if self._map is None:
            raise RuntimeError("frame buffer is closed")
        if (surface.width, surface.height) != (self.width, self.height):
            raise ValueError(
                f"surface is {surface.width}x{surface.height}, "
                f"screen is {self.width}x{self.height}"
            )
        stride = self.geometry.line_length
        for y in range(self.height):
            row = surface.row_bytes(y)
            start = y * stride
            self._map[start : start + len(row)] = row

    def close(self) -> None:
        """Unmap the screen, close the device and restore the text console."""
        if self._map is not None:
            self._map.close()
            self._map = None
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None
        if self._graphics and self.console is not None:
            _set_console_mode(self.console, KD_TEXT)
            self._graphics = False

    def __enter__(self) -> "Framebuffer":
        return self

    def __exit__(self, *args) -> None:
        self.close()