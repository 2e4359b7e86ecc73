import enum
import logging
from collections import namedtuple

from .errors import NotABitmapError, UnsupportedBitDepthError

logger = logging.getLogger(__name__)

# File header size in bytes; the info header starts right after it.
FILE_HEADER_SIZE = 14

WIN4_HEADER_SIZE = 40
WIN5_HEADER_SIZE = 57
OS21_HEADER_SIZE = 12
OS22_HEADER_SIZE = 64

SUPPORTED_BIT_DEPTHS = (1, 4, 8, 16, 24, 32)


class Variant(enum.Enum):
    WIN4 = "Windows 3.0/NT 3.51/95"
    WIN5 = "Windows NT 4.0/98/2000/XP"
    OS21 = "OS/2 PM 1.x"
    OS22 = "OS/2 PM 2.x"


class Compression(enum.IntEnum):
    RGB = 0
    RLE8 = 1
    RLE4 = 2
    BITFIELDS = 3
    JPEG = 4
    PNG = 5


_Descriptor = namedtuple("BitmapDescriptor", [
    "variant", "width", "height", "bits_per_pixel", "compression",
    "pixel_data_offset", "colors_used", "info_header_size", "planes",
    "image_size", "x_pels_per_meter", "y_pels_per_meter", "colors_important",
])


class BitmapDescriptor(_Descriptor):
    __slots__ = ()

    @property
    def length(self):
        return abs(self.height)

    @property
    def bottom_up(self):
        return self.height > 0

    @property
    def is_palette(self):
        return self.bits_per_pixel in (1, 4, 8)

    @property
    def color_table_offset(self):
        return FILE_HEADER_SIZE + self.info_header_size

    def as_metadata(self):
        compression = self.compression
        if isinstance(compression, Compression):
            compression = compression.name
        return {
            "variant": self.variant.name,
            "width": self.width,
            "height": self.height,
            "bpp": self.bits_per_pixel,
            "compression": compression,
            "data_offset": self.pixel_data_offset,
            "colors_used": self.colors_used,
            "info_header_size": self.info_header_size,
            "image_size": self.image_size,
        }


def variant_for_size(info_header_size: int) -> Variant:
    if info_header_size == WIN4_HEADER_SIZE:
        return Variant.WIN4
    if info_header_size == OS21_HEADER_SIZE:
        return Variant.OS21
    # No documented OS/2 header is 16 bytes, but such files are read as OS/2 2.x.
    if info_header_size in (OS22_HEADER_SIZE, 16):
        return Variant.OS22
    return Variant.WIN5


def _uint(b, start, size):
    return int.from_bytes(b[start:start + size], "little")


def _sint(b, start, size):
    return int.from_bytes(b[start:start + size], "little", signed=True)


def parse_header(source) -> BitmapDescriptor:
    """Read the file header and info header from the start of `source`.

    Raises NotABitmapError for a bad signature or a truncated header and
    UnsupportedBitDepthError for a bit count outside SUPPORTED_BIT_DEPTHS.
    """
    b = source.read_at(0, FILE_HEADER_SIZE + WIN4_HEADER_SIZE)

    # Signature (must start with 'BM')
    if b[0:2] != b"BM":
        raise NotABitmapError("File is not BMP")
    if len(b) < FILE_HEADER_SIZE + 4:
        raise NotABitmapError("Truncated file header")

    # Offset where pixel data starts
    data_offset = _uint(b, 10, 4)
    info_size = _uint(b, 14, 4)
    variant = variant_for_size(info_size)
    logger.debug("info header size=%d variant=%s", info_size, variant.name)

    if variant is Variant.OS21:
        if len(b) < FILE_HEADER_SIZE + OS21_HEADER_SIZE:
            raise NotABitmapError("Truncated OS/2 1.x info header")
        width = _sint(b, 18, 2)
        height = _sint(b, 20, 2)
        planes = _sint(b, 22, 2)
        bpp = _sint(b, 24, 2)
        # OS/2 1.x bitmaps are never compressed
        compression = Compression.RGB
        image_size = x_res = y_res = colors_used = colors_important = 0
    else:
        if len(b) < FILE_HEADER_SIZE + WIN4_HEADER_SIZE:
            raise NotABitmapError(f"Truncated {variant.name} info header")
        width = _sint(b, 18, 4)
        height = _sint(b, 22, 4)
        planes = _sint(b, 26, 2)
        bpp = _sint(b, 28, 2)
        compression = _uint(b, 30, 4)
        image_size = _uint(b, 34, 4)
        x_res = _sint(b, 38, 4)
        y_res = _sint(b, 42, 4)
        colors_used = _uint(b, 46, 4)
        colors_important = _uint(b, 50, 4)
        try:
            compression = Compression(compression)
        except ValueError:
            pass

    if bpp not in SUPPORTED_BIT_DEPTHS:
        raise UnsupportedBitDepthError(bpp)
    if width <= 0:
        raise NotABitmapError(f"Invalid image width {width}")

    logger.debug(
        "width=%d height=%d bpp=%d compression=%s data_offset=%d colors_used=%d",
        width, height, bpp, compression, data_offset, colors_used,
    )
    return BitmapDescriptor(
        variant=variant,
        width=width,
        height=height,
        bits_per_pixel=bpp,
        compression=compression,
        pixel_data_offset=data_offset,
        colors_used=colors_used,
        info_header_size=info_size,
        planes=planes,
        image_size=image_size,
        x_pels_per_meter=x_res,
        y_pels_per_meter=y_res,
        colors_important=colors_important,
    )
