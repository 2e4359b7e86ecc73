import enum
from collections import namedtuple

from .errors import UnsupportedCompressionError
from .header import Compression


class DecodePath(enum.Enum):
    UNCOMPRESSED = "uncompressed"
    RUN_LENGTH = "run-length"


def row_stride(width: int, bits_per_pixel: int) -> int:
    # Each row is padded to a multiple of 4 bytes
    return ((width * bits_per_pixel + 31) // 32) * 4


_RowLayout = namedtuple("RowLayout", ["length", "stride", "bottom_up", "path"])


class RowLayout(_RowLayout):
    __slots__ = ()

    def file_row(self, row: int) -> int:
        """Stored row that holds display row `row` (0 is the top row)."""
        if self.bottom_up:
            return self.length - 1 - row
        return row


def plan_layout(descriptor) -> RowLayout:
    compression = descriptor.compression
    if compression == Compression.RGB:
        path = DecodePath.UNCOMPRESSED
    elif compression in (Compression.RLE4, Compression.RLE8):
        path = DecodePath.RUN_LENGTH
    else:
        raise UnsupportedCompressionError(compression)

    return RowLayout(
        length=descriptor.length,
        stride=row_stride(descriptor.width, descriptor.bits_per_pixel),
        bottom_up=descriptor.bottom_up,
        path=path,
    )
