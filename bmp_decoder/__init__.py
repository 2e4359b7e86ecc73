'''Decode Windows and OS/2 BMP (DIB) files into top-down pixel rows.'''

__version__ = "0.1.0"

from .errors import (
    BMPError,
    NotABitmapError,
    RowReadError,
    UnsupportedBitDepthError,
    UnsupportedCompressionError,
)
from .header import BitmapDescriptor, Compression, Variant, parse_header
from .palette import ColorTable, read_color_table
from .layout import RowLayout, plan_layout, row_stride
from .rle import RLEDecompressor, decompress_rle
from .pixels import rearrange_pixels
from .sink import DecodedRow, ImageSink, RGBSink, RowCollector
from .source import ByteSource
from .parser import BMPParser, DecodeReport
