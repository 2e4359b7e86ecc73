import logging
from collections import namedtuple

from .errors import RowReadError
from .header import Compression, parse_header
from .layout import DecodePath, plan_layout
from .palette import read_color_table
from .pixels import output_format, packed_row_size, rearrange_pixels
from .rle import RLEDecompressor
from .sink import DecodedRow

logger = logging.getLogger(__name__)

_DecodeReport = namedtuple("DecodeReport", ["rows_emitted", "row_errors", "truncated"])


class DecodeReport(_DecodeReport):
    __slots__ = ()

    @property
    def succeeded(self):
        # a truncated RLE stream still counts as a (partial) success
        return not self.row_errors


class BMPParser:
    def __init__(self, source):
        self.source = source
        self.descriptor = None   # Header information (width, height, etc.)
        self.color_table = None  # Palette (for indexed BMPs)
        self.metadata = {}
        self.row_errors = []
        self.truncated = False

    def load(self):
        # Parse the headers and the palette; pixel rows are produced on demand
        self._parse_header()
        self._parse_color_table()
        return self.descriptor

    def _parse_header(self):
        self.descriptor = parse_header(self.source)
        self.metadata = self.descriptor.as_metadata()

    def _parse_color_table(self):
        self.color_table = read_color_table(self.source, self.descriptor)

    def rows(self):
        """Return an iterator of DecodedRow, top row first.

        Raises UnsupportedCompressionError straight away, before any row
        is read, when the compression is neither RGB nor RLE.
        """
        if self.descriptor is None:
            self.load()
        layout = plan_layout(self.descriptor)
        self.row_errors = []
        self.truncated = False
        if layout.path is DecodePath.UNCOMPRESSED:
            return self._uncompressed_rows(layout)
        return self._run_length_rows(layout)

    def decode(self, sink):
        rows = self.rows()
        sink.begin(self.descriptor, self.color_table)
        emitted = 0
        for row in rows:
            sink.emit(row.index, row.data, row.bands, row.bits_per_sample)
            emitted += 1
        return DecodeReport(emitted, list(self.row_errors), self.truncated)

    def _uncompressed_rows(self, layout):
        d = self.descriptor
        bands, bits_per_sample = output_format(d.bits_per_pixel)
        row_bytes = packed_row_size(d.width, d.bits_per_pixel)

        for row in range(layout.length):
            # Choose correct row start depending on bottom-up or top-down
            offset = d.pixel_data_offset + layout.file_row(row) * layout.stride
            scanbuf = bytearray(layout.stride)
            try:
                data = self.source.read_at(offset, layout.stride)
            except OSError as e:
                self._row_error(row, offset, f"Seek error: {e}")
            else:
                scanbuf[:len(data)] = data
                if len(data) < layout.stride:
                    self._row_error(
                        row, offset,
                        f"Read error: got {len(data)} of {layout.stride} bytes")

            rearrange_pixels(scanbuf, d.width, d.bits_per_pixel)
            yield DecodedRow(row, bytes(scanbuf[:row_bytes]), bands, bits_per_sample)

    def _row_error(self, row, offset, reason):
        error = RowReadError(row, offset, reason)
        logger.error("%s: %s", self.source.name, error)
        self.row_errors.append(error)

    def _run_length_rows(self, layout):
        d = self.descriptor
        bits = 8 if d.compression == Compression.RLE8 else 4
        if bits != d.bits_per_pixel:
            logger.warning(
                "%s compression with %d bits per pixel",
                d.compression.name, d.bits_per_pixel,
            )

        compr_size = max(self.source.size() - d.pixel_data_offset, 0)
        comp = self.source.read_at(d.pixel_data_offset, compr_size)
        decoder = RLEDecompressor(d.width, layout.length, bits)
        pixels = decoder.decompress(comp)
        if decoder.truncated:
            self.truncated = True
            logger.warning(
                "%s: compressed stream truncated, undecoded pixels left as index 0",
                self.source.name,
            )

        # The compressed stream is always laid out bottom row first
        width = d.width
        for row in range(layout.length):
            start = (layout.length - 1 - row) * width
            yield DecodedRow(row, bytes(pixels[start:start + width]), 1, 8)
