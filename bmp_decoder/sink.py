from collections import namedtuple

from .pixels import unpack_indices

DecodedRow = namedtuple("DecodedRow", ["index", "data", "bands", "bits_per_sample"])


class ImageSink:
    """Receives decoded rows in top-to-bottom display order.

    `begin` is called once before the first row; `emit` exactly once per
    row with increasing row_index.
    """

    def begin(self, descriptor, color_table):
        pass

    def emit(self, row_index, data, bands, bits_per_sample):
        raise NotImplementedError


class RowCollector(ImageSink):
    """Keeps every emitted row as-is."""

    def __init__(self):
        self.descriptor = None
        self.color_table = None
        self.rows = []

    def begin(self, descriptor, color_table):
        self.descriptor = descriptor
        self.color_table = color_table

    def emit(self, row_index, data, bands, bits_per_sample):
        self.rows.append(DecodedRow(row_index, bytes(data), bands, bits_per_sample))


def _scale5(value):
    return (value * 255) // 31


class RGBSink(ImageSink):
    """Resolves rows into lists of 8-bit (R, G, B) tuples, one per pixel."""

    def __init__(self):
        self.width = 0
        self.height = 0
        self.palette = None
        self.pixels = []

    def begin(self, descriptor, color_table):
        self.width = descriptor.width
        self.height = descriptor.length
        self.pixels = []
        if color_table is not None:
            # keep the high byte of each 16-bit channel
            self.palette = [
                (r >> 8, g >> 8, b >> 8)
                for r, g, b in zip(color_table.red, color_table.green, color_table.blue)
            ]
        else:
            self.palette = None

    def emit(self, row_index, data, bands, bits_per_sample):
        width = self.width
        if bands == 1:
            palette = self.palette or []
            row_pixels = []
            for index in unpack_indices(data, width, bits_per_sample):
                if index < len(palette):
                    row_pixels.append(palette[index])
                else:
                    row_pixels.append((0, 0, 0))
        elif bits_per_sample == 8:
            row_pixels = [tuple(data[x * 3:x * 3 + 3]) for x in range(width)]
        else:
            # 16-bit rows: little-endian X1R5G5B5
            row_pixels = []
            for x in range(width):
                v = data[x * 2] | (data[x * 2 + 1] << 8)
                row_pixels.append((_scale5((v >> 10) & 0x1F),
                                   _scale5((v >> 5) & 0x1F),
                                   _scale5(v & 0x1F)))
        self.pixels.append(row_pixels)
