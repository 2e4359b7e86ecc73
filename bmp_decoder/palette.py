import logging
from collections import namedtuple

from .header import Variant

logger = logging.getLogger(__name__)

_ColorTable = namedtuple("ColorTable", ["red", "green", "blue"])


class ColorTable(_ColorTable):
    """Per-channel lookup tables; index i maps to (red[i], green[i], blue[i]).

    Channel values are 16-bit: each stored byte is scaled by 257 so that
    0xFF becomes 0xFFFF.
    """
    __slots__ = ()

    @property
    def size(self):
        return len(self.red)

    def rgb(self, index):
        return self.red[index], self.green[index], self.blue[index]


def scale_sample(value: int) -> int:
    return value * 257


def color_count(descriptor) -> int:
    max_colors = 1 << descriptor.bits_per_pixel
    if descriptor.colors_used and descriptor.colors_used <= max_colors:
        return descriptor.colors_used
    return max_colors


def entry_size(variant) -> int:
    # OS/2 1.x stores (blue, green, red); the rest add a reserved byte
    return 3 if variant is Variant.OS21 else 4


def read_color_table(source, descriptor):
    """Read the palette that follows the info header.

    Returns None for bit depths that carry no palette. A palette cut short
    by the end of the file is padded with black entries.
    """
    if not descriptor.is_palette:
        return None

    num_colors = color_count(descriptor)
    elem = entry_size(descriptor.variant)
    start = descriptor.color_table_offset
    raw = source.read_at(start, num_colors * elem)
    if len(raw) < num_colors * elem:
        logger.warning(
            "Color table at offset %d truncated: %d of %d bytes",
            start, len(raw), num_colors * elem,
        )
        raw = raw + bytes(num_colors * elem - len(raw))

    red, green, blue = [], [], []
    for i in range(num_colors):
        b, g, r = raw[i * elem:i * elem + 3]
        red.append(scale_sample(r))
        green.append(scale_sample(g))
        blue.append(scale_sample(b))

    logger.debug("Read %d color table entries (%d bytes each)", num_colors, elem)
    return ColorTable(red, green, blue)
