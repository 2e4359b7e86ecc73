"""Exceptions raised (or collected) while decoding a BMP stream."""


class BMPError(ValueError):
    """Base class for every BMP decoding problem."""


class NotABitmapError(BMPError):
    pass


class UnsupportedBitDepthError(BMPError):
    def __init__(self, bits_per_pixel):
        super().__init__(f"Cannot process BMP file with bit count {bits_per_pixel}")
        self.bits_per_pixel = bits_per_pixel


class UnsupportedCompressionError(BMPError):
    def __init__(self, compression):
        name = getattr(compression, "name", compression)
        super().__init__(f"Unsupported compression: {name}")
        self.compression = compression


class RowReadError(BMPError):
    """A single scanline could not be read.

    These are never raised by the decoder; they are collected in the
    decode report so the remaining rows can still be emitted.
    """

    def __init__(self, row, offset, reason):
        super().__init__(f"scanline {row}: {reason} (offset {offset})")
        self.row = row
        self.offset = offset
        self.reason = reason
