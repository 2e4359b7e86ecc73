import io
import struct

import pytest

from bmp_decoder.source import ByteSource


def build_bmp(width, height, bpp, pixel_data=b"", info_size=40, compression=0,
              palette=b"", colors_used=0, data_offset=None):
    """Assemble a BMP file in memory from its parts."""
    if info_size == 12:
        info = struct.pack("<IhhHH", 12, width, height, 1, bpp)
    else:
        info = struct.pack("<IiiHHIIiiII", info_size, width, height, 1, bpp,
                           compression, len(pixel_data), 2835, 2835, colors_used, 0)
        info += bytes(max(info_size - 40, 0))

    if data_offset is None:
        data_offset = 14 + len(info) + len(palette)
    body = info + palette
    body += bytes(max(data_offset - 14 - len(body), 0))
    total = data_offset + len(pixel_data)
    file_header = b"BM" + struct.pack("<IHHI", total, 0, 0, data_offset)
    return file_header + body + pixel_data


class RecordingSource(ByteSource):
    """ByteSource that remembers every read_at call."""

    def __init__(self, data):
        super().__init__(io.BytesIO(data), name="<recording>")
        self.reads = []

    def read_at(self, offset, size):
        self.reads.append((offset, size))
        return super().read_at(offset, size)


class FailingSource(ByteSource):
    """ByteSource whose reads at the given offsets fail like a bad seek."""

    def __init__(self, data, bad_offsets):
        super().__init__(io.BytesIO(data), name="<failing>")
        self.bad_offsets = set(bad_offsets)

    def read_at(self, offset, size):
        if offset in self.bad_offsets:
            raise OSError("device not ready")
        return super().read_at(offset, size)


@pytest.fixture
def bmp_source():
    def make(*args, **kwargs):
        return ByteSource.from_bytes(build_bmp(*args, **kwargs))
    return make
