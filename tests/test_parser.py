import logging

import pytest

from bmp_decoder.errors import UnsupportedCompressionError
from bmp_decoder.header import Compression
from bmp_decoder.parser import BMPParser
from bmp_decoder.sink import RowCollector
from bmp_decoder.source import ByteSource
from conftest import FailingSource, RecordingSource, build_bmp


def decode(source):
    parser = BMPParser(source)
    parser.load()
    sink = RowCollector()
    report = parser.decode(sink)
    return parser, sink, report


def test_stride_padding_reads_whole_rows():
    rows = [bytes([1, 2, 3, 4, 5, 6, 7, 8, 9]), bytes([10, 11, 12, 13, 14, 15, 16, 17, 18])]
    pad = b"\xee\xee\xee"
    raw = build_bmp(3, 2, 24, pixel_data=rows[1] + pad + rows[0] + pad)
    source = RecordingSource(raw)

    parser, sink, report = decode(source)

    pixel_reads = [r for r in source.reads if r[0] >= 54]
    assert pixel_reads == [(54 + 12, 12), (54, 12)]
    assert [row.data for row in sink.rows] == [
        bytes([3, 2, 1, 6, 5, 4, 9, 8, 7]),
        bytes([12, 11, 10, 15, 14, 13, 18, 17, 16]),
    ]
    assert report.succeeded
    assert report.rows_emitted == 2


def test_row_order_inversion():
    display = [bytes([r, r, r, r]) for r in (1, 2, 3, 4)]
    bottom_up = build_bmp(4, 4, 8, pixel_data=b"".join(reversed(display)))
    top_down = build_bmp(4, -4, 8, pixel_data=b"".join(display))

    _, up_sink, _ = decode(ByteSource.from_bytes(bottom_up))
    _, down_sink, _ = decode(ByteSource.from_bytes(top_down))

    assert up_sink.rows == down_sink.rows
    assert [row.data for row in up_sink.rows] == display
    assert [row.index for row in up_sink.rows] == [0, 1, 2, 3]


def test_palette_rows_and_color_table():
    palette = bytes([0, 0, 0, 0, 255, 255, 255, 0])
    raw = build_bmp(10, 1, 1, pixel_data=b"\xaa\xc0\x00\x00", palette=palette)
    parser, sink, _ = decode(ByteSource.from_bytes(raw))

    assert parser.color_table.rgb(1) == (65535, 65535, 65535)
    assert sink.color_table is parser.color_table
    (row,) = sink.rows
    assert (row.bands, row.bits_per_sample) == (1, 1)
    assert row.data == b"\xaa\xc0"


def test_32bit_rows_have_three_bands():
    raw = build_bmp(2, 1, 32, pixel_data=b"\x01\x02\x03\xff\x04\x05\x06\xff")
    _, sink, _ = decode(ByteSource.from_bytes(raw))

    (row,) = sink.rows
    assert (row.bands, row.bits_per_sample) == (3, 8)
    assert row.data == b"\x03\x02\x01\x06\x05\x04"


def test_16bit_rows_pass_through():
    raw = build_bmp(1, 1, 16, pixel_data=b"\xff\x7f\x00\x00")
    _, sink, _ = decode(ByteSource.from_bytes(raw))
    (row,) = sink.rows
    assert (row.bands, row.bits_per_sample) == (3, 5)
    assert row.data == b"\xff\x7f"


@pytest.mark.parametrize("height", [2, -2])
def test_rle8_is_always_bottom_up(height):
    raw = build_bmp(4, height, 8, compression=Compression.RLE8,
                    pixel_data=bytes.fromhex("04 01 04 02 00 01"))
    _, sink, report = decode(ByteSource.from_bytes(raw))

    assert [row.data for row in sink.rows] == [b"\x02" * 4, b"\x01" * 4]
    assert all((row.bands, row.bits_per_sample) == (1, 8) for row in sink.rows)
    assert not report.truncated


def test_rle4_decode():
    raw = build_bmp(4, 1, 4, compression=Compression.RLE4,
                    pixel_data=bytes.fromhex("04 3c 00 01"))
    _, sink, _ = decode(ByteSource.from_bytes(raw))
    assert sink.rows[0].data == bytes([3, 12, 3, 12])


def test_truncated_rle_is_reported_not_raised(caplog):
    raw = build_bmp(4, 2, 8, compression=Compression.RLE8,
                    pixel_data=bytes.fromhex("04 01 02 02"))
    with caplog.at_level(logging.WARNING):
        _, sink, report = decode(ByteSource.from_bytes(raw))

    assert report.truncated
    assert report.succeeded
    assert [row.data for row in sink.rows] == [b"\x02\x02\x00\x00", b"\x01" * 4]
    assert "truncated" in caplog.text


def test_short_reads_are_reported_per_row(caplog):
    # three 1-pixel rows (stride 4) but only one and a half rows of data
    raw = build_bmp(1, 3, 24, pixel_data=b"\x01\x02\x03\x00\x0a\x0b")
    with caplog.at_level(logging.ERROR):
        _, sink, report = decode(ByteSource.from_bytes(raw))

    assert report.rows_emitted == 3
    assert not report.succeeded
    assert [e.row for e in report.row_errors] == [0, 1]
    assert [row.data for row in sink.rows] == [
        b"\x00\x00\x00",
        b"\x00\x0b\x0a",
        b"\x03\x02\x01",
    ]
    assert "scanline 0" in caplog.text


def test_seek_errors_do_not_stop_decoding():
    raw = build_bmp(1, -3, 8, pixel_data=b"\x01\x00\x00\x00\x02\x00\x00\x00\x03\x00\x00\x00")
    source = FailingSource(raw, bad_offsets=[54 + 4])
    _, sink, report = decode(source)

    assert [row.data for row in sink.rows] == [b"\x01", b"\x00", b"\x03"]
    (error,) = report.row_errors
    assert error.row == 1
    assert error.offset == 58
    assert "device not ready" in error.reason


@pytest.mark.parametrize("compression", [Compression.BITFIELDS, Compression.JPEG, Compression.PNG])
def test_unsupported_compression_is_fatal(compression):
    raw = build_bmp(2, 2, 32, compression=compression, pixel_data=bytes(16))
    parser = BMPParser(ByteSource.from_bytes(raw))
    sink = RowCollector()

    with pytest.raises(UnsupportedCompressionError):
        parser.decode(sink)
    assert sink.descriptor is None
    assert sink.rows == []


def test_rows_loads_header_on_demand():
    raw = build_bmp(1, 2, 8, pixel_data=b"\x05\x00\x00\x00\x06\x00\x00\x00")
    parser = BMPParser(ByteSource.from_bytes(raw))

    rows = list(parser.rows())
    assert [row.data for row in rows] == [b"\x06", b"\x05"]
    assert parser.metadata["width"] == 1


def test_decode_from_file(tmp_path):
    path = tmp_path / "tiny.bmp"
    path.write_bytes(build_bmp(1, 1, 24, pixel_data=b"\x10\x20\x30\x00"))

    with ByteSource.open(path) as source:
        _, sink, report = decode(source)

    assert sink.rows[0].data == b"\x30\x20\x10"
    assert report.succeeded
