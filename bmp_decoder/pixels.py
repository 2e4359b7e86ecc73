# Image data in BMP files is stored as BGR (or BGRA); these helpers turn
# scanlines into the RGB order every consumer expects.


def rearrange_pixels(buf: bytearray, width: int, bits_per_pixel: int) -> bytearray:
    """Reorder one scanline in place and return it.

    24-bit rows have blue and red swapped in every triplet. 32-bit rows are
    compacted to RGB triplets in the first 3 * width bytes, dropping the
    alpha byte. Other depths pass through unchanged.
    """
    if bits_per_pixel == 24:
        end = 3 * width
        buf[0:end:3], buf[2:end:3] = buf[2:end:3], buf[0:end:3]
    elif bits_per_pixel == 32:
        end = 4 * width
        rgb = bytearray(3 * width)
        rgb[0::3] = buf[2:end:4]
        rgb[1::3] = buf[1:end:4]
        rgb[2::3] = buf[0:end:4]
        buf[:3 * width] = rgb
    return buf


def output_format(bits_per_pixel: int):
    """(bands, bits_per_sample) of a rearranged scanline."""
    if bits_per_pixel in (1, 4, 8):
        return 1, bits_per_pixel
    if bits_per_pixel == 16:
        # 16-bit bitfields are not unpacked; rows are handed over as stored
        return 3, 5
    return 3, 8


def packed_row_size(width: int, bits_per_pixel: int) -> int:
    """Meaningful bytes in a rearranged scanline, without the row padding."""
    if bits_per_pixel == 32:
        return width * 3
    return (width * bits_per_pixel + 7) // 8


def unpack_indices(data, width: int, bits: int):
    """Expand a packed 1/4/8-bit scanline into a list of palette indices."""
    if bits == 8:
        return list(data[:width])

    per_byte = 8 // bits
    mask = (1 << bits) - 1
    indices = []
    for col in range(width):
        byte = data[col // per_byte]
        shift = 8 - bits * (col % per_byte + 1)
        indices.append((byte >> shift) & mask)
    return indices
