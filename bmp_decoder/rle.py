import logging

logger = logging.getLogger(__name__)

# Escape codes following a zero count byte
END_OF_LINE = 0
END_OF_BITMAP = 1
DELTA = 2


class RLEDecompressor:
    """Decode a BMP RLE4/RLE8 payload into a flat buffer of palette indices.

    The buffer holds one index per byte, `width * height` entries, in the
    order the stream writes them (bottom row first). Positions the stream
    never reaches stay 0. Decoding stops as soon as either the input or the
    output is exhausted, so a damaged stream yields a partial image rather
    than an error; `truncated` tells whether the input ran out early.
    """

    def __init__(self, width, height, bits_per_index):
        if bits_per_index not in (4, 8):
            raise ValueError(f"RLE needs 4 or 8 bits per index, got {bits_per_index}")
        self.width = width
        self.height = height
        self.bits_per_index = bits_per_index
        self.pixels = bytearray(width * height)
        self.pos = 0
        self.finished = False
        self.truncated = False

    def decompress(self, comp: bytes) -> bytearray:
        n = len(comp)
        out_len = len(self.pixels)
        i = 0

        while i < n and self.pos < out_len:
            if i + 1 >= n:
                self.truncated = True
                break
            count = comp[i]
            value = comp[i + 1]
            i += 2

            if count:
                self._run(count, value)
            elif value == END_OF_LINE:
                # the flat layout needs no explicit line advance
                continue
            elif value == END_OF_BITMAP:
                self.finished = True
                break
            elif value == DELTA:
                if i + 1 >= n:
                    self.truncated = True
                    break
                dx, dy = comp[i], comp[i + 1]
                i += 2
                self.pos += dx + dy * self.width
            else:
                i = self._absolute(comp, i, value)

        if not self.finished and self.pos < out_len:
            self.truncated = True
        if self.truncated:
            logger.debug(
                "RLE stream ended at byte %d with %d of %d pixels written",
                i, min(self.pos, out_len), out_len,
            )
        return self.pixels

    def _run(self, count, value):
        out = self.pixels
        end = min(self.pos + count, len(out))
        if self.bits_per_index == 8:
            out[self.pos:end] = bytes([value]) * (end - self.pos)
        else:
            high, low = value >> 4, value & 0x0F
            for k in range(end - self.pos):
                out[self.pos + k] = low if k & 1 else high
        self.pos += count

    def _absolute(self, comp, i, count):
        """Copy `count` literal indices starting at comp[i]; return the next
        opcode position, past the word-alignment pad byte if there is one."""
        out = self.pixels
        n = len(comp)
        if self.bits_per_index == 8:
            nbytes = count
        else:
            nbytes = (count + 1) // 2

        for k in range(count):
            if self.pos >= len(out):
                break
            if self.bits_per_index == 8:
                src = i + k
            else:
                src = i + k // 2
            if src >= n:
                self.truncated = True
                break
            if self.bits_per_index == 8:
                out[self.pos] = comp[src]
            elif k & 1:
                out[self.pos] = comp[src] & 0x0F
            else:
                out[self.pos] = comp[src] >> 4
            self.pos += 1

        return i + nbytes + (nbytes & 1)


def decompress_rle(comp: bytes, width: int, height: int, bits_per_index: int):
    """Return (index buffer, truncated) for one compressed payload."""
    decoder = RLEDecompressor(width, height, bits_per_index)
    pixels = decoder.decompress(comp)
    return pixels, decoder.truncated
