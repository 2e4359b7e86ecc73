import io


class ByteSource:
    """Random-access reader over a binary file object.

    Reads may come back short at the end of the stream; callers decide
    whether that matters.
    """

    def __init__(self, fileobj, name=None):
        self._file = fileobj
        self.name = name or getattr(fileobj, "name", "<stream>")

    @classmethod
    def open(cls, filepath):
        return cls(open(filepath, "rb"), name=str(filepath))

    @classmethod
    def from_bytes(cls, data: bytes, name="<bytes>"):
        return cls(io.BytesIO(data), name=name)

    def read_at(self, offset: int, size: int) -> bytes:
        if offset < 0:
            raise OSError(f"Seek error: negative offset {offset}")
        self._file.seek(offset)
        return self._file.read(size)

    def size(self) -> int:
        return self._file.seek(0, io.SEEK_END)

    def close(self):
        self._file.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
