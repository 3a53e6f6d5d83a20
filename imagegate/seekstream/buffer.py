"""Random-access buffers backing a seekable stream."""

from __future__ import annotations

import os
import tempfile

_INVALID = "invalid argument"


class MemoryBuffer:
    """In-memory buffer of fixed capacity, for sources of known size."""

    def __init__(self, size: int) -> None:
        self._buf: bytearray | None = bytearray(size)
        self._pos = 0
        self._size = 0

    def _data(self) -> bytearray:
        if self._buf is None:
            raise ValueError("buffer has been cleared")
        return self._buf

    def read(self, n: int = -1) -> bytes:
        """Read up to ``n`` bytes; an empty result means end of data."""
        data = self._data()
        if self._pos >= self._size:
            return b""
        end = self._size if n < 0 else min(self._size, self._pos + n)
        chunk = bytes(data[self._pos:end])
        self._pos += len(chunk)
        return chunk

    def write(self, data: bytes) -> int:
        """Write at the current position; bytes past capacity are dropped."""
        buf = self._data()
        count = max(0, min(len(data), len(buf) - self._pos))
        buf[self._pos:self._pos + count] = data[:count]
        self._pos += count
        self._size = max(self._size, self._pos)
        return count

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the position; raise ValueError if it would become negative."""
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._pos + offset
        elif whence == os.SEEK_END:
            target = self._size + offset
        else:
            raise ValueError(_INVALID)
        if target < 0:
            raise ValueError(_INVALID)
        self._pos = target
        return target

    def clear(self) -> None:
        """Release the memory."""
        self._buf = None


class TempFileBuffer:
    """Buffer kept in a temporary file, for large or unknown sizes."""

    def __init__(self, dir: str | None = None, prefix: str = "imagegate-") -> None:
        fd, self.name = tempfile.mkstemp(dir=dir, prefix=prefix)
        self._file = os.fdopen(fd, "w+b")

    def read(self, n: int = -1) -> bytes:
        """Read up to ``n`` bytes; an empty result means end of data."""
        return self._file.read(n)

    def write(self, data: bytes) -> int:
        """Write at the current position."""
        return self._file.write(data)

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the position; raise ValueError if it would become negative."""
        if whence == os.SEEK_SET:
            target = offset
        elif whence == os.SEEK_CUR:
            target = self._file.tell() + offset
        elif whence == os.SEEK_END:
            current = self._file.tell()
            end = self._file.seek(0, os.SEEK_END)
            self._file.seek(current)
            target = end + offset
        else:
            raise ValueError(_INVALID)
        if target < 0:
            raise ValueError(_INVALID)
        return self._file.seek(target)

    def clear(self) -> None:
        """Close and remove the temporary file."""
        self._file.close()
        try:
            os.remove(self.name)
        except FileNotFoundError:
            pass