"""Seeking over a non-seekable source by buffering what has been read."""

from __future__ import annotations

import os
from typing import Any, Protocol

_CHUNK = 64 * 1024


class _Buffer(Protocol):
    def read(self, n: int = -1) -> bytes: ...
    def write(self, data: bytes) -> int: ...
    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int: ...
    def clear(self) -> None: ...


class SeekStream:
    """A seekable reader over a forward-only source, backed by a buffer."""

    def __init__(self, source: Any, buffer: _Buffer) -> None:
        self._source: Any = source
        self._buffer: _Buffer | None = buffer
        self._size = 0
        self._curr = 0
        self._loaded = False

    def _check_open(self) -> tuple[Any, _Buffer]:
        if self._source is None or self._buffer is None:
            raise ValueError("I/O operation on closed stream")
        return self._source, self._buffer

    def _copy(self, source: Any, buffer: _Buffer, limit: int | None) -> int:
        copied = 0
        while limit is None or copied < limit:
            want = _CHUNK if limit is None else min(_CHUNK, limit - copied)
            chunk = source.read(want)
            if not chunk:
                self._loaded = True
                break
            buffer.write(chunk)
            copied += len(chunk)
        return copied

    def read(self, n: int = -1) -> bytes:
        """Read up to ``n`` bytes (all remaining if negative)."""
        if n < 0:
            chunks = []
            while chunk := self.read(_CHUNK):
                chunks.append(chunk)
            return b"".join(chunks)
        source, buffer = self._check_open()
        if self._loaded and self._curr >= self._size:
            return b""
        out = b""
        if self._curr < self._size:
            out = buffer.read(n)
            self._curr += len(out)
        if self._loaded or len(out) == n:
            return out
        chunk = source.read(n - len(out))
        if chunk:
            buffer.write(chunk)
        else:
            self._loaded = True
        self._size += len(chunk)
        self._curr += len(chunk)
        return out + chunk

    def seek(self, offset: int, whence: int = os.SEEK_SET) -> int:
        """Move the read position, loading from the source as needed."""
        source, buffer = self._check_open()
        if whence == os.SEEK_SET:
            dest = offset
        elif whence == os.SEEK_CUR:
            dest = self._curr + offset
        elif whence == os.SEEK_END:
            if not self._loaded:
                if self._curr != self._size:
                    self._curr = buffer.seek(self._size, os.SEEK_SET)
                copied = self._copy(source, buffer, None)
                self._curr += copied
                self._size += copied
            dest = self._size + offset
        else:
            raise ValueError("invalid argument")
        if not self._loaded and dest > self._size:
            if self._curr != self._size:
                buffer.seek(self._size, os.SEEK_SET)
            self._size += self._copy(source, buffer, dest - self._size)
        self._curr = buffer.seek(dest, os.SEEK_SET)
        return self._curr

    def close(self) -> None:
        """Clear the buffer and close the source."""
        if self._buffer is not None:
            self._buffer.clear()
            self._buffer = None
        if self._source is not None:
            source, self._source = self._source, None
            source.close()

    def remaining(self) -> int:
        """Number of buffered bytes not yet read."""
        return max(0, self._size - self._curr)

    def size(self) -> int:
        """Number of bytes buffered so far."""
        return self._size

    def __enter__(self) -> "SeekStream":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()