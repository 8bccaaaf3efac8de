"""Buffered byte reading and pattern search in binary streams."""

from __future__ import annotations

from typing import BinaryIO

SEARCH_BUFFER_SIZE = 32 * 1024


class _Chain:
    """Reads a prefix of bytes, then continues with an underlying stream."""

    def __init__(self, prefix: bytes, stream: BinaryIO) -> None:
        self._prefix = prefix
        self._stream = stream

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            data = self._prefix + self._stream.read()
            self._prefix = b""
            return data
        if self._prefix:
            data = self._prefix[:size]
            self._prefix = self._prefix[size:]
            if len(data) < size:
                data += self._stream.read(size - len(data))
            return data
        return self._stream.read(size)


class SliceReader:
    """Reader that returns exact-length slices and single bytes."""

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes; all remaining bytes when size is negative."""
        return self._stream.read(size)

    def read_slice(self, length: int) -> bytes:
        """Read exactly length bytes or raise EOFError."""
        data = b""
        while len(data) < length:
            chunk = self._stream.read(length - len(data))
            if not chunk:
                raise EOFError(f"expected {length} bytes, got {len(data)}")
            data += chunk
        return data

    def read_byte(self) -> int:
        """Read one byte as an integer or raise EOFError."""
        return self.read_slice(1)[0]


def search_pattern(
    stream: BinaryIO, pattern: bytes, buffer_size: int = SEARCH_BUFFER_SIZE
) -> SliceReader:
    """Return a reader positioned at the first occurrence of pattern.

    Raises EOFError when the stream ends without the pattern.
    """
    keep = max(len(pattern) - 1, 0)
    buffer = b""
    while True:
        chunk = stream.read(max(buffer_size - len(buffer), 1))
        if not chunk:
            raise EOFError("pattern not found")
        buffer += chunk
        index = buffer.find(pattern)
        if index >= 0:
            return SliceReader(_Chain(buffer[index:], stream))
        buffer = buffer[len(buffer) - keep:] if keep else b""