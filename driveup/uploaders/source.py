"""Chunk sources: payloads exposed as fixed-size byte ranges."""

from __future__ import annotations

import io
import os
from collections.abc import Iterator
from dataclasses import dataclass
from typing import BinaryIO, Protocol


@dataclass(frozen=True)
class Chunk:
    """A contiguous byte range of the payload, sent as one request."""

    offset: int
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def last(self) -> int:
        """Absolute position of the last byte covered (``offset - 1`` if empty)."""
        return self.offset + self.length - 1

    def is_final(self, total_size: int) -> bool:
        return self.last == total_size - 1

    def content_range(self, total_size: int) -> str:
        """Format the ``Content-Range`` header value for this chunk.

        An empty payload has no satisfiable range, so the zero-length final
        chunk is framed as ``bytes */0``.
        """
        if self.length == 0:
            return f"bytes */{total_size}"
        return f"bytes {self.offset}-{self.last}/{total_size}"


class ChunkSource(Protocol):
    """Payload with a known total length, readable chunk by chunk."""

    @property
    def total_size(self) -> int: ...

    def iter_chunks(self, chunk_size: int) -> Iterator[Chunk]: ...


class StreamChunkSource:
    """Chunk source over a readable binary stream.

    The size is taken from the stream's file descriptor when it has one,
    otherwise by seeking to the end. Reading starts at the stream's current
    position.
    """

    def __init__(self, stream: BinaryIO, total_size: int | None = None) -> None:
        self.stream = stream
        self._total_size = total_size if total_size is not None else self._measure(stream)

    @staticmethod
    def _measure(stream: BinaryIO) -> int:
        try:
            return os.fstat(stream.fileno()).st_size - stream.tell()
        except (AttributeError, OSError, io.UnsupportedOperation):
            pass
        position = stream.tell()
        end = stream.seek(0, io.SEEK_END)
        stream.seek(position)
        return end - position

    @property
    def total_size(self) -> int:
        return self._total_size

    def _read_full(self, size: int) -> bytes:
        # Short reads from pipes or sockets would misalign later chunks
        buf = bytearray()
        while len(buf) < size:
            data = self.stream.read(size - len(buf))
            if not data:
                break
            buf.extend(data)
        return bytes(buf)

    def iter_chunks(self, chunk_size: int) -> Iterator[Chunk]:
        """Yield successive chunks of at most ``chunk_size`` bytes.

        Args:
            chunk_size: Maximum bytes per chunk.

        Yields:
            Chunks in order; nothing for an empty stream.
        """
        offset = 0
        while True:
            data = self._read_full(chunk_size)
            if not data:
                return
            yield Chunk(offset=offset, data=data)
            offset += len(data)


class BytesChunkSource(StreamChunkSource):
    """Chunk source over an in-memory payload."""

    def __init__(self, data: bytes) -> None:
        super().__init__(io.BytesIO(data), total_size=len(data))
