"""Read and write layers placed between the stream driver and its streams.

The layer is picked once per run: buffered layers add a read-ahead and a
write-behind buffer, direct layers hand every read and write straight to
the caller's objects and flush after each line. Neither layer closes the
caller's streams.
"""

from __future__ import annotations

import errno
import io
from typing import BinaryIO, Protocol


class StreamLayers(Protocol):
    def read(self, size: int) -> bytes | None: ...

    def write_line(self, data: bytes) -> None: ...

    def flush(self) -> None: ...


class _SourceRaw(io.RawIOBase):
    """Raw view over a caller-owned source; closing it leaves the source open."""

    def __init__(self, source: BinaryIO) -> None:
        super().__init__()
        self._source = source

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int | None:
        data = self._source.read(len(buffer))
        if data is None:
            return None
        size = len(data)
        buffer[:size] = data
        return size


class _SinkRaw(io.RawIOBase):
    """Raw view over a caller-owned sink; closing it leaves the sink open."""

    def __init__(self, sink: BinaryIO) -> None:
        super().__init__()
        self._sink = sink
        self._downstream_closed = False

    def writable(self) -> bool:
        return True

    def write(self, data) -> int | None:
        # Once the reader is gone, later writes (including the finalizer's
        # flush of leftover buffered bytes) are dropped.
        if self._downstream_closed:
            return len(data)
        try:
            written = self._sink.write(data)
        except BrokenPipeError:
            self._downstream_closed = True
            raise
        # None (nothing accepted) reaches BufferedWriter, which raises BlockingIOError.
        return written


class BufferedLayers:
    def __init__(self, source: BinaryIO, sink: BinaryIO, *, buffer_size: int) -> None:
        self._reader = io.BufferedReader(_SourceRaw(source), buffer_size=buffer_size)
        self._writer = io.BufferedWriter(_SinkRaw(sink), buffer_size=buffer_size)
        self._sink = sink

    def read(self, size: int) -> bytes | None:
        return self._reader.read1(size)

    def write_line(self, data: bytes) -> None:
        self._writer.write(data)

    def flush(self) -> None:
        self._writer.flush()
        self._sink.flush()


class DirectLayers:
    def __init__(self, source: BinaryIO, sink: BinaryIO) -> None:
        # read1 returns what is available instead of waiting for a full chunk.
        self.read = getattr(source, "read1", source.read)
        self._sink = sink

    def write_line(self, data: bytes) -> None:
        write_all(self._sink, data)
        self._sink.flush()

    def flush(self) -> None:
        self._sink.flush()


def open_layers(
    source: BinaryIO,
    sink: BinaryIO,
    *,
    buffered: bool,
    buffer_size: int,
) -> StreamLayers:
    if buffered:
        return BufferedLayers(source, sink, buffer_size=buffer_size)
    return DirectLayers(source, sink)


def write_all(sink: BinaryIO, data: bytes) -> None:
    view = memoryview(data)
    while view:
        written = sink.write(view)
        if written is None:
            raise BlockingIOError(
                errno.EAGAIN,
                "sink accepted no bytes",
                len(data) - len(view),
            )
        view = view[written:]
