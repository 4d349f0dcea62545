from __future__ import annotations

import io

import pytest

from mp2json.runtime.io_layers import (
    BufferedLayers,
    DirectLayers,
    open_layers,
    write_all,
)


class _ShortWriteSink(io.RawIOBase):
    def __init__(self) -> None:
        super().__init__()
        self.chunks: list[bytes] = []

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        chunk = bytes(data[:2])
        self.chunks.append(chunk)
        return len(chunk)


class _ChunkSource:
    """Source without read1 that hands out at most three bytes per read."""

    def __init__(self, data: bytes) -> None:
        self._stream = io.BytesIO(data)

    def read(self, size: int) -> bytes:
        return self._stream.read(min(size, 3))


def test_open_layers_picks_layer_once() -> None:
    source = io.BytesIO()
    sink = io.BytesIO()
    assert isinstance(open_layers(source, sink, buffered=True, buffer_size=8), BufferedLayers)
    assert isinstance(open_layers(source, sink, buffered=False, buffer_size=8), DirectLayers)


def test_write_all_retries_short_writes() -> None:
    sink = _ShortWriteSink()
    write_all(sink, b"abcde")
    assert sink.chunks == [b"ab", b"cd", b"e"]


def test_buffered_layers_hold_output_until_flush() -> None:
    sink = io.BytesIO()
    layers = BufferedLayers(io.BytesIO(), sink, buffer_size=1024)
    layers.write_line(b"1\n")
    layers.write_line(b"2\n")
    assert sink.getvalue() == b""
    layers.flush()
    assert sink.getvalue() == b"1\n2\n"


def test_direct_layers_write_through() -> None:
    sink = io.BytesIO()
    layers = DirectLayers(io.BytesIO(), sink)
    layers.write_line(b"1\n")
    assert sink.getvalue() == b"1\n"


def test_buffered_layers_read_from_plain_source() -> None:
    layers = BufferedLayers(_ChunkSource(b"abcdefg"), io.BytesIO(), buffer_size=4)
    collected = b""
    while chunk := layers.read(4):
        collected += chunk
    assert collected == b"abcdefg"


def test_direct_layers_fall_back_to_read() -> None:
    layers = DirectLayers(_ChunkSource(b"abcd"), io.BytesIO())
    assert layers.read(10) == b"abc"
    assert layers.read(10) == b"d"
    assert layers.read(10) == b""


def test_write_all_refuses_a_sink_that_accepts_nothing(stalled_sink) -> None:
    with pytest.raises(BlockingIOError) as excinfo:
        write_all(stalled_sink(), b"abc")
    assert excinfo.value.characters_written == 0


def test_write_all_reports_bytes_before_stall() -> None:
    class _OnceSink(_ShortWriteSink):
        def write(self, data):
            if self.chunks:
                return None
            return super().write(data)

    with pytest.raises(BlockingIOError) as excinfo:
        write_all(_OnceSink(), b"abcde")
    assert excinfo.value.characters_written == 2
