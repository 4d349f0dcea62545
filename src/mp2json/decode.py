"""Incremental msgpack decoding over a chunked byte source."""

from __future__ import annotations

from typing import Callable, Iterator, NamedTuple

import msgpack
from msgpack.exceptions import OutOfData, UnpackException

from mp2json.exceptions import DecodeError

ChunkReader = Callable[[int], bytes | None]

DEFAULT_READ_SIZE = 64 * 1024


class MapEntries(tuple):
    """Ordered ``(key, value)`` pairs of one msgpack map.

    Keys keep their msgpack kind and duplicates are preserved, so the
    converter can reject non-string keys and apply its own overwrite rule.
    """

    __slots__ = ()


class Extension(NamedTuple):
    """One msgpack extension value; ``code`` spans the full signed byte range."""

    code: int
    data: bytes


def new_unpacker() -> msgpack.Unpacker:
    # Invalid UTF-8 survives as lone surrogates so the converter can report it
    # as a string error instead of a decode error.
    return msgpack.Unpacker(
        raw=False,
        unicode_errors="surrogateescape",
        strict_map_key=False,
        object_pairs_hook=MapEntries,
        use_list=True,
        ext_hook=Extension,
    )


def iter_values(
    read: ChunkReader,
    *,
    read_size: int = DEFAULT_READ_SIZE,
) -> Iterator[object]:
    """Yield each complete msgpack value pulled from ``read``.

    Returns when ``read`` reports end of input at a value boundary. Raises
    ``DecodeError`` for malformed input, for a value cut short by the end of
    input, and for read failures.
    """
    unpacker = new_unpacker()
    fed = 0
    boundary = 0
    while True:
        try:
            chunk = read(read_size)
        except OSError as exc:
            raise DecodeError(f"read failed: {exc}") from exc
        if not chunk:
            break
        try:
            unpacker.feed(chunk)
        except UnpackException as exc:
            raise DecodeError(str(exc) or type(exc).__name__) from exc
        fed += len(chunk)
        for value in _drain(unpacker):
            boundary = unpacker.tell()
            yield value
    pending = fed - boundary
    if pending:
        raise DecodeError(f"unexpected end of input inside a value ({pending} bytes pending)")


def _drain(unpacker: msgpack.Unpacker) -> Iterator[object]:
    while True:
        try:
            value = unpacker.unpack()
        except OutOfData:
            return
        except (UnpackException, ValueError) as exc:
            raise DecodeError(str(exc) or type(exc).__name__) from exc
        yield value


def read_one(read: ChunkReader) -> object:
    """Decode exactly one value from ``read``.

    The source is pulled one byte at a time, so it is left positioned at the
    start of the next value.
    """
    for value in iter_values(read, read_size=1):
        return value
    raise DecodeError("unexpected end of input before a value")
