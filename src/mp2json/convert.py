"""Mapping from decoded msgpack values to JSON values.

The msgpack value kinds form a closed set, so conversion is a single
type dispatch:

- nil, booleans and strings map to their JSON counterparts;
- integers must fit in 64 bits (signed, then unsigned) or else in a double;
- floats are widened to doubles, with non-finite values rendered as null;
- binary payloads and extension types become base64 envelopes;
- arrays and maps convert element by element, failing on the first error.

A failing conversion never produces a partial JSON value.
"""

from __future__ import annotations

import base64
import math
from typing import BinaryIO, Iterable, Mapping

from msgpack import ExtType, Timestamp

from mp2json.decode import Extension, MapEntries, read_one
from mp2json.exceptions import InvalidInteger, InvalidString, MapKeyNotString
from mp2json.json_types import BinaryEnvelope, ExtensionEnvelope, JSONObject, JSONValue

TIMESTAMP_TYPE_CODE = -1

_INT64_MIN = -(1 << 63)
_UINT64_MAX = (1 << 64) - 1


def convert(value: object) -> JSONValue:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return _convert_integer(value)
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        return _checked_text(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return encode_binary(value)
    # Extension, ExtType and MapEntries are tuples; match them before plain arrays.
    if isinstance(value, (Extension, ExtType)):
        return encode_extension(value.code, value.data)
    # msgpack always parses code -1 as a timestamp; the payload is its
    # canonical (shortest) encoding, not necessarily the bytes on the wire.
    if isinstance(value, Timestamp):
        return encode_extension(TIMESTAMP_TYPE_CODE, value.to_bytes())
    if isinstance(value, MapEntries):
        return _convert_map(value)
    if isinstance(value, Mapping):
        return _convert_map(value.items())
    if isinstance(value, (list, tuple)):
        return [convert(item) for item in value]
    raise TypeError(f"convert does not support value type {type(value).__name__}")


def encode_binary(data: bytes | bytearray | memoryview) -> BinaryEnvelope:
    return {
        "encoding": "base64",
        "value": _base64_text(data),
    }


def encode_extension(
    type_code: int, data: bytes | bytearray | memoryview
) -> ExtensionEnvelope:
    return {
        "type_code": int(type_code),
        "encoding": "base64",
        "value": _base64_text(data),
    }


def read_and_convert_one(source: BinaryIO) -> JSONValue:
    """Decode one msgpack value from ``source`` and convert it.

    Only the bytes of that value are consumed, so repeated calls walk a
    stream of concatenated values.
    """
    return convert(read_one(source.read))


def _convert_integer(value: int) -> int | float:
    # Signed and unsigned 64-bit ranges overlap; together they cover
    # [-2**63, 2**64 - 1].
    if _INT64_MIN <= value <= _UINT64_MAX:
        return value
    try:
        return float(value)
    except OverflowError:
        raise InvalidInteger(value) from None


def _checked_text(value: str) -> str:
    # Lone surrogates mark bytes that were not valid UTF-8 on the wire.
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise InvalidString() from None
    return value


def _convert_map(entries: Iterable[tuple[object, object]]) -> JSONObject:
    converted: JSONObject = {}
    for key, item in entries:
        if not isinstance(key, str):
            raise MapKeyNotString(_kind_name(key))
        converted[_checked_text(key)] = convert(item)
    return converted


def _kind_name(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "binary"
    if isinstance(value, (Extension, ExtType, Timestamp)):
        return "extension"
    if isinstance(value, (MapEntries, Mapping)):
        return "map"
    if isinstance(value, (list, tuple)):
        return "array"
    return type(value).__name__


def _base64_text(data: bytes | bytearray | memoryview) -> str:
    return base64.b64encode(bytes(data)).decode("ascii")
