from __future__ import annotations

import json

from mp2json.json_types import JSONValue

LINE_TERMINATOR = b"\n"
PRETTY_INDENT = 2


def dump_json_compact(value: JSONValue) -> str:
    """Single-line JSON text with no inserted whitespace.

    Mapping order is preserved as produced by the converter; non-ASCII text
    is emitted as-is rather than as ``\\u`` escapes.
    """
    return json.dumps(
        value,
        separators=(",", ":"),
        sort_keys=False,
        ensure_ascii=False,
        allow_nan=False,
    )


def dump_json_pretty(value: JSONValue) -> str:
    return json.dumps(
        value,
        indent=PRETTY_INDENT,
        sort_keys=False,
        ensure_ascii=False,
        allow_nan=False,
    )


def render_json_line(value: JSONValue, *, pretty: bool = False) -> bytes:
    text = dump_json_pretty(value) if pretty else dump_json_compact(value)
    return text.encode("utf-8") + LINE_TERMINATOR
