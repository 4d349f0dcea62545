"""Type aliases for the JSON side of the transcoder.

``JSONValue`` is everything ``convert`` can return. The envelope aliases
name the two object shapes used for payloads that JSON cannot carry
natively.
"""

from __future__ import annotations

from typing import TypeAlias


JSONNumber: TypeAlias = int | float
JSONScalar: TypeAlias = str | JSONNumber | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

# {"encoding": "base64", "value": ...}
BinaryEnvelope: TypeAlias = dict[str, str]
# {"type_code": ..., "encoding": "base64", "value": ...}
ExtensionEnvelope: TypeAlias = dict[str, str | int]
