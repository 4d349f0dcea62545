"""Error taxonomy for msgpack to JSON transcoding."""

from __future__ import annotations


class Mp2JsonError(Exception):
    """Base class for every fatal transcoding failure.

    ``kind`` is a stable short name used in command-line diagnostics.
    """

    kind = "error"
    default_message = "transcoding failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class ConversionError(Mp2JsonError):
    """A decoded msgpack value has no JSON rendering."""

    kind = "conversion"


class InvalidString(ConversionError):
    kind = "invalid_string"
    default_message = "msgpack string was not UTF-8"


class InvalidInteger(ConversionError):
    kind = "invalid_integer"
    default_message = "msgpack integer was not encodable in 64 bits"

    def __init__(self, value: int) -> None:
        super().__init__(f"{self.default_message}: {value}")
        self.value = value


class MapKeyNotString(ConversionError):
    kind = "map_key_not_string"
    default_message = "map key is not a string"

    def __init__(self, key_type: str = "") -> None:
        message = self.default_message
        if key_type:
            message = f"{message} (got {key_type})"
        super().__init__(message)
        self.key_type = key_type


class DecodeError(Mp2JsonError):
    """Malformed or truncated msgpack input; clean end-of-stream is not one."""

    kind = "decode"
    default_message = "msgpack decode error"

    def __init__(self, detail: str = "") -> None:
        message = self.default_message
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.detail = detail


class OutputError(Mp2JsonError):
    """Writing or flushing the sink failed for a reason other than a broken pipe."""

    kind = "output"
    default_message = "error writing"
