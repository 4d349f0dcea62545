"""mp2json package root."""

from mp2json.convert import convert, read_and_convert_one
from mp2json.driver import StreamOptions, StreamOutcome, run
from mp2json.exceptions import (
    ConversionError,
    DecodeError,
    InvalidInteger,
    InvalidString,
    MapKeyNotString,
    Mp2JsonError,
    OutputError,
)

__all__ = [
    "__version__",
    "ConversionError",
    "DecodeError",
    "InvalidInteger",
    "InvalidString",
    "MapKeyNotString",
    "Mp2JsonError",
    "OutputError",
    "StreamOptions",
    "StreamOutcome",
    "convert",
    "read_and_convert_one",
    "run",
]

__version__ = "0.1.0"
