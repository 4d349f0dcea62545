"""Stream driver: decode, convert, render and write one msgpack value at a time."""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass
from enum import Enum
import logging
from typing import BinaryIO

from mp2json.convert import convert
from mp2json.decode import DEFAULT_READ_SIZE, iter_values
from mp2json.exceptions import Mp2JsonError, OutputError
from mp2json.runtime.io_layers import StreamLayers, open_layers
from mp2json.runtime.json_io import render_json_line

logger = logging.getLogger(__name__)


class StreamOutcome(Enum):
    """How a successful run ended."""

    END_OF_STREAM = "end_of_stream"
    DOWNSTREAM_CLOSED = "downstream_closed"


@dataclass(frozen=True)
class StreamOptions:
    buffered: bool = True
    pretty: bool = False
    read_size: int = DEFAULT_READ_SIZE

    def __post_init__(self) -> None:
        read_size = int(self.read_size)
        if read_size <= 0:
            raise ValueError(f"read_size must be positive, got {self.read_size!r}")
        object.__setattr__(self, "read_size", read_size)


def run(
    source: BinaryIO,
    sink: BinaryIO,
    options: StreamOptions | None = None,
) -> StreamOutcome:
    """Transcode every msgpack value in ``source`` to a JSON line in ``sink``.

    Returns the success-shaped outcome. Raises ``Mp2JsonError`` subclasses for
    decode, conversion and output failures; lines written before a failure
    stay in the sink.
    """
    options = options or StreamOptions()
    layers = open_layers(
        source,
        sink,
        buffered=options.buffered,
        buffer_size=options.read_size,
    )
    try:
        outcome = _pump(layers, options)
    except Mp2JsonError:
        # The pending failure is what gets reported.
        with suppress(OSError):
            layers.flush()
        raise
    try:
        layers.flush()
    except BrokenPipeError:
        logger.debug("downstream closed during final flush")
        return StreamOutcome.DOWNSTREAM_CLOSED
    except OSError as exc:
        raise OutputError() from exc
    return outcome


def _pump(layers: StreamLayers, options: StreamOptions) -> StreamOutcome:
    written = 0
    for value in iter_values(layers.read, read_size=options.read_size):
        line = render_json_line(convert(value), pretty=options.pretty)
        try:
            layers.write_line(line)
        except BrokenPipeError:
            logger.debug("downstream closed after %d values", written)
            return StreamOutcome.DOWNSTREAM_CLOSED
        except OSError as exc:
            raise OutputError() from exc
        written += 1
    logger.debug("end of stream after %d values", written)
    return StreamOutcome.END_OF_STREAM
