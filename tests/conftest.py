from __future__ import annotations

import io
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from tests.env_helpers import env_scope


class ClosingSink(io.RawIOBase):
    """Sink whose reader goes away after ``accept`` writes."""

    def __init__(self, accept: int) -> None:
        super().__init__()
        self.accept = accept
        self.chunks: list[bytes] = []

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        if len(self.chunks) >= self.accept:
            raise BrokenPipeError(32, "Broken pipe")
        self.chunks.append(bytes(data))
        return len(data)


class FailingSink(io.RawIOBase):
    def __init__(self, error: OSError) -> None:
        super().__init__()
        self.error = error

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        raise self.error


class StalledSink(io.RawIOBase):
    """Non-blocking sink that never accepts a byte."""

    def writable(self) -> bool:
        return True

    def write(self, data) -> None:
        return None


@pytest.fixture
def closing_sink():
    return ClosingSink


@pytest.fixture
def failing_sink():
    return FailingSink


@pytest.fixture
def stalled_sink():
    return StalledSink


@pytest.fixture(autouse=True)
def _clean_mp2json_env():
    with env_scope(
        {
            "MP2JSON_PRETTY": None,
            "MP2JSON_UNBUFFERED": None,
            "MP2JSON_READ_SIZE": None,
            "MP2JSON_LOG_LEVEL": None,
        }
    ):
        yield
