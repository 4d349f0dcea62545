from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator


@contextmanager
def env_scope(values: dict[str, str | None]) -> Iterator[None]:
    """Apply environment overrides (None unsets) and restore them afterwards."""
    previous = {key: os.environ.get(key) for key in values}
    _apply(values)
    try:
        yield
    finally:
        _apply(previous)


def _apply(values: dict[str, str | None]) -> None:
    for key, value in values.items():
        if value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = value
