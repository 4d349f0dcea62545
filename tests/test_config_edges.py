from __future__ import annotations

from pathlib import Path
import textwrap

import pytest

from mp2json import config


def test_load_toml_missing_and_invalid(tmp_path: Path) -> None:
    missing = tmp_path / "missing.toml"
    assert config._load_toml(missing) == {}

    invalid = tmp_path / "invalid.toml"
    invalid.write_text("not = [toml", encoding="utf-8")
    assert config._load_toml(invalid) == {}

    assert config._load_toml(tmp_path) == {}


def test_load_config_default_path(tmp_path: Path) -> None:
    cfg = tmp_path / config.DEFAULT_CONFIG_NAME
    cfg.write_text("[mp2json]\npretty = true\n", encoding="utf-8")
    data = config.load_config(root=tmp_path, config_path=None)
    assert data["mp2json"]["pretty"] is True


def test_stream_defaults_reads_known_keys(tmp_path: Path) -> None:
    config_path = tmp_path / "custom.toml"
    config_path.write_text(
        textwrap.dedent(
            """
            [mp2json]
            pretty = true
            unbuffered = "yes"
            read_size = 512
            log_level = "debug"
            unknown = 1
            """
        ).strip()
        + "\n",
        encoding="utf-8",
    )
    defaults = config.stream_defaults(config_path=config_path)
    assert defaults == {
        "pretty": True,
        "unbuffered": "yes",
        "read_size": 512,
        "log_level": "debug",
    }


def test_stream_defaults_ignores_non_table_section(tmp_path: Path) -> None:
    config_path = tmp_path / "mp2json.toml"
    config_path.write_text('mp2json = "flat"\n', encoding="utf-8")
    assert config.stream_defaults(root=tmp_path) == {}


def test_as_bool_variants() -> None:
    assert config.as_bool(True) is True
    assert config.as_bool(0) is False
    assert config.as_bool(2) is True
    assert config.as_bool(" On ") is True
    assert config.as_bool("nope") is False
    assert config.as_bool(None) is False


def test_as_positive_int() -> None:
    assert config.as_positive_int(8, field="read_size") == 8
    assert config.as_positive_int(" 16 ", field="read_size") == 16
    for bad in (0, -3, "abc", True, 1.5, None):
        with pytest.raises(ValueError):
            config.as_positive_int(bad, field="read_size")


def test_merge_payload_skips_none() -> None:
    merged = config.merge_payload({"a": None, "b": 2}, {"a": 1, "b": 1, "c": 3})
    assert merged == {"a": 1, "b": 2, "c": 3}
