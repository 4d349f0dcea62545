from __future__ import annotations

from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional
import logging
import os
import sys

import click
import typer

from mp2json import __version__
from mp2json.config import as_bool, as_positive_int, merge_payload, stream_defaults
from mp2json.decode import DEFAULT_READ_SIZE
from mp2json.driver import StreamOptions, StreamOutcome, run
from mp2json.exceptions import Mp2JsonError
from mp2json.runtime.env_policy import stream_env_overrides

app = typer.Typer(add_completion=False)

_STDIN_ALIAS = "-"
_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_FORMAT = "%(name)s: %(levelname)s: %(message)s"


@dataclass(frozen=True)
class CliSettings:
    options: StreamOptions
    log_level: int


def _param_is_command_line(ctx: typer.Context, param: str) -> bool:
    # Compared by name: typer may bundle its own click with a distinct enum.
    source = ctx.get_parameter_source(param)
    return source is not None and source.name == "COMMANDLINE"


def _log_level_number(value: object) -> int:
    name = str(value).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"unknown log level {value!r}")
    return level


def resolve_settings(
    *,
    command_line: dict[str, object],
    config_path: Path | None = None,
) -> CliSettings:
    """Merge command line, environment and config file settings.

    ``command_line`` holds only values the user passed explicitly; everything
    else falls back to the environment, then ``mp2json.toml``, then the
    built-in defaults.
    """
    merged = merge_payload(
        command_line,
        merge_payload(stream_env_overrides(), stream_defaults(config_path=config_path)),
    )
    read_size = merged.get("read_size", DEFAULT_READ_SIZE)
    return CliSettings(
        options=StreamOptions(
            buffered=not as_bool(merged.get("unbuffered", False)),
            pretty=as_bool(merged.get("pretty", False)),
            read_size=as_positive_int(read_size, field="read_size"),
        ),
        log_level=_log_level_number(merged.get("log_level", _DEFAULT_LOG_LEVEL)),
    )


def _configure_logging(level: int) -> None:
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("mp2json").setLevel(level)


def _open_input(stack: ExitStack, input_path: str) -> BinaryIO:
    if input_path == _STDIN_ALIAS:
        return click.get_binary_stream("stdin")
    try:
        return stack.enter_context(open(input_path, "rb"))
    except OSError as exc:
        raise typer.BadParameter(
            f"cannot open {input_path}: {exc.strerror or exc}",
            param_hint="'--input'",
        ) from exc


def _silence_stdout() -> None:
    # Keeps the interpreter's shutdown flush from hitting the closed pipe again.
    try:
        stdout_fd = sys.stdout.fileno()
    except (OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    try:
        os.dup2(devnull, stdout_fd)
    finally:
        os.close(devnull)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"mp2json {__version__}")
        raise typer.Exit()


@app.command()
def transcode(
    ctx: typer.Context,
    pretty: bool = typer.Option(
        False, "--pretty", "-p", help="Indent JSON output over multiple lines."
    ),
    unbuffered: bool = typer.Option(
        False, "--unbuffered", "-U", help="Flush output after each message."
    ),
    input_path: str = typer.Option(
        _STDIN_ALIAS,
        "--input",
        "-i",
        help="Input path of file to convert from msgpack to JSON (or - for stdin).",
    ),
    read_size: Optional[int] = typer.Option(
        None, "--read-size", help="Bytes requested from the input per read."
    ),
    config: Optional[Path] = typer.Option(
        None, "--config", help="Configuration file (default: ./mp2json.toml)."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Diagnostic logging level written to stderr."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Convert a stream of msgpack values to newline-delimited JSON."""
    command_line: dict[str, object] = {
        "pretty": pretty if _param_is_command_line(ctx, "pretty") else None,
        "unbuffered": unbuffered if _param_is_command_line(ctx, "unbuffered") else None,
        "read_size": read_size,
        "log_level": log_level,
    }
    try:
        settings = resolve_settings(command_line=command_line, config_path=config)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    _configure_logging(settings.log_level)

    with ExitStack() as stack:
        source = _open_input(stack, input_path)
        sink = click.get_binary_stream("stdout")
        try:
            outcome = run(source, sink, settings.options)
        except Mp2JsonError as exc:
            typer.echo(f"mp2json: {exc.kind}: {exc}", err=True)
            raise typer.Exit(code=1) from exc
    if outcome is StreamOutcome.DOWNSTREAM_CLOSED:
        _silence_stdout()
