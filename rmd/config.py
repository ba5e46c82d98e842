from __future__ import annotations

import argparse
import os
from dataclasses import dataclass

from .errors import ConfigError

STDIN_SENTINEL = "-"
DEFAULT_PREVIEW_DELAY = 1.0
DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class Settings:
    input_path: str = STDIN_SENTINEL
    preview: bool = False
    style: bool = False
    verbose: bool = False
    preview_delay: float = DEFAULT_PREVIEW_DELAY
    temp_dir: str | None = None
    encoding: str = DEFAULT_ENCODING


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rmd",
        description="Render Markdown to HTML, optionally previewing it in the default browser.",
    )
    parser.add_argument(
        "-i",
        dest="input_path",
        default=STDIN_SENTINEL,
        help="Input file path ('-' reads standard input)",
    )
    # In preview mode the rendered file is opened w/ the OS's default web page viewer
    # and removed again upon exit
    parser.add_argument("-preview", "--preview", action="store_true", help="Preview only")
    parser.add_argument(
        "-style",
        "--style",
        action="store_true",
        help="Render markdown to html page w/ CSS style (Github Markdown light)",
    )
    parser.add_argument(
        "-v", "-verbose", "--verbose", dest="verbose", action="store_true", help="Print progress to stderr"
    )
    return parser


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def _env_encoding(name: str, default: str) -> str:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        b"".decode(raw)
    except LookupError as exc:
        raise ConfigError(f"{name} must name a known text encoding, got {raw!r}") from exc
    return raw


def load_settings(argv: list[str] | None = None) -> Settings:
    args = build_parser().parse_args(argv)
    return Settings(
        input_path=args.input_path,
        preview=args.preview,
        style=args.style,
        verbose=args.verbose,
        preview_delay=_env_float("RMD_PREVIEW_DELAY", DEFAULT_PREVIEW_DELAY),
        temp_dir=os.getenv("RMD_TMPDIR") or None,
        encoding=_env_encoding("RMD_ENCODING", DEFAULT_ENCODING),
    )
