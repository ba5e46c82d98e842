from __future__ import annotations

import shutil
import sys
import tempfile
from contextlib import ExitStack
from pathlib import Path
from typing import BinaryIO

from .config import STDIN_SENTINEL
from .errors import CleanupError, InputOpenError, InputReadError, TempDirError, TempFileError

TEMP_DIR_PREFIX = "rmd"
PREVIEW_FILENAME = "out.html"


def read_input(path: str | None, stdin: BinaryIO | None = None) -> bytes:
    """Load the whole Markdown source into memory.

    An empty path or ``-`` reads standard input until end of stream.
    """
    if not path or path == STDIN_SENTINEL:
        stream = stdin if stdin is not None else sys.stdin.buffer
        try:
            return stream.read()
        except OSError as exc:
            raise InputReadError(f"error reading all Markdown content from input: {exc}") from exc

    try:
        f = open(path, "rb")
    except OSError as exc:
        raise InputOpenError(f"error opening input file {path}: {exc}") from exc
    with f:
        try:
            return f.read()
        except OSError as exc:
            raise InputReadError(f"error reading all Markdown content from {path}: {exc}") from exc


def remove_temp_dir(path: Path) -> None:
    try:
        shutil.rmtree(path)
    except OSError as exc:
        print(f"rmd: {CleanupError(f'error removing temporary directory {path}: {exc}')}", file=sys.stderr)


def open_sink(
    preview: bool,
    stack: ExitStack,
    stdout: BinaryIO | None = None,
    temp_dir: str | None = None,
) -> tuple[BinaryIO, Path | None]:
    if not preview:
        # stdout by default so the output composes w/ other shell tools
        return (stdout if stdout is not None else sys.stdout.buffer), None

    try:
        tmp_dir = Path(tempfile.mkdtemp(prefix=TEMP_DIR_PREFIX, dir=temp_dir))
    except OSError as exc:
        raise TempDirError(f"error creating temp directory: {exc}") from exc
    stack.callback(remove_temp_dir, tmp_dir)

    out_path = tmp_dir / PREVIEW_FILENAME
    try:
        sink = open(out_path, "xb")
    except OSError as exc:
        raise TempFileError(f"error creating temp file {out_path}: {exc}") from exc
    stack.callback(sink.close)
    return sink, out_path
