from __future__ import annotations

import sys
from contextlib import ExitStack
from typing import BinaryIO

from dotenv import load_dotenv

from .config import Settings, load_settings
from .errors import ConfigError, RenderError, RmdError
from .io import open_sink, read_input
from .launcher import Launcher, get_launcher, preview
from .render import render_markdown
from .style import write_prefix, write_suffix


def _step(settings: Settings, message: str) -> None:
    if settings.verbose:
        print(message, file=sys.stderr)


def _write_document(settings: Settings, data: bytes, sink: BinaryIO) -> None:
    if settings.style:
        write_prefix(sink)
    render_markdown(data, sink, settings.encoding)
    if settings.style:
        write_suffix(sink)
    try:
        sink.flush()
    except OSError as exc:
        raise RenderError(f"error flushing rendered output: {exc}") from exc


def run(
    settings: Settings,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
    launcher: Launcher | None = None,
) -> None:
    """Read, convert and write one document; preview it when asked to.

    Cleanup registered on the exit stack runs in reverse order on every
    exit path: the temp file is closed, then its directory removed.
    """
    _step(settings, "[Step 1] Reading input...")
    data = read_input(settings.input_path, stdin)

    with ExitStack() as stack:
        _step(settings, "[Step 2] Selecting output sink...")
        sink, out_path = open_sink(
            settings.preview, stack, stdout=stdout, temp_dir=settings.temp_dir
        )

        _step(settings, "[Step 3] Rendering Markdown...")
        try:
            _write_document(settings, data, sink)
            if out_path is not None:
                try:
                    sink.close()
                except OSError as exc:
                    raise RenderError(f"error closing rendered output {out_path}: {exc}") from exc
        except RmdError:
            if out_path is not None:
                print("rmd: skip preview due to failed render", file=sys.stderr)
            raise

        if out_path is not None:
            _step(settings, f"[Step 4] Opening preview of {out_path}...")
            preview(out_path, launcher or get_launcher(), settings.preview_delay)
            _step(settings, "[Step 5] Removing temporary files...")


def main(argv: list[str] | None = None) -> int:
    load_dotenv()

    try:
        settings = load_settings(argv)
    except ConfigError as exc:
        print(f"rmd: {exc}", file=sys.stderr)
        return 2

    try:
        run(settings)
    except RmdError as exc:
        print(f"rmd: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
