from __future__ import annotations

from typing import BinaryIO

import markdown

from .config import DEFAULT_ENCODING
from .errors import RenderError

# GFM-equivalent set: tables, strikethrough, autolinks and task lists,
# plus nl2br so a soft newline inside a paragraph renders as <br />
GFM_EXTENSIONS = [
    "tables",
    "fenced_code",
    "nl2br",
    "pymdownx.tilde",
    "pymdownx.magiclink",
    "pymdownx.tasklist",
]


def build_markdown() -> markdown.Markdown:
    return markdown.Markdown(
        extensions=GFM_EXTENSIONS,
        extension_configs={
            "pymdownx.tilde": {"subscript": False},
            "pymdownx.tasklist": {"custom_checkbox": False},
        },
        output_format="xhtml",
    )


def render_markdown(data: bytes, sink: BinaryIO, encoding: str = DEFAULT_ENCODING) -> None:
    """Convert Markdown bytes and write the HTML straight into ``sink``.

    Output already written before a failure stays in the sink.
    """
    text = data.decode(encoding, errors="replace").lstrip("\ufeff")
    try:
        body_html = build_markdown().convert(text)
    except Exception as exc:
        raise RenderError(f"error rendering Markdown: {exc}") from exc
    try:
        sink.write(body_html.encode("utf-8", "xmlcharrefreplace"))
    except OSError as exc:
        raise RenderError(f"error writing rendered HTML to sink: {exc}") from exc
