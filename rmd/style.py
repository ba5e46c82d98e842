from __future__ import annotations

from typing import BinaryIO

import jinja2
from markupsafe import Markup

from .errors import RenderError, TemplateError
from .github_css import GITHUB_MARKDOWN_LIGHT_CSS

# Per https://github.com/sindresorhus/github-markdown-css/tree/main?tab=readme-ov-file#usage
HTML_PREFIX_TEMPLATE = """<html>
<head>
<style>
{{ css }}
</style>
</head>
<body>
<article class="markdown-body">
"""

HTML_SUFFIX = """
</article>
</body>
</html>"""

_env = jinja2.Environment(
    autoescape=True,
    keep_trailing_newline=True,
    undefined=jinja2.StrictUndefined,
)


def html_prefix(css: str = GITHUB_MARKDOWN_LIGHT_CSS) -> str:
    """Render the document preamble around the embedded stylesheet.

    The stylesheet is trusted and goes in as ``Markup``; escaping it would
    corrupt the CSS. Anything else handed to the template is escaped.
    """
    try:
        template = _env.from_string(HTML_PREFIX_TEMPLATE)
        return template.render(css=Markup(css))
    except jinja2.TemplateError as exc:
        raise TemplateError(f"error building html output prefix: {exc}") from exc


def write_prefix(sink: BinaryIO) -> None:
    prefix = html_prefix()
    try:
        sink.write(prefix.encode("utf-8"))
    except OSError as exc:
        raise TemplateError(f"error writing html output prefix data to sink: {exc}") from exc


def write_suffix(sink: BinaryIO) -> None:
    try:
        sink.write(HTML_SUFFIX.encode("utf-8"))
    except OSError as exc:
        raise RenderError(f"error writing html output suffix data to sink: {exc}") from exc
