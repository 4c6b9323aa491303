from __future__ import annotations

import html
import json
import re
from pathlib import Path
from typing import Any, Callable, Iterable, Optional

import markdown
from pygments.formatters import HtmlFormatter

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
PLACEHOLDER_RE = re.compile(r"\{\{\s*([A-Za-z0-9_.-]+)\s*\}\}")
DEFAULT_EXTENSIONS = ("fenced_code", "tables", "toc")


def markdown_parser(
    extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    highlight: bool = True,
    img_root: str = "",
) -> Callable[[str], str]:
    """Build a markup parser that turns Markdown into HTML.

    With ``highlight`` fenced code blocks are coloured by pygments through the
    ``codehilite`` extension. ``img_root`` is prefixed to bare relative image
    sources, as pages are written one directory below their source.
    """
    extensions = list(extensions)
    if highlight and "codehilite" not in extensions:
        extensions.append("codehilite")

    def parse(text: str) -> str:
        md = markdown.Markdown(
            extensions=extensions,
            extension_configs={"codehilite": {"guess_lang": False}},
        )
        html_content = md.convert(text)
        if img_root:
            html_content = fix_relative_img_src(html_content, img_root)
        return html_content

    return parse


def highlight_css(style: str = "default") -> str:
    return HtmlFormatter(style=style, cssclass="codehilite").get_style_defs(".codehilite")


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        return f'<img{attrs}src="{root.rstrip("/")}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def render_template(template: str, **context: str) -> str:
    """Fill ``{{key}}`` placeholders; unknown placeholders are left as is.

    ``content`` is substituted in the same pass as the other keys, so text
    inside the document body is never treated as a placeholder.
    """

    def repl(match: re.Match) -> str:
        key = match.group(1)
        if key in context:
            return context[key]
        return match.group(0)

    return PLACEHOLDER_RE.sub(repl, template)


def _as_text(parsed_content: Any) -> str:
    if isinstance(parsed_content, str):
        return parsed_content
    return json.dumps(parsed_content, ensure_ascii=False, default=str)


def page_template(template: str) -> Callable[[Any, Optional[dict]], str]:
    """Renderer for the ``html`` layout: ``{{content}}``, ``{{title}}`` and metadata keys."""

    def render(parsed_content: Any, metadata: Optional[dict] = None) -> str:
        metadata = metadata or {}
        context = {key: html.escape(value) for key, value in metadata.items()}
        context.setdefault("title", "Untitled")
        context["content"] = _as_text(parsed_content)
        return render_template(template, **context)

    return render


def read_template(path: Path) -> Callable[[Any, Optional[dict]], str]:
    return page_template(path.read_text(encoding="utf-8"))


def module_template(parsed_content: Any, metadata: Optional[dict] = None) -> str:
    """Render a record as an ES module exporting its metadata and content."""
    meta_json = json.dumps(metadata or {}, ensure_ascii=False, indent=2)
    if isinstance(parsed_content, str):
        content_json = json.dumps(parsed_content, ensure_ascii=False)
    else:
        content_json = json.dumps(parsed_content, ensure_ascii=False, default=str, indent=2)
    return f"export const meta = {meta_json};\n\nexport default {content_json};\n"
