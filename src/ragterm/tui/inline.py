"""Inline markdown styling: bold, inline code, italic, links, strikethrough.

Styling is a fixed sequence of regex passes over a single line.  Inline code
spans and link targets are swapped for private-use placeholders before the
passes run, so nothing inside backticks or a URL is ever read as emphasis.

The passes never emit escape sequences themselves.  Each one wraps its match
in numbered span markers; once every pass has run the spans are expanded
innermost first, so an outer style sees the close codes of the spans nested
in it and re-opens itself after each of them.
"""

from __future__ import annotations

import re

from ragterm.tui.theme import MarkdownTheme, Style

_CODE_RE = re.compile(r"`([^`]+?)`")
_LINK_TARGET_RE = re.compile(r"(\[[^\[\]]+\])\(([^)]+)\)")

_BOLD_STAR_RE = re.compile(r"\*\*(.+?)\*\*")
_BOLD_UNDERSCORE_RE = re.compile(r"__(.+?)__")
_ITALIC_STAR_RE = re.compile(r"(?<!\*)\*(?!\*)([^*]+?)(?<!\*)\*(?!\*)")
_ITALIC_UNDERSCORE_RE = re.compile(r"(?<!_)_(?!_)([^_]+?)(?<!_)_(?!_)")
_LINK_RE = re.compile(r"\[([^\[\]]+)\]\((\d+)\)")
_STRIKE_RE = re.compile(r"~~(.+?)~~")

_CODE_SLOT_RE = re.compile(r"(\d+)")
_URL_SLOT_RE = re.compile(r"(\d+)")
# A span with no other span opening inside it.
_SPAN_RE = re.compile(r"(\d+)([^]*?)\1")


def style_inline(text: str, theme: MarkdownTheme) -> str:
    """Apply inline emphasis to one line of markdown.

    Bold is resolved before italic, so ``**x**`` is never read as two
    italic markers.  Inline code keeps its content byte-for-byte.  Markers
    that do not pair up are left in place as literal characters.
    """
    if not text:
        return text

    code_spans: list[str] = []
    urls: list[str] = []
    spans: list[tuple[Style, str]] = []

    def _protect_code(m: re.Match[str]) -> str:
        code_spans.append(m.group(1))
        return f"{len(code_spans) - 1}"

    def _protect_url(m: re.Match[str]) -> str:
        urls.append(m.group(2))
        return f"{m.group(1)}({len(urls) - 1})"

    def _span(style: Style, inner: str, suffix: str = "") -> str:
        spans.append((style, suffix))
        i = len(spans) - 1
        return f"{i}{inner}{i}"

    def _link(m: re.Match[str]) -> str:
        url = _slot(urls, m.group(2), "")
        return _span(theme.link, m.group(1), theme.link_url(f" ({url})"))

    def _expand(m: re.Match[str]) -> str:
        style, suffix = spans[int(m.group(1))]
        return style(m.group(2)) + suffix

    result = _CODE_RE.sub(_protect_code, text)
    result = _LINK_TARGET_RE.sub(_protect_url, result)

    result = _BOLD_STAR_RE.sub(lambda m: _span(theme.bold, m.group(1)), result)
    result = _BOLD_UNDERSCORE_RE.sub(lambda m: _span(theme.bold, m.group(1)), result)
    result = _ITALIC_STAR_RE.sub(lambda m: _span(theme.italic, m.group(1)), result)
    result = _ITALIC_UNDERSCORE_RE.sub(lambda m: _span(theme.italic, m.group(1)), result)
    result = _LINK_RE.sub(_link, result)
    result = _STRIKE_RE.sub(lambda m: _span(theme.strikethrough, m.group(1)), result)

    # Targets whose link text was split apart by an earlier pass stay literal.
    result = _URL_SLOT_RE.sub(lambda m: _slot(urls, m.group(1), m.group(0)), result)
    result = _CODE_SLOT_RE.sub(
        lambda m: theme.inline_code(_slot(code_spans, m.group(1), m.group(0))),
        result,
    )

    expanded = 1
    while expanded:
        result, expanded = _SPAN_RE.subn(_expand, result)
    return result


def _slot(values: list[str], index: str, fallback: str) -> str:
    i = int(index)
    return values[i] if i < len(values) else fallback
