"""Markdown component -- renders a model answer to styled terminal output.

The renderer is line oriented: every input line is classified (code fence,
code, table row, heading, quote, rule, paragraph) and rendered in place.
Table rows are buffered until the first line without a pipe, then laid out
as one block by :func:`render_table`.
"""

from __future__ import annotations

import enum
import os
import re
import sys

from ragterm.tui.components.table import render_table
from ragterm.tui.inline import style_inline
from ragterm.tui.theme import MarkdownTheme, default_theme

_SEPARATOR_CELL_RE = re.compile(r"^[-:]+$")
_BULLET_RE = re.compile(r"^(\s*)[*\-+]\s+")
_ORDERED_RE = re.compile(r"^(\s*)(\d+)\.\s+")
_QUOTE_RE = re.compile(r"^\s*>\s*")

_HEADING_PREFIXES = ("### ", "## ", "# ")


class BlockState(enum.Enum):
    NORMAL = "normal"
    IN_CODE_BLOCK = "in_code_block"
    IN_TABLE = "in_table"


def terminal_columns() -> int:
    """Width of the attached terminal, or 80 when there is none."""
    try:
        return os.get_terminal_size(sys.stdout.fileno()).columns
    except (ValueError, OSError):
        return 80


def split_table_cells(line: str) -> list[str]:
    """Split a pipe-table line into trimmed, non-empty cells."""
    return [cell.strip() for cell in line.split("|") if cell.strip()]


def is_separator_row(cells: list[str]) -> bool:
    """``True`` for a ``|---|:--:|`` header separator or a line with no cells."""
    return all(_SEPARATOR_CELL_RE.match(cell) for cell in cells)


class MarkdownRenderer:
    """Renders a markdown string to a single ANSI-styled string.

    Args:
        theme: Styles and glyphs to use; defaults to :func:`default_theme`.
        width: Terminal width used for table layout.  When omitted it is
            read from the terminal on every :meth:`render` call.
    """

    def __init__(
        self,
        theme: MarkdownTheme | None = None,
        *,
        width: int | None = None,
    ) -> None:
        self._theme = theme or default_theme()
        self._width = width

    @property
    def theme(self) -> MarkdownTheme:
        return self._theme

    def render(self, text: str) -> str:
        return "\n".join(self.render_lines(text))

    def render_lines(self, text: str) -> list[str]:
        """Render *text* and return the output lines (without newlines)."""
        width = self._width if self._width is not None else terminal_columns()
        theme = self._theme

        result: list[str] = []
        table_rows: list[list[str]] = []
        state = BlockState.NORMAL

        for line in text.split("\n"):
            # Code fences toggle code mode; nothing inside is interpreted.
            if line.lstrip().startswith("```"):
                if state is BlockState.IN_TABLE:
                    result.extend(self._flush_table(table_rows, width))
                    table_rows = []
                state = (
                    BlockState.NORMAL
                    if state is BlockState.IN_CODE_BLOCK
                    else BlockState.IN_CODE_BLOCK
                )
                result.append(self._rule())
                continue

            if state is BlockState.IN_CODE_BLOCK:
                result.append(theme.code_block(f" {line} "))
                continue

            if "|" in line:
                cells = split_table_cells(line)
                state = BlockState.IN_TABLE
                if not is_separator_row(cells):
                    table_rows.append(cells)
                continue

            # Any line that is not a table row ends the table.
            if state is BlockState.IN_TABLE:
                result.extend(self._flush_table(table_rows, width))
                table_rows = []
                state = BlockState.NORMAL

            result.append(self._render_line(line))

        if table_rows:
            result.append(render_table(table_rows, width, theme))

        return result

    # -- block renderers ------------------------------------------------------

    def _flush_table(self, rows: list[list[str]], width: int) -> list[str]:
        if not rows:
            return []
        return [render_table(rows, width, self._theme), ""]

    def _rule(self) -> str:
        theme = self._theme
        return theme.rule(theme.rule_char * theme.rule_width)

    def _render_line(self, line: str) -> str:
        theme = self._theme

        for prefix in _HEADING_PREFIXES:
            if line.startswith(prefix):
                return self._render_heading(line[len(prefix):], len(prefix) - 1)

        if line.lstrip().startswith(">"):
            content = style_inline(_QUOTE_RE.sub("", line, count=1), theme)
            return theme.blockquote(f"{theme.quote_glyph}{content}")

        if line.strip() in ("---", "***"):
            return self._rule()

        line = _BULLET_RE.sub(
            lambda m: m.group(1) + theme.bullet(theme.bullet_glyph), line, count=1
        )
        line = _ORDERED_RE.sub(
            lambda m: m.group(1) + theme.number(f"{m.group(2)}. "), line, count=1
        )
        return style_inline(line, theme)

    def _render_heading(self, text: str, level: int) -> str:
        theme = self._theme
        styles = {1: theme.heading1, 2: theme.heading2, 3: theme.heading3}
        return styles[level](style_inline(text, theme))


def render_markdown(
    text: str,
    theme: MarkdownTheme | None = None,
    *,
    width: int | None = None,
) -> str:
    """Render *text* with a one-off :class:`MarkdownRenderer`."""
    return MarkdownRenderer(theme, width=width).render(text)
