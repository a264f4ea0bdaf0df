"""Table layout -- renders pipe-table rows as a bordered, wrapped block."""

from __future__ import annotations

from typing import Sequence

from ragterm.tui.inline import style_inline
from ragterm.tui.theme import MarkdownTheme, Style
from ragterm.tui.utils import display_width, pad_to_width, visible_width, wrap_words


def render_table(
    rows: Sequence[Sequence[str]],
    terminal_width: int,
    theme: MarkdownTheme,
) -> str:
    """Render *rows* (header first) as a box-drawn table.

    Column widths are negotiated against ``min(terminal_width,
    theme.max_table_width)``; each cell is word-wrapped to its column, so a
    row may span several display lines.  Returns ``""`` for an empty table.
    """
    if not rows:
        return ""

    num_cols = max(len(row) for row in rows)
    if num_cols == 0:
        return ""

    col_widths = calculate_column_widths(rows, num_cols, terminal_width, theme)
    cells = [_wrap_row(row, col_widths, theme) for row in rows]

    # Link targets and overlong words can render wider than their column.
    for row_cells in cells:
        for col, cell_lines in enumerate(row_cells):
            for line in cell_lines:
                col_widths[col] = max(col_widths[col], visible_width(line))

    lines: list[str] = [_border(col_widths, theme, "top")]

    for row_idx, row_cells in enumerate(cells):
        cell_style = theme.table_header if row_idx == 0 else None
        lines.extend(_render_row(row_cells, col_widths, theme, cell_style))
        if row_idx == 0:
            lines.append(_border(col_widths, theme, "mid"))

    lines.append(_border(col_widths, theme, "bottom"))
    return "\n".join(lines)


def calculate_column_widths(
    rows: Sequence[Sequence[str]],
    num_cols: int,
    terminal_width: int,
    theme: MarkdownTheme,
) -> list[int]:
    """Calculate column widths for a table.

    Each column gets the widest of its cells, capped at an equal share of
    the available width and never below ``theme.min_column_width``.
    """
    # "│ " before each column, " │" after the last: 3 columns per boundary
    border_overhead = 3 * (num_cols + 1)
    available_width = min(terminal_width, theme.max_table_width) - border_overhead
    base_col_width = available_width // num_cols

    widths = [0] * num_cols
    for row in rows:
        for col, cell in enumerate(row):
            widths[col] = max(widths[col], min(display_width(cell), base_col_width))

    return [max(theme.min_column_width, min(w, base_col_width)) for w in widths]


def _border(col_widths: list[int], theme: MarkdownTheme, position: str) -> str:
    chars = theme.box_chars
    segments = [chars["horizontal"] * (w + 2) for w in col_widths]
    line = (
        chars[f"{position}_left"]
        + chars[position].join(segments)
        + chars[f"{position}_right"]
    )
    return theme.table_border(line)


def _wrap_row(
    cells: Sequence[str],
    col_widths: list[int],
    theme: MarkdownTheme,
) -> list[list[str]]:
    """Wrap and style each cell of a row; missing cells are empty."""
    return [
        [
            style_inline(line, theme)
            for line in wrap_words(cells[col] if col < len(cells) else "", width)
        ]
        for col, width in enumerate(col_widths)
    ]


def _render_row(
    wrapped_cells: list[list[str]],
    col_widths: list[int],
    theme: MarkdownTheme,
    cell_style: Style | None = None,
) -> list[str]:
    """Render a single table row, possibly spanning multiple display lines."""
    max_lines = max(len(cell_lines) for cell_lines in wrapped_cells)

    vertical = theme.box_chars["vertical"]
    left = theme.table_border(f"{vertical} ")
    sep = theme.table_border(f" {vertical} ")
    right = theme.table_border(f" {vertical}")

    row_lines: list[str] = []
    for line_idx in range(max_lines):
        parts: list[str] = []
        for cell_lines, width in zip(wrapped_cells, col_widths):
            cell_line = cell_lines[line_idx] if line_idx < len(cell_lines) else ""
            padded = pad_to_width(cell_line, width)
            parts.append(cell_style(padded) if cell_style else padded)
        row_lines.append(left + sep.join(parts) + right)

    return row_lines
