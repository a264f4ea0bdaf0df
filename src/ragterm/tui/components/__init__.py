"""TUI components."""

from ragterm.tui.components.markdown import MarkdownRenderer, render_markdown
from ragterm.tui.components.panel import Panel
from ragterm.tui.components.spinner import Spinner
from ragterm.tui.components.table import render_table

__all__ = [
    "MarkdownRenderer",
    "Panel",
    "Spinner",
    "render_markdown",
    "render_table",
]
