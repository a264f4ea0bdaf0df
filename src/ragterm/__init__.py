"""ragterm: retrieval-augmented chat in the terminal."""

from ragterm.tui import MarkdownRenderer, MarkdownTheme, render_markdown

__version__ = "0.1.0"

__all__ = ["MarkdownRenderer", "MarkdownTheme", "render_markdown"]
