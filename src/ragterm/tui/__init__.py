"""ragterm.tui: terminal markdown rendering for model answers."""

# Components (re-exported from components package)
from ragterm.tui.components import (
    MarkdownRenderer,
    Panel,
    Spinner,
    render_markdown,
    render_table,
)

# Inline styling
from ragterm.tui.inline import style_inline

# Themes
from ragterm.tui.theme import MarkdownTheme, Style, default_theme, plain_theme

# Utilities
from ragterm.tui.utils import (
    display_width,
    pad_to_width,
    strip_ansi,
    strip_markup,
    visible_width,
    wrap_words,
)

__all__ = [
    # Components
    "MarkdownRenderer",
    "Panel",
    "Spinner",
    "render_markdown",
    "render_table",
    # Inline styling
    "style_inline",
    # Themes
    "MarkdownTheme",
    "Style",
    "default_theme",
    "plain_theme",
    # Utilities
    "display_width",
    "pad_to_width",
    "strip_ansi",
    "strip_markup",
    "visible_width",
    "wrap_words",
]
