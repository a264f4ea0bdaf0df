"""Styling configuration for the markdown renderer.

A :class:`MarkdownTheme` is passed explicitly to every rendering call, so
two renderers in the same process can use different colours (or none).
"""

from __future__ import annotations

from dataclasses import dataclass, field

# ---------------------------------------------------------------------------
# SGR open / close pairs
# ---------------------------------------------------------------------------

_BOLD = ("\x1b[1m", "\x1b[22m")
_DIM = ("\x1b[2m", "\x1b[22m")
_ITALIC = ("\x1b[3m", "\x1b[23m")
_UNDERLINE = ("\x1b[4m", "\x1b[24m")
_STRIKETHROUGH = ("\x1b[9m", "\x1b[29m")

_RED = ("\x1b[31m", "\x1b[39m")
_CYAN = ("\x1b[36m", "\x1b[39m")
_BLUE = ("\x1b[34m", "\x1b[39m")
_WHITE = ("\x1b[37m", "\x1b[39m")
_GRAY = ("\x1b[90m", "\x1b[39m")
_MAGENTA_BRIGHT = ("\x1b[95m", "\x1b[39m")
_CYAN_BRIGHT = ("\x1b[96m", "\x1b[39m")
_YELLOW_BRIGHT = ("\x1b[93m", "\x1b[39m")
_WHITE_BRIGHT = ("\x1b[97m", "\x1b[39m")

_BG_GRAY = ("\x1b[100m", "\x1b[49m")


# ---------------------------------------------------------------------------
# Style
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Style:
    """A stack of SGR attributes applied to a piece of text.

    Calling a style wraps the text in its open codes and the matching close
    codes.  When the text already contains one of the close codes (from a
    nested span), the attribute is re-opened right after it so the outer
    styling continues past the inner span.
    """

    codes: tuple[tuple[str, str], ...] = ()

    def __call__(self, text: str) -> str:
        for open_code, close_code in reversed(self.codes):
            text = text.replace(close_code, close_code + open_code)
            text = f"{open_code}{text}{close_code}"
        return text

    def __add__(self, other: Style) -> Style:
        return Style(self.codes + other.codes)

    def __bool__(self) -> bool:
        return bool(self.codes)


def _style(*codes: tuple[str, str]) -> Style:
    return Style(tuple(codes))


PLAIN = Style()


# ---------------------------------------------------------------------------
# MarkdownTheme
# ---------------------------------------------------------------------------


@dataclass
class MarkdownTheme:
    """Colour / style theme for the markdown renderer."""

    bold: Style = PLAIN
    italic: Style = PLAIN
    inline_code: Style = PLAIN
    link: Style = PLAIN
    link_url: Style = PLAIN
    strikethrough: Style = PLAIN
    heading1: Style = PLAIN
    heading2: Style = PLAIN
    heading3: Style = PLAIN
    blockquote: Style = PLAIN
    rule: Style = PLAIN
    bullet: Style = PLAIN
    number: Style = PLAIN
    code_block: Style = PLAIN
    table_border: Style = PLAIN
    table_header: Style = PLAIN
    error: Style = PLAIN

    quote_glyph: str = "│ "
    bullet_glyph: str = "• "
    rule_char: str = "─"
    rule_width: int = 60
    max_table_width: int = 120
    min_column_width: int = 8
    box_chars: dict[str, str] = field(
        default_factory=lambda: {
            "top_left": "┌",
            "top": "┬",
            "top_right": "┐",
            "mid_left": "├",
            "mid": "┼",
            "mid_right": "┤",
            "bottom_left": "└",
            "bottom": "┴",
            "bottom_right": "┘",
            "horizontal": "─",
            "vertical": "│",
        }
    )


def default_theme() -> MarkdownTheme:
    """The colour theme used on ANSI-capable terminals."""
    return MarkdownTheme(
        bold=_style(_BOLD, _CYAN_BRIGHT),
        italic=_style(_YELLOW_BRIGHT),
        inline_code=_style(_BG_GRAY, _WHITE),
        link=_style(_BLUE, _UNDERLINE),
        link_url=_style(_GRAY),
        strikethrough=_style(_STRIKETHROUGH, _GRAY),
        heading1=_style(_BOLD, _MAGENTA_BRIGHT, _UNDERLINE),
        heading2=_style(_BOLD, _MAGENTA_BRIGHT),
        heading3=_style(_BOLD, _CYAN_BRIGHT),
        blockquote=_style(_GRAY, _ITALIC),
        rule=_style(_GRAY),
        bullet=_style(_WHITE_BRIGHT),
        number=_style(_CYAN),
        code_block=_style(_BG_GRAY, _WHITE),
        table_border=_style(_CYAN),
        table_header=_style(_BOLD, _MAGENTA_BRIGHT),
        error=_style(_RED),
    )


def plain_theme() -> MarkdownTheme:
    """A theme that emits no escape sequences (``NO_COLOR``, pipes, tests)."""
    return MarkdownTheme()
