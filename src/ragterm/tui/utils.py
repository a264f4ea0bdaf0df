"""Terminal text utilities: ANSI handling, width measurement, word wrapping.

Two measures are provided:

* :func:`visible_width` -- columns occupied once ANSI escape sequences are
  removed.  Used for padding text that has already been styled.
* :func:`display_width` -- columns occupied once ANSI escapes *and* the
  stylistic markdown markup (``**``, ``*``, backticks, ``~~`` pairs, link
  syntax) are removed.  Used for sizing raw markdown before it is styled.
"""

from __future__ import annotations

import re
import unicodedata

import grapheme
import wcwidth as _wcwidth


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

# CSI SGR sequences: ESC[ <params> m
_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

_BOLD_MARK_RE = re.compile(r"\*\*")
_STRIKE_RE = re.compile(r"~~(.*?)~~")
_LINK_RE = re.compile(r"\[([^\[\]]+)\]\([^)]+\)")

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Grapheme width
# ---------------------------------------------------------------------------

def _grapheme_width(g: str) -> int:
    """Return the terminal display width of a single grapheme cluster.

    Rules:
    1. Zero-width characters (control, combining marks, etc.) -> 0
    2. Emoji (multi-codepoint, contains VS16 U+FE0F, ZWJ sequences, etc.) -> 2
    3. Otherwise delegate to wcwidth for the first meaningful codepoint.
    """
    if not g:
        return 0

    if len(g) == 1:
        cp = ord(g)
        if cp < 0x20 or (0x7F <= cp <= 0x9F):
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        cp = ord(ch)
        if cp in (0xFE0F, 0x200D):  # VS16, ZWJ
            return 2
        if 0x1F3FB <= cp <= 0x1F3FF:  # Skin tone modifiers
            return 2
        if 0x1F1E6 <= cp <= 0x1F1FF:  # Regional indicators
            return 2

    first_cp = ord(g[0])
    if first_cp >= 0x1F000 or 0x2600 <= first_cp <= 0x27BF:
        return 2

    cat = unicodedata.category(g[0])
    if cat.startswith("M") or cat == "Cf":
        return 0

    return max(_wcwidth.wcwidth(g[0]), 0)


# ---------------------------------------------------------------------------
# Stripping
# ---------------------------------------------------------------------------

def strip_ansi(text: str) -> str:
    """Remove ANSI SGR escape sequences from *text*."""
    return _ANSI_RE.sub("", text)


def strip_markup(text: str) -> str:
    """Remove stylistic markdown markup, keeping the visible content."""
    result = _BOLD_MARK_RE.sub("", text)
    result = result.replace("`", "")
    result = result.replace("*", "")
    result = _STRIKE_RE.sub(r"\1", result)
    return _LINK_RE.sub(r"\1", result)


# ---------------------------------------------------------------------------
# Width measurement
# ---------------------------------------------------------------------------

def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    * Strips ANSI escape sequences.
    * Treats tabs as 3 spaces.
    * Uses a fast ASCII path when possible.
    * Caches results for non-ASCII strings.
    """
    if not text:
        return 0

    stripped = _ANSI_RE.sub("", text)
    if not stripped:
        return 0

    stripped = stripped.replace("\t", "   ")

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = 0
    for g in grapheme.graphemes(stripped):
        total += _grapheme_width(g)

    return _cache_width(stripped, total)


def display_width(text: str) -> int:
    """Columns *text* occupies once ANSI codes and markdown markup are gone."""
    if not text:
        return 0
    return visible_width(strip_markup(strip_ansi(text)))


# ---------------------------------------------------------------------------
# Wrapping and padding
# ---------------------------------------------------------------------------

def wrap_words(text: str, max_width: int) -> list[str]:
    """Greedily wrap *text* into lines no wider than *max_width*.

    Words are separated by single spaces and measured with
    :func:`display_width`.  A word wider than *max_width* is placed on a
    line of its own and allowed to overflow; words are never split.
    Always returns at least one (possibly empty) line.
    """
    lines: list[str] = []
    current = ""

    for word in text.split(" "):
        candidate = f"{current} {word}" if current else word
        if display_width(candidate) <= max_width:
            current = candidate
        else:
            if current:
                lines.append(current)
            current = word

    if current:
        lines.append(current)

    return lines or [""]


def pad_to_width(text: str, width: int) -> str:
    """Right-pad *text* with spaces up to *width* visible columns."""
    return text + " " * max(0, width - visible_width(text))
