"""Panel component - a rounded border with a title around pre-rendered text."""

from __future__ import annotations

from ragterm.tui.theme import PLAIN, Style
from ragterm.tui.utils import pad_to_width, visible_width

_ROUND = {
    "top_left": "╭",
    "top_right": "╮",
    "bottom_left": "╰",
    "bottom_right": "╯",
    "horizontal": "─",
    "vertical": "│",
}


class Panel:
    """Panel component - draws a titled, padded box around its content.

    Content lines are never wrapped: the panel grows to the widest line so
    that tables rendered inside keep their alignment.
    """

    def __init__(
        self,
        title: str = "",
        *,
        border_style: Style = PLAIN,
        padding_x: int = 1,
        padding_y: int = 1,
    ) -> None:
        self._title = title
        self._border_style = border_style
        self._padding_x = padding_x
        self._padding_y = padding_y

    def render(self, text: str) -> list[str]:
        content_lines = text.split("\n") if text else [""]

        title = f" {self._title} " if self._title else ""
        inner = max(
            max(visible_width(line) for line in content_lines) + self._padding_x * 2,
            visible_width(title) + 2,
        )

        border = self._border_style
        h = _ROUND["horizontal"]
        v = border(_ROUND["vertical"])
        left_pad = " " * self._padding_x

        top_fill = h * (inner - visible_width(title) - 1)
        lines = [border(f"{_ROUND['top_left']}{h}{title}{top_fill}{_ROUND['top_right']}")]

        blank = f"{v}{' ' * inner}{v}"
        lines.extend(blank for _ in range(self._padding_y))
        for line in content_lines:
            lines.append(f"{v}{pad_to_width(left_pad + line, inner)}{v}")
        lines.extend(blank for _ in range(self._padding_y))

        lines.append(border(f"{_ROUND['bottom_left']}{h * inner}{_ROUND['bottom_right']}"))
        return lines
