"""Spinner that redraws every 80ms while a request is outstanding."""

from __future__ import annotations

import asyncio
import sys
from typing import Callable, TextIO


def _identity(text: str) -> str:
    return text


class Spinner:
    """Spinner that updates every 80ms with a braille animation.

    Only draws when *stream* is a TTY; otherwise ``start``/``stop`` are no-ops
    so piped output stays clean.
    """

    _frames = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]

    def __init__(
        self,
        message: str = "Thinking...",
        *,
        stream: TextIO | None = None,
        spinner_color_fn: Callable[[str], str] = _identity,
        message_color_fn: Callable[[str], str] = _identity,
    ) -> None:
        self._message = message
        self._stream = stream or sys.stderr
        self._spinner_color_fn = spinner_color_fn
        self._message_color_fn = message_color_fn
        self._current_frame = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def enabled(self) -> bool:
        isatty = getattr(self._stream, "isatty", None)
        return bool(isatty and isatty())

    def start(self) -> None:
        if not self.enabled or self._task is not None:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        self._stream.write("\r\x1b[2K")
        self._stream.flush()

    async def __aenter__(self) -> Spinner:
        self.start()
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.stop()

    async def _run(self) -> None:
        while True:
            self._draw()
            await asyncio.sleep(0.08)
            self._current_frame = (self._current_frame + 1) % len(self._frames)

    def _draw(self) -> None:
        frame = self._frames[self._current_frame]
        self._stream.write(
            f"\r{self._spinner_color_fn(frame)} {self._message_color_fn(self._message)}"
        )
        self._stream.flush()
