"""OpenCV window host: frame pacing, compositing and keyboard template UI."""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Awaitable, Callable, Dict, Optional

import cv2

from ..config.settings import DisplayConfig
from ..core.selection import Template, TemplateSelection
from .status import StatusRenderer
from .surface import OverlaySurface

logger = logging.getLogger(__name__)

# Digit keys select templates in declaration order: 0 = none ... 7 = star
KEY_TEMPLATES: Dict[int, Template] = {ord(str(i)): t for i, t in enumerate(Template)}
KEY_NEXT = (ord("n"), ord(" "))
KEY_PAUSE = ord("p")
KEY_QUIT = (ord("q"), 27)


class FramePacer:
    """
    Wait for fixed-rate frame boundaries.

    A late caller resumes at the next boundary instead of firing a backlog
    of missed frames.
    """

    def __init__(
        self,
        fps: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if fps <= 0:
            raise ValueError("fps must be positive")
        self.period = 1.0 / fps
        self.clock = clock
        self.sleep = sleep
        self._deadline: Optional[float] = None

    async def next_frame(self, loop=None):
        now = self.clock()
        target = self._deadline if self._deadline is not None else now + self.period
        if now > target:
            target += math.ceil((now - target) / self.period) * self.period
        self._deadline = target + self.period
        await self.sleep(max(0.0, target - now))


class WindowDisplay:
    """Show the composited overlay and route key presses to the UI channel."""

    def __init__(
        self,
        stream,
        surface: OverlaySurface,
        selection: TemplateSelection,
        config: DisplayConfig = DisplayConfig(),
        pacer: Optional[FramePacer] = None,
        status: Optional[StatusRenderer] = None,
    ):
        """
        Args:
            stream: Camera stream; advanced once per displayed frame
            surface: Overlay surface drawn by the render loop
            selection: Template channel the keyboard posts to
            config: Window name, target fps, status toggle
            pacer: Frame pacer (defaults to ``config.fps``)
            status: Status line renderer
        """
        self.stream = stream
        self.surface = surface
        self.selection = selection
        self.config = config
        self.pacer = pacer if pacer is not None else FramePacer(config.fps)
        self.status = status if status is not None else StatusRenderer()
        self._window_open = False

    def status_text(self) -> str:
        text = f"Template: {self.selection.peek().value}"
        if self.stream.paused:
            text += "  [paused]"
        elif self.stream.ended:
            text += "  [ended]"
        return text

    def show(self, frame):
        cv2.imshow(self.config.window_name, frame)
        self._window_open = True

    def handle_key(self, key: int, loop) -> None:
        if key in KEY_TEMPLATES:
            self.selection.post(KEY_TEMPLATES[key])
        elif key in KEY_NEXT:
            self.selection.post(self.selection.peek().next())
        elif key == KEY_PAUSE:
            paused = self.stream.toggle_pause()
            logger.info("Stream %s", "paused" if paused else "resumed")
        elif key in KEY_QUIT:
            loop.stop()

    def _window_closed(self) -> bool:
        try:
            return cv2.getWindowProperty(self.config.window_name, cv2.WND_PROP_VISIBLE) < 1
        except cv2.error:
            return True

    async def next_frame(self, loop) -> None:
        frame = self.stream.frame
        if frame is not None:
            out = self.surface.composite(frame)
            if self.config.show_status:
                out = self.status.draw(out, self.status_text())
            self.show(out)

        key = cv2.waitKey(1) & 0xFF
        if key != 0xFF:
            self.handle_key(key, loop)
        if self._window_open and self._window_closed():
            loop.stop()

        await self.pacer.next_frame()
        self.stream.advance()

    def close(self):
        if self._window_open:
            cv2.destroyWindow(self.config.window_name)
            self._window_open = False
