"""Status line rendering (template name, paused, loading messages)."""

import cv2
import numpy as np
from typing import Tuple
from PIL import Image, ImageDraw, ImageFont


class StatusRenderer:
    """Render a single line of text with a translucent background box."""

    def __init__(
        self,
        font_size: int = 18,
        text_color: Tuple[int, int, int] = (255, 255, 255),
        bg_color: Tuple[int, int, int] = (0, 0, 0),
        bg_alpha: float = 0.5,
        padding: int = 8,
    ):
        """
        Initialize status renderer.

        Args:
            font_size: Font size for text
            text_color: Text color (BGR, converted to RGB for PIL)
            bg_color: Background color (BGR)
            bg_alpha: Background transparency
            padding: Padding around text and from the frame edge
        """
        self.text_color = text_color
        self.bg_color = bg_color
        self.bg_alpha = bg_alpha
        self.padding = padding
        self.font = self._load_font(font_size)

    def _load_font(self, size: int):
        for name in ("DejaVuSans.ttf", "Arial.ttf", "/System/Library/Fonts/Helvetica.ttc"):
            try:
                return ImageFont.truetype(name, size)
            except (IOError, OSError):
                continue
        return ImageFont.load_default()

    def text_size(self, text: str) -> Tuple[int, int]:
        dummy = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        left, top, right, bottom = dummy.textbbox((0, 0), text, font=self.font)
        return right - left, bottom - top

    def draw(self, frame: np.ndarray, text: str) -> np.ndarray:
        """
        Draw text in the top-left corner of a copy of the frame.

        Args:
            frame: BGR image
            text: Text to draw

        Returns:
            Frame with text drawn
        """
        if not text:
            return frame
        tw, th = self.text_size(text)
        pad = self.padding
        x = pad * 2
        y = pad * 2

        overlay = frame.copy()
        cv2.rectangle(overlay, (x - pad, y - pad), (x + tw + pad, y + th + pad), self.bg_color, -1)
        frame = cv2.addWeighted(overlay, self.bg_alpha, frame, 1 - self.bg_alpha, 0)

        pil_image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
        rgb = (self.text_color[2], self.text_color[1], self.text_color[0])
        ImageDraw.Draw(pil_image).text((x, y), text, font=self.font, fill=rgb)
        return cv2.cvtColor(np.array(pil_image), cv2.COLOR_RGB2BGR)
