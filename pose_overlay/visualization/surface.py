"""Transparent 2D drawing surface layered over video frames."""

from __future__ import annotations

import math
from typing import List, Optional, Tuple

import cv2
import numpy as np

# Fixed-point bits for sub-pixel OpenCV drawing
_SHIFT = 4
_SCALE = 1 << _SHIFT


class Path:
    """
    Polyline path made of subpaths, built with canvas-style commands.

    Curves are flattened to line segments as they are added.
    """

    def __init__(self, curve_segments: int = 24):
        self.curve_segments = curve_segments
        self._subpaths: List[List[Tuple[float, float]]] = []
        self._closed: List[bool] = []

    def move_to(self, x: float, y: float) -> "Path":
        self._subpaths.append([(float(x), float(y))])
        self._closed.append(False)
        return self

    def line_to(self, x: float, y: float) -> "Path":
        if not self._subpaths:
            return self.move_to(x, y)
        self._subpaths[-1].append((float(x), float(y)))
        return self

    def bezier_curve_to(
        self,
        cp1x: float, cp1y: float,
        cp2x: float, cp2y: float,
        x: float, y: float,
    ) -> "Path":
        """Append a cubic Bezier from the current point."""
        if not self._subpaths:
            self.move_to(cp1x, cp1y)
        x0, y0 = self._subpaths[-1][-1]
        t = np.linspace(0.0, 1.0, self.curve_segments + 1)[1:]
        a = (1 - t) ** 3
        b = 3 * (1 - t) ** 2 * t
        c = 3 * (1 - t) * t ** 2
        d = t ** 3
        xs = a * x0 + b * cp1x + c * cp2x + d * x
        ys = a * y0 + b * cp1y + c * cp2y + d * y
        self._subpaths[-1].extend(zip(xs.tolist(), ys.tolist()))
        return self

    def close_path(self) -> "Path":
        if self._closed:
            self._closed[-1] = True
        return self

    def rect(self, x: float, y: float, w: float, h: float) -> "Path":
        self.move_to(x, y)
        self.line_to(x + w, y)
        self.line_to(x + w, y + h)
        self.line_to(x, y + h)
        return self.close_path()

    def subpaths(self) -> List[Tuple[np.ndarray, bool]]:
        """(points (N, 2) float64, closed) for every subpath."""
        return [
            (np.asarray(points, dtype=np.float64), closed)
            for points, closed in zip(self._subpaths, self._closed)
        ]

    def __len__(self) -> int:
        return len(self._subpaths)


class OverlaySurface:
    """
    RGBA drawing layer sized to the video's native resolution.

    Colour is BGR to match OpenCV frames. Every paint operation blends its
    coverage mask into the layer with the current opacity ("over" operator),
    so the layer can later be composited onto any frame.
    """

    def __init__(self, width: int, height: int):
        """
        Initialize an empty (fully transparent) surface.

        Args:
            width: Surface width in pixels
            height: Surface height in pixels
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid surface size: {width}x{height}")
        self.width = int(width)
        self.height = int(height)
        self.color = np.zeros((self.height, self.width, 3), dtype=np.float32)
        self.alpha = np.zeros((self.height, self.width), dtype=np.float32)

        self.fill_color: Tuple[int, int, int] = (0, 0, 0)
        self.stroke_color: Tuple[int, int, int] = (0, 0, 0)
        self.line_width = 1
        self.opacity = 1.0

    # ------------------------------------------------------------------
    # Style
    # ------------------------------------------------------------------

    def set_style(
        self,
        fill_color: Optional[Tuple[int, int, int]] = None,
        stroke_color: Optional[Tuple[int, int, int]] = None,
        line_width: Optional[int] = None,
        opacity: Optional[float] = None,
    ):
        if fill_color is not None:
            self.fill_color = tuple(int(c) for c in fill_color)
        if stroke_color is not None:
            self.stroke_color = tuple(int(c) for c in stroke_color)
        if line_width is not None:
            self.line_width = max(1, int(line_width))
        if opacity is not None:
            self.opacity = min(1.0, max(0.0, float(opacity)))

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def clear(self, region: Optional[Tuple[float, float, float, float]] = None):
        """
        Make the surface transparent.

        Args:
            region: Optional (x, y, w, h) rectangle; whole surface if None
        """
        if region is None:
            self.color.fill(0)
            self.alpha.fill(0)
            return
        roi = self._clip_roi(region[0], region[1], region[0] + region[2], region[1] + region[3])
        if roi is None:
            return
        x0, y0, x1, y1 = roi
        self.color[y0:y1, x0:x1] = 0
        self.alpha[y0:y1, x0:x1] = 0

    def fill_rect(self, x: float, y: float, w: float, h: float):
        if not (w > 0 and h > 0):
            return
        self.fill(Path().rect(x, y, w, h))

    def fill(self, path: Path):
        """Fill every subpath (subpaths are implicitly closed)."""
        polygons = [pts for pts, _ in path.subpaths() if len(pts) >= 3 and np.isfinite(pts).all()]
        if not polygons:
            return
        roi = self._roi_for(polygons, pad=1)
        if roi is None:
            return
        x0, y0, x1, y1 = roi
        mask = np.zeros((y1 - y0, x1 - x0), dtype=np.uint8)
        cv2.fillPoly(
            mask,
            [self._to_fixed(pts, x0, y0) for pts in polygons],
            255,
            cv2.LINE_AA,
            _SHIFT,
        )
        self._paint(roi, mask, self.fill_color)

    def stroke(self, path: Path):
        """Stroke every subpath with the current line width."""
        lines = [(pts, closed) for pts, closed in path.subpaths() if len(pts) >= 2 and np.isfinite(pts).all()]
        if not lines:
            return
        roi = self._roi_for([pts for pts, _ in lines], pad=self.line_width + 1)
        if roi is None:
            return
        x0, y0, x1, y1 = roi
        mask = np.zeros((y1 - y0, x1 - x0), dtype=np.uint8)
        for pts, closed in lines:
            cv2.polylines(
                mask,
                [self._to_fixed(pts, x0, y0)],
                closed,
                255,
                self.line_width,
                cv2.LINE_AA,
                _SHIFT,
            )
        self._paint(roi, mask, self.stroke_color)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def composite(self, frame: np.ndarray) -> np.ndarray:
        """
        Blend the surface over a BGR frame of the same size.

        Args:
            frame: BGR uint8 image

        Returns:
            New BGR uint8 image
        """
        if frame.shape[:2] != (self.height, self.width):
            frame = cv2.resize(frame, (self.width, self.height))
        a = self.alpha[..., None]
        out = frame.astype(np.float32) * (1 - a) + self.color * a
        return np.clip(out, 0, 255).astype(np.uint8)

    def painted_pixels(self) -> int:
        """Number of pixels with non-zero coverage."""
        return int(np.count_nonzero(self.alpha > 0))

    def is_blank(self) -> bool:
        return not self.alpha.any()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _clip_roi(self, left: float, top: float, right: float, bottom: float):
        x0 = max(0, int(math.floor(left)))
        y0 = max(0, int(math.floor(top)))
        x1 = min(self.width, int(math.ceil(right)))
        y1 = min(self.height, int(math.ceil(bottom)))
        if x1 <= x0 or y1 <= y0:
            return None
        return x0, y0, x1, y1

    def _roi_for(self, point_sets: List[np.ndarray], pad: int):
        allpts = np.vstack(point_sets)
        left, top = allpts.min(axis=0) - pad
        right, bottom = allpts.max(axis=0) + pad + 1
        return self._clip_roi(left, top, right, bottom)

    @staticmethod
    def _to_fixed(points: np.ndarray, x0: int, y0: int) -> np.ndarray:
        shifted = (points - (x0, y0)) * _SCALE
        # Clamp far-off coordinates; OpenCV clips against the mask itself.
        shifted = np.clip(np.round(shifted), -(1 << 26), 1 << 26)
        return shifted.astype(np.int32).reshape(-1, 1, 2)

    def _paint(self, roi, mask: np.ndarray, color: Tuple[int, int, int]):
        x0, y0, x1, y1 = roi
        src = mask.astype(np.float32) * (self.opacity / 255.0)
        if not src.any():
            return
        dst_a = self.alpha[y0:y1, x0:x1]
        dst_c = self.color[y0:y1, x0:x1]

        out_a = src + dst_a * (1 - src)
        safe = np.where(out_a > 0, out_a, 1.0)[..., None]
        src_c = np.asarray(color, dtype=np.float32)
        out_c = (src_c * src[..., None] + dst_c * (dst_a * (1 - src))[..., None]) / safe

        self.alpha[y0:y1, x0:x1] = out_a
        self.color[y0:y1, x0:x1] = out_c
