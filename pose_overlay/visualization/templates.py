"""Parametric overlay templates and the randomized texture pass."""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable, Dict, Optional, Tuple

import numpy as np

from ..config.settings import StyleConfig
from ..core.selection import Template
from ..core.types import AnchorRegion
from .surface import OverlaySurface, Path


class PaintMode(Enum):
    FILL = "fill"
    STROKE = "stroke"


# Shape builders take the region centre (x, y) and size (w, h).
ShapeBuilder = Callable[[float, float, float, float], Tuple[Path, PaintMode]]


def _centered_bar(fraction: float) -> ShapeBuilder:
    def build(x, y, w, h):
        bar_w = w * fraction
        return Path().rect(x - bar_w / 2, y - h / 2, bar_w, h), PaintMode.FILL
    return build


def _triangle(x, y, w, h):
    path = (
        Path()
        .move_to(x, y - h / 2)
        .line_to(x - w / 2, y + h / 2)
        .line_to(x + w / 2, y + h / 2)
        .close_path()
    )
    return path, PaintMode.FILL


def _heart(x, y, w, h):
    dip = (x, y - h / 4)
    tip = (x, y + h / 2)
    path = Path().move_to(*dip)
    # Left lobe down to the tip, then its mirror image back up to the dip.
    path.bezier_curve_to(x - w / 2, y - h / 2, x - w / 2, y + h / 8, *tip)
    path.bezier_curve_to(x + w / 2, y + h / 8, x + w / 2, y - h / 2, *dip)
    return path.close_path(), PaintMode.FILL


def _lightning(x, y, w, h):
    # Open zig-zag from top-left to bottom-right, stroked only.
    path = (
        Path()
        .move_to(x - w / 2, y - h / 2)
        .line_to(x, y)
        .line_to(x - w / 4, y + h / 4)
        .line_to(x + w / 2, y + h / 2)
        .line_to(x, y + h / 4)
        .line_to(x + w / 4, y)
    )
    return path, PaintMode.STROKE


def _star(x, y, w, h, points: int = 5):
    outer = w / 2
    inner = outer / 2
    path = Path()
    for i in range(points * 2):
        radius = outer if i % 2 == 0 else inner
        angle = i * math.pi / points - math.pi / 2
        px = x + radius * math.cos(angle)
        py = y + radius * math.sin(angle)
        if i == 0:
            path.move_to(px, py)
        else:
            path.line_to(px, py)
    return path.close_path(), PaintMode.FILL


SHAPES: Dict[Template, ShapeBuilder] = {
    Template.FULL: _centered_bar(1.0),
    Template.BRAZILIAN: _centered_bar(0.25),
    Template.LANDING_STRIP: _centered_bar(0.5),
    Template.TRIANGLE: _triangle,
    Template.HEART: _heart,
    Template.LIGHTNING: _lightning,
    Template.STAR: _star,
}


def _drawable(region: AnchorRegion) -> bool:
    values = (region.center_x, region.center_y, region.width, region.height)
    return all(math.isfinite(v) for v in values) and region.width > 0 and region.height > 0


class TemplateRenderer:
    """Draw the selected template plus texture into an anchor region."""

    def __init__(
        self,
        style: StyleConfig = StyleConfig(),
        rng: Optional[np.random.Generator] = None,
    ):
        """
        Initialize template renderer.

        Args:
            style: Colours, line widths and texture parameters
            rng: Random source for the texture pass (fresh unseeded if None)
        """
        self.style = style
        self.rng = rng if rng is not None else np.random.default_rng()

    def shape(self, template: Template, region: AnchorRegion) -> Optional[Tuple[Path, PaintMode]]:
        """Build the template outline, or None for NONE."""
        builder = SHAPES.get(template)
        if builder is None:
            return None
        return builder(region.center_x, region.center_y, region.width, region.height)

    def texture(self, region: AnchorRegion) -> Path:
        """Short random strokes starting anywhere inside the region."""
        n = self.style.texture_strokes
        jitter = self.style.texture_jitter
        left, top, right, bottom = region.bounds

        starts = self.rng.uniform((left, top), (right, bottom), size=(n, 2))
        ends = starts + self.rng.uniform(-jitter, jitter, size=(n, 2))

        path = Path()
        for (sx, sy), (ex, ey) in zip(starts, ends):
            path.move_to(sx, sy).line_to(ex, ey)
        return path

    def render(self, surface: OverlaySurface, region: AnchorRegion, template: Template) -> bool:
        """
        Draw onto the surface. The surface is not cleared first.

        Args:
            surface: Target surface
            region: Anchor region
            template: Active template

        Returns:
            True if anything was drawn
        """
        if template is Template.NONE or not _drawable(region):
            return False
        built = self.shape(template, region)
        if built is None:
            return False
        path, mode = built

        style = self.style
        surface.set_style(
            fill_color=style.color,
            stroke_color=style.color,
            line_width=style.line_width,
            opacity=1.0,
        )
        if mode is PaintMode.FILL:
            surface.fill(path)
        else:
            surface.stroke(path)

        surface.set_style(line_width=style.texture_line_width, opacity=style.texture_alpha)
        surface.stroke(self.texture(region))
        return True
