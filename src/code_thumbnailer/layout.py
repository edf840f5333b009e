"""Region layout and caption font fitting for code thumbnails.

All drawing happens on a fixed base canvas of ``BASE_WIDTH`` x
``BASE_HEIGHT`` units which is scaled to the host's canvas at the very end,
so the regions and font sizes here do not depend on the requested size.
The code region covers the whole drawable area and the tag region is a
strip along its lower edge, drawn on top of the code.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from .config import ThumbnailConfig
from .fonts import measure_text

__all__ = [
    "ASPECT_RATIO",
    "BASE_HEIGHT",
    "BASE_WIDTH",
    "LayoutEngine",
    "LayoutResult",
    "Rect",
    "TAG_FIT_MARGIN",
    "TAG_HEIGHT",
    "TextMeasurer",
    "canvas_size",
    "fit_tag_font_size",
    "tag_text",
]

logger = logging.getLogger(__name__)

ASPECT_RATIO: Final[float] = 1.4
"""Canvas width divided by canvas height."""

BASE_HEIGHT: Final[float] = 640.0
BASE_WIDTH: Final[float] = 896.0

ORIGIN_X: Final[float] = 0.0
ORIGIN_Y: Final[float] = 0.0
CODE_WIDTH: Final[float] = BASE_WIDTH
CODE_HEIGHT: Final[float] = BASE_HEIGHT

TAG_HEIGHT: Final[float] = 128.0
"""Height of the caption strip on the base canvas."""

TAG_FIT_MARGIN: Final[float] = 20.0
"""Horizontal room kept free when fitting the caption font size."""

TextMeasurer = Callable[[str, str, float], float]
"""Callable returning the width of ``text`` in font ``family`` at ``size``."""


@dataclass(frozen=True, slots=True)
class Rect:
    """Axis-aligned rectangle with a top-left origin."""

    x: float
    y: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def pixel_size(self) -> tuple[int, int]:
        return int(round(self.width)), int(round(self.height))

    @property
    def pixel_origin(self) -> tuple[int, int]:
        return int(round(self.x)), int(round(self.y))


@dataclass(frozen=True, slots=True)
class LayoutResult:
    """Regions and caption font size computed for one request."""

    canvas_size: tuple[float, float]
    base_size: tuple[float, float]
    code_region: Rect
    tag_region: Rect
    resolved_tag_font_size: float
    degraded: bool = False

    @property
    def output_size(self) -> tuple[int, int]:
        width, height = self.canvas_size
        return int(round(width)), int(round(height))


def canvas_size(height: float) -> tuple[float, float]:
    """Return the canvas dimensions for a requested *height*."""

    height = float(height)
    return ASPECT_RATIO * height, height


def tag_text(label: str) -> str:
    """Return the caption text drawn for a language *label*."""

    return label.upper()


def fit_tag_font_size(
    text: str,
    *,
    nominal: float,
    minimum: float,
    available_width: float,
    measure: Callable[[str, float], float],
) -> tuple[float, bool]:
    """Return the caption font size and whether it was clamped to *minimum*.

    The caption is measured once at *nominal*. When it is wider than
    *available_width* the size is scaled by the ratio of the two widths and
    then clamped to *minimum*; any remaining overflow is left to truncation.
    """

    size = float(nominal)
    width = measure(text, size)
    if width > available_width:
        size *= max(0.0, available_width) / width
        if size < minimum:
            return float(minimum), True
    return size, False


class LayoutEngine:
    """Compute drawing regions for the code body and the caption tag."""

    def __init__(self, measure: TextMeasurer | None = None) -> None:
        self._measure = measure or measure_text

    def compute(
        self,
        size: tuple[float, float],
        config: ThumbnailConfig,
        label: str,
    ) -> LayoutResult:
        """Return the layout for a canvas of *size* captioned with *label*."""

        code_region = Rect(ORIGIN_X, ORIGIN_Y, CODE_WIDTH, CODE_HEIGHT)
        tag_region = Rect(
            code_region.x,
            code_region.bottom - TAG_HEIGHT,
            code_region.width,
            TAG_HEIGHT,
        )

        family = config.tag_font_name
        font_size, degraded = fit_tag_font_size(
            tag_text(label),
            nominal=config.tag_font_size,
            minimum=config.tag_min_font_size,
            available_width=code_region.width - TAG_FIT_MARGIN,
            measure=lambda text, points: self._measure(text, family, points),
        )
        if degraded:
            logger.debug("Caption %r clamped to minimum font size %.1f", label, font_size)

        return LayoutResult(
            canvas_size=(float(size[0]), float(size[1])),
            base_size=(BASE_WIDTH, BASE_HEIGHT),
            code_region=code_region,
            tag_region=tag_region,
            resolved_tag_font_size=font_size,
            degraded=degraded,
        )
