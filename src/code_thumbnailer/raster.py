"""Draw styled code and the language caption into a single bitmap."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Final

import numpy as np
from PIL import Image, ImageDraw

from .errors import RasterizeError
from .fonts import FontType, load_font
from .highlighting import Color, FontSpec, StyledDocument
from .layout import LayoutResult, Rect, tag_text

__all__ = [
    "ELLIPSIS",
    "RasterOutput",
    "Rasterizer",
    "TAG_COLOR",
    "composite_layers",
    "truncate_middle",
]

logger = logging.getLogger(__name__)

WHITE: Final[Color] = (255, 255, 255, 255)
TRANSPARENT: Final[Color] = (0, 0, 0, 0)

TAG_COLOR: Final[Color] = (0, 84, 135, 255)
"""Fixed colour of the caption text."""

ELLIPSIS: Final[str] = "…"

TEXT_PADDING: Final[float] = 5.0
LINE_SPACING: Final[float] = 1.25
TAB_SIZE: Final[int] = 4

# C0 control characters other than tab are not drawn.
_CONTROL_CHARACTERS: Final[dict[int, None]] = {code: None for code in range(32) if code != 9}


@dataclass(slots=True)
class RasterOutput:
    """Final bitmap together with the caption actually drawn on it."""

    image: Image.Image
    caption: str


class Rasterizer:
    """Render a styled document and its caption into one RGBA image."""

    def rasterize(
        self,
        document: StyledDocument,
        layout: LayoutResult,
        label: str,
        *,
        tag_font_name: str,
        use_light_background: bool = True,
    ) -> RasterOutput:
        """Return the composited bitmap at ``layout.output_size``.

        Raises :class:`RasterizeError` instead of returning a partly drawn
        image when a surface cannot be allocated or there is nothing to draw.
        """

        if document.is_empty:
            raise RasterizeError("Styled document is empty")

        try:
            output_width, output_height = layout.output_size
        except (ValueError, OverflowError) as exc:
            raise RasterizeError(f"Invalid canvas size {layout.canvas_size!r}") from exc
        if output_width < 1 or output_height < 1:
            raise RasterizeError(f"Invalid canvas size {layout.canvas_size!r}")

        background = WHITE if use_light_background else document.background
        layers: list[Image.Image] = []
        try:
            code_layer = self._draw_code(document, layout.code_region, background)
            layers.append(code_layer)
            tag_layer, caption = self._draw_tag(
                tag_text(label),
                layout.tag_region,
                tag_font_name,
                layout.resolved_tag_font_size,
            )
            layers.append(tag_layer)

            base_width, base_height = (int(round(value)) for value in layout.base_size)
            composite = composite_layers(
                (base_width, base_height),
                [
                    (code_layer, layout.code_region.pixel_origin),
                    (tag_layer, layout.tag_region.pixel_origin),
                ],
            )
            if composite.size != (output_width, output_height):
                base = composite
                try:
                    composite = base.resize((output_width, output_height), Image.Resampling.LANCZOS)
                finally:
                    base.close()
        except (ValueError, MemoryError, OSError) as exc:
            raise RasterizeError(f"Unable to draw thumbnail: {exc}") from exc
        finally:
            for layer in layers:
                layer.close()

        return RasterOutput(composite, caption)

    # ------------------------------------------------------------------
    # Drawing passes
    # ------------------------------------------------------------------
    def _draw_code(self, document: StyledDocument, region: Rect, background: Color) -> Image.Image:
        width, height = _surface_size(region)
        image = Image.new("RGBA", (width, height), background)
        draw = ImageDraw.Draw(image, "RGBA")

        fonts: dict[FontSpec, FontType] = {}
        line_height = max(1.0, max(run.font.size for run in document) * LINE_SPACING)
        x = TEXT_PADDING
        y = TEXT_PADDING
        column = 0

        for run in document:
            font = fonts.get(run.font)
            if font is None:
                font = fonts[run.font] = load_font(
                    run.font.family,
                    run.font.size,
                    bold=run.font.bold,
                    italic=run.font.italic,
                )

            for index, part in enumerate(run.text.split("\n")):
                if index:
                    x = TEXT_PADDING
                    y += line_height
                    column = 0
                if y >= height:
                    return image

                segment, column = _expand_tabs(part.translate(_CONTROL_CHARACTERS), column)
                if not segment or x >= width:
                    continue
                draw.text((x, y), segment, fill=run.color, font=font)
                x += font.getlength(segment)

        return image

    def _draw_tag(self, text: str, region: Rect, family: str, size: float) -> tuple[Image.Image, str]:
        width, height = _surface_size(region)
        image = Image.new("RGBA", (width, height), TRANSPARENT)
        draw = ImageDraw.Draw(image, "RGBA")
        font = load_font(family, size)

        caption = truncate_middle(text, float(width), font.getlength)
        if caption != text:
            logger.debug("Caption %r truncated to %r", text, caption)

        left, top, right, bottom = draw.textbbox((0, 0), caption, font=font)
        x = (width - (right - left)) / 2.0 - left
        y = (height - (bottom - top)) / 2.0 - top
        draw.text((x, y), caption, fill=TAG_COLOR, font=font)
        return image, caption


def truncate_middle(text: str, max_width: float, measure: Callable[[str], float]) -> str:
    """Return *text* shortened with an ellipsis in the middle to fit *max_width*."""

    if measure(text) <= max_width:
        return text

    def candidate(kept: int) -> str:
        head = (kept + 1) // 2
        tail = kept // 2
        return text[:head] + ELLIPSIS + (text[len(text) - tail :] if tail else "")

    low, high = 0, len(text) - 1
    best = candidate(0)
    while low <= high:
        middle = (low + high) // 2
        option = candidate(middle)
        if measure(option) <= max_width:
            best = option
            low = middle + 1
        else:
            high = middle - 1
    return best


def composite_layers(
    size: tuple[int, int],
    layers: Sequence[tuple[Image.Image, tuple[int, int]]],
) -> Image.Image:
    """Return a transparent canvas of *size* with *layers* drawn over it in order."""

    width, height = size
    if width < 1 or height < 1:
        raise ValueError(f"Invalid composite size {size!r}")

    canvas = np.zeros((height, width, 4), dtype=np.float32)
    for layer, (left, top) in layers:
        pixels = np.asarray(layer.convert("RGBA"), dtype=np.float32) / 255.0

        x0, y0 = max(0, left), max(0, top)
        x1 = min(width, left + layer.width)
        y1 = min(height, top + layer.height)
        if x1 <= x0 or y1 <= y0:
            continue

        source = pixels[y0 - top : y1 - top, x0 - left : x1 - left]
        target = canvas[y0:y1, x0:x1]
        source_alpha = source[..., 3:4]
        target_alpha = target[..., 3:4] * (1.0 - source_alpha)
        alpha = source_alpha + target_alpha
        with np.errstate(divide="ignore", invalid="ignore"):
            rgb = (source[..., :3] * source_alpha + target[..., :3] * target_alpha) / alpha
        rgb = np.where(alpha > 0, rgb, 0.0)

        canvas[y0:y1, x0:x1, :3] = rgb
        canvas[y0:y1, x0:x1, 3:4] = alpha

    pixels = np.clip(np.rint(canvas * 255.0), 0, 255).astype(np.uint8)
    return Image.fromarray(pixels)


def _surface_size(region: Rect) -> tuple[int, int]:
    width, height = region.pixel_size
    if width < 1 or height < 1:
        raise RasterizeError(f"Cannot allocate a {width}x{height} drawing surface")
    return width, height


def _expand_tabs(segment: str, column: int) -> tuple[str, int]:
    if "\t" not in segment:
        return segment, column + len(segment)

    pieces: list[str] = []
    for character in segment:
        if character == "\t":
            spaces = TAB_SIZE - column % TAB_SIZE
            pieces.append(" " * spaces)
            column += spaces
        else:
            pieces.append(character)
            column += 1
    return "".join(pieces), column
