"""Request-scoped orchestration of the thumbnail stages."""

from __future__ import annotations

import enum
import io
import logging
from dataclasses import dataclass, field

from PIL import Image

from .config import ThumbnailConfig
from .decoding import decode_source, excerpt, read_source
from .errors import DecodeError, RasterizeError, ThumbnailGenerationError
from .highlighting import (
    LIGHT_FALLBACK_THEME,
    Highlighter,
    PygmentsHighlighter,
    is_dark_theme,
)
from .languages import LanguageDetector, PygmentsLanguageDetector
from .layout import LayoutEngine, LayoutResult, canvas_size
from .raster import Rasterizer

__all__ = [
    "PipelineStage",
    "RenderRequest",
    "Thumbnail",
    "ThumbnailPipeline",
]

logger = logging.getLogger(__name__)


class PipelineStage(enum.Enum):
    """States a render request moves through."""

    START = "start"
    DECODE = "decode"
    DETECT_LANGUAGE = "detect_language"
    HIGHLIGHT = "highlight"
    LAYOUT = "layout"
    RASTERIZE = "rasterize"
    DONE = "done"
    ABORTED = "aborted"


@dataclass(frozen=True, slots=True)
class RenderRequest:
    """Describe one thumbnail request made by the host."""

    file_path: str
    maximum_size: tuple[float, float]
    source_bytes: bytes | None = field(default=None, repr=False)

    @property
    def canvas_size(self) -> tuple[float, float]:
        """Canvas dimensions derived from the requested maximum height."""

        return canvas_size(self.maximum_size[1])


@dataclass(slots=True)
class Thumbnail:
    """A rendered thumbnail; the caller owns :attr:`image`."""

    image: Image.Image
    language: str
    display_language: str
    caption: str
    layout: LayoutResult

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size

    def to_png(self) -> bytes:
        buffer = io.BytesIO()
        self.image.save(buffer, format="PNG")
        return buffer.getvalue()


class ThumbnailPipeline:
    """Turn a :class:`RenderRequest` into a :class:`Thumbnail`.

    The pipeline holds only the read-only configuration snapshot and
    stateless collaborators, so one instance can serve concurrent requests
    from any number of threads.
    """

    def __init__(
        self,
        config: ThumbnailConfig,
        *,
        detector: LanguageDetector | None = None,
        highlighter: Highlighter | None = None,
        layout_engine: LayoutEngine | None = None,
        rasterizer: Rasterizer | None = None,
    ) -> None:
        self._config = config
        self._detector = detector or PygmentsLanguageDetector()
        self._highlighter = highlighter or PygmentsHighlighter()
        self._layout_engine = layout_engine or LayoutEngine()
        self._rasterizer = rasterizer or Rasterizer()

    @property
    def config(self) -> ThumbnailConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def render(self, request: RenderRequest) -> Thumbnail:
        """Return the thumbnail for *request*.

        Raises :class:`DecodeError` or :class:`RasterizeError` when the
        request is aborted; no partial image is ever returned.
        """

        config = self._config
        stage = PipelineStage.START
        try:
            stage = self._advance(request, PipelineStage.DECODE)
            data = request.source_bytes
            if data is None:
                data = read_source(request.file_path)
            text = excerpt(decode_source(data))

            stage = self._advance(request, PipelineStage.DETECT_LANGUAGE)
            language = self._detector.detect(request.file_path, False)
            display_language = self._detector.detect(request.file_path, True)

            stage = self._advance(request, PipelineStage.HIGHLIGHT)
            document = self._highlighter.highlight(
                text,
                language,
                self._effective_theme(),
                config.font_name,
                config.base_font_size,
            )

            stage = self._advance(request, PipelineStage.LAYOUT)
            layout = self._layout_engine.compute(request.canvas_size, config, display_language)

            stage = self._advance(request, PipelineStage.RASTERIZE)
            output = self._rasterizer.rasterize(
                document,
                layout,
                display_language,
                tag_font_name=config.tag_font_name,
                use_light_background=config.use_light_background,
            )
        except (DecodeError, RasterizeError) as exc:
            logger.info("Thumbnail for %s aborted during %s: %s", request.file_path, stage.value, exc)
            self._advance(request, PipelineStage.ABORTED)
            raise

        self._advance(request, PipelineStage.DONE)
        return Thumbnail(
            image=output.image,
            language=language,
            display_language=display_language,
            caption=output.caption,
            layout=layout,
        )

    def try_render(self, request: RenderRequest) -> Thumbnail | None:
        """Return the thumbnail for *request* or ``None`` when none is available."""

        try:
            return self.render(request)
        except ThumbnailGenerationError:
            return None

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _advance(self, request: RenderRequest, stage: PipelineStage) -> PipelineStage:
        logger.debug("%s: %s", request.file_path, stage.value)
        return stage

    def _effective_theme(self) -> str:
        theme = self._config.theme_name
        if self._config.use_light_background and is_dark_theme(theme):
            return LIGHT_FALLBACK_THEME
        return theme
