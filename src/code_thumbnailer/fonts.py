"""Font lookup and text measurement backed by Pillow."""

from __future__ import annotations

import functools
import logging
from pathlib import Path

from PIL import ImageFont
from pygments.formatters.img import FontManager, FontNotFound

__all__ = ["FontType", "load_font", "measure_text", "resolve_font_path"]

logger = logging.getLogger(__name__)

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont

_FONT_SUFFIXES = {".ttf", ".otf", ".ttc"}

# Nominal size used while resolving a family to a file; the face is reopened
# at the requested size afterwards.
_LOOKUP_SIZE = 12


def _candidate_files(family: str, bold: bool, italic: bool) -> list[str]:
    if bold and italic:
        styles = ["-BoldItalic", "-BoldOblique", "-Bold"]
    elif bold:
        styles = ["-Bold"]
    elif italic:
        styles = ["-Italic", "-Oblique"]
    else:
        styles = []
    styles += ["", "-Regular"]

    stems = [family]
    compact = "".join(family.split())
    if compact != family:
        stems.append(compact)
    return [f"{stem}{style}.ttf" for stem in stems for style in styles]


@functools.lru_cache(maxsize=64)
def resolve_font_path(family: str, bold: bool = False, italic: bool = False) -> str | None:
    """Return the font file for *family* in the requested style, if any.

    Family names such as ``"DejaVu Sans Mono"`` go through the system font
    registry via Pygments' :class:`~pygments.formatters.img.FontManager`.
    When the registry is unavailable or does not know the family, the usual
    ``FamilyName-Bold.ttf`` file names are tried on Pillow's font path.
    """

    if Path(family).suffix.lower() in _FONT_SUFFIXES:
        return family

    try:
        face = FontManager(family, _LOOKUP_SIZE).get_font(bold, italic)
    except (FontNotFound, OSError) as exc:
        logger.debug("Font registry lookup for %r failed: %s", family, exc)
    else:
        path = getattr(face, "path", None)
        if isinstance(path, str) and path:
            return path

    for name in _candidate_files(family, bold, italic):
        try:
            face = ImageFont.truetype(name, _LOOKUP_SIZE)
        except OSError:
            continue
        return face.path if isinstance(face.path, str) else name
    return None


def load_font(family: str, size: float, *, bold: bool = False, italic: bool = False) -> FontType:
    """Return a font for *family* at *size* pixels.

    Styled variants fall back to the regular face, and a family that cannot
    be found at all falls back to Pillow's bundled default font.
    """

    size = max(1.0, float(size))
    path = resolve_font_path(family, bold, italic)
    if path is not None:
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            logger.debug("Unable to open font file %s", path)

    logger.debug("Font %r not found, using Pillow's default font", family)
    return ImageFont.load_default(size=size)


def measure_text(text: str, family: str, size: float) -> float:
    """Return the advance width of *text* rendered in *family* at *size*."""

    return float(load_font(family, size).getlength(text))
