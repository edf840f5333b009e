"""Syntax highlighting into styled runs using Pygments."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Final, Protocol, runtime_checkable

from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.style import StyleMeta
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

__all__ = [
    "Color",
    "DEFAULT_DARK_FOREGROUND",
    "DEFAULT_LIGHT_FOREGROUND",
    "FALLBACK_THEME",
    "FontSpec",
    "Highlighter",
    "LIGHT_FALLBACK_THEME",
    "PygmentsHighlighter",
    "StyledDocument",
    "StyledRun",
    "is_dark_theme",
    "parse_hex_color",
    "theme_background",
]

logger = logging.getLogger(__name__)

Color = tuple[int, int, int, int]

WHITE: Final[Color] = (255, 255, 255, 255)

FALLBACK_THEME: Final[str] = "default"
"""Theme used when a configured theme name is unknown."""

LIGHT_FALLBACK_THEME: Final[str] = "default"
"""Theme substituted for dark themes when a light background is requested."""

DEFAULT_DARK_FOREGROUND: Final[Color] = (0, 0, 0, 255)
"""Text colour for unstyled tokens on light backgrounds."""

DEFAULT_LIGHT_FOREGROUND: Final[Color] = (235, 235, 235, 255)
"""Text colour for unstyled tokens on dark backgrounds."""


@dataclass(frozen=True, slots=True)
class FontSpec:
    """Font attributes attached to a styled run."""

    family: str
    size: float
    bold: bool = False
    italic: bool = False


@dataclass(frozen=True, slots=True)
class StyledRun:
    """A contiguous slice of source text with its colour and font."""

    text: str
    color: Color
    font: FontSpec


@dataclass(frozen=True, slots=True)
class StyledDocument:
    """Ordered styled runs that together cover a body of text exactly once."""

    runs: tuple[StyledRun, ...]
    background: Color = WHITE

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def is_empty(self) -> bool:
        return not any(run.text for run in self.runs)

    def __iter__(self) -> Iterator[StyledRun]:
        return iter(self.runs)


@runtime_checkable
class Highlighter(Protocol):
    """Protocol implemented by syntax highlighters."""

    def highlight(
        self,
        text: str,
        language: str,
        theme_name: str,
        font_name: str,
        font_size: float,
    ) -> StyledDocument:
        """Return a :class:`StyledDocument` covering *text*; never fails."""


class PygmentsHighlighter:
    """Produce styled runs from Pygments tokens and styles."""

    def highlight(
        self,
        text: str,
        language: str,
        theme_name: str,
        font_name: str,
        font_size: float,
    ) -> StyledDocument:
        style = _resolve_style(theme_name)
        background = theme_background(theme_name)
        default_color = DEFAULT_LIGHT_FOREGROUND if _is_dark(background) else DEFAULT_DARK_FOREGROUND
        plain = FontSpec(font_name, float(font_size))
        lexer = _resolve_lexer(language)

        styles: dict[object, tuple[Color, FontSpec]] = {}

        def style_for(token_type: object) -> tuple[Color, FontSpec]:
            resolved = styles.get(token_type)
            if resolved is None:
                attributes = style.style_for_token(token_type)
                color = parse_hex_color(attributes.get("color"), default_color)
                font = FontSpec(
                    font_name,
                    float(font_size),
                    bold=bool(attributes.get("bold")),
                    italic=bool(attributes.get("italic")),
                )
                resolved = styles[token_type] = (color, font)
            return resolved

        runs: list[StyledRun] = []

        def append(chunk: str, color: Color, font: FontSpec) -> None:
            if not chunk:
                return
            if runs and runs[-1].color == color and runs[-1].font == font:
                runs[-1] = StyledRun(runs[-1].text + chunk, color, font)
            else:
                runs.append(StyledRun(chunk, color, font))

        position = 0
        try:
            for index, token_type, value in lexer.get_tokens_unprocessed(text):
                end = min(len(text), index + len(value))
                if index > position:
                    append(text[position:index], default_color, plain)
                    position = index
                if end <= position:
                    continue
                color, font = style_for(token_type)
                append(text[position:end], color, font)
                position = end
        except Exception:
            logger.exception("Lexer %s failed; rendering the remainder unstyled", lexer.name)

        if position < len(text):
            append(text[position:], default_color, plain)

        return StyledDocument(tuple(runs), background)


def parse_hex_color(value: object, default: Color) -> Color:
    """Return an RGBA tuple for a ``#rrggbb``/``rgb`` style string."""

    if not isinstance(value, str):
        return default
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(component * 2 for component in text)
    if len(text) not in {6, 8}:
        return default
    try:
        r = int(text[0:2], 16)
        g = int(text[2:4], 16)
        b = int(text[4:6], 16)
        a = int(text[6:8], 16) if len(text) == 8 else 255
    except ValueError:
        return default
    return (r, g, b, a)


def theme_background(theme_name: str) -> Color:
    """Return the background colour declared by *theme_name*."""

    return parse_hex_color(_resolve_style(theme_name).background_color, WHITE)


def is_dark_theme(theme_name: str) -> bool:
    """Return ``True`` when *theme_name* draws on a dark background."""

    return _is_dark(theme_background(theme_name))


def _is_dark(color: Color) -> bool:
    r, g, b = (component / 255.0 for component in color[:3])
    return 0.2126 * r + 0.7152 * g + 0.0722 * b < 0.5


def _resolve_style(theme_name: str) -> StyleMeta:
    try:
        return get_style_by_name(theme_name)
    except ClassNotFound:
        logger.debug("Unknown theme %r, using %r", theme_name, FALLBACK_THEME)
        return get_style_by_name(FALLBACK_THEME)


def _resolve_lexer(language: str) -> Lexer:
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        logger.debug("No lexer for %r, highlighting as plain text", language)
        return TextLexer()
