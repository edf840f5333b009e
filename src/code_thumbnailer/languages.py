"""Map file paths to the language names shown on thumbnails."""

from __future__ import annotations

from pathlib import PurePath
from typing import Final, Protocol, runtime_checkable

from pygments.lexers import find_lexer_class_for_filename
from pygments.lexers.special import TextLexer

__all__ = [
    "FALLBACK_DISPLAY_LABEL",
    "FALLBACK_SHORT_LABEL",
    "LanguageDetector",
    "PygmentsLanguageDetector",
]

FALLBACK_DISPLAY_LABEL: Final[str] = "Text"
"""Display label used when no language matches a path."""

FALLBACK_SHORT_LABEL: Final[str] = "text"
"""Short label used when no language matches a path."""


@runtime_checkable
class LanguageDetector(Protocol):
    """Protocol implemented by path-based language detectors."""

    def detect(self, path: str, want_display_form: bool) -> str:
        """Return the language label for *path*; never fails or returns ``""``."""


class PygmentsLanguageDetector:
    """Detect languages from file names using the Pygments lexer registry."""

    def detect(self, path: str, want_display_form: bool) -> str:
        lexer_class = self._lexer_class_for(path)
        if lexer_class is None or lexer_class is TextLexer:
            return FALLBACK_DISPLAY_LABEL if want_display_form else FALLBACK_SHORT_LABEL

        if want_display_form:
            return lexer_class.name or FALLBACK_DISPLAY_LABEL
        aliases = lexer_class.aliases or ()
        return aliases[0] if aliases else FALLBACK_SHORT_LABEL

    def _lexer_class_for(self, path: str) -> type | None:
        name = PurePath(str(path)).name
        if not name:
            return None

        lexer_class = find_lexer_class_for_filename(name)
        if lexer_class is None and name != name.lower():
            lexer_class = find_lexer_class_for_filename(name.lower())
        return lexer_class
