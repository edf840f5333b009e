"""Exceptions raised while producing code thumbnails."""

from __future__ import annotations

from typing import Final

__all__ = [
    "INVALID_ENCODING",
    "UNREADABLE",
    "DecodeError",
    "RasterizeError",
    "ThumbnailGenerationError",
]

INVALID_ENCODING: Final[str] = "InvalidEncoding"
"""Reason recorded when source bytes are not valid UTF-8."""

UNREADABLE: Final[str] = "Unreadable"
"""Reason recorded when the source file cannot be read."""


class ThumbnailGenerationError(RuntimeError):
    """Raised when a thumbnail cannot be produced for a source file."""


class DecodeError(ThumbnailGenerationError):
    """Raised when source bytes cannot be turned into text."""

    def __init__(self, message: str, *, reason: str = INVALID_ENCODING, offset: int | None = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.offset = offset


class RasterizeError(ThumbnailGenerationError):
    """Raised when a drawing surface cannot be allocated or drawn into."""
