"""Turn raw source bytes into the text excerpt that gets rendered."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Final

from .errors import INVALID_ENCODING, UNREADABLE, DecodeError

__all__ = [
    "MAX_EXCERPT_CHARS",
    "MAX_EXCERPT_LINES",
    "decode_source",
    "excerpt",
    "read_source",
]

logger = logging.getLogger(__name__)

MAX_EXCERPT_LINES: Final[int] = 120
"""Upper bound on the number of source lines passed to the highlighter."""

MAX_EXCERPT_CHARS: Final[int] = 20_000
"""Upper bound on the number of characters passed to the highlighter."""


def decode_source(data: bytes | bytearray | memoryview) -> str:
    """Return *data* decoded as strict UTF-8.

    A byte order mark is kept as a character so valid input round-trips
    exactly. Invalid sequences raise :class:`DecodeError`.
    """

    try:
        return bytes(data).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(
            f"Source is not valid UTF-8 (byte {exc.start}: {exc.reason})",
            reason=INVALID_ENCODING,
            offset=exc.start,
        ) from exc


def read_source(path: Path | str) -> bytes:
    """Return the raw contents of *path*."""

    source_path = Path(path)
    try:
        with source_path.open("rb") as handle:
            return handle.read()
    except OSError as exc:
        raise DecodeError(f"Unable to read {source_path!s}: {exc}", reason=UNREADABLE) from exc


def excerpt(text: str, *, max_lines: int = MAX_EXCERPT_LINES, max_chars: int = MAX_EXCERPT_CHARS) -> str:
    """Return the leading part of *text* that can appear on a thumbnail."""

    if max_lines < 1 or max_chars < 1:
        raise ValueError("Excerpt bounds must be positive")

    head = text[:max_chars]
    lines = head.splitlines(keepends=True)
    if len(lines) > max_lines:
        head = "".join(lines[:max_lines])

    if len(head) < len(text):
        logger.debug("Trimmed source from %d to %d characters", len(text), len(head))
    return head
