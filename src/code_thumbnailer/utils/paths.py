"""Path handling for thumbnail sources, outputs and the settings override."""

from __future__ import annotations

from collections.abc import Collection
from os import PathLike
from pathlib import Path

__all__ = ["expand_path", "optional_path", "source_file", "thumbnail_target"]

THUMBNAIL_SUFFIX = ".png"


def expand_path(value: str | PathLike[str], *, empty_error: str = "Path value cannot be empty.") -> Path:
    """Return *value* as an absolute path with ``~`` expanded."""

    text = str(value).strip()
    if not text:
        raise ValueError(empty_error)
    return Path(text).expanduser().resolve()


def optional_path(value: str | None) -> Path | None:
    """Return an absolute path for *value*, or ``None`` when it is unset or blank."""

    if value is None or not value.strip():
        return None
    return expand_path(value)


def source_file(value: str | PathLike[str]) -> Path:
    """Return the absolute path of an existing regular file.

    Raises :class:`FileNotFoundError` when nothing exists at *value* and
    :class:`IsADirectoryError` when it names a directory.
    """

    path = expand_path(value, empty_error="Source paths cannot be empty.")
    if not path.exists():
        raise FileNotFoundError(f"No such file: {path}")
    if path.is_dir():
        raise IsADirectoryError(f"Is a directory: {path}")
    return path


def thumbnail_target(source: Path, output_dir: Path, taken: Collection[Path]) -> Path:
    """Return the PNG path for *source* inside *output_dir* that is not in *taken*.

    The first choice is ``<file name>.png``. Sources sharing a file name are
    told apart by prefixing their parent directory names (``pkg_util.py.png``),
    and a counter is appended as a last resort.
    """

    name = source.name
    parents = [part for part in reversed(source.parent.parts) if part != source.anchor]
    candidate = output_dir / f"{name}{THUMBNAIL_SUFFIX}"
    for parent in parents:
        if candidate not in taken:
            return candidate
        name = f"{parent}_{name}"
        candidate = output_dir / f"{name}{THUMBNAIL_SUFFIX}"

    counter = 2
    while candidate in taken:
        candidate = output_dir / f"{name}-{counter}{THUMBNAIL_SUFFIX}"
        counter += 1
    return candidate
