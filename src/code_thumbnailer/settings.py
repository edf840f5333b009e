"""Persistence helpers for user-configurable thumbnail preferences."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Final

from PySide6.QtCore import QSettings

from .utils.paths import optional_path

__all__ = [
    "APPLICATION_NAME",
    "DEFAULT_FONT_NAME",
    "DEFAULT_FONT_SIZE",
    "DEFAULT_TAG_FONT_NAME",
    "DEFAULT_TAG_FONT_SIZE",
    "DEFAULT_TAG_MIN_FONT_SIZE",
    "DEFAULT_THEME_NAME",
    "FONT_SIZE_OPTIONS",
    "ORGANIZATION_NAME",
    "SETTINGS_FILE_ENV_VAR",
    "Preferences",
    "load_preferences",
    "open_settings_store",
    "save_preferences",
]


ORGANIZATION_NAME: Final[str] = "CodeThumbnailer"
"""Organization identifier used when storing Qt settings."""

APPLICATION_NAME: Final[str] = "code-thumbnailer"
"""Application identifier used when storing Qt settings."""

SETTINGS_FILE_ENV_VAR: Final[str] = "CODE_THUMBNAILER_SETTINGS_FILE"
"""Environment variable naming an INI file used instead of the native store."""

FONT_SIZE_OPTIONS: Final[tuple[float, ...]] = (10.0, 12.0, 14.0, 16.0, 18.0, 24.0, 28.0)
"""Point sizes offered for the code font."""

DEFAULT_FONT_NAME: Final[str] = "DejaVuSansMono"
DEFAULT_FONT_SIZE: Final[float] = FONT_SIZE_OPTIONS[3]
DEFAULT_THEME_NAME: Final[str] = "default"
DEFAULT_TAG_FONT_NAME: Final[str] = "DejaVuSans"
DEFAULT_TAG_FONT_SIZE: Final[float] = 110.0
DEFAULT_TAG_MIN_FONT_SIZE: Final[float] = 72.0

_GROUP: Final[str] = "thumbnail"


@dataclass(slots=True)
class Preferences:
    """Collection of end-user preferences that drive thumbnail rendering."""

    font_name: str = DEFAULT_FONT_NAME
    font_size: float = DEFAULT_FONT_SIZE
    theme_name: str = DEFAULT_THEME_NAME
    use_light_background: bool = True
    tag_font_name: str = DEFAULT_TAG_FONT_NAME
    tag_font_size: float = DEFAULT_TAG_FONT_SIZE
    tag_min_font_size: float = DEFAULT_TAG_MIN_FONT_SIZE


_BOOLEAN_STRINGS: Final[dict[str, bool]] = {
    "1": True,
    "true": True,
    "yes": True,
    "on": True,
    "0": False,
    "false": False,
    "no": False,
    "off": False,
}


def _coerce_bool(value: object, default: bool) -> bool:
    # INI-backed stores hand booleans back as strings.
    if isinstance(value, str):
        return _BOOLEAN_STRINGS.get(value.strip().lower(), default)
    if isinstance(value, bool | int):
        return bool(value)
    return default


def _coerce_float(value: object, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    if not math.isfinite(number) or number <= 0:
        return default
    return number


def _coerce_name(value: object, default: str) -> str:
    if isinstance(value, str):
        candidate = value.strip()
        if candidate:
            return candidate
    return default


def _coerce_font_size(value: object) -> float:
    size = _coerce_float(value, DEFAULT_FONT_SIZE)
    if size not in FONT_SIZE_OPTIONS:
        return DEFAULT_FONT_SIZE
    return size


def open_settings_store() -> QSettings:
    """Return the settings store, honouring :data:`SETTINGS_FILE_ENV_VAR`."""

    override = optional_path(os.environ.get(SETTINGS_FILE_ENV_VAR))
    if override is not None:
        return QSettings(str(override), QSettings.Format.IniFormat)
    return QSettings(ORGANIZATION_NAME, APPLICATION_NAME)


def load_preferences(store: QSettings | None = None) -> Preferences:
    """Return persisted preferences, using defaults for anything missing."""

    if store is None:
        store = open_settings_store()

    store.beginGroup(_GROUP)
    try:
        font_name = _coerce_name(store.value("fontName"), DEFAULT_FONT_NAME)
        font_size = _coerce_font_size(store.value("fontSize"))
        theme_name = _coerce_name(store.value("themeName"), DEFAULT_THEME_NAME)
        light = _coerce_bool(store.value("useLightBackground"), True)
        tag_font_name = _coerce_name(store.value("tagFontName"), DEFAULT_TAG_FONT_NAME)
        tag_size = _coerce_float(store.value("tagFontSize"), DEFAULT_TAG_FONT_SIZE)
        tag_min = _coerce_float(store.value("tagMinFontSize"), DEFAULT_TAG_MIN_FONT_SIZE)
    finally:
        store.endGroup()

    if tag_min > tag_size:
        tag_min = tag_size

    return Preferences(
        font_name=font_name,
        font_size=font_size,
        theme_name=theme_name,
        use_light_background=light,
        tag_font_name=tag_font_name,
        tag_font_size=tag_size,
        tag_min_font_size=tag_min,
    )


def save_preferences(preferences: Preferences, store: QSettings | None = None) -> None:
    """Persist *preferences* using Qt's :class:`~PySide6.QtCore.QSettings`."""

    if store is None:
        store = open_settings_store()

    store.beginGroup(_GROUP)
    store.setValue("fontName", preferences.font_name)
    store.setValue("fontSize", float(preferences.font_size))
    store.setValue("themeName", preferences.theme_name)
    store.setValue("useLightBackground", bool(preferences.use_light_background))
    store.setValue("tagFontName", preferences.tag_font_name)
    store.setValue("tagFontSize", float(preferences.tag_font_size))
    store.setValue("tagMinFontSize", float(preferences.tag_min_font_size))
    store.endGroup()

    store.sync()
