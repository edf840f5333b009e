"""Configuration snapshot shared read-only by every render request."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Final

from .settings import (
    DEFAULT_FONT_NAME,
    DEFAULT_FONT_SIZE,
    DEFAULT_TAG_FONT_NAME,
    DEFAULT_TAG_FONT_SIZE,
    DEFAULT_TAG_MIN_FONT_SIZE,
    DEFAULT_THEME_NAME,
    Preferences,
    load_preferences,
)

__all__ = [
    "THEME_ENV_VAR",
    "ThumbnailConfig",
    "configure",
    "get_config",
]

THEME_ENV_VAR: Final[str] = "CODE_THUMBNAILER_THEME"
"""Environment variable that overrides the stored theme name."""


@dataclass(frozen=True, slots=True)
class ThumbnailConfig:
    """Immutable rendering configuration read once before rendering starts."""

    font_name: str = DEFAULT_FONT_NAME
    base_font_size: float = DEFAULT_FONT_SIZE
    theme_name: str = DEFAULT_THEME_NAME
    use_light_background: bool = True
    tag_font_size: float = DEFAULT_TAG_FONT_SIZE
    tag_min_font_size: float = DEFAULT_TAG_MIN_FONT_SIZE
    tag_font_name: str = DEFAULT_TAG_FONT_NAME

    def __post_init__(self) -> None:
        for name in ("font_name", "theme_name", "tag_font_name"):
            value = str(getattr(self, name)).strip()
            if not value:
                raise ValueError(f"{name} cannot be empty")
            object.__setattr__(self, name, value)

        for name in ("base_font_size", "tag_font_size", "tag_min_font_size"):
            value = float(getattr(self, name))
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"{name} must be a positive number, got {value!r}")
            object.__setattr__(self, name, value)

        if self.tag_min_font_size > self.tag_font_size:
            raise ValueError("tag_min_font_size cannot exceed tag_font_size")

        object.__setattr__(self, "use_light_background", bool(self.use_light_background))

    @classmethod
    def from_preferences(cls, preferences: Preferences) -> ThumbnailConfig:
        """Build a snapshot from persisted :class:`Preferences`."""

        return cls(
            font_name=preferences.font_name,
            base_font_size=preferences.font_size,
            theme_name=preferences.theme_name,
            use_light_background=preferences.use_light_background,
            tag_font_size=preferences.tag_font_size,
            tag_min_font_size=preferences.tag_min_font_size,
            tag_font_name=preferences.tag_font_name,
        )


_CONFIG: ThumbnailConfig | None = None


def get_config() -> ThumbnailConfig:
    """Return the cached :class:`ThumbnailConfig` instance."""

    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _build_config()
    return _CONFIG


def configure(**overrides: object) -> ThumbnailConfig:
    """Rebuild the cached configuration with optional field overrides.

    ``None`` values are ignored so callers can forward optional arguments
    straight through. Snapshots already handed out are unaffected.
    """

    global _CONFIG
    _CONFIG = _build_config(**{key: value for key, value in overrides.items() if value is not None})
    return _CONFIG


def _build_config(**overrides: object) -> ThumbnailConfig:
    unknown = set(overrides) - set(ThumbnailConfig.__slots__)
    if unknown:
        raise TypeError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")

    fields: dict[str, object] = {}
    env_theme = os.environ.get(THEME_ENV_VAR, "").strip()
    if env_theme:
        fields["theme_name"] = env_theme
    fields.update(overrides)

    base = ThumbnailConfig.from_preferences(load_preferences())
    values = {name: fields.get(name, getattr(base, name)) for name in ThumbnailConfig.__slots__}
    return ThumbnailConfig(**values)
