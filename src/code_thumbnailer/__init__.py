"""Top-level package for the code thumbnailer.

The package renders syntax-coloured preview images of source files with a
caption naming the detected language. :class:`ThumbnailPipeline` is the
request-scoped renderer and :class:`ThumbnailProvider` the host-facing entry
point.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
