"""Command-line host that writes code thumbnails to PNG files."""

from __future__ import annotations

import argparse
import logging
import math
import threading
from collections.abc import Sequence
from pathlib import Path

from .config import configure
from .layout import canvas_size
from .pipeline import RenderRequest, Thumbnail
from .provider import ThumbnailProvider
from .utils.paths import expand_path, source_file, thumbnail_target

__all__ = ["main"]

logger = logging.getLogger(__name__)

DEFAULT_HEIGHT = 256


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="code-thumbnailer",
        description="Render syntax-coloured thumbnails of source files as PNG images.",
    )
    parser.add_argument("files", nargs="+", type=Path, help="Source files to render.")
    parser.add_argument(
        "--height",
        type=float,
        default=DEFAULT_HEIGHT,
        help=f"Thumbnail height in pixels; the width follows the aspect ratio (default {DEFAULT_HEIGHT}).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("."),
        help="Directory receiving <file name>.png outputs (default: current directory).",
    )
    parser.add_argument("--theme", help="Pygments style used for highlighting.")
    parser.add_argument("--font", dest="font_name", help="Font family used for the code.")
    parser.add_argument("--font-size", type=float, help="Code font size in points.")
    parser.add_argument(
        "--dark-background",
        action="store_true",
        help="Use the theme's own background instead of white.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not math.isfinite(args.height) or args.height <= 0:
        print("Height must be a positive number.")
        return 2

    config = configure(
        theme_name=args.theme,
        font_name=args.font_name,
        base_font_size=args.font_size,
        use_light_background=False if args.dark_background else None,
    )
    output_dir = expand_path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    provider = ThumbnailProvider(config)
    failures: list[Path] = []
    lock = threading.Lock()
    seen: set[Path] = set()
    targets: set[Path] = set()

    for source in args.files:
        try:
            source_path = source_file(source)
        except (ValueError, OSError) as exc:
            with lock:
                failures.append(Path(source))
            print(f"No thumbnail for {source}: {exc}")
            continue
        if source_path in seen:
            logger.debug("Skipping repeated source %s", source_path)
            continue
        seen.add(source_path)

        target = thumbnail_target(source_path, output_dir, targets)
        targets.add(target)

        def handle(
            thumbnail: Thumbnail | None,
            error: BaseException | None,
            *,
            source_path: Path = source_path,
            target: Path = target,
        ) -> None:
            if thumbnail is None:
                with lock:
                    failures.append(source_path)
                print(f"No thumbnail for {source_path}: {error}")
                return
            try:
                target.write_bytes(thumbnail.to_png())
            except OSError as exc:
                with lock:
                    failures.append(source_path)
                print(f"Unable to write {target}: {exc}")
                return
            print(f"{source_path} -> {target} ({thumbnail.display_language})")

        request = RenderRequest(str(source_path), canvas_size(args.height))
        provider.submit(request, handle)

    provider.wait_for_done()
    return 1 if failures else 0


if __name__ == "__main__":  # pragma: no cover - manual invocation
    raise SystemExit(main())
