"""Host-facing entry point that answers thumbnail requests."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from PySide6.QtCore import QRunnable, QThreadPool

from .config import ThumbnailConfig, get_config
from .errors import ThumbnailGenerationError
from .pipeline import RenderRequest, Thumbnail, ThumbnailPipeline

__all__ = [
    "CompletionHandler",
    "ReplyAlreadySentError",
    "ThumbnailHandler",
    "ThumbnailProvider",
]

logger = logging.getLogger(__name__)

ThumbnailHandler = Callable[[Thumbnail | None, BaseException | None], None]
"""Callback receiving either a thumbnail or the error that prevented one."""


class ReplyAlreadySentError(RuntimeError):
    """Raised when a completion handler is invoked a second time."""


class CompletionHandler:
    """Single-assignment wrapper guaranteeing a handler runs at most once."""

    def __init__(self, handler: ThumbnailHandler) -> None:
        self._handler = handler
        self._lock = threading.Lock()
        self._sent = False

    @property
    def sent(self) -> bool:
        return self._sent

    def __call__(self, thumbnail: Thumbnail | None, error: BaseException | None) -> None:
        if (thumbnail is None) == (error is None):
            raise ValueError("Exactly one of thumbnail or error must be supplied")

        with self._lock:
            if self._sent:
                raise ReplyAlreadySentError("Thumbnail reply has already been sent")
            self._sent = True

        self._handler(thumbnail, error)


class ThumbnailProvider:
    """Answer thumbnail requests from the host, possibly concurrently.

    The configuration snapshot is captured when the provider is created, so
    it is fully populated before the first request can run and later calls
    to :func:`~code_thumbnailer.config.configure` do not affect it.
    """

    def __init__(
        self,
        config: ThumbnailConfig | None = None,
        *,
        pipeline: ThumbnailPipeline | None = None,
        max_threads: int | None = None,
    ) -> None:
        self._config = config or get_config()
        self._pipeline = pipeline or ThumbnailPipeline(self._config)
        self._thread_pool = QThreadPool()
        if max_threads is not None:
            self._thread_pool.setMaxThreadCount(max(1, int(max_threads)))

    @property
    def config(self) -> ThumbnailConfig:
        return self._config

    def provide_thumbnail(self, request: RenderRequest, handler: ThumbnailHandler) -> None:
        """Render *request* and invoke *handler* exactly once with the outcome."""

        reply = handler if isinstance(handler, CompletionHandler) else CompletionHandler(handler)

        try:
            thumbnail = self._pipeline.render(request)
        except ThumbnailGenerationError as exc:
            reply(None, exc)
            return
        except Exception as exc:
            logger.exception("Unexpected error while rendering thumbnail for %s", request.file_path)
            reply(None, exc)
            return

        reply(thumbnail, None)

    def submit(self, request: RenderRequest, handler: ThumbnailHandler) -> None:
        """Queue *request* on the provider's thread pool."""

        self._thread_pool.start(_ThumbnailWorker(self, request, CompletionHandler(handler)))

    def wait_for_done(self, msecs: int = -1) -> bool:
        """Block until every submitted request has completed."""

        return self._thread_pool.waitForDone(msecs)


class _ThumbnailWorker(QRunnable):
    def __init__(self, provider: ThumbnailProvider, request: RenderRequest, reply: CompletionHandler) -> None:
        super().__init__()
        self._provider = provider
        self._request = request
        self._reply = reply

    def run(self) -> None:
        try:
            self._provider.provide_thumbnail(self._request, self._reply)
        except Exception:
            logger.exception("Thumbnail handler failed for %s", self._request.file_path)
