"""Background image fetching for destination cards and detail views."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed

from wandernest.models import DestinationRecord, ImageResult

from .unsplash import UnsplashService

logger = logging.getLogger(__name__)

ImageCallback = Callable[[int, "ImageResult | None"], None]


class ImageTask:
    """
    Handle for one image fetch tied to the view that requested it.

    Once cancel() returns, the task's callback is guaranteed not to run.
    """

    def __init__(self, destination_id: int, callback: ImageCallback | None = None):
        self.destination_id = destination_id
        self._callback = callback
        # Held while the callback runs; the callback itself may call cancel().
        self._lock = threading.RLock()
        self._cancelled = False
        self._future: Future | None = None

    def _attach(self, future: Future) -> None:
        self._future = future
        future.add_done_callback(self._deliver)

    def _deliver(self, future: Future) -> None:
        if future.cancelled():
            return
        image = future.result()
        with self._lock:
            if self._cancelled or self._callback is None:
                return
            self._callback(self.destination_id, image)

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True
        if self._future is not None:
            self._future.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._future is not None and self._future.done()

    def result(self, timeout: float | None = None) -> ImageResult | None:
        """Wait for the image; cancelled tasks yield None."""
        if self._cancelled or self._future is None or self._future.cancelled():
            return None
        return self._future.result(timeout=timeout)


class ImageLoader:
    """Fetches destination photos on a small thread pool."""

    def __init__(self, service: UnsplashService, max_workers: int = 5):
        self.service = service
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="images")

    def _fetch(self, record: DestinationRecord) -> ImageResult | None:
        # Image failures render a placeholder; they never reach the caller.
        try:
            return self.service.photo_for_destination(record)
        except Exception:
            logger.exception("Image fetch for %s failed", record.name)
            return None

    def load(self, record: DestinationRecord, on_ready: ImageCallback | None = None) -> ImageTask:
        """Start fetching the photo for ``record``; ``on_ready`` runs on a worker thread."""
        task = ImageTask(record.id, on_ready)
        task._attach(self._executor.submit(self._fetch, record))
        return task

    def load_many(self, records: Iterable[DestinationRecord]) -> dict[int, ImageResult | None]:
        """
        Fetch photos for several destinations in parallel.

        Returns:
            Dict mapping destination id to its photo (None for placeholders)
        """
        future_to_id = {
            self._executor.submit(self._fetch, record): record.id for record in records
        }
        results: dict[int, ImageResult | None] = {}
        for future in as_completed(future_to_id):
            results[future_to_id[future]] = future.result()
        return results

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "ImageLoader":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
