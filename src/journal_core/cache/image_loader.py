"""Asynchronous image fetching that warms the shared ImageCache."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from io import BytesIO

from aws_lambda_powertools import Logger
from PIL import Image
from pydantic import BaseModel, ConfigDict

from journal_core.cache.image_cache import ImageCache
from journal_core.infrastructure.http.downloader import download_bytes
from journal_core.models.errors import DownloadError
from journal_core.utils.constants import IMAGE_FETCH_TIMEOUT_SECONDS, PRELOAD_IMAGE_LIMIT

logger = Logger(UTC=True)

FetchBytes = Callable[..., bytes]


class DecodedImage(BaseModel):
    """A fully decoded image ready for display."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    image: Image.Image
    width: int
    height: int
    size_cost: int


def decode_image(data: bytes) -> DecodedImage:
    """Decode *data* into pixels.

    The cost is the uncompressed pixel footprint (width × height × bands),
    which is what the image occupies in memory once displayed.

    Raises:
        OSError: If Pillow cannot identify or decode the data
        DecompressionBombError: If the pixel count exceeds Pillow's limit
    """
    image = Image.open(BytesIO(data))
    image.load()
    width, height = image.size

    return DecodedImage(
        image=image,
        width=width,
        height=height,
        size_cost=width * height * len(image.getbands()),
    )


class ImageLoader:
    """Loads remote images through an :class:`ImageCache`.

    - Concurrent requests for the same URL share one in-flight fetch.
    - Every fetch is bounded by an explicit timeout.
    - A fetch is cancelled when its key is invalidated, or evicted from
      the cache while a forced reload is in flight.
    - Failures resolve to ``None``: a missing image is the view's concern.
    """

    def __init__(
        self,
        cache: ImageCache,
        *,
        fetch: FetchBytes = download_bytes,
        timeout: float = IMAGE_FETCH_TIMEOUT_SECONDS,
    ) -> None:
        self._cache = cache
        self._fetch_bytes = fetch
        self._timeout = timeout
        self._in_flight: dict[str, asyncio.Task[DecodedImage | None]] = {}

        cache.add_eviction_listener(self._on_key_removed)

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    async def load(self, url: str, *, force: bool = False) -> DecodedImage | None:
        """Return the decoded image for *url*, fetching it on a cache miss."""
        if not force:
            cached = self._cache.get(url)
            if cached is not None:
                return cached

        task = self._in_flight.get(url)
        if task is None:
            task = asyncio.create_task(self._fetch(url))
            self._in_flight[url] = task
            task.add_done_callback(lambda done, url=url: self._forget(url, done))

        try:
            # One caller going away must not cancel the fetch other callers share
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            return None

    async def preload(self, urls: Sequence[str], *, limit: int = PRELOAD_IMAGE_LIMIT) -> int:
        """Warm the cache with the first *limit* URLs and return how many loaded."""
        results = await asyncio.gather(*(self.load(url) for url in urls[:limit]))
        loaded = sum(1 for result in results if result is not None)

        logger.info("Preloaded images", extra={"requested": min(limit, len(urls)), "loaded": loaded})
        return loaded

    def cancel(self, url: str) -> bool:
        """Cancel the in-flight fetch of *url*. Returns whether one was running."""
        task = self._in_flight.pop(url, None)
        if task is None or task.done():
            return False

        logger.debug("Cancelling image fetch", extra={"url": url})
        self._cancel_task(task)
        return True

    def invalidate(self, url: str) -> None:
        """Forget *url* entirely: cancel its fetch and drop its cache entry."""
        self.cancel(url)
        self._cache.remove(url)

    def invalidate_all(self) -> None:
        for url in list(self._in_flight):
            self.cancel(url)
        self._cache.clear()

    async def _fetch(self, url: str) -> DecodedImage | None:
        try:
            data = await asyncio.wait_for(
                asyncio.to_thread(self._fetch_bytes, url, timeout=self._timeout),
                timeout=self._timeout,
            )
            decoded = await asyncio.to_thread(decode_image, data)

        except (DownloadError, TimeoutError) as exc:
            logger.warning("Image fetch failed", extra={"url": url, "error": str(exc)})
            return None

        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            logger.warning("Image could not be decoded", extra={"url": url, "error": str(exc)})
            return None

        self._cache.put(url, decoded, decoded.size_cost)
        logger.debug("Image cached", extra={"url": url, "size_cost": decoded.size_cost})
        return decoded

    def _forget(self, url: str, task: asyncio.Task[DecodedImage | None]) -> None:
        if self._in_flight.get(url) is task:
            del self._in_flight[url]

    def _on_key_removed(self, key: str) -> None:
        task = self._in_flight.get(key)
        if task is not None and not task.done():
            logger.debug("Cache key removed during fetch, cancelling", extra={"url": key})
            self._in_flight.pop(key, None)
            self._cancel_task(task)

    @staticmethod
    def _cancel_task(task: asyncio.Task[DecodedImage | None]) -> None:
        # Cache listeners may fire on a worker thread
        loop = task.get_loop()
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is loop:
            task.cancel()
        else:
            loop.call_soon_threadsafe(task.cancel)
