"""
Reconciliation of the locally cached gallery against the remote photos table.
"""

import asyncio
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from journal_core.cache.image_loader import ImageLoader
from journal_core.models.errors import JournalSyncError
from journal_core.repositories.auth_context import AuthContext
from journal_core.repositories.data_store import RemoteDataStore
from journal_core.repositories.object_store import RemoteObjectStore
from journal_core.utils.constants import (
    PHOTO_BUCKET,
    PRELOAD_IMAGE_LIMIT,
    SIGNED_URL_EXPIRY_SECONDS,
    TABLE_PHOTOS,
)
from journal_core.utils.decorators import background_operation
from journal_core.utils.observable import Observable
from journal_features.gallery.models import GalleryRecord, GallerySnapshot, GalleryState
from journal_features.gallery.store import GalleryStateStore
from journal_features.photos.service import PhotoService

logger = Logger(UTC=True)


class GalleryReconciler(Observable[GallerySnapshot]):
    """Keeps the in-memory and durable gallery in step with the remote store.

    This component coordinates:
    - Instant cold-start display from the durable cache
    - Fetching the authoritative photo list
    - Path-based change detection
    - Signed URL regeneration, only when the gallery changed

    Access URLs expire and come back as different strings for unchanged
    content, so the comparison is made on identity paths only.
    """

    def __init__(
        self,
        *,
        data_store: RemoteDataStore,
        object_store: RemoteObjectStore,
        state_store: GalleryStateStore,
        auth: AuthContext,
        photo_service: PhotoService | None = None,
        image_loader: ImageLoader | None = None,
        bucket: str = PHOTO_BUCKET,
        url_expiry_seconds: int = SIGNED_URL_EXPIRY_SECONDS,
    ) -> None:
        super().__init__()
        self._data = data_store
        self._objects = object_store
        self._state_store = state_store
        self._auth = auth
        self._photos = photo_service
        self._loader = image_loader
        self._bucket = bucket
        self._url_expiry = url_expiry_seconds

        # Loaded synchronously so the gallery is visible before any network call
        self._cached_state = state_store.load()
        self._gallery_images: list[str] = list(self._cached_state.access_urls)
        self._records: list[GalleryRecord] = []

    @property
    def gallery_images(self) -> list[str]:
        """Access URLs in display order (newest first)."""
        return list(self._gallery_images)

    @property
    def records(self) -> list[GalleryRecord]:
        """Full records, parallel to :attr:`gallery_images` once refreshed."""
        return list(self._records)

    def snapshot(self) -> GallerySnapshot:
        return GallerySnapshot(gallery_images=self.gallery_images, records=self.records)

    @background_operation
    async def refresh(self, user_id: str | None = None) -> bool:
        """Reconcile with the remote store.

        Returns:
            True if the local gallery was replaced, False if it was
            already current or there is no session. Failures are logged
            and leave the previous gallery in place.
        """
        resolved_user = user_id or self._auth.current_user_id()
        if not resolved_user:
            logger.warning("Gallery refresh skipped, no session")
            return False

        logger.debug("Refreshing gallery", extra={"user_id": resolved_user})

        # Step 1: Fetch the authoritative list, newest first
        rows = await asyncio.to_thread(
            self._data.query,
            TABLE_PHOTOS,
            filters={"user_id": resolved_user},
            order=("created_at", True),
        )
        records = self._decode_rows(rows)
        fresh_paths = [record.identity_path for record in records]

        # Step 2: Compare identity paths with the durable cache
        if fresh_paths == self._cached_state.identity_paths:
            refreshed = [
                record.model_copy(update={"access_url": url})
                for record, url in zip(records, self._cached_state.access_urls)
            ]
            if refreshed != self._records:
                self._records = refreshed
                self._notify(self.snapshot())

            logger.info("Gallery is up-to-date", extra={"count": len(records)})
            return False

        # Step 3: Regenerate access URLs for every photo
        access_urls = list(
            await asyncio.gather(
                *(
                    asyncio.to_thread(
                        self._objects.get_signed_url,
                        bucket=self._bucket,
                        path=path,
                        expiry_seconds=self._url_expiry,
                    )
                    for path in fresh_paths
                )
            )
        )

        # Step 4: Replace durable and in-memory state together
        new_state = GalleryState(identity_paths=fresh_paths, access_urls=access_urls)
        self._state_store.save(new_state)

        self._cached_state = new_state
        self._gallery_images = access_urls
        self._records = [
            record.model_copy(update={"access_url": url})
            for record, url in zip(records, access_urls)
        ]
        self._notify(self.snapshot())

        logger.info(
            "Gallery updated",
            extra={"user_id": resolved_user, "count": len(access_urls)},
        )
        return True

    def record_for_url(self, url: str) -> GalleryRecord | None:
        """Return the record displayed under *url*, if known."""
        try:
            index = self._gallery_images.index(url)
        except ValueError:
            return None

        if index < len(self._records):
            return self._records[index]
        return None

    async def delete_photo(self, photo_id: str) -> bool:
        """Delete a photo remotely, then drop it from the local gallery.

        The photo is located by id among the refreshed records, or by its
        identity path when only the cached gallery is loaded.

        Returns:
            True on success; failures are logged and return False
        """
        if self._photos is None:
            raise RuntimeError("GalleryReconciler was created without a PhotoService")

        try:
            path = await asyncio.to_thread(self._photos.delete_photo, photo_id)
        except JournalSyncError as exc:
            logger.error(
                "Failed to delete photo",
                extra={"photo_id": photo_id, "error_code": exc.error_code},
            )
            return False

        identity_paths = list(self._cached_state.identity_paths)
        index = next(
            (position for position, record in enumerate(self._records) if record.id == photo_id),
            None,
        )
        if index is None and path in identity_paths:
            index = identity_paths.index(path)
        if index is None:
            logger.info("Deleted photo was not in the local gallery", extra={"photo_id": photo_id})
            return True

        # Records, access URLs and cached paths share one order
        if index < len(self._records):
            self._records.pop(index)
        if index < len(identity_paths):
            identity_paths.pop(index)
        removed_url = self._gallery_images.pop(index) if index < len(self._gallery_images) else None
        if removed_url and self._loader is not None:
            self._loader.invalidate(removed_url)

        new_state = GalleryState(
            identity_paths=identity_paths,
            access_urls=list(self._gallery_images),
        )
        self._state_store.save(new_state)
        self._cached_state = new_state
        self._notify(self.snapshot())

        logger.info("Photo removed from gallery", extra={"photo_id": photo_id})
        return True

    async def preload_images(self, limit: int = PRELOAD_IMAGE_LIMIT) -> int:
        """Warm the image cache with the first gallery images."""
        if self._loader is None:
            return 0
        return await self._loader.preload(self._gallery_images, limit=limit)

    def clear_image_cache(self) -> None:
        if self._loader is not None:
            self._loader.invalidate_all()
            logger.info("Image cache cleared")

    @staticmethod
    def _decode_rows(rows: list[dict[str, Any]]) -> list[GalleryRecord]:
        records: list[GalleryRecord] = []

        for row in rows:
            try:
                records.append(GalleryRecord.from_row(row))
            except (KeyError, PydanticValidationError):
                logger.warning("Skipping malformed photo row", extra={"row_id": row.get("id")})

        return records
