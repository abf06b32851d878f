"""Business logic for storing transformed photos.

This module coordinates downloading a transformation result, uploading it
to object storage and recording it in the photos table, while translating
failures into domain-specific errors.
"""

import uuid
from collections.abc import Callable

from aws_lambda_powertools import Logger

from journal_core.infrastructure.http.downloader import download_bytes
from journal_core.models.errors import (
    JournalSyncError,
    NotFoundError,
    ObjectStoreError,
    ValidationError,
)
from journal_core.repositories.auth_context import AuthContext
from journal_core.repositories.data_store import RemoteDataStore
from journal_core.repositories.object_store import RemoteObjectStore
from journal_core.utils.constants import (
    ALLOWED_MIME_TYPES,
    ERROR_CODE_UNSUPPORTED_MIME_TYPE,
    IMAGE_FETCH_TIMEOUT_SECONDS,
    PHOTO_BUCKET,
    SIGNED_URL_EXPIRY_SECONDS,
    TABLE_PHOTOS,
)
from journal_core.utils.mime import detect_mime_type, extension_for
from journal_core.utils.time import utc_now_iso
from journal_core.utils.validators import validate_input
from journal_features.gallery.models import GalleryRecord
from journal_features.photos.models import PhotoDraft

logger = Logger(UTC=True)


class PhotoService:
    """Application service responsible for the user's stored photos.

    This service orchestrates:
    - Downloading the transformed image
    - Uploading image content to object storage
    - Persisting the photos row
    - Owner-scoped deletion

    All methods are blocking and are expected to run on a worker thread.
    """

    def __init__(
        self,
        *,
        data_store: RemoteDataStore,
        object_store: RemoteObjectStore,
        auth: AuthContext,
        download: Callable[..., bytes] = download_bytes,
        bucket: str = PHOTO_BUCKET,
    ) -> None:
        self.data = data_store
        self.objects = object_store
        self.auth = auth
        self.download = download
        self.bucket = bucket

    def save_transform_result(
        self,
        *,
        result_url: str,
        title: str | None = None,
        description: str | None = None,
        is_public: bool = True,
    ) -> GalleryRecord:
        """Store a transformed image as a new photo of the current user.

        The save flow is:
        1. Download the result and detect its MIME type
        2. Upload it to object storage under ``<user_id>/<uuid>.<ext>``
        3. Insert the photos row
        4. Remove the uploaded object if the insert fails

        Returns:
            The new record, with a signed access URL when one could be generated

        Raises:
            UnauthenticatedError: Without a session
            ValidationError: If the draft or the image type is invalid
            DownloadError: If the result cannot be downloaded
            ObjectStoreError: If the upload fails
            DataStoreError: If the row cannot be inserted
        """
        user_id = self.auth.require_user_id()
        draft = validate_input(
            PhotoDraft,
            {"title": title, "description": description, "is_public": is_public},
        )

        logger.debug("Saving transform result", extra={"user_id": user_id})

        # Step 1: Download and identify the image
        file_data = self.download(result_url, timeout=IMAGE_FETCH_TIMEOUT_SECONDS)

        try:
            mime_type = detect_mime_type(file_data)
        except ValueError as exc:
            raise ValidationError(
                message="Unsupported image type",
                error_code=ERROR_CODE_UNSUPPORTED_MIME_TYPE,
                details={"result_url": result_url},
            ) from exc

        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(
                message="Unsupported image type",
                error_code=ERROR_CODE_UNSUPPORTED_MIME_TYPE,
                details={"mime_type": mime_type},
            )

        # Step 2: Upload to storage
        path = f"{user_id}/{uuid.uuid4()}.{extension_for(mime_type)}"
        self.objects.upload(
            bucket=self.bucket,
            path=path,
            data=file_data,
            content_type=mime_type,
        )

        # Step 3: Persist the row (rollback storage on failure)
        row = {
            "user_id": user_id,
            "image_url": path,
            "title": draft.title,
            "description": draft.description,
            "is_public": draft.is_public,
            "created_at": utc_now_iso(),
        }

        try:
            inserted = self.data.insert(TABLE_PHOTOS, row)
        except JournalSyncError:
            logger.exception("Failed to record photo", extra={"path": path})

            # Best-effort cleanup to avoid orphaned storage objects
            try:
                self.objects.remove(bucket=self.bucket, paths=[path])
            except ObjectStoreError:
                logger.warning(
                    "Failed to clean up uploaded photo after insert failure",
                    extra={"path": path},
                )
            raise

        record = GalleryRecord.from_row(inserted)

        # Step 4: Grant read access; the photo is saved even if this fails
        try:
            access_url = self.objects.get_signed_url(
                bucket=self.bucket,
                path=path,
                expiry_seconds=SIGNED_URL_EXPIRY_SECONDS,
            )
        except ObjectStoreError:
            logger.warning("Unable to sign new photo URL", extra={"path": path})
        else:
            record = record.model_copy(update={"access_url": access_url})

        logger.info(
            "Photo saved successfully",
            extra={"photo_id": record.id, "user_id": user_id},
        )
        return record

    def delete_photo(self, photo_id: str) -> str | None:
        """Delete one of the current user's photos.

        The row is deleted first, scoped to the owner; the storage object
        is removed only once the row is gone.

        Returns:
            The identity path the photo was stored under, if the row had one

        Raises:
            UnauthenticatedError: Without a session
            NotFoundError: If the photo does not exist or is not owned
            DataStoreError: If the row cannot be read or deleted
        """
        user_id = self.auth.require_user_id()
        owner_filter = {"id": photo_id, "user_id": user_id}

        rows = self.data.query(TABLE_PHOTOS, filters=owner_filter, range_limit=1)
        if not rows:
            logger.warning("Photo not found for delete", extra={"photo_id": photo_id})
            raise NotFoundError(
                message="Photo not found",
                details={"photo_id": photo_id},
            )

        path = rows[0].get("image_url")

        if self.data.delete(TABLE_PHOTOS, filters=owner_filter) == 0:
            raise NotFoundError(
                message="Photo not found",
                details={"photo_id": photo_id},
            )

        if path:
            try:
                self.objects.remove(bucket=self.bucket, paths=[path])
            except ObjectStoreError:
                logger.warning(
                    "Photo row deleted but storage object remains",
                    extra={"photo_id": photo_id, "path": path},
                )

        logger.info("Photo deleted", extra={"photo_id": photo_id, "user_id": user_id})
        return path
