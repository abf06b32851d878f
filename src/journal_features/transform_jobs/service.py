"""End-to-end flow from a captured photo to a refreshed gallery."""

import asyncio
import uuid

from aws_lambda_powertools import Logger

from journal_core.models.style import StyleConfiguration
from journal_core.repositories.transform_api import TransformAPI
from journal_core.utils.decorators import user_facing_message
from journal_features.gallery.reconciler import GalleryReconciler
from journal_features.photos.service import PhotoService
from journal_features.transform_jobs.styles import style_for
from journal_features.transform_jobs.tracker import InFlightJobTracker

logger = Logger(UTC=True)


class TransformWorkflow:
    """Application service that runs one photo through transformation.

    This service orchestrates:
    - Registering the job with the tracker
    - Submitting the image to the transformation API
    - Saving the result as a new photo
    - Reporting success or failure, then refreshing the gallery
    """

    def __init__(
        self,
        *,
        transform_api: TransformAPI,
        photo_service: PhotoService,
        tracker: InFlightJobTracker,
        reconciler: GalleryReconciler | None = None,
    ) -> None:
        self.transform_api = transform_api
        self.photo_service = photo_service
        self.tracker = tracker
        self.reconciler = reconciler

    @staticmethod
    def generate_job_id() -> str:
        """Generate a unique job identifier."""
        return f"job_{uuid.uuid4().hex}"

    async def submit_photo(
        self,
        image_bytes: bytes,
        *,
        style: StyleConfiguration | str = "Illustration",
        title: str | None = None,
        description: str | None = None,
        is_public: bool = True,
        job_id: str | None = None,
    ) -> str:
        """Transform and save *image_bytes*, reporting progress through the tracker.

        The flow is:
        1. Register the job (transforming notification)
        2. Submit to the transformation API on a worker thread
        3. Download and store the result as a new photo
        4. Show the success notification
        5. Reconcile the gallery so the new photo appears first

        Failures end in the tracker's error notification and are never
        raised to the caller.

        Returns:
            The job identifier
        """
        job_id = job_id or self.generate_job_id()
        style_config = style if isinstance(style, StyleConfiguration) else style_for(style)

        self.tracker.begin(job_id)
        logger.debug("Submitting photo for transformation", extra={"job_id": job_id, "style": style_config.name})

        try:
            result_url = await asyncio.to_thread(
                self.transform_api.submit,
                image_bytes=image_bytes,
                style=style_config,
            )
            record = await asyncio.to_thread(
                self.photo_service.save_transform_result,
                result_url=result_url,
                title=title,
                description=description,
                is_public=is_public,
            )

        except asyncio.CancelledError:
            self.tracker.discard(job_id)
            raise

        except Exception as exc:
            logger.exception("Photo transformation failed", extra={"job_id": job_id})
            self.tracker.fail(job_id, user_facing_message(exc))
            return job_id

        self.tracker.succeed(job_id, result_url=record.access_url)
        logger.info("Photo transformed and saved", extra={"job_id": job_id, "photo_id": record.id})

        if self.reconciler is not None:
            await self.reconciler.refresh(record.user_id)

        return job_id
