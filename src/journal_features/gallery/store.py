"""Durable local cache of the gallery state."""

from aws_lambda_powertools import Logger
from pydantic import ValidationError as PydanticValidationError

from journal_core.repositories.key_value_store import DurableKeyValueStore
from journal_core.utils.constants import GALLERY_STATE_BLOB_KEY
from journal_features.gallery.models import GalleryState

logger = Logger(UTC=True)


class GalleryStateStore:
    """Loads and saves the gallery state as one JSON blob.

    Reading never fails: an absent or unreadable blob is an empty
    gallery. Writing replaces the previous blob wholesale.
    """

    def __init__(self, blobs: DurableKeyValueStore, *, key: str = GALLERY_STATE_BLOB_KEY) -> None:
        self._blobs = blobs
        self._key = key

    def load(self) -> GalleryState:
        try:
            raw = self._blobs.read_blob(self._key)
        except OSError:
            logger.exception("Unable to read cached gallery", extra={"key": self._key})
            return GalleryState.empty()

        if raw is None:
            logger.debug("No cached gallery", extra={"key": self._key})
            return GalleryState.empty()

        try:
            state = GalleryState.model_validate_json(raw)
        except PydanticValidationError as exc:
            logger.warning(
                "Cached gallery is corrupt, starting empty",
                extra={"key": self._key, "errors": exc.error_count()},
            )
            return GalleryState.empty()

        logger.info("Loaded cached gallery", extra={"count": len(state)})
        return state

    def save(self, state: GalleryState) -> None:
        self._blobs.write_blob(self._key, state.model_dump_json().encode("utf-8"))
        logger.info("Saved gallery to cache", extra={"count": len(state)})
