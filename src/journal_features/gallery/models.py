"""
Pydantic models for the user's gallery.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, model_validator


class GalleryRecord(BaseModel):
    """One stored photo of the signed-in user.

    ``identity_path`` is the stable storage key and the only field used
    for change detection. ``access_url`` is derived, time-limited and
    regenerated whenever the gallery changes.
    """

    id: StrictStr = Field(..., description="Row identifier in the photos table")
    user_id: StrictStr = Field(..., description="Owner user identifier")
    identity_path: StrictStr = Field(..., description="Non-expiring storage path of the image")
    access_url: StrictStr | None = Field(None, description="Signed URL derived from identity_path")

    title: StrictStr | None = None
    description: StrictStr | None = None
    is_public: bool = True

    created_at: datetime = Field(..., description="Creation timestamp (UTC)")

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "GalleryRecord":
        """Build a record from a ``photos`` row (path stored in ``image_url``)."""
        return cls(
            id=row["id"],
            user_id=row["user_id"],
            identity_path=row["image_url"],
            title=row.get("title") or None,
            description=row.get("description") or None,
            is_public=row.get("is_public", True),
            created_at=row["created_at"],
        )


class GalleryState(BaseModel):
    """Durable snapshot of the gallery: identity paths and their access URLs.

    Both lists are parallel: ``access_urls[i]`` grants access to
    ``identity_paths[i]``.
    """

    model_config = ConfigDict(frozen=True)

    identity_paths: list[StrictStr] = Field(default_factory=list)
    access_urls: list[StrictStr] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_parallel_lists(self) -> "GalleryState":
        """Ensure both lists describe the same photos."""
        if len(self.identity_paths) != len(self.access_urls):
            raise ValueError("identity_paths and access_urls must have the same length")
        return self

    @classmethod
    def empty(cls) -> "GalleryState":
        return cls()

    def __len__(self) -> int:
        return len(self.identity_paths)


class GallerySnapshot(BaseModel):
    """What observers of the gallery receive after every change."""

    model_config = ConfigDict(frozen=True)

    gallery_images: list[str]
    records: list[GalleryRecord]
