"""Pydantic models for saving transformed photos."""

from pydantic import BaseModel, ConfigDict, Field


class PhotoDraft(BaseModel):
    """User-supplied fields of a photo about to be saved."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str | None = Field(None, max_length=200, description="Photo title")
    description: str | None = Field(None, max_length=1000, description="Photo description")
    is_public: bool = Field(True, description="Whether the photo may appear in the public feed")
