"""
Pydantic models for the social feed.

Rows come from the ``photos``, ``likes``, ``comments`` and ``profiles``
tables. Joined and derived fields (author, counts, like status) are filled
in by enrichment and stay ``None`` when it fails.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator

from journal_core.utils.formatting import format_count, format_time_ago
from journal_core.utils.time import parse_iso, utc_now

UNKNOWN_USER = "Unknown User"


def _aware_timestamp(value: Any) -> Any:
    # Naive strings from other clients are read as UTC
    return parse_iso(value) if isinstance(value, str) else value


class AuthorSummary(BaseModel):
    """The subset of a profile attached to posts and comments."""

    model_config = ConfigDict(frozen=True)

    username: StrictStr | None = None
    display_name: StrictStr | None = None
    avatar_url: StrictStr | None = None

    @property
    def display_label(self) -> str:
        return self.display_name or self.username or UNKNOWN_USER

    @classmethod
    def from_profile(cls, profile: "UserProfile") -> "AuthorSummary":
        return cls(
            username=profile.username,
            display_name=profile.display_name,
            avatar_url=profile.avatar_url,
        )


class UserProfile(BaseModel):
    """A row of the ``profiles`` table."""

    id: StrictStr
    username: StrictStr | None = None
    display_name: StrictStr | None = None
    avatar_url: StrictStr | None = None
    bio: StrictStr | None = None

    # Missing timestamps fall back to now
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def default_missing_timestamp(cls, value: Any) -> Any:
        return value if value else utc_now()

    @property
    def display_label(self) -> str:
        return self.display_name or self.username or UNKNOWN_USER

    @property
    def has_avatar(self) -> bool:
        return bool(self.avatar_url)

    @classmethod
    def empty(cls, user_id: str) -> "UserProfile":
        """Profile of a user who has not filled anything in yet."""
        return cls(id=user_id)


class Post(BaseModel):
    """A public photo in the feed."""

    id: StrictStr
    user_id: StrictStr
    image_url: StrictStr
    description: StrictStr | None = None
    is_public: bool = True
    created_at: datetime
    updated_at: datetime | None = None

    # Enrichment
    author: AuthorSummary | None = None
    like_count: int | None = None
    comment_count: int | None = None
    is_liked_by_current_user: bool | None = None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def parse_timestamp(cls, value: Any) -> Any:
        return _aware_timestamp(value)

    @property
    def username(self) -> str:
        return (self.author.username if self.author else None) or UNKNOWN_USER

    @property
    def display_label(self) -> str:
        return self.author.display_label if self.author else UNKNOWN_USER

    @property
    def formatted_like_count(self) -> str:
        return format_count(self.like_count)

    @property
    def formatted_comment_count(self) -> str:
        return format_count(self.comment_count)

    def time_ago(self, *, now: datetime | None = None) -> str:
        return format_time_ago(self.created_at, now=now)


class Like(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: StrictStr
    post_id: StrictStr
    user_id: StrictStr
    created_at: datetime

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_timestamp(cls, value: Any) -> Any:
        return _aware_timestamp(value)


class Comment(BaseModel):
    """A comment on a post, oldest first within a post."""

    id: StrictStr
    post_id: StrictStr
    user_id: StrictStr
    content: StrictStr
    created_at: datetime

    author: AuthorSummary | None = None

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_timestamp(cls, value: Any) -> Any:
        return _aware_timestamp(value)

    def time_ago(self, *, now: datetime | None = None) -> str:
        return format_time_ago(self.created_at, now=now)


class NewPost(BaseModel):
    """Validation model for post creation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    image_url: str = Field(..., min_length=1, description="Storage path or URL of the image")
    description: str | None = Field(None, max_length=1000, description="Post description")
    is_public: bool = True


class NewComment(BaseModel):
    """Validation model for comment creation."""

    model_config = ConfigDict(str_strip_whitespace=True)

    post_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=1000, description="Comment text")


class FeedPage(BaseModel):
    """Paginated feed state pushed to observers."""

    model_config = ConfigDict(frozen=True)

    posts: list[Post] = Field(default_factory=list)
    next_offset: int = 0
    has_more: bool = True
    is_loading: bool = False
    error_message: str | None = None
