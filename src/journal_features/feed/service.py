"""Business logic for the social feed.

This module wraps the remote data store with the feed's read and write
operations: posts, likes, comments and profiles. All methods are blocking
and are expected to run on a worker thread.
"""

from typing import Any, TypeVar

from aws_lambda_powertools import Logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from journal_core.models.errors import DataStoreError, JournalSyncError, NotFoundError
from journal_core.repositories.auth_context import AuthContext
from journal_core.repositories.data_store import RemoteDataStore, Row
from journal_core.utils.constants import (
    DEFAULT_COMMENT_PAGE_SIZE,
    DEFAULT_OFFSET,
    DEFAULT_PAGE_SIZE,
    ERROR_CODE_ROW_INVALID_FORMAT,
    TABLE_COMMENTS,
    TABLE_LIKES,
    TABLE_PHOTOS,
    TABLE_PROFILES,
)
from journal_core.utils.time import utc_now_iso
from journal_core.utils.validators import validate_input
from journal_features.feed.models import (
    AuthorSummary,
    Comment,
    Like,
    NewComment,
    NewPost,
    Post,
    UserProfile,
)

logger = Logger(UTC=True)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _decode_rows(model: type[ModelT], rows: list[Row], *, table: str) -> list[ModelT]:
    """Decode *rows*, skipping the ones that do not match *model*."""
    decoded: list[ModelT] = []

    for row in rows:
        try:
            decoded.append(model.model_validate(row))
        except PydanticValidationError as exc:
            logger.warning(
                "Skipping malformed row",
                extra={"table": table, "row_id": row.get("id"), "errors": exc.error_count()},
            )

    return decoded


def _decode_row(model: type[ModelT], row: Row, *, table: str) -> ModelT:
    try:
        return model.model_validate(row)
    except PydanticValidationError as exc:
        raise DataStoreError(
            message="Stored row has an invalid format",
            error_code=ERROR_CODE_ROW_INVALID_FORMAT,
            details={"table": table, "row_id": row.get("id")},
        ) from exc


class FeedService:
    """Application service for posts, likes, comments and profiles.

    Mutations require a session and raise ``UnauthenticatedError``
    without one. Reads work anonymously; personalization (liked-by-me)
    is simply absent.
    """

    def __init__(self, *, data_store: RemoteDataStore, auth: AuthContext) -> None:
        self.data = data_store
        self.auth = auth

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    def fetch_public_feed(
        self,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = DEFAULT_OFFSET,
    ) -> list[Post]:
        """Fetch one page of public posts, newest first, without enrichment."""
        logger.debug("Fetching public feed", extra={"limit": limit, "offset": offset})

        rows = self.data.query(
            TABLE_PHOTOS,
            filters={"is_public": True},
            order=("created_at", True),
            range_offset=offset,
            range_limit=limit,
        )
        return _decode_rows(Post, rows, table=TABLE_PHOTOS)

    def fetch_user_posts(
        self,
        user_id: str,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = DEFAULT_OFFSET,
    ) -> list[Post]:
        """Fetch one page of a user's public posts, newest first."""
        rows = self.data.query(
            TABLE_PHOTOS,
            filters={"user_id": user_id, "is_public": True},
            order=("created_at", True),
            range_offset=offset,
            range_limit=limit,
        )
        return _decode_rows(Post, rows, table=TABLE_PHOTOS)

    def enrich_post(self, post: Post) -> Post:
        """Attach author, counts and like status to *post*.

        Each lookup is independent: a failing one leaves its field
        ``None`` and the others still apply.
        """
        updates: dict[str, Any] = {}

        lookups = {
            "author": lambda: self._author_summary(post.user_id),
            "like_count": lambda: self.get_like_count(post.id),
            "comment_count": lambda: self.get_comment_count(post.id),
            "is_liked_by_current_user": lambda: self.is_post_liked_by_current_user(post.id),
        }

        for field, lookup in lookups.items():
            try:
                updates[field] = lookup()
            except JournalSyncError as exc:
                logger.warning(
                    "Post enrichment failed",
                    extra={"post_id": post.id, "field": field, "error_code": exc.error_code},
                )

        return post.model_copy(update=updates)

    def create_post(
        self,
        image_url: str,
        description: str | None = None,
        *,
        is_public: bool = True,
    ) -> Post:
        """Create a post owned by the current user.

        Raises:
            UnauthenticatedError: Without a session
            ValidationError: If the input is invalid
            DataStoreError: If the insert fails
        """
        user_id = self.auth.require_user_id()
        new_post = validate_input(
            NewPost,
            {"image_url": image_url, "description": description, "is_public": is_public},
        )

        now = utc_now_iso()
        inserted = self.data.insert(
            TABLE_PHOTOS,
            {
                "user_id": user_id,
                **new_post.model_dump(),
                "created_at": now,
                "updated_at": now,
            },
        )

        post = _decode_row(Post, inserted, table=TABLE_PHOTOS)
        logger.info("Post created", extra={"post_id": post.id, "user_id": user_id})
        return post

    def delete_post(self, post_id: str) -> None:
        """Delete one of the current user's posts, then its likes and comments.

        The owned post is deleted first so that an unauthorized delete
        never removes anything.

        Raises:
            UnauthenticatedError: Without a session
            NotFoundError: If the post does not exist or is not owned
            DataStoreError: If the post delete fails
        """
        user_id = self.auth.require_user_id()

        deleted = self.data.delete(TABLE_PHOTOS, filters={"id": post_id, "user_id": user_id})
        if deleted == 0:
            logger.warning("Post not found for delete", extra={"post_id": post_id})
            raise NotFoundError(
                message="Post not found",
                details={"post_id": post_id},
            )

        for table in (TABLE_LIKES, TABLE_COMMENTS):
            try:
                self.data.delete(table, filters={"post_id": post_id})
            except DataStoreError:
                logger.warning(
                    "Post deleted but dependents remain",
                    extra={"post_id": post_id, "table": table},
                )

        logger.info("Post deleted", extra={"post_id": post_id, "user_id": user_id})

    # ------------------------------------------------------------------
    # Likes
    # ------------------------------------------------------------------

    def toggle_like(self, post_id: str) -> bool:
        """Like or unlike *post_id* for the current user.

        Returns:
            True if the post is now liked

        Raises:
            UnauthenticatedError: Without a session
            DataStoreError: If the remote toggle fails
        """
        user_id = self.auth.require_user_id()

        existing = self.data.query(
            TABLE_LIKES,
            filters={"post_id": post_id, "user_id": user_id},
            range_limit=1,
        )

        if existing:
            self.data.delete(TABLE_LIKES, filters={"id": existing[0]["id"]})
            logger.info("Post unliked", extra={"post_id": post_id, "user_id": user_id})
            return False

        self.data.insert(
            TABLE_LIKES,
            {"post_id": post_id, "user_id": user_id, "created_at": utc_now_iso()},
        )
        logger.info("Post liked", extra={"post_id": post_id, "user_id": user_id})
        return True

    def is_post_liked_by_current_user(self, post_id: str) -> bool:
        """Anonymous users have liked nothing."""
        user_id = self.auth.current_user_id()
        if not user_id:
            return False

        likes = self.data.query(
            TABLE_LIKES,
            filters={"post_id": post_id, "user_id": user_id},
            range_limit=1,
        )
        return bool(likes)

    def fetch_likes(self, post_id: str) -> list[Like]:
        rows = self.data.query(TABLE_LIKES, filters={"post_id": post_id}, order=("created_at", False))
        return _decode_rows(Like, rows, table=TABLE_LIKES)

    def get_like_count(self, post_id: str) -> int:
        return self.data.count(TABLE_LIKES, filters={"post_id": post_id})

    def get_comment_count(self, post_id: str) -> int:
        return self.data.count(TABLE_COMMENTS, filters={"post_id": post_id})

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def fetch_comments(
        self,
        post_id: str,
        limit: int = DEFAULT_COMMENT_PAGE_SIZE,
        offset: int = DEFAULT_OFFSET,
    ) -> list[Comment]:
        """Fetch comments of *post_id*, oldest first, with their authors.

        Malformed rows are skipped. A failed author lookup leaves the
        comment without an author.
        """
        rows = self.data.query(
            TABLE_COMMENTS,
            filters={"post_id": post_id},
            order=("created_at", False),
            range_offset=offset,
            range_limit=limit,
        )
        comments = _decode_rows(Comment, rows, table=TABLE_COMMENTS)

        authors: dict[str, AuthorSummary | None] = {}
        for user_id in dict.fromkeys(comment.user_id for comment in comments):
            try:
                authors[user_id] = self._author_summary(user_id)
            except JournalSyncError:
                logger.warning("Comment author lookup failed", extra={"user_id": user_id})
                authors[user_id] = None

        return [comment.model_copy(update={"author": authors.get(comment.user_id)}) for comment in comments]

    def add_comment(self, post_id: str, content: str) -> Comment:
        """Add a comment by the current user.

        Raises:
            UnauthenticatedError: Without a session
            ValidationError: If the content is empty or too long
            DataStoreError: If the insert fails
        """
        user_id = self.auth.require_user_id()
        new_comment = validate_input(NewComment, {"post_id": post_id, "content": content})

        inserted = self.data.insert(
            TABLE_COMMENTS,
            {
                "post_id": new_comment.post_id,
                "user_id": user_id,
                "content": new_comment.content,
                "created_at": utc_now_iso(),
            },
        )
        comment = _decode_row(Comment, inserted, table=TABLE_COMMENTS)

        try:
            author = self._author_summary(user_id)
        except JournalSyncError:
            author = None

        logger.info("Comment added", extra={"post_id": post_id, "comment_id": comment.id})
        return comment.model_copy(update={"author": author})

    def delete_comment(self, comment_id: str) -> None:
        """Delete one of the current user's comments.

        Raises:
            UnauthenticatedError: Without a session
            NotFoundError: If the comment does not exist or is not owned
        """
        user_id = self.auth.require_user_id()

        deleted = self.data.delete(TABLE_COMMENTS, filters={"id": comment_id, "user_id": user_id})
        if deleted == 0:
            raise NotFoundError(
                message="Comment not found",
                details={"comment_id": comment_id},
            )

        logger.info("Comment deleted", extra={"comment_id": comment_id})

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def fetch_user_profile(self, user_id: str) -> UserProfile | None:
        rows = self.data.query(TABLE_PROFILES, filters={"id": user_id}, range_limit=1)
        return _decode_row(UserProfile, rows[0], table=TABLE_PROFILES) if rows else None

    def fetch_user_profile_by_username(self, username: str) -> UserProfile | None:
        rows = self.data.query(TABLE_PROFILES, filters={"username": username}, range_limit=1)
        return _decode_row(UserProfile, rows[0], table=TABLE_PROFILES) if rows else None

    def _author_summary(self, user_id: str) -> AuthorSummary | None:
        profile = self.fetch_user_profile(user_id)
        return AuthorSummary.from_profile(profile) if profile else None
