"""
Incremental loading of the public feed.
"""

import asyncio

from aws_lambda_powertools import Logger

from journal_core.utils.constants import DEFAULT_PAGE_SIZE
from journal_core.utils.decorators import user_facing_message
from journal_core.utils.observable import Observable
from journal_features.feed.models import FeedPage, Post
from journal_features.feed.service import FeedService

logger = Logger(UTC=True)


class FeedPaginator(Observable[FeedPage]):
    """Offset-based loader for the public feed.

    - ``posts`` never holds two posts with the same id.
    - Pages are appended in fetch order (newest first) and never re-sorted.
    - A first-page load always runs and supersedes whatever is in flight.
      Next-page triggers are ignored while any load runs.
    - Failures set a dismissible ``error_message`` and keep ``posts``.
    """

    def __init__(self, feed_service: FeedService, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        super().__init__()
        self._service = feed_service
        self._page_size = page_size

        self._posts: list[Post] = []
        self._next_offset = 0
        self._has_more = True
        self._is_loading = False
        self._error_message: str | None = None

        # Bumped by every first-page load; older results are dropped
        self._generation = 0

    @property
    def posts(self) -> list[Post]:
        return list(self._posts)

    @property
    def next_offset(self) -> int:
        return self._next_offset

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error_message(self) -> str | None:
        return self._error_message

    def snapshot(self) -> FeedPage:
        return FeedPage(
            posts=self.posts,
            next_offset=self._next_offset,
            has_more=self._has_more,
            is_loading=self._is_loading,
            error_message=self._error_message,
        )

    async def load_first_page(self, page_size: int | None = None) -> None:
        """Replace ``posts`` with the first page of the feed."""
        size = page_size or self._page_size
        self._generation += 1
        generation = self._generation
        self._is_loading = True
        self._error_message = None
        self._notify(self.snapshot())

        try:
            fetched = await asyncio.to_thread(self._service.fetch_public_feed, size, 0)
        except Exception as exc:
            if self._superseded(generation):
                return
            logger.exception("Failed to load feed")
            self._error_message = f"Failed to load feed: {user_facing_message(exc)}"
            self._is_loading = False
            self._notify(self.snapshot())
            return

        enriched = await self._enrich(fetched)
        if self._superseded(generation):
            return

        self._posts = self._without_duplicates(enriched, seen=set())
        self._next_offset = len(fetched)
        self._has_more = len(fetched) == size
        self._is_loading = False
        self._notify(self.snapshot())

        logger.info("Feed loaded", extra={"count": len(self._posts), "has_more": self._has_more})

    async def load_next_page(self, page_size: int | None = None) -> None:
        """Append the next page; does nothing while loading or at the end."""
        if self._is_loading or not self._has_more:
            return

        size = page_size or self._page_size
        offset = self._next_offset
        generation = self._generation
        self._is_loading = True
        self._notify(self.snapshot())

        try:
            fetched = await asyncio.to_thread(self._service.fetch_public_feed, size, offset)
        except Exception as exc:
            if self._superseded(generation):
                return
            logger.exception("Failed to load more posts", extra={"offset": offset})
            self._error_message = f"Failed to load more posts: {user_facing_message(exc)}"
            self._is_loading = False
            self._notify(self.snapshot())
            return

        enriched = await self._enrich(fetched)
        if self._superseded(generation):
            return

        seen = {post.id for post in self._posts}

        self._posts.extend(self._without_duplicates(enriched, seen=seen))
        self._next_offset = offset + len(fetched)
        self._has_more = len(fetched) == size
        self._is_loading = False
        self._notify(self.snapshot())

        logger.info(
            "Feed page appended",
            extra={"fetched": len(fetched), "total": len(self._posts), "has_more": self._has_more},
        )

    async def refresh(self) -> None:
        self._next_offset = 0
        self._has_more = True
        await self.load_first_page()

    async def toggle_like(self, post: Post) -> None:
        """Flip the like state locally, then remotely.

        If the remote toggle fails, the local flip is undone on the post as
        it is now, so a later toggle of the same post survives, and
        ``error_message`` is set.
        """
        current = self._find(post.id)
        if current is None:
            return

        liked, optimistic_count = self._flip_like(current)
        self._notify(self.snapshot())

        try:
            is_liked = await asyncio.to_thread(self._service.toggle_like, post.id)
        except Exception as exc:
            logger.exception("Failed to update like", extra={"post_id": post.id})
            latest = self._find(post.id)
            if latest is not None:
                self._flip_like(latest)
            self._error_message = f"Failed to update like: {user_facing_message(exc)}"
            self._notify(self.snapshot())
            return

        try:
            like_count = await asyncio.to_thread(self._service.get_like_count, post.id)
        except Exception:
            logger.warning("Unable to refresh like count", extra={"post_id": post.id})
            like_count = optimistic_count if is_liked == liked else current.like_count

        self._replace(post.id, is_liked_by_current_user=is_liked, like_count=like_count)
        self._notify(self.snapshot())

    async def create_post(self, image_url: str, description: str | None = None) -> bool:
        """Create a post and show it at the top of the feed."""
        try:
            created = await asyncio.to_thread(self._service.create_post, image_url, description)
        except Exception as exc:
            logger.exception("Failed to create post")
            self._error_message = f"Failed to create post: {user_facing_message(exc)}"
            self._notify(self.snapshot())
            return False

        self._posts = [created] + [existing for existing in self._posts if existing.id != created.id]
        self._notify(self.snapshot())
        return True

    async def delete_post(self, post: Post) -> bool:
        try:
            await asyncio.to_thread(self._service.delete_post, post.id)
        except Exception as exc:
            logger.exception("Failed to delete post", extra={"post_id": post.id})
            self._error_message = f"Failed to delete post: {user_facing_message(exc)}"
            self._notify(self.snapshot())
            return False

        self._posts = [existing for existing in self._posts if existing.id != post.id]
        self._notify(self.snapshot())
        return True

    def dismiss_error(self) -> None:
        if self._error_message is not None:
            self._error_message = None
            self._notify(self.snapshot())

    async def _enrich(self, posts: list[Post]) -> list[Post]:
        results = await asyncio.gather(
            *(asyncio.to_thread(self._service.enrich_post, post) for post in posts),
            return_exceptions=True,
        )

        enriched: list[Post] = []
        for post, result in zip(posts, results):
            if isinstance(result, Post):
                enriched.append(result)
            else:
                logger.warning(
                    "Post enrichment failed, showing post without it",
                    extra={"post_id": post.id, "error": str(result)},
                )
                enriched.append(post)

        return enriched

    @staticmethod
    def _without_duplicates(posts: list[Post], *, seen: set[str]) -> list[Post]:
        unique: list[Post] = []
        for post in posts:
            if post.id not in seen:
                seen.add(post.id)
                unique.append(post)
        return unique

    def _superseded(self, generation: int) -> bool:
        if generation == self._generation:
            return False
        logger.debug("Discarding result of a superseded feed load", extra={"generation": generation})
        return True

    def _flip_like(self, post: Post) -> tuple[bool, int]:
        liked = not bool(post.is_liked_by_current_user)
        like_count = max(0, (post.like_count or 0) + (1 if liked else -1))
        self._replace(post.id, is_liked_by_current_user=liked, like_count=like_count)
        return liked, like_count

    def _find(self, post_id: str) -> Post | None:
        return next((post for post in self._posts if post.id == post_id), None)

    def _replace(self, post_id: str, **updates: object) -> None:
        for index, post in enumerate(self._posts):
            if post.id == post_id:
                self._posts[index] = post.model_copy(update=updates)
                return
