from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import ValidationError as PydanticValidationError

from fakes import FakeAuthContext, failing_data_store_error
from journal_core.models.errors import (
    DataStoreError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from journal_core.utils.constants import TABLE_COMMENTS, TABLE_LIKES, TABLE_PHOTOS, TABLE_PROFILES
from journal_features.feed.models import Post, UserProfile
from journal_features.feed.service import FeedService


def post_row(post_id: str, user_id: str, created_at: str, *, is_public: bool = True) -> dict[str, Any]:
    return {
        "id": post_id,
        "user_id": user_id,
        "image_url": f"{user_id}/{post_id}.jpg",
        "description": None,
        "is_public": is_public,
        "created_at": created_at,
    }


@pytest.fixture
def seeded_store(fake_data_store):
    fake_data_store.seed(
        TABLE_PHOTOS,
        [
            post_row("post1", "john", "2024-01-01T10:00:00+00:00"),
            post_row("post2", "alice", "2024-01-02T10:00:00+00:00"),
            post_row("hidden", "alice", "2024-01-03T10:00:00+00:00", is_public=False),
        ],
    )
    fake_data_store.seed(
        TABLE_PROFILES,
        [
            {"id": "john", "username": "john", "display_name": "John", "created_at": None},
            {"id": "alice", "username": "alice", "display_name": None, "avatar_url": "https://a/alice.png"},
        ],
    )
    fake_data_store.seed(
        TABLE_LIKES,
        [
            {"id": "l1", "post_id": "post2", "user_id": "john", "created_at": "2024-01-02T11:00:00+00:00"},
            {"id": "l2", "post_id": "post2", "user_id": "bob", "created_at": "2024-01-02T12:00:00+00:00"},
        ],
    )
    fake_data_store.seed(
        TABLE_COMMENTS,
        [
            {
                "id": "c2",
                "post_id": "post2",
                "user_id": "john",
                "content": "Second",
                "created_at": "2024-01-02T13:00:00+00:00",
            },
            {
                "id": "c1",
                "post_id": "post2",
                "user_id": "alice",
                "content": "First",
                "created_at": "2024-01-02T12:30:00+00:00",
            },
            {"id": "broken", "post_id": "post2", "created_at": "2024-01-02T14:00:00+00:00"},
        ],
    )
    return fake_data_store


@pytest.fixture
def service(seeded_store, auth) -> FeedService:
    return FeedService(data_store=seeded_store, auth=auth)


class TestFeedReads:
    def test_public_feed_is_newest_first_and_public_only(self, service) -> None:
        posts = service.fetch_public_feed(limit=20, offset=0)

        assert [post.id for post in posts] == ["post2", "post1"]
        assert all(post.author is None for post in posts)

    def test_public_feed_pages(self, service) -> None:
        assert [post.id for post in service.fetch_public_feed(limit=1, offset=1)] == ["post1"]

    def test_user_posts(self, service) -> None:
        assert [post.id for post in service.fetch_user_posts("alice")] == ["post2"]

    def test_enrich_post(self, service) -> None:
        post = service.fetch_public_feed()[0]

        enriched = service.enrich_post(post)

        assert enriched.author.username == "alice"
        assert enriched.display_label == "alice"
        assert enriched.like_count == 2
        assert enriched.comment_count == 3
        assert enriched.is_liked_by_current_user is True
        assert post.author is None

    def test_enrichment_failures_are_independent(self, service, seeded_store) -> None:
        post = service.fetch_public_feed()[0]
        seeded_store.failures[f"count:{TABLE_LIKES}"] = failing_data_store_error()

        enriched = service.enrich_post(post)

        assert enriched.like_count is None
        assert enriched.comment_count == 3
        assert enriched.author is not None

    def test_anonymous_reads(self, seeded_store, anonymous_auth) -> None:
        service = FeedService(data_store=seeded_store, auth=anonymous_auth)

        enriched = service.enrich_post(service.fetch_public_feed()[0])

        assert enriched.is_liked_by_current_user is False

    def test_malformed_post_rows_are_skipped(self, service, seeded_store) -> None:
        seeded_store.seed(TABLE_PHOTOS, [{"id": "bad", "is_public": True, "created_at": "2024-02-01T00:00:00+00:00"}])

        assert "bad" not in [post.id for post in service.fetch_public_feed()]

    def test_unknown_author_label(self) -> None:
        post = Post.model_validate(post_row("x", "ghost", "2024-01-01T00:00:00+00:00"))

        assert post.username == "Unknown User"
        assert post.display_label == "Unknown User"


class TestPostMutations:
    def test_create_post(self, service, seeded_store) -> None:
        post = service.create_post("john/new.jpg", "  Hello  ")

        assert post.user_id == "john"
        assert post.description == "Hello"
        assert post.updated_at is not None
        assert any(row["id"] == post.id for row in seeded_store.tables[TABLE_PHOTOS])

    def test_create_post_requires_session(self, seeded_store, anonymous_auth) -> None:
        with pytest.raises(UnauthenticatedError):
            FeedService(data_store=seeded_store, auth=anonymous_auth).create_post("x.jpg")

    def test_create_post_validates_description(self, service) -> None:
        with pytest.raises(ValidationError):
            service.create_post("john/new.jpg", "x" * 1001)

    def test_delete_post_removes_dependents(self, seeded_store) -> None:
        alice = FeedService(data_store=seeded_store, auth=FakeAuthContext("alice"))

        alice.delete_post("post2")

        assert "post2" not in [row["id"] for row in seeded_store.tables[TABLE_PHOTOS]]
        assert seeded_store.tables[TABLE_LIKES] == []
        assert seeded_store.tables[TABLE_COMMENTS] == []

    def test_delete_foreign_post_deletes_nothing(self, service, seeded_store) -> None:
        with pytest.raises(NotFoundError):
            service.delete_post("post2")

        assert len(seeded_store.tables[TABLE_PHOTOS]) == 3
        assert len(seeded_store.tables[TABLE_LIKES]) == 2
        assert len(seeded_store.tables[TABLE_COMMENTS]) == 3
        assert ("delete", TABLE_LIKES) not in seeded_store.calls

    def test_dependent_cleanup_failure_is_tolerated(self, seeded_store) -> None:
        seeded_store.failures[f"delete:{TABLE_LIKES}"] = failing_data_store_error()
        alice = FeedService(data_store=seeded_store, auth=FakeAuthContext("alice"))

        alice.delete_post("post2")

        assert seeded_store.tables[TABLE_COMMENTS] == []


class TestLikes:
    def test_toggle_like_round_trip(self, service, seeded_store) -> None:
        assert service.toggle_like("post1") is True
        assert service.get_like_count("post1") == 1
        assert service.is_post_liked_by_current_user("post1") is True

        assert service.toggle_like("post1") is False
        assert service.get_like_count("post1") == 0

    def test_toggle_existing_like_removes_only_own(self, service) -> None:
        assert service.toggle_like("post2") is False

        assert [like.user_id for like in service.fetch_likes("post2")] == ["bob"]

    def test_toggle_like_requires_session(self, seeded_store, anonymous_auth) -> None:
        with pytest.raises(UnauthenticatedError):
            FeedService(data_store=seeded_store, auth=anonymous_auth).toggle_like("post1")

    def test_toggle_like_failure_propagates(self, service, seeded_store) -> None:
        seeded_store.failures["insert"] = DataStoreError(message="Unable to save data at this time")

        with pytest.raises(DataStoreError):
            service.toggle_like("post1")


class TestComments:
    def test_fetch_comments_oldest_first_with_authors(self, service) -> None:
        comments = service.fetch_comments("post2")

        assert [comment.id for comment in comments] == ["c1", "c2"]
        assert comments[0].author.username == "alice"
        assert comments[1].author.display_label == "John"

    def test_author_lookup_failure_leaves_comment(self, service, seeded_store) -> None:
        seeded_store.failures[f"query:{TABLE_PROFILES}"] = failing_data_store_error()

        comments = service.fetch_comments("post2")

        assert len(comments) == 2
        assert all(comment.author is None for comment in comments)

    def test_add_and_delete_comment(self, service, seeded_store) -> None:
        comment = service.add_comment("post1", "  Nice  ")

        assert comment.content == "Nice"
        assert comment.author.username == "john"

        service.delete_comment(comment.id)
        assert comment.id not in [row["id"] for row in seeded_store.tables[TABLE_COMMENTS]]

    @pytest.mark.parametrize("content", ["", "   ", "x" * 1001])
    def test_add_comment_validates_content(self, service, content: str) -> None:
        with pytest.raises(ValidationError):
            service.add_comment("post1", content)

    def test_cannot_delete_foreign_comment(self, service) -> None:
        with pytest.raises(NotFoundError):
            service.delete_comment("c1")


class TestProfiles:
    def test_fetch_by_id_and_username(self, service) -> None:
        by_id = service.fetch_user_profile("alice")
        by_username = service.fetch_user_profile_by_username("alice")

        assert by_id.id == by_username.id == "alice"
        assert by_id.has_avatar is True

    def test_missing_timestamp_defaults_to_now(self, service) -> None:
        assert service.fetch_user_profile("john").created_at is not None

    def test_unknown_profile(self, service) -> None:
        assert service.fetch_user_profile("nobody") is None

    def test_empty_profile(self) -> None:
        profile = UserProfile.empty("u1")

        assert profile.display_label == "Unknown User"
        assert profile.has_avatar is False


class TestDisplayHelpers:
    def test_post_counters(self) -> None:
        post = Post.model_validate(
            {**post_row("x", "john", "2024-01-01T00:00:00+00:00"), "like_count": 1530, "comment_count": 12}
        )

        assert post.formatted_like_count == "1.5K"
        assert post.formatted_comment_count == "12"

    def test_counters_before_enrichment(self) -> None:
        post = Post.model_validate(post_row("x", "john", "2024-01-01T00:00:00+00:00"))

        assert post.formatted_like_count == "0"
        assert post.formatted_comment_count == "0"

    def test_naive_timestamps_are_utc(self) -> None:
        now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        post = Post.model_validate(post_row("x", "john", "2024-01-01T09:00:00"))

        assert post.created_at.tzinfo is not None
        assert post.time_ago(now=now) == "3h ago"

    def test_comment_time_ago(self, service) -> None:
        [first, _] = service.fetch_comments("post2")

        assert first.time_ago(now=datetime(2024, 1, 2, 12, 45, tzinfo=timezone.utc)) == "15m ago"
        assert first.time_ago(now=datetime(2024, 3, 1, tzinfo=timezone.utc)) == "Jan 2, 2024"

    def test_unparseable_timestamp_is_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Post.model_validate(post_row("x", "john", "yesterday"))
