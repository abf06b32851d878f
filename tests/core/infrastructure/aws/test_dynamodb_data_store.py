from decimal import Decimal
from typing import Any

from botocore.exceptions import ClientError
import pytest

from journal_core.infrastructure.aws.dynamodb_data_store import DynamoDBDataStore
from journal_core.models.errors import DataStoreError, NotFoundError, ValidationError
from journal_core.utils.constants import (
    ERROR_CODE_INSERT_FAILED,
    ERROR_CODE_INVALID_RANGE,
    ERROR_CODE_QUERY_FAILED,
    TABLE_LIKES,
    TABLE_PHOTOS,
)


class DummyAdapter:
    """Adapter whose every call raises the configured error."""

    def __init__(self, error: Exception) -> None:
        self.error = error

    def put_item(self, table: str, **_: Any) -> dict[str, Any]:
        raise self.error

    def update_item(self, table: str, **_: Any) -> dict[str, Any]:
        raise self.error

    def delete_item(self, table: str, **_: Any) -> dict[str, Any]:
        raise self.error

    def scan(self, table: str, **_: Any) -> dict[str, Any]:
        raise self.error


def _client_error(code: str = "InternalServerError") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "boom"}}, "Operation")


@pytest.fixture
def seeded_photos(dynamodb_put_item, photo_rows) -> list[dict[str, Any]]:
    for row in photo_rows:
        dynamodb_put_item(TABLE_PHOTOS, row)
    return photo_rows


class TestDynamoDBDataStoreQuery:
    def test_query_filters_and_orders_descending(self, seeded_photos) -> None:
        store = DynamoDBDataStore()

        rows = store.query(
            TABLE_PHOTOS,
            filters={"user_id": "john"},
            order=("created_at", True),
        )

        assert [row["id"] for row in rows] == ["p2", "p1"]

    def test_query_applies_offset_and_limit(self, seeded_photos) -> None:
        store = DynamoDBDataStore()

        rows = store.query(
            TABLE_PHOTOS,
            order=("created_at", False),
            range_offset=1,
            range_limit=1,
        )

        assert [row["id"] for row in rows] == ["p2"]

    def test_query_filters_on_boolean(self, seeded_photos) -> None:
        store = DynamoDBDataStore()

        rows = store.query(TABLE_PHOTOS, filters={"is_public": True})

        assert {row["id"] for row in rows} == {"p1", "p2"}

    def test_query_converts_decimals(self, dynamodb_put_item) -> None:
        dynamodb_put_item(TABLE_PHOTOS, {"id": "n1", "width": Decimal("640"), "ratio": Decimal("1.5")})
        store = DynamoDBDataStore()

        (row,) = store.query(TABLE_PHOTOS, filters={"id": "n1"})

        assert row["width"] == 640 and isinstance(row["width"], int)
        assert row["ratio"] == 1.5

    def test_query_rejects_invalid_range(self, dynamodb_tables) -> None:
        store = DynamoDBDataStore()

        with pytest.raises(ValidationError) as exc:
            store.query(TABLE_PHOTOS, range_offset=-1)

        assert exc.value.error_code == ERROR_CODE_INVALID_RANGE

    def test_query_translates_client_error(self) -> None:
        store = DynamoDBDataStore(adapter=DummyAdapter(_client_error()))

        with pytest.raises(DataStoreError) as exc:
            store.query(TABLE_PHOTOS)

        assert exc.value.error_code == ERROR_CODE_QUERY_FAILED

    def test_query_missing_table_is_data_store_error(self, aws_mock) -> None:
        store = DynamoDBDataStore()

        with pytest.raises(DataStoreError):
            store.query("missing_table")


class TestDynamoDBDataStoreWrites:
    def test_insert_generates_id(self, dynamodb_tables, dynamodb_get_item) -> None:
        store = DynamoDBDataStore()

        row = store.insert(TABLE_LIKES, {"post_id": "p1", "user_id": "john", "score": 0.5})

        assert row["id"]
        stored = dynamodb_get_item(TABLE_LIKES, row["id"])
        assert stored is not None
        assert stored["post_id"] == "p1"
        assert stored["score"] == Decimal("0.5")

    def test_insert_duplicate_id_fails(self, dynamodb_tables) -> None:
        store = DynamoDBDataStore()
        store.insert(TABLE_LIKES, {"id": "l1", "post_id": "p1"})

        with pytest.raises(DataStoreError) as exc:
            store.insert(TABLE_LIKES, {"id": "l1", "post_id": "p2"})

        assert exc.value.error_code == ERROR_CODE_INSERT_FAILED

    def test_update_returns_new_row(self, seeded_photos) -> None:
        store = DynamoDBDataStore()

        updated = store.update(
            TABLE_PHOTOS,
            filters={"id": "p1", "user_id": "john"},
            patch={"title": "Renamed"},
        )

        assert updated["id"] == "p1"
        assert updated["title"] == "Renamed"

    def test_update_without_match_raises_not_found(self, seeded_photos) -> None:
        store = DynamoDBDataStore()

        with pytest.raises(NotFoundError):
            store.update(TABLE_PHOTOS, filters={"id": "p1", "user_id": "alice"}, patch={"title": "x"})

    def test_update_empty_patch_rejected(self, seeded_photos) -> None:
        store = DynamoDBDataStore()

        with pytest.raises(ValidationError):
            store.update(TABLE_PHOTOS, filters={"id": "p1"}, patch={})

    def test_delete_is_scoped_by_filters(self, seeded_photos, dynamodb_get_item) -> None:
        store = DynamoDBDataStore()

        assert store.delete(TABLE_PHOTOS, filters={"id": "a1", "user_id": "john"}) == 0
        assert store.delete(TABLE_PHOTOS, filters={"user_id": "john"}) == 2

        assert dynamodb_get_item(TABLE_PHOTOS, "p1") is None
        assert dynamodb_get_item(TABLE_PHOTOS, "a1") is not None

    def test_delete_without_filters_rejected(self, dynamodb_tables) -> None:
        store = DynamoDBDataStore()

        with pytest.raises(ValidationError):
            store.delete(TABLE_PHOTOS, filters={})

    def test_count(self, seeded_photos) -> None:
        store = DynamoDBDataStore()

        assert store.count(TABLE_PHOTOS) == 3
        assert store.count(TABLE_PHOTOS, filters={"user_id": "john"}) == 2
        assert store.count(TABLE_PHOTOS, filters={"user_id": "nobody"}) == 0

    def test_count_translates_client_error(self) -> None:
        store = DynamoDBDataStore(adapter=DummyAdapter(_client_error()))

        with pytest.raises(DataStoreError):
            store.count(TABLE_PHOTOS)
