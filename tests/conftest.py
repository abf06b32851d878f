"""
Pytest configuration and fixtures for photo journal sync tests.
Provides AWS mocking, DynamoDB and S3 fixtures with proper cleanup.
"""

import os
from collections.abc import Callable
from typing import Any

import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("JOURNAL_PHOTO_BUCKET_NAME", "journal-photos-test")
os.environ.setdefault("JOURNAL_TABLE_PREFIX", "test_")
os.environ.setdefault("TRANSFORM_API_KEY", "test-transform-key")
os.environ.setdefault("POWERTOOLS_LOG_LEVEL", "DEBUG")

from journal_core.utils.constants import ALL_TABLES  # noqa: E402

from fakes import (  # noqa: E402
    FakeAuthContext,
    FakeDataStore,
    FakeObjectStore,
    ManualScheduler,
    MemoryBlobStore,
)


@pytest.fixture(scope="function")
def aws_mock():
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def dynamodb_resource(aws_mock):
    return boto3.resource("dynamodb", region_name=os.getenv("AWS_REGION"))


def _physical_table_name(table: str) -> str:
    return f"{os.getenv('JOURNAL_TABLE_PREFIX', '')}{table}"


def _create_dynamodb_table(dynamodb_resource, table_name: str):
    """Helper to create a DynamoDB table keyed by ``id``."""
    return dynamodb_resource.create_table(
        TableName=table_name,
        BillingMode="PAY_PER_REQUEST",
        KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
    )


@pytest.fixture(scope="function")
def dynamodb_tables(dynamodb_resource) -> dict[str, Any]:
    """
    Create every logical table (photos, likes, comments, profiles).

    Tables live only for the duration of the moto context.
    """
    tables: dict[str, Any] = {}

    for table in ALL_TABLES:
        name = _physical_table_name(table)
        try:
            created = dynamodb_resource.Table(name)
            created.load()
        except ClientError:
            created = _create_dynamodb_table(dynamodb_resource, name)
            created.wait_until_exists()
        tables[table] = created

    return tables


@pytest.fixture
def dynamodb_put_item(dynamodb_tables) -> Callable[[str, dict[str, Any]], dict[str, Any]]:
    """
    Helper to insert a single item into a logical table.

    Usage:
        item = dynamodb_put_item("photos", {"id": "p1", "user_id": "john"})
    """

    def _put(table: str, item: dict[str, Any]) -> dict[str, Any]:
        dynamodb_tables[table].put_item(Item=item)
        return item

    return _put


@pytest.fixture
def dynamodb_get_item(dynamodb_tables) -> Callable[[str, str], dict[str, Any] | None]:
    """
    Helper to get a single item from a logical table.

    Usage:
        item = dynamodb_get_item("photos", "p1")
    """

    def _get(table: str, item_id: str) -> dict[str, Any] | None:
        response: dict[str, Any] = dynamodb_tables[table].get_item(Key={"id": item_id})
        item: dict[str, Any] | None = response.get("Item")
        return item

    return _get


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_bucket(s3_client):
    """Create the photo bucket for the duration of the moto context."""
    bucket_name = os.getenv("JOURNAL_PHOTO_BUCKET_NAME")

    try:
        s3_client.head_bucket(Bucket=bucket_name)
    except ClientError:
        s3_client.create_bucket(Bucket=bucket_name)

    return s3_client


@pytest.fixture
def s3_put_object(s3_bucket) -> Callable[..., dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        response = s3_put_object("john/photo.jpg", image_bytes, "image/jpeg")
    """

    def _put(key: str, body: bytes, content_type: str = "application/octet-stream"):
        return s3_bucket.put_object(
            Bucket=os.getenv("JOURNAL_PHOTO_BUCKET_NAME"),
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    return _put


@pytest.fixture
def s3_get_object(s3_bucket) -> Callable[[str], bytes]:
    """
    Helper to get an object from S3.

    Usage:
        content = s3_get_object("john/photo.jpg")
    """

    def _get(key: str) -> bytes:
        response: dict[str, Any] = s3_bucket.get_object(
            Bucket=os.getenv("JOURNAL_PHOTO_BUCKET_NAME"),
            Key=key,
        )
        data: bytes = response["Body"].read()
        return data

    return _get


@pytest.fixture
def fake_data_store() -> FakeDataStore:
    return FakeDataStore()


@pytest.fixture
def fake_object_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def memory_blobs() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def auth() -> FakeAuthContext:
    return FakeAuthContext("john")


@pytest.fixture
def anonymous_auth() -> FakeAuthContext:
    return FakeAuthContext(None)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def sample_png_binary() -> bytes:
    """Sample binary image data (1x1 PNG)."""
    import base64

    png_base64 = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
    return base64.b64decode(png_base64)


@pytest.fixture
def photo_rows() -> list[dict[str, Any]]:
    """Photos of john and alice, oldest first."""
    return [
        {
            "id": "p1",
            "user_id": "john",
            "image_url": "john/p1.jpg",
            "title": "First",
            "description": "First photo",
            "is_public": True,
            "created_at": "2024-01-01T10:00:00+00:00",
        },
        {
            "id": "p2",
            "user_id": "john",
            "image_url": "john/p2.jpg",
            "title": None,
            "description": None,
            "is_public": True,
            "created_at": "2024-01-02T10:00:00+00:00",
        },
        {
            "id": "a1",
            "user_id": "alice",
            "image_url": "alice/a1.png",
            "title": "Cat",
            "description": "Cat photo",
            "is_public": False,
            "created_at": "2024-01-03T10:00:00+00:00",
        },
    ]
