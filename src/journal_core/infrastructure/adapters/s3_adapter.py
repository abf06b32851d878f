"""Thin adapter for interacting with Amazon S3."""

from collections.abc import Mapping, Sequence
import os
from typing import Any, Protocol

import boto3

from journal_core.utils.constants import (
    DEFAULT_AWS_REGION,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_PHOTO_BUCKET_NAME,
)


class _Boto3S3Client(Protocol):
    """Internal typing for boto3 S3 client (AWS-facing only)."""

    def put_object(
        self,
        *,
        Bucket: str,
        Key: str,
        Body: bytes,
        ContentType: str,
    ) -> Any: ...

    def delete_objects(
        self,
        *,
        Bucket: str,
        Delete: Mapping[str, Any],
    ) -> Mapping[str, Any]: ...

    def generate_presigned_url(
        self,
        ClientMethod: str,
        Params: Mapping[str, Any],
        ExpiresIn: int,
    ) -> str: ...


class S3AdapterProtocol(Protocol):
    """Minimal S3 adapter protocol (object-store-facing)."""

    region: str
    endpoint_url: str | None

    def bucket_name(self, bucket: str) -> str: ...

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None: ...

    def delete_objects(self, *, bucket: str, keys: Sequence[str]) -> Mapping[str, Any]: ...

    def generate_presigned_url(
        self,
        *,
        method: str,
        params: dict[str, Any],
        expires_in: int,
    ) -> str: ...


class S3Adapter:
    """Low-level S3 operations (mechanical, no error handling).

    This adapter:
    - Wraps boto3 S3 client
    - Maps the logical ``photos`` bucket to the configured bucket name
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self) -> None:
        """Create S3 client from environment configuration."""
        bucket_name = os.getenv(ENV_PHOTO_BUCKET_NAME)
        if not bucket_name:
            raise RuntimeError(f"{ENV_PHOTO_BUCKET_NAME} environment variable is not set")

        self._bucket = bucket_name
        self.region = os.getenv(ENV_AWS_REGION, DEFAULT_AWS_REGION)
        self.endpoint_url = os.getenv(ENV_AWS_ENDPOINT_URL)
        self._client: _Boto3S3Client = boto3.client(
            "s3",
            endpoint_url=self.endpoint_url,
            region_name=self.region,
        )

    def bucket_name(self, bucket: str) -> str:
        """Return the physical bucket for a logical bucket name.

        Every logical bucket shares the configured bucket; the logical
        name only scopes callers.
        """
        return self._bucket

    def put_object(
        self,
        *,
        bucket: str,
        key: str,
        body: bytes,
        content_type: str,
    ) -> None:
        """Store object in S3.
        Raises boto3 exceptions - caught by domain implementation.
        """
        self._client.put_object(
            Bucket=self.bucket_name(bucket),
            Key=key,
            Body=body,
            ContentType=content_type,
        )

    def delete_objects(self, *, bucket: str, keys: Sequence[str]) -> Mapping[str, Any]:
        """Delete objects from S3 in one request.
        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._client.delete_objects(
            Bucket=self.bucket_name(bucket),
            Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
        )

    def generate_presigned_url(
        self,
        *,
        method: str,
        params: dict[str, Any],
        expires_in: int,
    ) -> str:
        """Generate a pre-signed S3 URL."""
        return self._client.generate_presigned_url(
            ClientMethod=method,
            Params={**params, "Bucket": self._bucket},
            ExpiresIn=expires_in,
        )
