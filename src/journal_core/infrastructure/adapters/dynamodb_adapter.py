"""Thin DynamoDB adapter wrapping boto3 table operations."""

import os
from typing import Any, Protocol, cast

import boto3

from journal_core.utils.constants import (
    DEFAULT_AWS_REGION,
    ENV_AWS_ENDPOINT_URL,
    ENV_AWS_REGION,
    ENV_TABLE_PREFIX,
)


class DynamoDBTable(Protocol):
    """Minimal DynamoDB Table protocol."""

    def put_item(self, *, Item: dict[str, Any], **kwargs: Any) -> dict[str, Any]: ...
    def get_item(self, *, Key: dict[str, Any]) -> dict[str, Any]: ...
    def update_item(self, **kwargs: Any) -> dict[str, Any]: ...
    def delete_item(self, *, Key: dict[str, Any], **kwargs: Any) -> dict[str, Any]: ...
    def scan(self, **kwargs: Any) -> dict[str, Any]: ...


class DynamoDBAdapterProtocol(Protocol):
    """Minimal DynamoDB adapter protocol (data-store-facing)."""

    def put_item(
        self,
        table: str,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]: ...

    def update_item(self, table: str, **kwargs: Any) -> dict[str, Any]: ...

    def delete_item(self, table: str, *, key: dict[str, Any]) -> dict[str, Any]: ...

    def scan(self, table: str, **kwargs: Any) -> dict[str, Any]: ...


class DynamoDBAdapter:
    """Low-level DynamoDB operations (mechanical, no error handling).

    This adapter:
    - Wraps the boto3 DynamoDB resource
    - Maps logical table names to physical ones (``<prefix><table>``)
    - Does NOT handle errors (lets them bubble up)
    - Domain implementations catch and translate errors
    """

    def __init__(self) -> None:
        """Initialize DynamoDB resource from environment."""
        self._prefix = os.getenv(ENV_TABLE_PREFIX, "")
        self._resource = boto3.resource(
            "dynamodb",
            endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
            region_name=os.getenv(ENV_AWS_REGION, DEFAULT_AWS_REGION),
        )
        self._tables: dict[str, DynamoDBTable] = {}

    def physical_name(self, table: str) -> str:
        """Return the physical DynamoDB table name for a logical table."""
        return f"{self._prefix}{table}"

    def _table(self, table: str) -> DynamoDBTable:
        if table not in self._tables:
            self._tables[table] = cast(
                DynamoDBTable,
                self._resource.Table(self.physical_name(table)),
            )
        return self._tables[table]

    def put_item(
        self,
        table: str,
        *,
        item: dict[str, Any],
        condition_expression: str | None = None,
    ) -> dict[str, Any]:
        """Insert item into DynamoDB.

        Raises boto3 exceptions - caught by domain implementation.
        """
        kwargs: dict[str, Any] = {"Item": item}

        if condition_expression:
            kwargs["ConditionExpression"] = condition_expression

        return self._table(table).put_item(**kwargs)

    def update_item(self, table: str, **kwargs: Any) -> dict[str, Any]:
        """Update item attributes.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._table(table).update_item(**kwargs)

    def delete_item(self, table: str, *, key: dict[str, Any]) -> dict[str, Any]:
        """Delete item by key.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._table(table).delete_item(Key=key)

    def scan(self, table: str, **kwargs: Any) -> dict[str, Any]:
        """Execute a DynamoDB scan.

        Raises boto3 exceptions - caught by domain implementation.
        """
        return self._table(table).scan(**kwargs)
