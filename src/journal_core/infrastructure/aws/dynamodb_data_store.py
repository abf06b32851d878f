"""DynamoDB-backed implementation of RemoteDataStore."""

from decimal import Decimal
from functools import reduce
from typing import Any
import uuid

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Attr, ConditionBase
from botocore.exceptions import ClientError

from journal_core.filters.offset_pagination import OffsetPagination
from journal_core.infrastructure.adapters.dynamodb_adapter import (
    DynamoDBAdapter,
    DynamoDBAdapterProtocol,
)
from journal_core.models.errors import DataStoreError, NotFoundError, ValidationError
from journal_core.repositories.data_store import Filters, Order, RemoteDataStore, Row
from journal_core.utils.constants import (
    ERROR_CODE_COUNT_FAILED,
    ERROR_CODE_DELETE_FAILED,
    ERROR_CODE_INSERT_FAILED,
    ERROR_CODE_QUERY_FAILED,
    ERROR_CODE_ROW_INVALID_FORMAT,
    ERROR_CODE_UPDATE_FAILED,
)

logger = Logger(UTC=True)


def _from_dynamo(value: Any) -> Any:
    """Convert DynamoDB Decimals back into plain ints/floats."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, dict):
        return {key: _from_dynamo(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_from_dynamo(item) for item in value]
    return value


def _to_dynamo(value: Any) -> Any:
    """Convert floats into Decimals, which is all DynamoDB accepts."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {key: _to_dynamo(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(item) for item in value]
    return value


class DynamoDBDataStore(RemoteDataStore):
    """DynamoDB-backed row storage with error handling.

    Every logical table is a DynamoDB table keyed by ``id`` (string).
    Filtering uses scan filter expressions; ordering and offset/limit
    slicing happen in memory on the matched rows.

    All boto3 errors are caught and translated into
    domain-specific errors with stable semantics.
    """

    def __init__(self, adapter: DynamoDBAdapterProtocol | None = None) -> None:
        """Initialize with DynamoDB adapter."""
        self._db: DynamoDBAdapterProtocol = adapter or DynamoDBAdapter()

    def query(
        self,
        table: str,
        *,
        filters: Filters | None = None,
        order: Order | None = None,
        range_offset: int = 0,
        range_limit: int | None = None,
    ) -> list[Row]:
        """Return rows matching *filters*, ordered and sliced.

        NOTE:
        - Scan results are paginated internally until exhausted.
        - Missing order columns sort as empty strings.
        """
        logger.debug(
            "Querying rows",
            extra={
                "table": table,
                "filters": dict(filters or {}),
                "order": order,
                "offset": range_offset,
                "limit": range_limit,
            },
        )

        window = OffsetPagination(offset=range_offset, limit=range_limit)
        window.ensure_valid()

        try:
            rows = self._scan_all(table, filters)

        except ClientError as exc:
            logger.error("DynamoDB scan failed", extra={"table": table})
            raise DataStoreError(
                message="Unable to load data at this time",
                error_code=ERROR_CODE_QUERY_FAILED,
                details={"table": table},
            ) from exc

        except DataStoreError:
            raise

        except Exception as exc:
            logger.exception("Unexpected error querying rows")
            raise DataStoreError(
                message="Unable to load data at this time",
                error_code=ERROR_CODE_QUERY_FAILED,
                details={"table": table},
            ) from exc

        if order:
            column, descending = order
            rows.sort(key=lambda row: str(row.get(column) or ""), reverse=descending)

        page = window.apply(rows)

        logger.info(
            "Rows queried",
            extra={"table": table, "matched": len(rows), "returned": len(page)},
        )

        return page

    def insert(self, table: str, row: Row) -> Row:
        """Insert *row*, generating an ``id`` when absent.

        Raises:
            DataStoreError: If the insert fails or the id already exists
        """
        item = {**row}
        item.setdefault("id", str(uuid.uuid4()))

        logger.debug("Inserting row", extra={"table": table, "id": item["id"]})

        try:
            self._db.put_item(
                table,
                item=_to_dynamo(item),
                condition_expression="attribute_not_exists(id)",
            )
            logger.info("Row inserted", extra={"table": table, "id": item["id"]})
            return item

        except ClientError as exc:
            logger.error(
                "DynamoDB put_item failed",
                extra={"table": table, "id": item["id"]},
            )
            raise DataStoreError(
                message="Unable to save data at this time",
                error_code=ERROR_CODE_INSERT_FAILED,
                details={"table": table, "id": item["id"]},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error inserting row")
            raise DataStoreError(
                message="Unable to save data at this time",
                error_code=ERROR_CODE_INSERT_FAILED,
                details={"table": table, "id": item["id"]},
            ) from exc

    def update(self, table: str, *, filters: Filters, patch: Row) -> Row:
        """Apply *patch* to the rows matching *filters* and return the first.

        Raises:
            NotFoundError: If no row matches
            DataStoreError: If the update fails
        """
        if not patch:
            raise ValidationError(message="Update patch must not be empty")

        matches = self.query(table, filters=filters)
        if not matches:
            logger.warning(
                "No row to update",
                extra={"table": table, "filters": dict(filters)},
            )
            raise NotFoundError(
                message="Record not found",
                details={"table": table},
            )

        patch = {column: value for column, value in patch.items() if column != "id"}
        names = {f"#f{index}": column for index, column in enumerate(patch)}
        values = {f":v{index}": _to_dynamo(value) for index, value in enumerate(patch.values())}
        assignments = ", ".join(f"#f{index} = :v{index}" for index in range(len(patch)))

        updated: list[Row] = []

        try:
            for match in matches:
                response = self._db.update_item(
                    table,
                    Key={"id": match["id"]},
                    UpdateExpression=f"SET {assignments}",
                    ExpressionAttributeNames=names,
                    ExpressionAttributeValues=values,
                    ConditionExpression="attribute_exists(id)",
                    ReturnValues="ALL_NEW",
                )
                updated.append(_from_dynamo(response.get("Attributes", {})))

        except ClientError as exc:
            logger.error("DynamoDB update_item failed", extra={"table": table})

            if exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                raise NotFoundError(
                    message="Record not found",
                    details={"table": table},
                ) from exc

            raise DataStoreError(
                message="Unable to update data at this time",
                error_code=ERROR_CODE_UPDATE_FAILED,
                details={"table": table},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error updating row")
            raise DataStoreError(
                message="Unable to update data at this time",
                error_code=ERROR_CODE_UPDATE_FAILED,
                details={"table": table},
            ) from exc

        logger.info("Rows updated", extra={"table": table, "count": len(updated)})
        return updated[0]

    def delete(self, table: str, *, filters: Filters) -> int:
        """Delete every row matching *filters* and return how many went."""
        if not filters:
            raise ValidationError(message="Refusing to delete without filters")

        matches = self.query(table, filters=filters)

        try:
            for match in matches:
                self._db.delete_item(table, key={"id": match["id"]})

        except ClientError as exc:
            logger.error("DynamoDB delete_item failed", extra={"table": table})
            raise DataStoreError(
                message="Unable to delete data at this time",
                error_code=ERROR_CODE_DELETE_FAILED,
                details={"table": table},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error deleting rows")
            raise DataStoreError(
                message="Unable to delete data at this time",
                error_code=ERROR_CODE_DELETE_FAILED,
                details={"table": table},
            ) from exc

        logger.info("Rows deleted", extra={"table": table, "count": len(matches)})
        return len(matches)

    def count(self, table: str, *, filters: Filters | None = None) -> int:
        """Count rows matching *filters* without transferring them."""
        scan_kwargs: dict[str, Any] = {"Select": "COUNT"}
        condition = self._filter_expression(filters)
        if condition is not None:
            scan_kwargs["FilterExpression"] = condition

        total = 0

        try:
            while True:
                response = self._db.scan(table, **scan_kwargs)
                total += int(response.get("Count", 0))

                last_evaluated_key = response.get("LastEvaluatedKey")
                if not last_evaluated_key:
                    break
                scan_kwargs["ExclusiveStartKey"] = last_evaluated_key

        except ClientError as exc:
            logger.error("DynamoDB count scan failed", extra={"table": table})
            raise DataStoreError(
                message="Unable to count data at this time",
                error_code=ERROR_CODE_COUNT_FAILED,
                details={"table": table},
            ) from exc

        except Exception as exc:
            logger.exception("Unexpected error counting rows")
            raise DataStoreError(
                message="Unable to count data at this time",
                error_code=ERROR_CODE_COUNT_FAILED,
                details={"table": table},
            ) from exc

        return total

    @staticmethod
    def _filter_expression(filters: Filters | None) -> ConditionBase | None:
        if not filters:
            return None

        conditions = [Attr(column).eq(_to_dynamo(value)) for column, value in filters.items()]
        return reduce(lambda left, right: left & right, conditions)

    def _scan_all(self, table: str, filters: Filters | None) -> list[Row]:
        scan_kwargs: dict[str, Any] = {}
        condition = self._filter_expression(filters)
        if condition is not None:
            scan_kwargs["FilterExpression"] = condition

        rows: list[Row] = []

        while True:
            response = self._db.scan(table, **scan_kwargs)
            page_items = response.get("Items", [])

            if not isinstance(page_items, list):
                raise DataStoreError(
                    message="Invalid scan response from DynamoDB",
                    error_code=ERROR_CODE_ROW_INVALID_FORMAT,
                    details={"table": table},
                )

            rows.extend(_from_dynamo(item) for item in page_items)

            last_evaluated_key = response.get("LastEvaluatedKey")
            if not last_evaluated_key:
                break
            scan_kwargs["ExclusiveStartKey"] = last_evaluated_key

        return rows
