"""Abstract contract for the remote relational data store."""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

Row = dict[str, Any]
Filters = Mapping[str, Any]
Order = tuple[str, bool]


class RemoteDataStore(ABC):
    """Contract for reading and writing schemaless rows.

    Implementations could be DynamoDB, PostgREST, SQLite, etc.
    Components depend on this interface, not the implementation.

    Filters are equality matches on every given column. Order is a
    ``(column, descending)`` pair.
    """

    @abstractmethod
    def query(
        self,
        table: str,
        *,
        filters: Filters | None = None,
        order: Order | None = None,
        range_offset: int = 0,
        range_limit: int | None = None,
    ) -> list[Row]:
        """Return rows matching *filters*.

        Args:
            table: Logical table name
            filters: Equality filters, all of which must match
            order: Optional ``(column, descending)`` sort
            range_offset: Number of matching rows to skip
            range_limit: Maximum number of rows to return (all if None)

        Returns:
            List of rows in the requested order

        Raises:
            ValidationError: If the range is invalid
            DataStoreError: If the query fails
        """

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        """Insert *row* and return the stored row.

        Raises:
            DataStoreError: If the insert fails
        """

    @abstractmethod
    def update(self, table: str, *, filters: Filters, patch: Row) -> Row:
        """Apply *patch* to the single row matching *filters* and return it.

        Raises:
            NotFoundError: If no row matches
            DataStoreError: If the update fails
        """

    @abstractmethod
    def delete(self, table: str, *, filters: Filters) -> int:
        """Delete every row matching *filters*.

        Returns:
            Number of rows deleted

        Raises:
            DataStoreError: If the delete fails
        """

    @abstractmethod
    def count(self, table: str, *, filters: Filters | None = None) -> int:
        """Count rows matching *filters*.

        Raises:
            DataStoreError: If the count fails
        """
