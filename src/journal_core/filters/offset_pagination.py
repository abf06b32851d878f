"""
Offset/limit windows over already-ordered rows.
"""

from collections.abc import Sequence
from typing import Any

from journal_core.models.errors import ValidationError
from journal_core.utils.constants import (
    DEFAULT_OFFSET,
    ERROR_CODE_INVALID_RANGE,
    MAX_LIMIT,
    MIN_LIMIT,
)


class OffsetPagination:
    """
    A requested ``[offset, offset + limit)`` window.

    ``limit=None`` selects every row from ``offset`` onwards. The window is
    checked once, then applied to rows that were filtered and ordered
    by the caller.

    Example:
        window = OffsetPagination(offset=20, limit=20)
        window.ensure_valid()
        page = window.apply(rows)
    """

    def __init__(self, *, offset: int = DEFAULT_OFFSET, limit: int | None = None) -> None:
        self.offset = offset
        self.limit = limit

    def problem(self) -> str | None:
        """Describe what is wrong with the window, or None if it is usable."""
        if self.limit is not None and not MIN_LIMIT <= self.limit <= MAX_LIMIT:
            return f"Limit must be between {MIN_LIMIT} and {MAX_LIMIT}"

        if self.offset < 0:
            return "Offset must be zero or a positive integer"

        return None

    def ensure_valid(self) -> None:
        """
        Raises:
            ValidationError: With ``INVALID_RANGE`` if the window is unusable
        """
        message = self.problem()
        if message is not None:
            raise ValidationError(
                message=message,
                error_code=ERROR_CODE_INVALID_RANGE,
                details={"offset": self.offset, "limit": self.limit},
            )

    def apply(self, rows: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        end = None if self.limit is None else self.offset + self.limit
        return list(rows[self.offset : end])
