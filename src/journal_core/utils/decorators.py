"""
Common decorators for background and boundary-crossing operations.
"""

from __future__ import annotations

import traceback
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

from aws_lambda_powertools import Logger

logger = Logger(service="journal-sync", UTC=True)

ResultT = TypeVar("ResultT")


def _log_error(
    message: str,
    *,
    operation: str,
    exc: Exception,
    level: str = "warning",
) -> None:
    """
    Log error with consistent structure and full context.

    Args:
        message: Log message
        operation: Name of the wrapped operation
        exc: Exception that was raised
        level: Log level ('warning' or 'exception')
    """
    log_extra = {
        "operation": operation,
        "error": str(exc),
        "error_type": type(exc).__name__,
    }

    if level == "exception":
        # logger.exception automatically includes traceback
        logger.exception(message, extra=log_extra)
    else:
        # For warnings, manually add traceback
        log_extra["traceback"] = traceback.format_exc()
        logger.warning(message, extra=log_extra)


def background_operation(
    func: Callable[..., Awaitable[ResultT]],
) -> Callable[..., Awaitable[ResultT | None]]:
    """
    Decorator for background coroutines whose failures must never reach the caller.

    Background work (gallery reconciliation, like-status backfill, preloading)
    keeps whatever state it had before the failure. The failure is logged and
    the coroutine resolves to ``None``.

    Cancellation is not a failure and always propagates.

    Example:
        @background_operation
        async def refresh(self) -> None:
            ...
    """

    @wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> ResultT | None:
        try:
            return await func(*args, **kwargs)

        # Network-level issues are expected on mobile connections
        except (ConnectionError, TimeoutError) as exc:
            _log_error(
                "Background operation interrupted by connectivity",
                operation=func.__qualname__,
                exc=exc,
            )
            return None

        except Exception as exc:
            _log_error(
                "Background operation failed",
                operation=func.__qualname__,
                exc=exc,
                level="exception",
            )
            return None

    return wrapper


def user_facing_message(exc: Exception) -> str:
    """
    Convert exceptions into messages suitable for a dismissible notification.

    Domain errors already carry a user-friendly message; anything else is
    mapped by type.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message

    if isinstance(exc, TimeoutError):
        return "The request took too long. Please try again."

    if isinstance(exc, ConnectionError):
        return "Unable to reach the server. Please check your connection."

    exc_str = str(exc)
    if exc_str:
        return exc_str

    return "Something went wrong. Please try again."
