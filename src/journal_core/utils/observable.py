"""Minimal observer interface used to push state changes to the presentation layer."""

from collections.abc import Callable
from typing import Generic, TypeVar

from aws_lambda_powertools import Logger

logger = Logger(UTC=True)

SnapshotT = TypeVar("SnapshotT")


class Observable(Generic[SnapshotT]):
    """Keeps a list of subscribers and notifies them with a state snapshot.

    Subscribers are called synchronously, in subscription order, on the
    context that mutated the state. A failing subscriber is logged and
    does not prevent the others from being notified.
    """

    def __init__(self) -> None:
        self._subscribers: list[Callable[[SnapshotT], None]] = []

    def subscribe(self, handler: Callable[[SnapshotT], None]) -> Callable[[], None]:
        """Register *handler* and return a callable that unsubscribes it."""
        self._subscribers.append(handler)

        def unsubscribe() -> None:
            if handler in self._subscribers:
                self._subscribers.remove(handler)

        return unsubscribe

    def _notify(self, snapshot: SnapshotT) -> None:
        for handler in list(self._subscribers):
            try:
                handler(snapshot)
            except Exception:
                logger.exception(
                    "Subscriber failed",
                    extra={"handler": getattr(handler, "__name__", repr(handler))},
                )
