import asyncio

import pytest

from journal_core.models.errors import DataStoreError
from journal_core.utils.decorators import background_operation, user_facing_message
from journal_core.utils.observable import Observable
from journal_core.utils.scheduler import AsyncioScheduler


class TestBackgroundOperation:
    @pytest.mark.asyncio
    async def test_returns_result(self) -> None:
        @background_operation
        async def work() -> int:
            return 42

        assert await work() == 42

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [ConnectionError("offline"), TimeoutError(), DataStoreError(message="down")],
    )
    async def test_failures_resolve_to_none(self, error: Exception) -> None:
        @background_operation
        async def work() -> int:
            raise error

        assert await work() is None

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self) -> None:
        started = asyncio.Event()

        @background_operation
        async def work() -> None:
            started.set()
            await asyncio.sleep(10)

        task = asyncio.create_task(work())
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


@pytest.mark.parametrize(
    "error, expected",
    [
        (DataStoreError(message="Unable to load data at this time"), "Unable to load data at this time"),
        (TimeoutError(), "The request took too long. Please try again."),
        (ConnectionError(), "Unable to reach the server. Please check your connection."),
        (RuntimeError("odd"), "odd"),
        (RuntimeError(), "Something went wrong. Please try again."),
    ],
)
def test_user_facing_message(error: Exception, expected: str) -> None:
    assert user_facing_message(error) == expected


class TestObservable:
    def test_subscribers_notified_in_order_and_unsubscribe(self) -> None:
        observable: Observable[int] = Observable()
        received: list[tuple[str, int]] = []

        observable.subscribe(lambda value: received.append(("a", value)))
        unsubscribe_b = observable.subscribe(lambda value: received.append(("b", value)))

        observable._notify(1)
        unsubscribe_b()
        observable._notify(2)

        assert received == [("a", 1), ("b", 1), ("a", 2)]

    def test_failing_subscriber_does_not_block_others(self) -> None:
        observable: Observable[int] = Observable()
        received: list[int] = []

        def broken(_: int) -> None:
            raise RuntimeError("boom")

        observable.subscribe(broken)
        observable.subscribe(received.append)
        observable._notify(7)

        assert received == [7]


@pytest.mark.asyncio
async def test_asyncio_scheduler_runs_and_cancels() -> None:
    scheduler = AsyncioScheduler()
    fired: list[str] = []

    scheduler.call_later(0.01, lambda: fired.append("kept"))
    cancelled = scheduler.call_later(0.01, lambda: fired.append("cancelled"))
    cancelled.cancel()
    await asyncio.sleep(0.05)

    assert fired == ["kept"]
