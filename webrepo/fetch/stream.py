"""Single-value push-based streams over one asynchronous computation."""

import asyncio
import concurrent.futures
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar


T = TypeVar("T")
U = TypeVar("U")

Source = Callable[[], Awaitable[T]]

# Strong references to running subscriptions, see asyncio.create_task
_running_tasks: set[asyncio.Task[None]] = set()


def _running_loop() -> asyncio.AbstractEventLoop | None:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscription:
    """Handle on one subscription to a CallStream."""

    def __init__(self) -> None:
        self._cancelled = False
        self._finished = False
        self._handle: asyncio.Task[None] | concurrent.futures.Future[None] | None = None

    @property
    def cancelled(self) -> bool:
        """Check if the subscription was cancelled."""
        return self._cancelled

    @property
    def finished(self) -> bool:
        """Check if a terminal event was delivered."""
        return self._finished

    def cancel(self) -> None:
        """Cancel the subscription.

        Aborts the in-flight computation if it is still running and
        suppresses any terminal event not yet delivered.
        """
        if self._cancelled or self._finished:
            return
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()

    def _attach(self, handle: asyncio.Task[None] | concurrent.futures.Future[None]) -> None:
        self._handle = handle

    def _claim(self) -> bool:
        # Only one terminal event, and none after cancel.
        if self._cancelled or self._finished:
            return False
        self._finished = True
        return True


class CallStream(Generic[T]):
    """A lazy stream that emits one value then completes, or one error.

    Nothing runs until ``subscribe``; every subscription runs the source
    once. The source runs on ``run_on`` and terminal callbacks always fire
    on ``deliver_on``. Both default to the loop running at subscribe time.
    """

    def __init__(
        self,
        source: Source[T],
        deliver_on: asyncio.AbstractEventLoop | None = None,
        run_on: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize the stream.

        Args:
            source: Zero-argument coroutine function producing the value.
            deliver_on: Loop on which callbacks are invoked.
            run_on: Loop on which the source runs.
        """
        self._source = source
        self._deliver_on = deliver_on
        self._run_on = run_on

    def map(self, fn: Callable[[T], U]) -> "CallStream[U]":
        """Derive a stream whose value is ``fn`` applied to this one's."""
        source = self._source

        async def mapped() -> U:
            return fn(await source())

        return CallStream(mapped, deliver_on=self._deliver_on, run_on=self._run_on)

    def deliver_on(self, loop: asyncio.AbstractEventLoop) -> "CallStream[T]":
        """Return a copy delivering terminal events on ``loop``."""
        return CallStream(self._source, deliver_on=loop, run_on=self._run_on)

    def run_on(self, loop: asyncio.AbstractEventLoop) -> "CallStream[T]":
        """Return a copy running its source on ``loop``."""
        return CallStream(self._source, deliver_on=self._deliver_on, run_on=loop)

    def subscribe(
        self,
        on_value: Callable[[T], object],
        on_error: Callable[[Exception], object] | None = None,
        on_completed: Callable[[], object] | None = None,
    ) -> Subscription:
        """Start the computation.

        Args:
            on_value: Called with the single value.
            on_error: Called with the failure. Without it, failures go to
                the delivery loop's exception handler.
            on_completed: Called after ``on_value``.

        Returns:
            Subscription that can cancel the computation.

        Raises:
            RuntimeError: If no loop is running and none was configured.
        """
        current = _running_loop()
        deliver_on = self._deliver_on or current
        run_on = self._run_on or deliver_on
        if deliver_on is None or run_on is None:
            msg = "CallStream.subscribe() needs a running event loop or explicit loops"
            raise RuntimeError(msg)

        subscription = Subscription()
        coro = self._drive(subscription, deliver_on, on_value, on_error, on_completed)
        if run_on is current:
            task = run_on.create_task(coro)
            _running_tasks.add(task)
            task.add_done_callback(_running_tasks.discard)
            subscription._attach(task)
        else:
            subscription._attach(asyncio.run_coroutine_threadsafe(coro, run_on))
        return subscription

    async def first(self) -> T:
        """Subscribe and wait for the value, raising the stream's error.

        Cancelling the awaiting task cancels the subscription.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()

        def on_value(value: T) -> None:
            if not future.done():
                future.set_result(value)

        def on_error(error: Exception) -> None:
            if not future.done():
                future.set_exception(error)

        subscription = self.deliver_on(loop).subscribe(on_value, on_error)
        try:
            return await future
        except asyncio.CancelledError:
            subscription.cancel()
            raise

    async def _drive(
        self,
        subscription: Subscription,
        deliver_on: asyncio.AbstractEventLoop,
        on_value: Callable[[T], object],
        on_error: Callable[[Exception], object] | None,
        on_completed: Callable[[], object] | None,
    ) -> None:
        try:
            value = await self._source()
        except Exception as e:  # noqa: BLE001
            deliver_on.call_soon_threadsafe(
                _emit_error, subscription, deliver_on, on_error, e
            )
            return
        deliver_on.call_soon_threadsafe(
            _emit_value, subscription, on_value, on_completed, value
        )


def _emit_value(
    subscription: Subscription,
    on_value: Callable[[T], object],
    on_completed: Callable[[], object] | None,
    value: T,
) -> None:
    if not subscription._claim():
        return
    on_value(value)
    if on_completed is not None:
        on_completed()


def _emit_error(
    subscription: Subscription,
    loop: asyncio.AbstractEventLoop,
    on_error: Callable[[Exception], object] | None,
    error: Exception,
) -> None:
    if not subscription._claim():
        return
    if on_error is None:
        loop.call_exception_handler(
            {
                "message": "Unhandled error in CallStream subscription",
                "exception": error,
            }
        )
        return
    on_error(error)
